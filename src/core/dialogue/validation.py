"""대화 트리 무결성 검사

참조 무결성(존재하지 않는 노드 참조)은 구조적으로 강제하지 않고
이 검사 패스에서 경고 문자열 목록으로 보고한다.
"""

import logging
from typing import Any, Optional

from src.core.validation import ContentIssue, parse_entry

from .models import DialogueTree

logger = logging.getLogger(__name__)


def check_dialogue_integrity(tree: DialogueTree) -> list[str]:
    """끊어진 참조 경고 목록. 비어 있으면 통과."""
    warnings: list[str] = []
    node_ids = tree.node_ids

    for entry in tree.entry_points:
        if entry.node_id not in node_ids:
            warnings.append(f"Entry point references unknown node: {entry.node_id}")

    for node in tree.nodes:
        if node.next_node_id and node.next_node_id not in node_ids:
            warnings.append(
                f"Node {node.id} references unknown next node: {node.next_node_id}"
            )
        for choice in node.choices:
            if choice.next_node_id and choice.next_node_id not in node_ids:
                warnings.append(
                    f"Choice in node {node.id} references unknown node: "
                    f"{choice.next_node_id}"
                )

    return warnings


def find_unreachable_nodes(tree: DialogueTree) -> list[str]:
    """진입점에서 도달할 수 없는 노드 id (선언 순서)"""
    reachable: set[str] = set()
    frontier = [e.node_id for e in tree.entry_points]
    while frontier:
        node_id = frontier.pop()
        if node_id in reachable:
            continue
        node = tree.get_node(node_id)
        if node is None:
            continue
        reachable.add(node_id)
        if node.next_node_id:
            frontier.append(node.next_node_id)
        frontier.extend(c.next_node_id for c in node.choices if c.next_node_id)

    return [n.id for n in tree.nodes if n.id not in reachable]


def parse_dialogue_tree(
    data: Any, source: str = "dialogue_trees"
) -> tuple[Optional[DialogueTree], list[ContentIssue]]:
    """원시 데이터 → DialogueTree. 스키마 위반은 필드 단위 이슈로 반환."""
    tree, issues = parse_entry(DialogueTree, data, source)
    if tree is not None:
        for warning in check_dialogue_integrity(tree):
            logger.warning("Dialogue tree %s: %s", tree.id, warning)
    return tree, issues
