"""대화 엔진: 상태 = 노드, 전이 = 선택지

순수 함수. 효과를 직접 실행하지 않고 순서대로 모아서 호출자에게 돌려준다.
검증되지 않은 트리에서 끊어진 참조로 들어가면 DanglingNodeError (저작 버그).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .conditions import ConversationState, evaluate_conditions, project_effects
from .models import DialogueChoice, DialogueEffect, DialogueNode, DialogueTree, EntryPoint

logger = logging.getLogger(__name__)


class DanglingNodeError(KeyError):
    """트리에 없는 노드로 전이하려 함"""

    def __init__(self, tree_id: str, node_id: str):
        self.tree_id = tree_id
        self.node_id = node_id
        super().__init__(f"Dialogue tree {tree_id} has no node {node_id}")


@dataclass(frozen=True)
class AvailableChoice:
    index: int  # node.choices 내 위치
    choice: DialogueChoice


@dataclass
class DialogueStep:
    """한 번의 전이 결과.

    node가 None이면 대화 종료.
    effects: 선택지 효과 → 새 노드 진입 효과 순서.
    """

    node: Optional[DialogueNode]
    choices: list[AvailableChoice] = field(default_factory=list)
    effects: list[DialogueEffect] = field(default_factory=list)

    @property
    def ended(self) -> bool:
        return self.node is None

    @property
    def can_auto_advance(self) -> bool:
        """선택지 없이 다음 노드로 넘어가는 노드인지"""
        return (
            self.node is not None
            and not self.node.choices
            and self.node.next_node_id is not None
        )


def resolve_entry_point(tree: DialogueTree, state: ConversationState) -> EntryPoint:
    """우선순위 내림차순(동순위는 선언 순서)으로 첫 충족 진입점.
    아무것도 충족하지 않으면 최저 우선순위 진입점으로 폴백한다.
    """
    ordered = sorted(tree.entry_points, key=lambda e: e.priority, reverse=True)
    for entry in ordered:
        if evaluate_conditions(entry.conditions, state):
            return entry

    fallback = ordered[-1]
    logger.debug(
        "No entry point matched in %s, falling back to %s", tree.id, fallback.node_id
    )
    return fallback


def resolve_entry_node(tree: DialogueTree, state: ConversationState) -> DialogueNode:
    return _require_node(tree, resolve_entry_point(tree, state).node_id)


def available_choices(
    node: DialogueNode, state: ConversationState
) -> list[AvailableChoice]:
    """조건을 모두 만족하는 선택지. 조건 없는 선택지는 항상 가능."""
    return [
        AvailableChoice(index=i, choice=choice)
        for i, choice in enumerate(node.choices)
        if evaluate_conditions(choice.conditions, state)
    ]


def start_dialogue(tree: DialogueTree, state: ConversationState) -> DialogueStep:
    node = resolve_entry_node(tree, state)
    return _enter(node, state, [])


def choose(
    tree: DialogueTree,
    node_id: str,
    choice_index: int,
    state: ConversationState,
) -> DialogueStep:
    """node_id 노드의 choice_index 번째 선택지를 고른다.

    state는 현재 노드 진입 효과가 이미 반영된 상태여야 한다.
    """
    node = _require_node(tree, node_id)
    if not 0 <= choice_index < len(node.choices):
        raise ValueError(f"Node {node_id} has no choice {choice_index}")

    choice = node.choices[choice_index]
    if not evaluate_conditions(choice.conditions, state):
        raise ValueError(f"Choice {choice_index} of node {node_id} is not available")

    effects = list(choice.effects)
    if choice.next_node_id is None:
        return DialogueStep(node=None, effects=effects)

    return _enter(_require_node(tree, choice.next_node_id), state, effects)


def advance(tree: DialogueTree, node_id: str, state: ConversationState) -> DialogueStep:
    """자동 진행 노드의 next_node_id를 따라간다. 없으면 대화 종료."""
    node = _require_node(tree, node_id)
    if node.next_node_id is None:
        return DialogueStep(node=None)
    return _enter(_require_node(tree, node.next_node_id), state, [])


def _enter(
    node: DialogueNode,
    state: ConversationState,
    effects: list[DialogueEffect],
) -> DialogueStep:
    # 진입 효과는 노드가 현재 노드가 될 때 한 번만, 선택지 계산보다 먼저
    effects.extend(node.on_enter_effects)
    return DialogueStep(
        node=node,
        choices=available_choices(node, project_effects(state, effects)),
        effects=effects,
    )


def _require_node(tree: DialogueTree, node_id: str) -> DialogueNode:
    node = tree.get_node(node_id)
    if node is None:
        raise DanglingNodeError(tree.id, node_id)
    return node
