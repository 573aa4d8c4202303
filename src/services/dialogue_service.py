"""대화 Service: 저작/제출된 트리를 대화 엔진으로 진행

엔진은 순수 함수이고 상태를 갖지 않는다.
Service는 트리 조회/검증과 로깅만 담당하며, 효과 적용은 호출자 몫이다.
"""

import logging
from typing import Any, Optional

from src.core.dialogue.conditions import ConversationState
from src.core.dialogue.engine import DialogueStep, choose, start_dialogue
from src.core.dialogue.models import DialogueTree
from src.core.dialogue.validation import check_dialogue_integrity, parse_dialogue_tree
from src.core.generation.library import TemplateLibrary
from src.core.validation import ContentValidationError

logger = logging.getLogger(__name__)


class DialogueService:
    """대화 트리 실행"""

    def __init__(self, library: TemplateLibrary):
        self._library = library

    def get_tree(self, tree_id: str) -> Optional[DialogueTree]:
        return self._library.dialogue_tree(tree_id)

    def resolve_tree(
        self,
        tree_id: Optional[str] = None,
        tree_data: Optional[dict[str, Any]] = None,
    ) -> DialogueTree:
        """제출된 트리가 있으면 검증 후 사용, 없으면 라이브러리에서 조회.

        Raises:
            ContentValidationError: 제출된 트리가 스키마 위반
            LookupError: tree_id가 라이브러리에 없음
        """
        if tree_data is not None:
            tree, issues = parse_dialogue_tree(tree_data, source="request")
            if tree is None:
                raise ContentValidationError(issues)
            return tree

        if tree_id is None:
            raise LookupError("Either tree_id or tree must be given")
        tree = self.get_tree(tree_id)
        if tree is None:
            raise LookupError(f"Dialogue tree not found: {tree_id}")
        return tree

    def integrity_warnings(self, tree: DialogueTree) -> list[str]:
        return check_dialogue_integrity(tree)

    def start(self, tree: DialogueTree, state: ConversationState) -> DialogueStep:
        step = start_dialogue(tree, state)
        logger.info(
            "Dialogue started: tree=%s npc=%s node=%s",
            tree.id,
            state.npc_id,
            step.node.id if step.node else None,
        )
        return step

    def choose(
        self,
        tree: DialogueTree,
        node_id: str,
        choice_index: int,
        state: ConversationState,
    ) -> DialogueStep:
        step = choose(tree, node_id, choice_index, state)
        if step.ended:
            logger.info("Dialogue ended: tree=%s npc=%s", tree.id, state.npc_id)
        else:
            logger.debug("Dialogue %s: %s → %s", tree.id, node_id, step.node.id)
        return step
