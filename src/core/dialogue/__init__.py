"""대화 런타임 Core 패키지

공개 API:
- 그래프 모델: DialogueTree, DialogueNode, DialogueChoice, EntryPoint
- 조건/효과: DialogueCondition, DialogueEffect (type 태그 유니온)
- 평가: ConversationState, evaluate_condition(s), project_effects
- 엔진: resolve_entry_point, start_dialogue, choose, advance
- 무결성: check_dialogue_integrity, parse_dialogue_tree
"""

from src.core.dialogue.models import (
    DialogueChoice,
    DialogueCondition,
    DialogueEffect,
    DialogueNode,
    DialogueTree,
    EntryPoint,
)
from src.core.dialogue.conditions import (
    ConversationState,
    dialogue_period,
    evaluate_condition,
    evaluate_conditions,
    project_effects,
)
from src.core.dialogue.engine import (
    AvailableChoice,
    DanglingNodeError,
    DialogueStep,
    advance,
    available_choices,
    choose,
    resolve_entry_node,
    resolve_entry_point,
    start_dialogue,
)
from src.core.dialogue.validation import (
    check_dialogue_integrity,
    find_unreachable_nodes,
    parse_dialogue_tree,
)

__all__ = [
    "DialogueChoice",
    "DialogueCondition",
    "DialogueEffect",
    "DialogueNode",
    "DialogueTree",
    "EntryPoint",
    "ConversationState",
    "dialogue_period",
    "evaluate_condition",
    "evaluate_conditions",
    "project_effects",
    "AvailableChoice",
    "DanglingNodeError",
    "DialogueStep",
    "advance",
    "available_choices",
    "choose",
    "resolve_entry_node",
    "resolve_entry_point",
    "start_dialogue",
    "check_dialogue_integrity",
    "find_unreachable_nodes",
    "parse_dialogue_tree",
]
