"""퀘스트 런타임 Core 패키지

공개 API:
- 열거형: QuestType, ObjectiveType, QuestStatus
- 정의 모델: Quest, QuestStage, Objective, QuestRewards, StageRewards, QuestPrerequisites
- 런타임 상태: ActiveQuest, PlayerSnapshot
- 상태 머신: check_prerequisites, start_quest, record_progress, advance_quest 등
"""

from src.core.quest.enums import ObjectiveType, QuestStatus, QuestType
from src.core.quest.models import (
    ActiveQuest,
    ItemReward,
    Objective,
    Quest,
    QuestPrerequisites,
    QuestRewards,
    QuestStage,
    StageRewards,
)
from src.core.quest.state_machine import (
    PlayerSnapshot,
    PrerequisiteResult,
    QuestAdvance,
    QuestStateError,
    abandon_quest,
    advance_quest,
    check_prerequisites,
    create_active_quest,
    current_stage,
    fail_quest,
    is_current_stage_complete,
    is_objective_satisfied,
    is_quest_complete,
    is_stage_complete,
    jump_to_stage,
    record_progress,
    start_quest,
    sum_rewards,
    tick_time_limit,
)

__all__ = [
    "ObjectiveType",
    "QuestStatus",
    "QuestType",
    "ActiveQuest",
    "ItemReward",
    "Objective",
    "Quest",
    "QuestPrerequisites",
    "QuestRewards",
    "QuestStage",
    "StageRewards",
    "PlayerSnapshot",
    "PrerequisiteResult",
    "QuestAdvance",
    "QuestStateError",
    "abandon_quest",
    "advance_quest",
    "check_prerequisites",
    "create_active_quest",
    "current_stage",
    "fail_quest",
    "is_current_stage_complete",
    "is_objective_satisfied",
    "is_quest_complete",
    "is_stage_complete",
    "jump_to_stage",
    "record_progress",
    "start_quest",
    "sum_rewards",
    "tick_time_limit",
]
