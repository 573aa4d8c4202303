"""퀘스트 관련 열거형"""

from enum import Enum


class QuestType(str, Enum):
    MAIN = "main"
    SIDE = "side"
    FACTION = "faction"
    BOUNTY = "bounty"
    DELIVERY = "delivery"
    EXPLORATION = "exploration"


class ObjectiveType(str, Enum):
    KILL = "kill"
    COLLECT = "collect"
    TALK = "talk"
    VISIT = "visit"
    INTERACT = "interact"
    DELIVER = "deliver"


class QuestStatus(str, Enum):
    AVAILABLE = "available"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    ABANDONED = "abandoned"


TERMINAL_STATUSES = frozenset(
    {QuestStatus.COMPLETED, QuestStatus.FAILED, QuestStatus.ABANDONED}
)
