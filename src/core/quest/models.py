"""퀘스트 도메인 모델

Quest/QuestStage/Objective: 저작 또는 생성된 정의 (불변, pydantic 검증).
ActiveQuest: 호출자가 소유하는 런타임 진행 상태 (dataclass).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import ObjectiveType, QuestStatus, QuestType

MIN_QUEST_LEVEL = 1
MAX_QUEST_LEVEL = 10


class _Definition(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ItemReward(_Definition):
    item_id: str
    quantity: int = Field(default=1, ge=1)


class StageRewards(_Definition):
    xp: int = Field(default=0, ge=0)
    gold: int = Field(default=0, ge=0)
    items: tuple[ItemReward, ...] = ()
    reputation: dict[str, int] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.xp or self.gold or self.items or self.reputation)


class QuestRewards(StageRewards):
    unlocks_quests: tuple[str, ...] = ()


class Objective(_Definition):
    id: str
    description: str
    type: ObjectiveType
    target: str
    deliver_to: Optional[str] = None
    count: int = Field(default=1, ge=1)
    optional: bool = False
    hidden: bool = False
    hint: Optional[str] = None


class QuestStage(_Definition):
    id: str
    title: str
    description: str = ""
    objectives: tuple[Objective, ...] = Field(min_length=1)
    on_start_text: Optional[str] = None
    on_complete_text: Optional[str] = None
    stage_rewards: StageRewards = StageRewards()


class QuestPrerequisites(_Definition):
    completed_quests: tuple[str, ...] = ()
    min_level: Optional[int] = Field(default=None, ge=1)
    faction_reputation: dict[str, int] = Field(default_factory=dict)
    required_items: tuple[str, ...] = ()


class Quest(_Definition):
    id: str
    title: str
    description: str = ""
    type: QuestType = QuestType.SIDE
    giver_npc_id: Optional[str] = None
    recommended_level: int = Field(
        default=MIN_QUEST_LEVEL, ge=MIN_QUEST_LEVEL, le=MAX_QUEST_LEVEL
    )
    stages: tuple[QuestStage, ...] = Field(min_length=1)
    prerequisites: QuestPrerequisites = QuestPrerequisites()
    rewards: QuestRewards = QuestRewards()
    tags: tuple[str, ...] = ()
    repeatable: bool = False
    time_limit_hours: Optional[float] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _unique_objective_ids(self) -> Quest:
        # 진행도 맵 키는 퀘스트 전체에서 유일한 objective id
        seen: set[str] = set()
        for stage in self.stages:
            for objective in stage.objectives:
                if objective.id in seen:
                    raise ValueError(f"duplicate objective id: {objective.id}")
                seen.add(objective.id)
        return self

    @property
    def last_stage_index(self) -> int:
        return len(self.stages) - 1


@dataclass
class ActiveQuest:
    """진행 중 퀘스트 상태. 시간 값은 게임 시간(시) 기준."""

    quest_id: str
    status: QuestStatus = QuestStatus.ACTIVE
    current_stage_index: int = 0
    objective_progress: dict[str, int] = field(default_factory=dict)
    started_at: float = 0.0
    completed_at: Optional[float] = None
    time_remaining_hours: Optional[float] = None

    def progress_of(self, objective_id: str) -> int:
        return self.objective_progress.get(objective_id, 0)
