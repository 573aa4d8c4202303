"""퀘스트 상태 머신

available → active → {completed | failed | abandoned}

- 목표 충족: progress[objective.id] >= objective.count
- 스테이지 완료: 선택(optional)이 아닌 목표가 모두 충족
- 퀘스트 완료: 현재 스테이지가 마지막이고 완료됨
- 스테이지 인덱스는 감소하지 않는다
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .enums import QuestStatus
from .models import ActiveQuest, Objective, Quest, QuestStage, StageRewards

logger = logging.getLogger(__name__)


class QuestStateError(ValueError):
    """허용되지 않는 상태 전이"""


@dataclass
class PlayerSnapshot:
    """선행 조건 판정용 플레이어 상태"""

    level: int = 1
    completed_quests: set[str] = field(default_factory=set)
    faction_reputation: dict[str, int] = field(default_factory=dict)
    inventory: dict[str, int] = field(default_factory=dict)


@dataclass
class PrerequisiteResult:
    met: bool
    failures: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.met


@dataclass
class QuestAdvance:
    """advance_quest 결과.

    rewards: 지급할 보상 순서 (스테이지 보상 → 완료 시 퀘스트 보상).
    """

    stage_completed: bool = False
    quest_completed: bool = False
    completed_stage: Optional[QuestStage] = None
    next_stage: Optional[QuestStage] = None
    rewards: list[StageRewards] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)


# === 판정 ===


def is_objective_satisfied(objective: Objective, progress: Mapping[str, int]) -> bool:
    return progress.get(objective.id, 0) >= objective.count


def is_stage_complete(stage: QuestStage, progress: Mapping[str, int]) -> bool:
    """선택 목표는 진행을 막지 않는다"""
    return all(
        is_objective_satisfied(o, progress) for o in stage.objectives if not o.optional
    )


def current_stage(quest: Quest, active: ActiveQuest) -> Optional[QuestStage]:
    if 0 <= active.current_stage_index < len(quest.stages):
        return quest.stages[active.current_stage_index]
    return None


def is_current_stage_complete(quest: Quest, active: ActiveQuest) -> bool:
    stage = current_stage(quest, active)
    return stage is not None and is_stage_complete(stage, active.objective_progress)


def is_quest_complete(quest: Quest, active: ActiveQuest) -> bool:
    return active.current_stage_index == quest.last_stage_index and (
        is_current_stage_complete(quest, active)
    )


def check_prerequisites(quest: Quest, player: PlayerSnapshot) -> PrerequisiteResult:
    """모든 선행 조건 AND. 실패 항목을 전부 나열한다."""
    prereq = quest.prerequisites
    failures: list[str] = []

    for quest_id in prereq.completed_quests:
        if quest_id not in player.completed_quests:
            failures.append(f"requires completed quest {quest_id}")

    if prereq.min_level is not None and player.level < prereq.min_level:
        failures.append(f"requires level {prereq.min_level} (have {player.level})")

    for faction, threshold in prereq.faction_reputation.items():
        current = player.faction_reputation.get(faction, 0)
        if current < threshold:
            failures.append(
                f"requires {faction} reputation {threshold} (have {current})"
            )

    for item_id in prereq.required_items:
        if player.inventory.get(item_id, 0) <= 0:
            failures.append(f"requires item {item_id}")

    return PrerequisiteResult(met=not failures, failures=failures)


# === 전이 ===


def create_active_quest(quest: Quest, now: float = 0.0) -> ActiveQuest:
    return ActiveQuest(
        quest_id=quest.id,
        status=QuestStatus.ACTIVE,
        current_stage_index=0,
        started_at=now,
        time_remaining_hours=quest.time_limit_hours,
    )


def start_quest(quest: Quest, player: PlayerSnapshot, now: float = 0.0) -> ActiveQuest:
    """선행 조건 확인 후 available → active"""
    result = check_prerequisites(quest, player)
    if not result:
        raise QuestStateError(
            f"Cannot start quest {quest.id}: " + "; ".join(result.failures)
        )
    logger.info("Quest started: %s", quest.id)
    return create_active_quest(quest, now)


def record_progress(
    quest: Quest, active: ActiveQuest, objective_id: str, amount: int = 1
) -> bool:
    """현재 스테이지 목표 진행도 증가 (count에서 상한).

    현재 스테이지에 없는 목표는 무시하고 False.
    """
    stage = _require_stage(quest, active)
    objective = next((o for o in stage.objectives if o.id == objective_id), None)
    if objective is None:
        logger.debug("Objective %s not in current stage of %s", objective_id, quest.id)
        return False

    before = active.progress_of(objective_id)
    after = max(0, min(objective.count, before + amount))
    active.objective_progress[objective_id] = after
    return after != before


def advance_quest(quest: Quest, active: ActiveQuest, now: float = 0.0) -> QuestAdvance:
    """현재 스테이지가 완료됐으면 보상 지급 + 다음 스테이지/퀘스트 완료.

    퀘스트 보상은 마지막 스테이지 보상에 더해진다 (대체 아님).
    """
    stage = _require_stage(quest, active)
    if not is_stage_complete(stage, active.objective_progress):
        return QuestAdvance()

    outcome = QuestAdvance(stage_completed=True, completed_stage=stage)
    outcome.rewards.append(stage.stage_rewards)
    if stage.on_complete_text:
        outcome.messages.append(stage.on_complete_text)

    if active.current_stage_index == quest.last_stage_index:
        active.status = QuestStatus.COMPLETED
        active.completed_at = now
        outcome.quest_completed = True
        outcome.rewards.append(quest.rewards)
        logger.info("Quest completed: %s", quest.id)
        return outcome

    active.current_stage_index += 1
    outcome.next_stage = quest.stages[active.current_stage_index]
    if outcome.next_stage.on_start_text:
        outcome.messages.append(outcome.next_stage.on_start_text)
    return outcome


def jump_to_stage(quest: Quest, active: ActiveQuest, stage_index: int) -> None:
    """스크립트에 의한 강제 이동. 뒤로 갈 수 없다."""
    _require_active(active)
    if not 0 <= stage_index < len(quest.stages):
        raise QuestStateError(f"Quest {quest.id} has no stage {stage_index}")
    if stage_index < active.current_stage_index:
        raise QuestStateError(
            f"Stage index cannot decrease ({active.current_stage_index} → {stage_index})"
        )
    active.current_stage_index = stage_index


def fail_quest(active: ActiveQuest, now: float = 0.0) -> None:
    _require_active(active)
    active.status = QuestStatus.FAILED
    active.completed_at = now
    logger.info("Quest failed: %s", active.quest_id)


def abandon_quest(active: ActiveQuest, now: float = 0.0) -> None:
    _require_active(active)
    active.status = QuestStatus.ABANDONED
    active.completed_at = now


def tick_time_limit(active: ActiveQuest, hours: float, now: float = 0.0) -> bool:
    """제한 시간 차감. 시간이 다 되면 실패 처리하고 True."""
    if active.status != QuestStatus.ACTIVE or active.time_remaining_hours is None:
        return False
    active.time_remaining_hours = max(0.0, active.time_remaining_hours - hours)
    if active.time_remaining_hours == 0.0:
        fail_quest(active, now)
        return True
    return False


def sum_rewards(rewards: list[StageRewards]) -> StageRewards:
    """지급 목록 합산 (표시용)"""
    reputation: dict[str, int] = {}
    items = []
    for reward in rewards:
        items.extend(reward.items)
        for faction, delta in reward.reputation.items():
            reputation[faction] = reputation.get(faction, 0) + delta
    return StageRewards(
        xp=sum(r.xp for r in rewards),
        gold=sum(r.gold for r in rewards),
        items=tuple(items),
        reputation=reputation,
    )


def _require_active(active: ActiveQuest) -> None:
    if active.status != QuestStatus.ACTIVE:
        raise QuestStateError(
            f"Quest {active.quest_id} is {active.status.value}, not active"
        )


def _require_stage(quest: Quest, active: ActiveQuest) -> QuestStage:
    """진행 중 퀘스트의 현재 스테이지 (인덱스가 범위 밖이면 QuestStateError)"""
    _require_active(active)
    stage = current_stage(quest, active)
    if stage is None:
        raise QuestStateError(
            f"Quest {quest.id} has no stage {active.current_stage_index}"
        )
    return stage
