"""대화 조건 평가

엔진은 게임 상태를 직접 보지 않는다.
호출자가 ConversationState 스냅샷을 넘기면 그 위에서만 판정한다.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Optional

from .models import (
    DialogueCondition,
    DialogueEffect,
    FirstMeetingCondition,
    ReturnVisitCondition,
)


@dataclass
class ConversationState:
    """조건 평가용 게임 상태 뷰"""

    npc_id: Optional[str] = None
    game_hour: float = 12.0
    active_quests: set[str] = field(default_factory=set)
    completed_quests: set[str] = field(default_factory=set)
    inventory: dict[str, int] = field(default_factory=dict)
    reputation: int = 0
    faction_reputation: dict[str, int] = field(default_factory=dict)
    gold: int = 0
    talked_to: set[str] = field(default_factory=set)
    flags: set[str] = field(default_factory=set)

    def item_count(self, item_id: str) -> int:
        return self.inventory.get(item_id, 0)

    def reputation_for(self, faction: Optional[str]) -> int:
        if faction is None:
            return self.reputation
        return self.faction_reputation.get(faction, 0)


def dialogue_period(game_hour: float) -> str:
    """대화 조건용 시간대. 저녁 18~22시, 밤 22~6시."""
    if 6 <= game_hour < 12:
        return "morning"
    if 12 <= game_hour < 18:
        return "afternoon"
    if 18 <= game_hour < 22:
        return "evening"
    return "night"


def _first_meeting(_: FirstMeetingCondition, state: ConversationState) -> bool:
    return state.npc_id is not None and state.npc_id not in state.talked_to


def _return_visit(_: ReturnVisitCondition, state: ConversationState) -> bool:
    return state.npc_id is not None and state.npc_id in state.talked_to


_EVALUATORS: dict[str, Callable[..., bool]] = {
    "quest_active": lambda c, s: c.quest_id in s.active_quests,
    "quest_complete": lambda c, s: c.quest_id in s.completed_quests,
    "quest_not_started": lambda c, s: (
        c.quest_id not in s.active_quests and c.quest_id not in s.completed_quests
    ),
    "has_item": lambda c, s: s.item_count(c.item_id) >= c.quantity,
    "lacks_item": lambda c, s: s.item_count(c.item_id) < c.quantity,
    "reputation_gte": lambda c, s: s.reputation_for(c.faction) >= c.value,
    "reputation_lte": lambda c, s: s.reputation_for(c.faction) <= c.value,
    "gold_gte": lambda c, s: s.gold >= c.amount,
    "talked_to": lambda c, s: c.npc_id in s.talked_to,
    "not_talked_to": lambda c, s: c.npc_id not in s.talked_to,
    "time_of_day": lambda c, s: dialogue_period(s.game_hour) == c.period,
    "flag_set": lambda c, s: c.flag in s.flags,
    "flag_not_set": lambda c, s: c.flag not in s.flags,
    "first_meeting": _first_meeting,
    "return_visit": _return_visit,
}


def evaluate_condition(condition: DialogueCondition, state: ConversationState) -> bool:
    return _EVALUATORS[condition.type](condition, state)


def evaluate_conditions(
    conditions: Iterable[DialogueCondition], state: ConversationState
) -> bool:
    """모든 조건 AND. 빈 목록은 항상 True."""
    return all(evaluate_condition(c, state) for c in conditions)


def project_effects(
    state: ConversationState, effects: Iterable[DialogueEffect]
) -> ConversationState:
    """효과를 반영한 상태 사본. 원본 상태와 실제 게임 상태는 건드리지 않는다.

    조건 판정에 영향이 없는 효과(장소 해금, 이벤트 등)는 무시.
    """
    projected = replace(
        state,
        active_quests=set(state.active_quests),
        completed_quests=set(state.completed_quests),
        inventory=dict(state.inventory),
        faction_reputation=dict(state.faction_reputation),
        talked_to=set(state.talked_to),
        flags=set(state.flags),
    )
    for effect in effects:
        if effect.type == "start_quest":
            projected.active_quests.add(effect.quest_id)
        elif effect.type == "complete_quest":
            projected.active_quests.discard(effect.quest_id)
            projected.completed_quests.add(effect.quest_id)
        elif effect.type == "give_item":
            projected.inventory[effect.item_id] = (
                projected.item_count(effect.item_id) + effect.quantity
            )
        elif effect.type == "take_item":
            projected.inventory[effect.item_id] = max(
                0, projected.item_count(effect.item_id) - effect.quantity
            )
        elif effect.type == "give_gold":
            projected.gold += effect.amount
        elif effect.type == "take_gold":
            projected.gold = max(0, projected.gold - effect.amount)
        elif effect.type == "change_reputation":
            if effect.faction is None:
                projected.reputation += effect.delta
            else:
                projected.faction_reputation[effect.faction] = (
                    projected.reputation_for(effect.faction) + effect.delta
                )
        elif effect.type == "set_flag":
            projected.flags.add(effect.flag)
        elif effect.type == "clear_flag":
            projected.flags.discard(effect.flag)
    return projected
