"""대화 트리 도메인 모델

조건/효과는 `type` 필드로 구분되는 닫힌 태그 유니온.
각 종류는 자신에게 필요한 필드만 가진다.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator


class _Variant(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# === 조건 ===


class QuestActiveCondition(_Variant):
    type: Literal["quest_active"] = "quest_active"
    quest_id: str


class QuestCompleteCondition(_Variant):
    type: Literal["quest_complete"] = "quest_complete"
    quest_id: str


class QuestNotStartedCondition(_Variant):
    type: Literal["quest_not_started"] = "quest_not_started"
    quest_id: str


class HasItemCondition(_Variant):
    type: Literal["has_item"] = "has_item"
    item_id: str
    quantity: int = Field(default=1, ge=1)


class LacksItemCondition(_Variant):
    type: Literal["lacks_item"] = "lacks_item"
    item_id: str
    quantity: int = Field(default=1, ge=1)


class ReputationAtLeastCondition(_Variant):
    """faction이 없으면 전체 평판 기준"""

    type: Literal["reputation_gte"] = "reputation_gte"
    faction: Optional[str] = None
    value: int


class ReputationAtMostCondition(_Variant):
    type: Literal["reputation_lte"] = "reputation_lte"
    faction: Optional[str] = None
    value: int


class GoldAtLeastCondition(_Variant):
    type: Literal["gold_gte"] = "gold_gte"
    amount: int = Field(ge=0)


class TalkedToCondition(_Variant):
    type: Literal["talked_to"] = "talked_to"
    npc_id: str


class NotTalkedToCondition(_Variant):
    type: Literal["not_talked_to"] = "not_talked_to"
    npc_id: str


class TimeOfDayCondition(_Variant):
    type: Literal["time_of_day"] = "time_of_day"
    period: Literal["morning", "afternoon", "evening", "night"]


class FlagSetCondition(_Variant):
    type: Literal["flag_set"] = "flag_set"
    flag: str


class FlagNotSetCondition(_Variant):
    type: Literal["flag_not_set"] = "flag_not_set"
    flag: str


class FirstMeetingCondition(_Variant):
    type: Literal["first_meeting"] = "first_meeting"


class ReturnVisitCondition(_Variant):
    type: Literal["return_visit"] = "return_visit"


DialogueCondition = Annotated[
    Union[
        QuestActiveCondition,
        QuestCompleteCondition,
        QuestNotStartedCondition,
        HasItemCondition,
        LacksItemCondition,
        ReputationAtLeastCondition,
        ReputationAtMostCondition,
        GoldAtLeastCondition,
        TalkedToCondition,
        NotTalkedToCondition,
        TimeOfDayCondition,
        FlagSetCondition,
        FlagNotSetCondition,
        FirstMeetingCondition,
        ReturnVisitCondition,
    ],
    Field(discriminator="type"),
]


# === 효과 ===


class StartQuestEffect(_Variant):
    type: Literal["start_quest"] = "start_quest"
    quest_id: str


class CompleteQuestEffect(_Variant):
    type: Literal["complete_quest"] = "complete_quest"
    quest_id: str


class AdvanceQuestEffect(_Variant):
    type: Literal["advance_quest"] = "advance_quest"
    quest_id: str
    stage: Optional[int] = Field(default=None, ge=0)


class GiveItemEffect(_Variant):
    type: Literal["give_item"] = "give_item"
    item_id: str
    quantity: int = Field(default=1, ge=1)


class TakeItemEffect(_Variant):
    type: Literal["take_item"] = "take_item"
    item_id: str
    quantity: int = Field(default=1, ge=1)


class GiveGoldEffect(_Variant):
    type: Literal["give_gold"] = "give_gold"
    amount: int = Field(ge=0)


class TakeGoldEffect(_Variant):
    type: Literal["take_gold"] = "take_gold"
    amount: int = Field(ge=0)


class ChangeReputationEffect(_Variant):
    type: Literal["change_reputation"] = "change_reputation"
    faction: Optional[str] = None
    delta: int


class SetFlagEffect(_Variant):
    type: Literal["set_flag"] = "set_flag"
    flag: str


class ClearFlagEffect(_Variant):
    type: Literal["clear_flag"] = "clear_flag"
    flag: str


class UnlockLocationEffect(_Variant):
    type: Literal["unlock_location"] = "unlock_location"
    location_id: str


class ChangeNPCStateEffect(_Variant):
    type: Literal["change_npc_state"] = "change_npc_state"
    npc_id: str
    state: str


class TriggerEventEffect(_Variant):
    type: Literal["trigger_event"] = "trigger_event"
    event_id: str


class OpenShopEffect(_Variant):
    type: Literal["open_shop"] = "open_shop"
    shop_id: Optional[str] = None


DialogueEffect = Annotated[
    Union[
        StartQuestEffect,
        CompleteQuestEffect,
        AdvanceQuestEffect,
        GiveItemEffect,
        TakeItemEffect,
        GiveGoldEffect,
        TakeGoldEffect,
        ChangeReputationEffect,
        SetFlagEffect,
        ClearFlagEffect,
        UnlockLocationEffect,
        ChangeNPCStateEffect,
        TriggerEventEffect,
        OpenShopEffect,
    ],
    Field(discriminator="type"),
]


# === 그래프 ===


class DialogueChoice(_Variant):
    """선택지. next_node_id가 None이면 대화 종료."""

    text: str
    next_node_id: Optional[str] = None
    conditions: tuple[DialogueCondition, ...] = ()
    effects: tuple[DialogueEffect, ...] = ()
    tags: tuple[str, ...] = ()
    hint: Optional[str] = None


class DialogueNode(_Variant):
    """화자 대사 + 선택지.

    선택지가 없고 next_node_id가 있으면 자동 진행 노드.
    """

    id: str
    text: str
    speaker: Optional[str] = None
    choices: tuple[DialogueChoice, ...] = ()
    next_node_id: Optional[str] = None
    on_enter_effects: tuple[DialogueEffect, ...] = ()
    tags: tuple[str, ...] = ()
    expression: Optional[str] = None


class EntryPoint(_Variant):
    node_id: str
    conditions: tuple[DialogueCondition, ...] = ()
    priority: int = 0


class DialogueTree(_Variant):
    id: str
    name: str
    description: str = ""
    npc_id: Optional[str] = None
    nodes: tuple[DialogueNode, ...] = Field(min_length=1)
    entry_points: tuple[EntryPoint, ...] = Field(min_length=1)
    tags: tuple[str, ...] = ()

    _node_index: dict[str, DialogueNode] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _unique_node_ids(self) -> DialogueTree:
        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise ValueError(f"duplicate node id: {node.id}")
            seen.add(node.id)
        return self

    def model_post_init(self, __context) -> None:
        self._node_index = {node.id: node for node in self.nodes}

    def get_node(self, node_id: str) -> Optional[DialogueNode]:
        return self._node_index.get(node_id)

    @property
    def node_ids(self) -> set[str]:
        return set(self._node_index)
