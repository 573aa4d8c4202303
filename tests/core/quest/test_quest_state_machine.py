"""퀘스트 상태 머신 테스트"""

import pytest

from src.core.quest import (
    ActiveQuest,
    PlayerSnapshot,
    Quest,
    QuestStateError,
    QuestStatus,
    StageRewards,
    abandon_quest,
    advance_quest,
    check_prerequisites,
    fail_quest,
    is_quest_complete,
    jump_to_stage,
    record_progress,
    start_quest,
    sum_rewards,
    tick_time_limit,
)


def _quest(**overrides) -> Quest:
    data = {
        "id": "q_test",
        "title": "Test",
        "stages": [
            {
                "id": "s1",
                "title": "One",
                "objectives": [
                    {"id": "kill_wolves", "description": "Kill", "type": "kill", "target": "wolf", "count": 3},
                    {"id": "pick_flowers", "description": "Pick", "type": "collect", "target": "flower", "optional": True},
                ],
                "stage_rewards": {"xp": 10, "gold": 5},
                "on_complete_text": "Wolves gone.",
            },
            {
                "id": "s2",
                "title": "Two",
                "on_start_text": "Head back to town.",
                "objectives": [
                    {"id": "report", "description": "Report", "type": "talk", "target": "npc_sheriff"},
                ],
            },
        ],
        "rewards": {"xp": 100, "gold": 50, "reputation": {"law_enforcement": 5}},
    }
    data.update(overrides)
    return Quest.model_validate(data)


class TestPrerequisites:
    """실패 항목을 모두 나열"""

    def test_lists_every_failure(self):
        quest = _quest(
            prerequisites={
                "completed_quests": ["q_intro"],
                "min_level": 4,
                "faction_reputation": {"desperados": 10},
                "required_items": ["lamp"],
            }
        )
        result = check_prerequisites(quest, PlayerSnapshot(level=2))
        assert not result
        assert len(result.failures) == 4
        assert "requires level 4 (have 2)" in result.failures

    def test_met(self):
        quest = _quest(prerequisites={"min_level": 2, "required_items": ["lamp"]})
        assert check_prerequisites(quest, PlayerSnapshot(level=3, inventory={"lamp": 1}))

    def test_start_quest_raises_when_unmet(self):
        quest = _quest(prerequisites={"min_level": 5})
        with pytest.raises(QuestStateError):
            start_quest(quest, PlayerSnapshot(level=1))

    def test_start_quest_sets_time_limit(self):
        active = start_quest(_quest(time_limit_hours=48), PlayerSnapshot(), now=10)
        assert active.status == QuestStatus.ACTIVE
        assert active.started_at == 10
        assert active.time_remaining_hours == 48


class TestProgress:
    def test_capped_at_count(self):
        quest = _quest()
        active = ActiveQuest(quest_id=quest.id)
        assert record_progress(quest, active, "kill_wolves", 10)
        assert active.progress_of("kill_wolves") == 3
        assert not record_progress(quest, active, "kill_wolves")

    def test_objective_outside_current_stage_ignored(self):
        quest = _quest()
        active = ActiveQuest(quest_id=quest.id)
        assert not record_progress(quest, active, "report")
        assert not record_progress(quest, active, "nope")
        assert active.objective_progress == {}

    def test_progress_requires_active(self):
        quest = _quest()
        active = ActiveQuest(quest_id=quest.id, status=QuestStatus.FAILED)
        with pytest.raises(QuestStateError):
            record_progress(quest, active, "kill_wolves")

    def test_progress_on_completed_quest_raises(self):
        quest = _quest()
        active = ActiveQuest(quest_id=quest.id, status=QuestStatus.COMPLETED)
        with pytest.raises(QuestStateError):
            record_progress(quest, active, "report")

    def test_stage_index_out_of_range_raises(self):
        quest = _quest()
        active = ActiveQuest(quest_id=quest.id, current_stage_index=len(quest.stages))
        with pytest.raises(QuestStateError):
            record_progress(quest, active, "report")
        with pytest.raises(QuestStateError):
            advance_quest(quest, active)


class TestAdvance:
    """선택 목표는 진행을 막지 않는다"""

    def test_incomplete_stage_does_nothing(self):
        quest = _quest()
        active = ActiveQuest(quest_id=quest.id)
        record_progress(quest, active, "kill_wolves", 2)
        outcome = advance_quest(quest, active)
        assert not outcome.stage_completed
        assert active.current_stage_index == 0

    def test_optional_objective_not_required(self):
        quest = _quest()
        active = ActiveQuest(quest_id=quest.id)
        record_progress(quest, active, "kill_wolves", 3)
        outcome = advance_quest(quest, active)
        assert outcome.stage_completed
        assert outcome.next_stage.id == "s2"
        assert outcome.rewards == [StageRewards(xp=10, gold=5)]
        assert outcome.messages == ["Wolves gone.", "Head back to town."]
        assert active.current_stage_index == 1

    def test_final_stage_adds_quest_rewards(self):
        quest = _quest()
        active = ActiveQuest(quest_id=quest.id, current_stage_index=1)
        record_progress(quest, active, "report")
        assert is_quest_complete(quest, active)
        outcome = advance_quest(quest, active, now=30)
        assert outcome.quest_completed
        assert active.status == QuestStatus.COMPLETED
        assert active.completed_at == 30
        assert outcome.rewards[-1] == quest.rewards
        assert len(outcome.rewards) == 2

    def test_completed_quest_cannot_advance(self):
        quest = _quest()
        active = ActiveQuest(quest_id=quest.id, status=QuestStatus.COMPLETED)
        with pytest.raises(QuestStateError):
            advance_quest(quest, active)


class TestTransitions:
    def test_jump_forward_only(self):
        quest = _quest()
        active = ActiveQuest(quest_id=quest.id)
        jump_to_stage(quest, active, 1)
        assert active.current_stage_index == 1
        with pytest.raises(QuestStateError):
            jump_to_stage(quest, active, 0)
        with pytest.raises(QuestStateError):
            jump_to_stage(quest, active, 5)

    def test_fail_and_abandon_are_terminal(self):
        failed = ActiveQuest(quest_id="a")
        fail_quest(failed, now=5)
        assert failed.status == QuestStatus.FAILED
        with pytest.raises(QuestStateError):
            abandon_quest(failed)

        abandoned = ActiveQuest(quest_id="b")
        abandon_quest(abandoned)
        assert abandoned.status == QuestStatus.ABANDONED

    def test_time_limit_expiry_fails_quest(self):
        active = ActiveQuest(quest_id="q", time_remaining_hours=10)
        assert not tick_time_limit(active, 4)
        assert active.time_remaining_hours == 6
        assert tick_time_limit(active, 8, now=99)
        assert active.status == QuestStatus.FAILED
        assert active.time_remaining_hours == 0.0

    def test_no_time_limit_never_expires(self):
        active = ActiveQuest(quest_id="q")
        assert not tick_time_limit(active, 1000)
        assert active.status == QuestStatus.ACTIVE


class TestSumRewards:
    def test_sums_all_parts(self):
        total = sum_rewards(
            [
                StageRewards(xp=10, gold=5, reputation={"a": 2}),
                StageRewards(xp=1, items=({"item_id": "lamp"},), reputation={"a": 3, "b": -1}),
            ]
        )
        assert total.xp == 11
        assert total.gold == 5
        assert [i.item_id for i in total.items] == ["lamp"]
        assert total.reputation == {"a": 5, "b": -1}

    def test_empty(self):
        assert sum_rewards([]).is_empty
