"""QuestService 테스트"""

import pytest

from src.core.quest import PlayerSnapshot, QuestStateError, QuestStatus
from src.core.validation import ContentValidationError
from src.services.quest_service import QuestService


@pytest.fixture
def service(library):
    return QuestService(library)


class TestResolveQuest:
    def test_from_library(self, service):
        assert service.resolve_quest("silver_vein_sabotage").time_limit_hours == 72

    def test_unknown(self, service):
        with pytest.raises(LookupError):
            service.resolve_quest("nope")

    def test_invalid_submission(self, service):
        with pytest.raises(ContentValidationError) as exc_info:
            service.resolve_quest(quest_data={"id": "q", "title": "Q", "stages": []})
        assert exc_info.value.issues[0].field == "stages"


class TestSilverVein:
    """번들된 광산 퀘스트를 끝까지 진행"""

    def test_prerequisites(self, service):
        quest = service.resolve_quest("silver_vein_sabotage")
        assert not service.check_prerequisites(quest, PlayerSnapshot(level=1))
        with pytest.raises(QuestStateError):
            service.start(quest, PlayerSnapshot(level=1))

    def test_full_run(self, service):
        quest = service.resolve_quest("silver_vein_sabotage")
        active = service.start(quest, PlayerSnapshot(level=3))

        result = service.progress(quest, active, "talk_night_shift")
        assert result.changed and not result.advance.stage_completed
        service.progress(quest, active, "talk_night_shift")
        result = service.progress(quest, active, "find_letter")
        assert result.advance.stage_completed
        assert active.current_stage_index == 1

        result = service.progress(quest, active, "deliver_letter")
        assert result.advance.rewards[0].gold == 10

        result = service.progress(quest, active, "defeat_saboteur", now=50)
        assert result.advance.quest_completed
        assert active.status == QuestStatus.COMPLETED
        assert result.advance.rewards[-1].xp == 150

    def test_unknown_objective_does_not_advance(self, service):
        quest = service.resolve_quest("silver_vein_sabotage")
        active = service.start(quest, PlayerSnapshot(level=3))
        result = service.progress(quest, active, "secret_stash")
        assert not result.changed
        assert not result.advance.stage_completed

    def test_time_limit(self, service):
        quest = service.resolve_quest("silver_vein_sabotage")
        active = service.start(quest, PlayerSnapshot(level=3))
        assert not service.pass_time(active, 24)
        assert service.pass_time(active, 48)
        assert active.status == QuestStatus.FAILED
