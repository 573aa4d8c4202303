"""퀘스트 Service: 퀘스트 정의 조회 + 상태 머신 호출

ActiveQuest는 호출자가 소유한다 (저장 형식은 범위 밖).
Service는 정의를 찾아 Core 전이를 적용하고 결과를 로깅한다.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from src.core.generation.library import TemplateLibrary
from src.core.quest.models import ActiveQuest, Quest
from src.core.quest.state_machine import (
    PlayerSnapshot,
    PrerequisiteResult,
    QuestAdvance,
    advance_quest,
    check_prerequisites,
    record_progress,
    start_quest,
    tick_time_limit,
)
from src.core.validation import ContentValidationError, parse_entry

logger = logging.getLogger(__name__)


@dataclass
class ProgressResult:
    changed: bool
    advance: QuestAdvance


class QuestService:
    """퀘스트 정의 + 진행"""

    def __init__(self, library: TemplateLibrary):
        self._library = library

    def get_quest(self, quest_id: str) -> Optional[Quest]:
        return self._library.quest(quest_id)

    def resolve_quest(
        self,
        quest_id: Optional[str] = None,
        quest_data: Optional[dict[str, Any]] = None,
    ) -> Quest:
        """제출된 정의가 있으면 검증 후 사용, 없으면 라이브러리에서 조회.

        Raises:
            ContentValidationError: 제출된 정의가 스키마 위반
            LookupError: quest_id가 라이브러리에 없음
        """
        if quest_data is not None:
            quest, issues = parse_entry(Quest, quest_data, "request")
            if quest is None:
                raise ContentValidationError(issues)
            return quest

        if quest_id is None:
            raise LookupError("Either quest_id or quest must be given")
        quest = self.get_quest(quest_id)
        if quest is None:
            raise LookupError(f"Quest not found: {quest_id}")
        return quest

    def check_prerequisites(self, quest: Quest, player: PlayerSnapshot) -> PrerequisiteResult:
        result = check_prerequisites(quest, player)
        if not result:
            logger.debug("Prerequisites not met for %s: %s", quest.id, result.failures)
        return result

    def start(self, quest: Quest, player: PlayerSnapshot, now: float = 0.0) -> ActiveQuest:
        return start_quest(quest, player, now)

    def progress(
        self,
        quest: Quest,
        active: ActiveQuest,
        objective_id: str,
        amount: int = 1,
        now: float = 0.0,
    ) -> ProgressResult:
        """목표 진행 기록 후, 스테이지가 끝났으면 바로 다음으로 넘긴다"""
        changed = record_progress(quest, active, objective_id, amount)
        outcome = advance_quest(quest, active, now) if changed else QuestAdvance()
        if outcome.stage_completed:
            logger.info(
                "Quest %s stage %s completed",
                quest.id,
                outcome.completed_stage.id if outcome.completed_stage else "?",
            )
        return ProgressResult(changed=changed, advance=outcome)

    def pass_time(self, active: ActiveQuest, hours: float, now: float = 0.0) -> bool:
        """제한 시간 차감. 실패 처리됐으면 True."""
        expired = tick_time_limit(active, hours, now)
        if expired:
            logger.info("Quest %s failed: time limit reached", active.quest_id)
        return expired
