"""Quest API endpoints (stateless state machine)."""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    ActiveQuestSchema,
    ErrorResponse,
    PrerequisiteRequest,
    PrerequisiteResponse,
    QuestProgressRequest,
    QuestProgressResponse,
    QuestRefRequest,
)
from src.core.quest.models import Quest
from src.core.quest.state_machine import QuestStateError
from src.core.validation import ContentValidationError
from src.services.quest_service import QuestService

router = APIRouter(prefix="/quest", tags=["quest"])


def get_quest_service(request: Request) -> QuestService:
    """QuestService 인스턴스 반환 (의존성 주입)"""
    service: QuestService = request.app.state.quest_service
    return service


def _resolve_quest(service: QuestService, request: QuestRefRequest) -> Quest:
    try:
        return service.resolve_quest(request.quest_id, request.quest)
    except ContentValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post(
    "/check-prerequisites",
    response_model=PrerequisiteResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def check_prerequisites(
    request: PrerequisiteRequest,
    service: QuestService = Depends(get_quest_service),
) -> PrerequisiteResponse:
    """선행 조건 판정 (실패 항목 전부 나열)"""
    quest = _resolve_quest(service, request)
    result = service.check_prerequisites(quest, request.player.to_snapshot())
    return PrerequisiteResponse(quest_id=quest.id, met=result.met, failures=result.failures)


@router.post(
    "/progress",
    response_model=QuestProgressResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def record_progress(
    request: QuestProgressRequest,
    service: QuestService = Depends(get_quest_service),
) -> QuestProgressResponse:
    """
    목표 진행 기록

    스테이지가 완료되면 다음 스테이지로 넘어가고 보상 목록을 돌려준다.
    현재 스테이지에 없는 목표는 무시(changed=false).
    """
    quest = _resolve_quest(service, request)
    if request.active.quest_id != quest.id:
        raise HTTPException(
            status_code=400,
            detail=f"Active quest {request.active.quest_id} does not match {quest.id}",
        )
    if request.active.current_stage_index > quest.last_stage_index:
        raise HTTPException(
            status_code=400,
            detail=f"Quest {quest.id} has no stage {request.active.current_stage_index}",
        )

    active = request.active.to_active()
    try:
        result = service.progress(
            quest, active, request.objective_id, request.amount, request.now
        )
    except QuestStateError as e:
        raise HTTPException(status_code=400, detail=str(e))

    outcome = result.advance
    return QuestProgressResponse(
        changed=result.changed,
        stage_completed=outcome.stage_completed,
        quest_completed=outcome.quest_completed,
        active=ActiveQuestSchema.from_active(active),
        next_stage_id=outcome.next_stage.id if outcome.next_stage else None,
        rewards=[r.model_dump(mode="json") for r in outcome.rewards],
        messages=outcome.messages,
    )
