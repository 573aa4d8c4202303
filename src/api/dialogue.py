"""Dialogue API endpoints (stateless traversal)."""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    ChoiceInfo,
    DialogueChooseRequest,
    DialogueStartRequest,
    DialogueStepResponse,
    ErrorResponse,
)
from src.core.dialogue.engine import DanglingNodeError, DialogueStep
from src.core.dialogue.models import DialogueTree
from src.core.logging import get_logger
from src.core.validation import ContentValidationError
from src.services.dialogue_service import DialogueService

logger = get_logger(__name__)

router = APIRouter(prefix="/dialogue", tags=["dialogue"])


def get_dialogue_service(request: Request) -> DialogueService:
    """DialogueService 인스턴스 반환 (의존성 주입)"""
    service: DialogueService = request.app.state.dialogue_service
    return service


def _resolve_tree(service: DialogueService, request: DialogueStartRequest) -> DialogueTree:
    try:
        return service.resolve_tree(request.tree_id, request.tree)
    except ContentValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _build_step_response(tree: DialogueTree, step: DialogueStep) -> DialogueStepResponse:
    """DialogueStep을 응답 스키마로 변환"""
    if step.node is None:
        return DialogueStepResponse(
            tree_id=tree.id,
            ended=True,
            effects=[e.model_dump(mode="json") for e in step.effects],
        )
    return DialogueStepResponse(
        tree_id=tree.id,
        ended=False,
        node_id=step.node.id,
        speaker=step.node.speaker,
        text=step.node.text,
        choices=[
            ChoiceInfo(
                index=c.index,
                text=c.choice.text,
                hint=c.choice.hint,
                tags=list(c.choice.tags),
            )
            for c in step.choices
        ],
        effects=[e.model_dump(mode="json") for e in step.effects],
        can_auto_advance=step.can_auto_advance,
    )


@router.post(
    "/start",
    response_model=DialogueStepResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def start_dialogue(
    request: DialogueStartRequest,
    service: DialogueService = Depends(get_dialogue_service),
) -> DialogueStepResponse:
    """
    대화 시작

    진입점을 우선순위 순으로 평가하고, 충족하는 것이 없으면 최저 우선순위 진입점.
    """
    tree = _resolve_tree(service, request)
    try:
        step = service.start(tree, request.state.to_state())
    except DanglingNodeError as e:
        logger.error("Broken dialogue tree %s: %s", tree.id, e)
        raise HTTPException(status_code=422, detail=f"Broken dialogue tree: {e.node_id}")
    return _build_step_response(tree, step)


@router.post(
    "/choose",
    response_model=DialogueStepResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def choose_option(
    request: DialogueChooseRequest,
    service: DialogueService = Depends(get_dialogue_service),
) -> DialogueStepResponse:
    """
    선택지 선택

    state는 현재 노드 진입 효과까지 반영된 상태여야 한다.
    응답 effects는 선택지 효과 → 다음 노드 진입 효과 순서.
    """
    tree = _resolve_tree(service, request)
    try:
        step = service.choose(
            tree, request.node_id, request.choice_index, request.state.to_state()
        )
    except DanglingNodeError as e:
        if e.node_id == request.node_id:
            raise HTTPException(status_code=404, detail=f"Node not found: {e.node_id}")
        logger.error("Broken dialogue tree %s: %s", tree.id, e)
        raise HTTPException(status_code=422, detail=f"Broken dialogue tree: {e.node_id}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _build_step_response(tree, step)
