"""Generation API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.encoders import jsonable_encoder

from src.api.schemas import (
    ErrorResponse,
    GenerateDialogueRequest,
    GenerateEncounterRequest,
    GenerateLocationRequest,
    GenerateNPCRequest,
    GenerateQuestRequest,
    GenerateResponse,
)
from src.config import settings
from src.core.logging import get_logger
from src.services.generation_service import GenerationService

logger = get_logger(__name__)

router = APIRouter(prefix="/generate", tags=["generation"])


def get_generation_service(request: Request) -> GenerationService:
    """GenerationService 인스턴스 반환 (의존성 주입)"""
    service: GenerationService = request.app.state.generation_service
    return service


def _seed_of(service: GenerationService, context, key: str) -> int:
    return service.stream(context, key).seed


@router.post("/npc", response_model=GenerateResponse)
def generate_npc(
    request: GenerateNPCRequest,
    service: GenerationService = Depends(get_generation_service),
) -> GenerateResponse:
    """NPC 1명 생성 (template_id 지정 또는 필터로 가중 선택)"""
    context = request.context.to_context(settings.WORLD_SEED)
    npc = service.generate_npc(
        context,
        request.key,
        template_id=request.template_id,
        location_type=request.location_type,
        faction=request.faction,
        biome=request.biome,
        gender=request.gender,
    )
    if npc is None:
        return GenerateResponse(generated=False)
    return GenerateResponse(
        generated=True,
        seed=_seed_of(service, context, request.key),
        result=jsonable_encoder(npc),
    )


@router.post("/quest", response_model=GenerateResponse)
def generate_quest(
    request: GenerateQuestRequest,
    service: GenerationService = Depends(get_generation_service),
) -> GenerateResponse:
    """퀘스트 1개 생성. result.runtime은 퀘스트 엔진용 정의."""
    context = request.context.to_context(settings.WORLD_SEED)
    quest = service.generate_quest(
        context,
        request.key,
        template_id=request.template_id,
        giver=request.giver.to_giver() if request.giver else None,
        location_type=request.location_type,
        available_npcs=[t.to_target() for t in request.available_npcs],
        available_items=[t.to_target() for t in request.available_items],
        available_locations=[t.to_target() for t in request.available_locations],
        available_enemies=[t.to_target() for t in request.available_enemies],
    )
    if quest is None:
        return GenerateResponse(generated=False)
    result = jsonable_encoder(quest)
    result["runtime"] = quest.to_quest().model_dump(mode="json")
    return GenerateResponse(
        generated=True,
        seed=_seed_of(service, context, request.key),
        result=result,
    )


@router.post(
    "/encounter",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}},
)
def generate_encounter(
    request: GenerateEncounterRequest,
    service: GenerationService = Depends(get_generation_service),
) -> GenerateResponse:
    if request.min_difficulty > request.max_difficulty:
        raise HTTPException(
            status_code=400, detail="min_difficulty must not exceed max_difficulty"
        )
    context = request.context.to_context(settings.WORLD_SEED)
    encounter = service.generate_encounter(
        context,
        request.key,
        biome=request.biome,
        location_type=request.location_type,
        time_of_day=request.time_of_day,
        min_difficulty=request.min_difficulty,
        max_difficulty=request.max_difficulty,
    )
    if encounter is None:
        return GenerateResponse(generated=False)
    return GenerateResponse(
        generated=True,
        seed=_seed_of(service, context, request.key),
        result=jsonable_encoder(encounter),
    )


@router.post("/dialogue", response_model=GenerateResponse)
def generate_dialogue(
    request: GenerateDialogueRequest,
    service: GenerationService = Depends(get_generation_service),
) -> GenerateResponse:
    """NPC + 그 NPC의 대화 트리"""
    context = request.context.to_context(settings.WORLD_SEED)
    generated = service.generate_dialogue(
        context,
        request.key,
        npc_template_id=request.npc_template_id,
        location_type=request.location_type,
        quest_id=request.quest_id,
        simple=request.simple,
    )
    if generated is None:
        return GenerateResponse(generated=False)
    npc, tree = generated
    return GenerateResponse(
        generated=True,
        seed=_seed_of(service, context, request.key),
        result={"npc": jsonable_encoder(npc), "tree": tree.model_dump(mode="json")},
    )


@router.post("/location", response_model=GenerateResponse)
def generate_location(
    request: GenerateLocationRequest,
    service: GenerationService = Depends(get_generation_service),
) -> GenerateResponse:
    context = request.context.to_context(settings.WORLD_SEED)
    location = service.generate_location(
        context, request.key, request.location_type, region_id=request.region_id
    )
    logger.info(
        "Generated location %s (%s) with %d NPCs",
        location.name,
        location.type,
        len(location.npcs),
    )
    return GenerateResponse(
        generated=True,
        seed=location.seed,
        result=jsonable_encoder(location),
    )
