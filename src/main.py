"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.dialogue import router as dialogue_router
from src.api.generation import router as generation_router
from src.api.health import router as health_router
from src.api.pricing import router as pricing_router
from src.api.quest import router as quest_router
from src.config import settings
from src.core.generation.library import load_content_pack
from src.core.logging import get_logger, setup_logging
from src.services.dialogue_service import DialogueService
from src.services.generation_service import GenerationService
from src.services.pricing_service import PricingService
from src.services.quest_service import QuestService

setup_logging(settings.LOG_LEVEL, settings.DEBUG)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # 콘텐츠 팩 로드
    logger.info("Loading content pack from %s...", settings.content_dir)
    library, report = load_content_pack(settings.content_dir, strict=settings.STRICT_CONTENT)
    app.state.library = library
    if report.ok:
        logger.info("Content pack loaded: %s", report.counts)
    else:
        logger.warning(
            "Content pack loaded with %d dropped entries: %s",
            len(report.issues),
            report.counts,
        )

    # 서비스 초기화
    generation_service = GenerationService(library, world_name=settings.WORLD_NAME)
    app.state.generation_service = generation_service
    app.state.dialogue_service = DialogueService(library)
    app.state.quest_service = QuestService(library)
    app.state.pricing_service = PricingService(library)
    logger.info("Services initialized (world seed %d).", settings.WORLD_SEED)

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    generation_service.shutdown()


app = FastAPI(title="Frontier Narrative", lifespan=lifespan)

app.include_router(health_router)
app.include_router(generation_router)
app.include_router(dialogue_router)
app.include_router(quest_router)
app.include_router(pricing_router)
