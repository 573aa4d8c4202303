"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient

from src.core.generation.library import TemplateLibrary, load_content_pack
from src.core.generation.schemas import GenerationContext
from src.main import app


@pytest.fixture()
def client() -> TestClient:
    """FastAPI TestClient with the bundled content pack loaded via lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="session")
def library() -> TemplateLibrary:
    """Bundled content pack (strict: every entry must validate)."""
    loaded, _ = load_content_pack(strict=True)
    return loaded


@pytest.fixture()
def context() -> GenerationContext:
    return GenerationContext(
        world_seed=12345,
        region_id="dust_basin",
        region_name="Dust Basin",
        location_id="loc_test",
        location_name="Test Gulch",
        player_level=3,
        game_hour=14.0,
    )
