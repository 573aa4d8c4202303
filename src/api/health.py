"""Health check endpoint."""

from fastapi import APIRouter, Request

from src.api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request) -> HealthResponse:
    """Return application status and loaded template counts."""
    library = getattr(request.app.state, "library", None)
    if library is None:
        return HealthResponse(status="starting")
    return HealthResponse(status="ok", templates=library.counts())
