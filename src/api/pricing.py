"""Pricing API endpoints."""

from fastapi import APIRouter, Depends, Request

from src.api.schemas import AppliedModifierInfo, PriceQuoteRequest, PriceQuoteResponse
from src.core.economy.pricing import PriceContext
from src.services.pricing_service import PricingService

router = APIRouter(prefix="/pricing", tags=["pricing"])


def get_pricing_service(request: Request) -> PricingService:
    """PricingService 인스턴스 반환 (의존성 주입)"""
    service: PricingService = request.app.state.pricing_service
    return service


@router.post("/quote", response_model=PriceQuoteResponse)
def quote(
    request: PriceQuoteRequest,
    service: PricingService = Depends(get_pricing_service),
) -> PriceQuoteResponse:
    """
    가격 견적

    seed가 없으면 각 보정자의 중간값 배율(결정 모드), 있으면 범위 내 추출.
    """
    context = PriceContext(
        location_type=request.location_type,
        region=request.region,
        active_events=tuple(request.active_events),
        season=request.season,
        faction_tensions=dict(request.faction_tensions),
        population=request.population,
        danger_level=request.danger_level,
        features=tuple(request.features),
    )
    result = service.quote(
        request.base_price,
        request.item_tags,
        context,
        seed=request.seed,
        shop_modifier=request.shop_modifier,
    )
    return PriceQuoteResponse(
        base_price=result.base_price,
        final_price=result.final_price,
        multiplier=result.multiplier,
        applied=[
            AppliedModifierInfo(modifier_id=a.modifier_id, multiplier=a.multiplier)
            for a in result.applied
        ],
    )
