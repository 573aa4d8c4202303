"""가격 Service: 라이브러리의 가격 보정자로 견적 산출"""

import logging
from typing import Iterable, Optional

from src.core.economy.pricing import PriceContext, PriceModifier, PriceQuote, quote_price
from src.core.generation.library import TemplateLibrary
from src.core.numeric import round_half_up
from src.core.rng import SeededRandom

logger = logging.getLogger(__name__)


class PricingService:
    """seed가 없으면 결정 모드(중간값), 있으면 그 시드로 배율 추출"""

    def __init__(self, library: TemplateLibrary):
        self._library = library

    @property
    def modifiers(self) -> list[PriceModifier]:
        return self._library.price_modifiers

    def quote(
        self,
        base_price: int,
        item_tags: Iterable[str],
        context: PriceContext,
        seed: Optional[int] = None,
        shop_modifier: float = 1.0,
    ) -> PriceQuote:
        """shop_modifier: 상점 주인별 배율 (ProceduralWorld가 생성)"""
        rng = SeededRandom(seed) if seed is not None else None
        result = quote_price(base_price, item_tags, context, self.modifiers, rng)
        if shop_modifier != 1.0:
            result.multiplier *= shop_modifier
            result.final_price = round_half_up(base_price * result.multiplier)
        return result
