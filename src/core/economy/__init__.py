"""경제 Core 패키지: 조건부 가격 보정"""

from src.core.economy.pricing import (
    AppliedModifier,
    PriceCondition,
    PriceContext,
    PriceModifier,
    PriceQuote,
    UnknownPriceCondition,
    applicable_modifiers,
    calculate_price,
    check_condition,
    modifier_applies,
    price_context_from_generation,
    quote_price,
)

__all__ = [
    "AppliedModifier",
    "PriceCondition",
    "PriceContext",
    "PriceModifier",
    "PriceQuote",
    "UnknownPriceCondition",
    "applicable_modifiers",
    "calculate_price",
    "check_condition",
    "modifier_applies",
    "price_context_from_generation",
    "quote_price",
]
