"""가격 보정 엔진: 조건부 곱셈 보정자

보정자 적용 조건:
- 아이템 태그 필터가 비었거나 아이템 태그와 교집합
- 장소 유형/지역 필터가 비었거나 컨텍스트 값을 포함
- 모든 조건이 참 (알 수 없는 조건 유형은 참)

결정 모드: 각 보정자 범위의 중간값을 곱한다.
확률 모드: 각 보정자 범위 안에서 균등 추출해 곱한다.
최종 가격 = round(base × 누적 배율)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Annotated, Iterable, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.numeric import round_half_up
from src.core.rng import SeededRandom
from src.core.validation import FloatRange

if TYPE_CHECKING:
    from src.core.generation.schemas import GenerationContext

logger = logging.getLogger(__name__)

Season = Literal["spring", "summer", "fall", "winter"]


class _Condition(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class EventActiveCondition(_Condition):
    type: Literal["event_active"] = "event_active"
    event: str


class SeasonCondition(_Condition):
    type: Literal["season"] = "season"
    season: Season


class PopulationBelowCondition(_Condition):
    type: Literal["population_below"] = "population_below"
    value: float


class DangerLevelAboveCondition(_Condition):
    type: Literal["danger_level_above"] = "danger_level_above"
    value: float


class FactionTensionAboveCondition(_Condition):
    """faction이 "any"면 어느 세력이든 임계값 초과 시 참"""

    type: Literal["faction_tension_above"] = "faction_tension_above"
    faction: str = "any"
    value: float


class HasFeatureCondition(_Condition):
    type: Literal["has_feature"] = "has_feature"
    feature: str


KNOWN_CONDITION_TYPES = frozenset(
    {
        "event_active",
        "season",
        "population_below",
        "danger_level_above",
        "faction_tension_above",
        "has_feature",
    }
)


class UnknownPriceCondition(BaseModel):
    """알 수 없는 조건 유형. 항상 참으로 평가된다."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str

    @field_validator("type")
    @classmethod
    def _not_a_known_type(cls, value: str) -> str:
        # 알려진 유형의 잘못된 형태가 여기로 흘러와 허용되지 않도록
        if value in KNOWN_CONDITION_TYPES:
            raise ValueError(f"malformed {value} condition")
        return value


KnownPriceCondition = Annotated[
    Union[
        EventActiveCondition,
        SeasonCondition,
        PopulationBelowCondition,
        DangerLevelAboveCondition,
        FactionTensionAboveCondition,
        HasFeatureCondition,
    ],
    Field(discriminator="type"),
]

PriceCondition = Annotated[
    Union[KnownPriceCondition, UnknownPriceCondition],
    Field(union_mode="left_to_right"),
]


class PriceModifier(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    item_tags: tuple[str, ...] = ()
    location_types: tuple[str, ...] = ()
    regions: tuple[str, ...] = ()
    multiplier_range: FloatRange = (0.8, 1.2)
    conditions: tuple[PriceCondition, ...] = ()
    tags: tuple[str, ...] = ()

    @field_validator("multiplier_range")
    @classmethod
    def _positive(cls, value: tuple[float, float]):
        if value[0] <= 0:
            raise ValueError("multiplier must be positive")
        return value

    @property
    def midpoint(self) -> float:
        low, high = self.multiplier_range
        return (low + high) / 2


@dataclass
class PriceContext:
    location_type: Optional[str] = None
    region: Optional[str] = None
    active_events: Sequence[str] = ()
    season: Optional[str] = None
    faction_tensions: dict[str, float] = field(default_factory=dict)
    population: float = 100
    danger_level: float = 1
    features: Sequence[str] = ()


@dataclass
class AppliedModifier:
    modifier_id: str
    multiplier: float


@dataclass
class PriceQuote:
    base_price: int
    final_price: int
    multiplier: float
    applied: list[AppliedModifier] = field(default_factory=list)


# === 판정 ===


def check_condition(condition: PriceCondition, context: PriceContext) -> bool:
    if isinstance(condition, EventActiveCondition):
        return condition.event in context.active_events
    if isinstance(condition, SeasonCondition):
        return context.season == condition.season
    if isinstance(condition, PopulationBelowCondition):
        return context.population < condition.value
    if isinstance(condition, DangerLevelAboveCondition):
        return context.danger_level > condition.value
    if isinstance(condition, FactionTensionAboveCondition):
        if condition.faction == "any":
            return any(t > condition.value for t in context.faction_tensions.values())
        return context.faction_tensions.get(condition.faction, 0) > condition.value
    if isinstance(condition, HasFeatureCondition):
        return condition.feature in context.features
    # 알 수 없는 유형은 허용
    return True


def modifier_applies(
    modifier: PriceModifier, item_tags: Iterable[str], context: PriceContext
) -> bool:
    tags = set(item_tags)
    if modifier.item_tags and not tags.intersection(modifier.item_tags):
        return False
    if modifier.location_types and context.location_type not in modifier.location_types:
        return False
    if modifier.regions and context.region not in modifier.regions:
        return False
    return all(check_condition(c, context) for c in modifier.conditions)


def applicable_modifiers(
    modifiers: Iterable[PriceModifier],
    item_tags: Iterable[str],
    context: PriceContext,
) -> list[PriceModifier]:
    tags = list(item_tags)
    return [m for m in modifiers if modifier_applies(m, tags, context)]


# === 계산 ===


def quote_price(
    base_price: int,
    item_tags: Iterable[str],
    context: PriceContext,
    modifiers: Iterable[PriceModifier],
    rng: Optional[SeededRandom] = None,
) -> PriceQuote:
    """적용된 보정자별 배율까지 포함한 견적.

    rng가 없으면 중간값(결정 모드), 있으면 범위 내 균등 추출.
    """
    multiplier = 1.0
    applied: list[AppliedModifier] = []
    for modifier in applicable_modifiers(modifiers, item_tags, context):
        if rng is None:
            factor = modifier.midpoint
        else:
            factor = rng.uniform(*modifier.multiplier_range)
        multiplier *= factor
        applied.append(AppliedModifier(modifier_id=modifier.id, multiplier=factor))

    final_price = round_half_up(base_price * multiplier)
    if applied:
        logger.debug(
            "Price %d → %d (x%.3f via %s)",
            base_price,
            final_price,
            multiplier,
            ", ".join(a.modifier_id for a in applied),
        )
    return PriceQuote(
        base_price=base_price,
        final_price=final_price,
        multiplier=multiplier,
        applied=applied,
    )


def calculate_price(
    base_price: int,
    item_tags: Iterable[str],
    context: PriceContext,
    modifiers: Iterable[PriceModifier],
    rng: Optional[SeededRandom] = None,
) -> int:
    return quote_price(base_price, item_tags, context, modifiers, rng).final_price


def price_context_from_generation(
    context: GenerationContext,
    location_type: Optional[str] = None,
    season: Optional[str] = None,
    population: float = 100,
    danger_level: float = 1,
    features: Sequence[str] = (),
) -> PriceContext:
    """생성 컨텍스트의 지역/이벤트/세력 긴장도를 가격 컨텍스트로 옮긴다"""
    return PriceContext(
        location_type=location_type,
        region=context.region_id,
        active_events=tuple(context.active_events),
        season=season,
        faction_tensions=dict(context.faction_tensions),
        population=population,
        danger_level=danger_level,
        features=tuple(features),
    )
