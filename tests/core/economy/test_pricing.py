"""가격 보정 엔진 테스트"""

import pytest
from pydantic import ValidationError

from src.core.economy import (
    PriceContext,
    PriceModifier,
    UnknownPriceCondition,
    applicable_modifiers,
    calculate_price,
    price_context_from_generation,
    quote_price,
)
from src.core.rng import SeededRandom


def _modifier(modifier_id="m", **overrides) -> PriceModifier:
    data = {"id": modifier_id, "multiplier_range": [1.0, 1.0]}
    data.update(overrides)
    return PriceModifier.model_validate(data)


class TestModifierFilters:
    """태그 교집합 + 장소/지역 + 조건 AND"""

    def test_item_tag_intersection(self):
        modifier = _modifier(item_tags=["food", "drink"])
        assert applicable_modifiers([modifier], ["food"], PriceContext())
        assert not applicable_modifiers([modifier], ["weapon"], PriceContext())

    def test_empty_filters_apply_everywhere(self):
        assert applicable_modifiers([_modifier()], [], PriceContext())

    def test_location_and_region(self):
        modifier = _modifier(location_types=["outpost"], regions=["dust_basin"])
        assert applicable_modifiers([modifier], [], PriceContext(location_type="outpost", region="dust_basin"))
        assert not applicable_modifiers([modifier], [], PriceContext(location_type="outpost", region="red_desert"))
        assert not applicable_modifiers([modifier], [], PriceContext(region="dust_basin"))

    @pytest.mark.parametrize(
        "condition,context,expected",
        [
            ({"type": "event_active", "event": "gold_rush"}, PriceContext(active_events=("gold_rush",)), True),
            ({"type": "season", "season": "winter"}, PriceContext(season="summer"), False),
            ({"type": "population_below", "value": 50}, PriceContext(population=30), True),
            ({"type": "danger_level_above", "value": 5}, PriceContext(danger_level=5), False),
            ({"type": "faction_tension_above", "value": 0.7}, PriceContext(faction_tensions={"a": 0.8}), True),
            ({"type": "faction_tension_above", "faction": "b", "value": 0.7}, PriceContext(faction_tensions={"a": 0.8}), False),
            ({"type": "has_feature", "feature": "railroad"}, PriceContext(features=("railroad",)), True),
        ],
    )
    def test_conditions(self, condition, context, expected):
        modifier = _modifier(conditions=[condition])
        assert bool(applicable_modifiers([modifier], [], context)) is expected

    def test_unknown_condition_is_permissive(self):
        modifier = _modifier(conditions=[{"type": "moon_phase", "phase": "full"}])
        assert isinstance(modifier.conditions[0], UnknownPriceCondition)
        assert applicable_modifiers([modifier], [], PriceContext())

    def test_malformed_known_condition_rejected(self):
        with pytest.raises(ValidationError):
            _modifier(conditions=[{"type": "season", "season": "monsoon"}])

    def test_multiplier_must_be_positive(self):
        with pytest.raises(ValidationError):
            _modifier(multiplier_range=[0.0, 1.0])
        with pytest.raises(ValidationError):
            _modifier(multiplier_range=[1.5, 1.2])


class TestQuote:
    def test_midpoints_multiply_and_round_half_up(self):
        modifiers = [
            _modifier("scarcity", multiplier_range=[1.2, 1.4]),
            _modifier("glut", multiplier_range=[0.8, 0.9]),
        ]
        quote = quote_price(100, ["food"], PriceContext(), modifiers)
        assert quote.final_price == 111
        assert quote.multiplier == pytest.approx(1.105)
        assert [a.modifier_id for a in quote.applied] == ["scarcity", "glut"]

    def test_no_modifiers_keeps_base(self):
        quote = quote_price(42, [], PriceContext(), [])
        assert quote.final_price == 42
        assert quote.applied == []

    def test_stochastic_within_range(self):
        modifier = _modifier(multiplier_range=[0.5, 1.5])
        rng = SeededRandom(3)
        prices = {calculate_price(100, [], PriceContext(), [modifier], rng) for _ in range(200)}
        assert min(prices) >= 50
        assert max(prices) <= 150
        assert len(prices) > 10

    def test_stochastic_deterministic_by_seed(self):
        modifiers = [_modifier(multiplier_range=[0.5, 1.5])]
        a = calculate_price(100, [], PriceContext(), modifiers, SeededRandom(9))
        b = calculate_price(100, [], PriceContext(), modifiers, SeededRandom(9))
        assert a == b

    def test_bundled_modifiers(self, library):
        context = PriceContext(location_type="outpost", population=30)
        quote = quote_price(100, ["supplies"], context, library.price_modifiers)
        applied = {a.modifier_id for a in quote.applied}
        assert {"remote_scarcity", "small_settlement_markup"} <= applied
        assert quote.final_price > 100


class TestGenerationBridge:
    def test_copies_region_events_tensions(self, context):
        ctx = context.with_overrides(active_events=("gold_rush",), faction_tensions={"desperados": 0.9})
        price_ctx = price_context_from_generation(ctx, location_type="mining_town", season="winter")
        assert price_ctx.region == "dust_basin"
        assert price_ctx.active_events == ("gold_rush",)
        assert price_ctx.faction_tensions == {"desperados": 0.9}
        assert price_ctx.location_type == "mining_town"
        assert price_ctx.season == "winter"
