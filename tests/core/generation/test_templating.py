"""템플릿 치환 + 필터/가중 선택 테스트"""

from collections import Counter

import pytest

from src.core.generation.enums import TimeOfDay
from src.core.generation.selection import matches_any_tag, matches_filter, select_weighted
from src.core.generation.templating import (
    extract_template_variables,
    is_night,
    substitute_template,
    time_of_day,
)
from src.core.rng import SeededRandom


class TestSubstituteTemplate:
    """{{variable}} 치환"""

    def test_replaces_known_tokens(self):
        text = substitute_template("Howdy {{name}}, welcome to {{town}}.", {"name": "Jo", "town": "Dry Gulch"})
        assert text == "Howdy Jo, welcome to Dry Gulch."

    def test_unknown_token_left_verbatim(self):
        assert substitute_template("Find {{target}} by {{when}}", {"target": "Slim"}) == (
            "Find Slim by {{when}}"
        )

    def test_none_value_left_verbatim(self):
        assert substitute_template("{{title}} Jones", {"title": None}) == "{{title}} Jones"

    def test_repeated_token(self):
        assert substitute_template("{{x}}-{{x}}", {"x": "a"}) == "a-a"

    def test_non_string_values(self):
        assert substitute_template("{{n}} head", {"n": 12}) == "12 head"

    def test_no_tokens(self):
        assert substitute_template("plain text", {}) == "plain text"

    def test_malformed_braces_untouched(self):
        assert substitute_template("{name} {{ name }}", {"name": "x"}) == "{name} {{ name }}"

    def test_extract_variables_in_order_without_duplicates(self):
        assert extract_template_variables("{{b}} {{a}} {{b}}") == ["b", "a"]


class TestTimeOfDay:
    @pytest.mark.parametrize(
        ("hour", "expected"),
        [
            (0, TimeOfDay.NIGHT),
            (5.9, TimeOfDay.NIGHT),
            (6, TimeOfDay.MORNING),
            (11.99, TimeOfDay.MORNING),
            (12, TimeOfDay.AFTERNOON),
            (17.5, TimeOfDay.AFTERNOON),
            (18, TimeOfDay.EVENING),
            (23, TimeOfDay.EVENING),
        ],
    )
    def test_periods(self, hour, expected):
        assert time_of_day(hour) == expected

    @pytest.mark.parametrize(("hour", "night"), [(3, True), (6, False), (20, False), (21, True)])
    def test_is_night(self, hour, night):
        assert is_night(hour) is night


class TestSelection:
    """빈 필터 = 모두 허용, 후보 없음 = None"""

    def test_empty_filter_matches_everything(self):
        assert matches_filter((), "anything")
        assert matches_filter((), None)

    def test_non_empty_filter_requires_membership(self):
        assert matches_filter(("ranch",), "ranch")
        assert not matches_filter(("ranch",), "outpost")
        assert not matches_filter(("ranch",), None)

    def test_matches_any_tag(self):
        assert matches_any_tag(["a", "b"], ["b", "c"])
        assert not matches_any_tag(["a"], ["c"])

    def test_select_weighted_none_when_empty(self):
        assert select_weighted(SeededRandom(1), []) is None

    def test_select_weighted_respects_weights(self):
        rng = SeededRandom(31)
        counts = Counter(
            select_weighted(rng, ["rare", "common"], lambda c: 1.0 if c == "rare" else 9.0)
            for _ in range(10_000)
        )
        assert counts["common"] / 10_000 == pytest.approx(0.9, abs=0.02)
