"""조우 생성기 테스트"""

import pytest

from src.core.generation.encounter_generator import (
    MAX_ENCOUNTER_CHANCE,
    encounter_chance,
    generate_enemy,
    generate_random_encounter,
    resolve_enemy_template,
    scaled_stats,
    select_encounter_template,
    should_trigger_encounter,
)
from src.core.generation.enums import TimeOfDay
from src.core.generation.library import library_from_dicts
from src.core.generation.schemas import DEFAULT_ENEMY_TEMPLATE
from src.core.rng import SeededRandom


class TestEnemies:
    def test_resolve_by_id_then_tag_then_default(self, library):
        rng = SeededRandom(1)
        assert resolve_enemy_template(rng, library, "coyote").id == "coyote"
        assert "wildlife" in resolve_enemy_template(rng, library, "wildlife").combat_tags
        assert resolve_enemy_template(rng, library, "dragon") is DEFAULT_ENEMY_TEMPLATE

    def test_level_one_stats_are_base(self, library):
        template = library.enemy_template("bandit")
        assert scaled_stats(template, 1) == template.base_stats

    def test_scaled_stats(self, library):
        stats = scaled_stats(library.enemy_template("bandit"), 3)
        assert stats.health == 40
        assert stats.damage == 10
        assert stats.armor == 2
        assert stats.accuracy == 69
        assert stats.evasion == 12

    def test_level_clamped_to_template(self, library):
        enemy = generate_enemy(SeededRandom(2), library, "rattlesnake", 2.0, 10, 0)
        assert enemy.level == library.enemy_template("rattlesnake").max_level

    def test_stats_vary_within_ten_percent(self, library):
        rng = SeededRandom(3)
        base = scaled_stats(library.enemy_template("grizzly"), 5)
        for i in range(30):
            enemy = generate_enemy(rng, library, "grizzly", 1.0, 5, i)
            assert base.health * 0.89 <= enemy.health <= base.health * 1.11
            assert enemy.max_health == enemy.health


class TestEncounterSelection:
    """지정한 필터만 적용, 후보 없음은 None"""

    def test_biome_filter(self, library):
        rng = SeededRandom(4)
        for _ in range(30):
            template = select_encounter_template(rng, library, biome="forest")
            assert not template.valid_biomes or "forest" in template.valid_biomes

    def test_time_filter_excludes_day_only(self, library):
        rng = SeededRandom(4)
        for _ in range(50):
            template = select_encounter_template(
                rng, library, time_of_day=TimeOfDay.NIGHT
            )
            assert not template.valid_time_of_day or TimeOfDay.NIGHT in template.valid_time_of_day

    def test_difficulty_overlap(self, library):
        rng = SeededRandom(4)
        for _ in range(30):
            template = select_encounter_template(rng, library, min_difficulty=9, max_difficulty=10)
            assert template.difficulty_range[1] >= 9

    def test_no_match_returns_none(self, library, context):
        result = generate_random_encounter(
            SeededRandom(1), library, context, biome="ocean", location_type="lighthouse"
        )
        assert result is None


class TestGenerateEncounter:
    def test_deterministic(self, library, context):
        a = generate_random_encounter(SeededRandom(11), library, context, biome="desert")
        b = generate_random_encounter(SeededRandom(11), library, context, biome="desert")
        assert a == b

    def test_description_and_rewards(self, context):
        library = library_from_dicts(
            {
                "enemy_templates": [
                    {"id": "rat", "name": "Rat", "base_stats": {"health": 5, "damage": 1, "armor": 0}}
                ],
                "encounter_templates": [
                    {
                        "id": "rats",
                        "name": "Rats",
                        "description_template": "{{enemyCount}} rats near {{location}} ({{weather}})",
                        "enemies": [{"enemy_id_or_tag": "rat", "count_range": [3, 3]}],
                        "xp_range": [10, 10],
                        "gold_range": [0, 0],
                    }
                ],
            }
        )
        encounter = generate_random_encounter(SeededRandom(1), library, context)
        assert len(encounter.enemies) == 3
        assert encounter.description == "3 rats near Test Gulch ({{weather}})"
        assert encounter.gold_reward == 0
        assert 1 <= encounter.difficulty <= 10
        assert len({e.id for e in encounter.enemies}) == 3


class TestEncounterChance:
    def test_base_daytime(self, context):
        assert encounter_chance(context) == pytest.approx(0.15)

    def test_night_multiplier(self, context):
        assert encounter_chance(context.with_overrides(game_hour=23)) == pytest.approx(0.225)

    def test_tension_and_events(self, context):
        tense = context.with_overrides(faction_tensions={"desperados": 0.9})
        assert encounter_chance(tense) == pytest.approx(0.15 * 1.4)
        war = context.with_overrides(active_events=("gang_war",))
        assert encounter_chance(war) == pytest.approx(0.3)
        quiet = context.with_overrides(active_events=("law_crackdown",))
        assert encounter_chance(quiet) == pytest.approx(0.075)

    def test_capped(self, context):
        chaos = context.with_overrides(
            game_hour=2,
            faction_tensions={"a": 1.0, "b": 1.0, "c": 1.0},
            active_events=("gang_war",),
        )
        assert encounter_chance(chaos) == MAX_ENCOUNTER_CHANCE

    def test_should_trigger_extremes(self, context):
        assert not should_trigger_encounter(SeededRandom(1), context, base_chance=0.0)
        assert should_trigger_encounter(SeededRandom(1), context, base_chance=1.0)
