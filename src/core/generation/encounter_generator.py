"""조우 생성기: 조우 템플릿 + 적 템플릿 + 컨텍스트 → GeneratedEncounter

적 레벨 = max(1, round(플레이어 레벨 × 슬롯 배율)), 적 템플릿 레벨 범위로 고정.
난이도 = min(10, round(총 전투력 / (플레이어 레벨 × 50))).
"""

from __future__ import annotations

import logging
from typing import Optional

from src.core.numeric import clamp, round_half_up
from src.core.rng import SeededRandom, UINT32_MASK

from .enums import TimeOfDay
from .library import TemplateLibrary
from .models import GeneratedEncounter, GeneratedEnemy
from .schemas import (
    DEFAULT_ENEMY_TEMPLATE,
    EncounterTemplate,
    EnemyStats,
    EnemyTemplate,
    GenerationContext,
)
from .selection import matches_filter, select_weighted
from .templating import is_night, substitute_template

logger = logging.getLogger(__name__)

BASE_ENCOUNTER_CHANCE = 0.15
MAX_ENCOUNTER_CHANCE = 0.8


def resolve_enemy_template(
    rng: SeededRandom, library: TemplateLibrary, enemy_id_or_tag: str
) -> EnemyTemplate:
    """id 일치 → 전투 태그 일치 중 하나 → 기본 적"""
    template = library.enemy_template(enemy_id_or_tag)
    if template is not None:
        return template
    tagged = library.enemy_templates_by_tag(enemy_id_or_tag)
    if tagged:
        return rng.pick(tagged)
    logger.debug("Unknown enemy id or tag %r, using default", enemy_id_or_tag)
    return DEFAULT_ENEMY_TEMPLATE


def scaled_stats(template: EnemyTemplate, level: int) -> EnemyStats:
    """레벨 1 기준 스탯을 레벨에 맞게 확장 (명중/회피는 100 상한)"""
    base = template.base_stats
    scaling = template.scaling
    steps = level - 1
    return EnemyStats(
        health=max(1, round_half_up(base.health * scaling.health_per_level**steps)),
        damage=round_half_up(base.damage * scaling.damage_per_level**steps),
        armor=round_half_up(base.armor * scaling.armor_per_level**steps),
        accuracy=min(100, round_half_up(base.accuracy + scaling.accuracy_per_level * steps)),
        evasion=min(100, round_half_up(base.evasion + scaling.evasion_per_level * steps)),
    )


def _vary(rng: SeededRandom, value: float, spread: float = 0.1) -> int:
    return max(1, round_half_up(value * (1 + rng.uniform(-spread, spread))))


def _enemy_name(rng: SeededRandom, template: EnemyTemplate) -> str:
    pool = template.name_pool
    parts: list[str] = []
    if pool.prefixes and rng.chance(0.5):
        parts.append(rng.pick(pool.prefixes))
    if not parts and pool.titles and rng.chance(0.3):
        parts.append(rng.pick(pool.titles))
    parts.append(template.name)
    if pool.suffixes and rng.chance(0.2):
        parts.append(rng.pick(pool.suffixes))
    name = " ".join(parts)
    return name[:1].upper() + name[1:]


def generate_enemy(
    rng: SeededRandom,
    library: TemplateLibrary,
    enemy_id_or_tag: str,
    level_scale: float,
    player_level: int,
    index: int,
) -> GeneratedEnemy:
    template = resolve_enemy_template(rng, library, enemy_id_or_tag)

    level = clamp(
        max(1, round_half_up(player_level * level_scale)),
        template.min_level,
        template.max_level,
    )
    stats = scaled_stats(template, level)

    health = _vary(rng, stats.health)
    damage = _vary(rng, stats.damage)
    armor = _vary(rng, stats.armor, 0.05)
    accuracy = min(100, _vary(rng, stats.accuracy, 0.05))
    evasion = min(100, _vary(rng, stats.evasion, 0.05))

    name = _enemy_name(rng, template)

    base_xp = round_half_up(
        (health * 0.5 + damage * 2 + armor * 1.5) * template.xp_modifier
    )
    xp_value = round_half_up(base_xp * (1 + (level - 1) * 0.15))

    return GeneratedEnemy(
        id=f"enemy_{index}_{rng.randint(0, 0xFFFF):x}",
        template_id=template.id,
        enemy_type=enemy_id_or_tag,
        name=name,
        level=level,
        health=health,
        max_health=health,
        damage=damage,
        armor=armor,
        accuracy=accuracy,
        evasion=evasion,
        xp_value=xp_value,
        behavior_tags=list(template.behavior_tags),
        combat_tags=list(template.combat_tags),
        loot_table_id=template.loot_table_id,
    )


def generate_encounter(
    rng: SeededRandom,
    template: EncounterTemplate,
    context: GenerationContext,
    library: TemplateLibrary,
) -> GeneratedEncounter:
    encounter_seed = rng.randint(0, UINT32_MASK)
    encounter_rng = SeededRandom(encounter_seed)

    enemies: list[GeneratedEnemy] = []
    for slot in template.enemies:
        count = encounter_rng.randint(*slot.count_range)
        for _ in range(count):
            enemies.append(
                generate_enemy(
                    encounter_rng,
                    library,
                    slot.enemy_id_or_tag,
                    slot.level_scale,
                    context.player_level,
                    len(enemies),
                )
            )

    total_power = sum(e.power for e in enemies)
    difficulty = min(10, round_half_up(total_power / (context.player_level * 50)))

    multiplier = 1 + (context.player_level - 1) * 0.2
    xp_reward = round_half_up(
        encounter_rng.randint(*template.xp_range) * multiplier * (1 + difficulty * 0.1)
    )
    gold_reward = round_half_up(encounter_rng.randint(*template.gold_range) * multiplier)

    variables = {
        "enemyCount": str(len(enemies)),
        "difficulty": str(difficulty),
        "location": context.location_name or context.location_id or "the area",
        "region": context.region_name or context.region_id or "these parts",
    }

    return GeneratedEncounter(
        id=f"enc_{encounter_seed:x}",
        template_id=template.id,
        name=template.name,
        description=substitute_template(template.description_template, variables),
        enemies=enemies,
        difficulty=difficulty,
        xp_reward=xp_reward,
        gold_reward=gold_reward,
        loot_table_id=template.loot_table_id,
        tags=list(template.tags),
        seed=encounter_seed,
    )


def select_encounter_template(
    rng: SeededRandom,
    library: TemplateLibrary,
    biome: Optional[str] = None,
    location_type: Optional[str] = None,
    time_of_day: Optional[TimeOfDay] = None,
    min_difficulty: int = 1,
    max_difficulty: int = 10,
) -> Optional[EncounterTemplate]:
    """지정된 필터만 적용한다 (None = 필터 없음). 난이도는 범위 겹침."""
    candidates = [
        t
        for t in library.encounter_templates
        if (biome is None or matches_filter(t.valid_biomes, biome))
        and (location_type is None or matches_filter(t.valid_location_types, location_type))
        and (time_of_day is None or not t.valid_time_of_day or time_of_day in t.valid_time_of_day)
        and t.difficulty_range[0] <= max_difficulty
        and t.difficulty_range[1] >= min_difficulty
    ]
    return select_weighted(rng, candidates, lambda t: t.weight)


def generate_random_encounter(
    rng: SeededRandom,
    library: TemplateLibrary,
    context: GenerationContext,
    biome: Optional[str] = None,
    location_type: Optional[str] = None,
    time_of_day: Optional[TimeOfDay] = None,
    min_difficulty: int = 1,
    max_difficulty: int = 10,
) -> Optional[GeneratedEncounter]:
    """조건에 맞는 조우 템플릿이 없으면 None"""
    template = select_encounter_template(
        rng, library, biome, location_type, time_of_day, min_difficulty, max_difficulty
    )
    if template is None:
        logger.debug(
            "No encounter template for biome=%s location=%s time=%s difficulty=%d-%d",
            biome,
            location_type,
            time_of_day,
            min_difficulty,
            max_difficulty,
        )
        return None
    return generate_encounter(rng, template, context, library)


def encounter_chance(
    context: GenerationContext, base_chance: float = BASE_ENCOUNTER_CHANCE
) -> float:
    """야간 ×1.5, 세력 긴장도(0.5 초과분), gang_war ×2, law_crackdown ×0.5, 상한 0.8"""
    chance = base_chance
    if is_night(context.game_hour):
        chance *= 1.5
    for tension in context.faction_tensions.values():
        if tension > 0.5:
            chance *= 1 + (tension - 0.5)
    if "gang_war" in context.active_events:
        chance *= 2
    if "law_crackdown" in context.active_events:
        chance *= 0.5
    return min(chance, MAX_ENCOUNTER_CHANCE)


def should_trigger_encounter(
    rng: SeededRandom,
    context: GenerationContext,
    base_chance: float = BASE_ENCOUNTER_CHANCE,
) -> bool:
    return rng.chance(encounter_chance(context, base_chance))
