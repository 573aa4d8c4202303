"""생성 템플릿/풀 스키마 (pydantic)

템플릿은 로드 시점에 검증되고 이후 변경되지 않는 참조 데이터다.
범위 필드는 [min, max] 2-튜플, 텍스트 필드는 {{variable}} 플레이스홀더를 포함한다.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.quest.enums import ObjectiveType, QuestType
from src.core.quest.models import MAX_QUEST_LEVEL, MIN_QUEST_LEVEL
from src.core.validation import FloatRange, IntRange, UnitFloat, UnitRange

from .enums import (
    LocationSize,
    NameOrigin,
    NodeRole,
    QuestArchetype,
    SnippetCategory,
    TargetType,
    TimeOfDay,
)

GENERATION_SCHEMA_VERSION = "1.0.0"

PERSONALITY_TRAITS = (
    "aggression",
    "friendliness",
    "curiosity",
    "greed",
    "honesty",
    "lawfulness",
)


class TemplateModel(BaseModel):
    """불변 템플릿 공통 설정. 알 수 없는 필드는 저작 오류로 본다."""

    model_config = ConfigDict(frozen=True, extra="forbid")


# === 생성 컨텍스트 ===


class GenerationContext(BaseModel):
    """모든 생성기에 값으로 전달되는 월드/플레이어 사실"""

    model_config = ConfigDict(frozen=True)

    world_seed: int
    region_id: Optional[str] = None
    location_id: Optional[str] = None
    region_name: Optional[str] = None
    location_name: Optional[str] = None
    player_level: int = Field(default=1, ge=1, le=10)
    game_hour: float = Field(default=12.0, ge=0.0, le=24.0)
    faction_tensions: dict[str, float] = Field(default_factory=dict)
    active_events: tuple[str, ...] = ()
    context_tags: tuple[str, ...] = ()

    def with_overrides(self, **changes) -> GenerationContext:
        """변경분을 반영한 새 컨텍스트 (원본 불변)"""
        return self.model_validate({**self.model_dump(), **changes})


# === 이름 풀 ===


class NamePool(TemplateModel):
    origin: NameOrigin
    male_first: tuple[str, ...] = Field(min_length=1)
    female_first: tuple[str, ...] = Field(min_length=1)
    neutral_first: tuple[str, ...] = ()
    surnames: tuple[str, ...] = Field(min_length=1)
    nicknames: tuple[str, ...] = ()
    titles: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ("{{first}} {{last}}",)


class PlaceNamePool(TemplateModel):
    id: str
    adjectives: tuple[str, ...] = Field(min_length=1)
    nouns: tuple[str, ...] = Field(min_length=1)
    suffixes: tuple[str, ...] = ()
    possessives: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ("{{adj}} {{noun}}",)
    location_types: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()


# === NPC ===


class PersonalityRange(TemplateModel):
    aggression: UnitRange = (0.2, 0.5)
    friendliness: UnitRange = (0.3, 0.7)
    curiosity: UnitRange = (0.3, 0.7)
    greed: UnitRange = (0.2, 0.5)
    honesty: UnitRange = (0.4, 0.8)
    lawfulness: UnitRange = (0.3, 0.7)


class WeightedOrigin(TemplateModel):
    origin: NameOrigin
    weight: float = Field(default=1.0, ge=0.0)


class NPCTemplate(TemplateModel):
    id: str
    name: str
    description: str = ""
    role: str
    allowed_factions: tuple[str, ...] = Field(default=("neutral",), min_length=1)
    personality: PersonalityRange = PersonalityRange()
    name_origins: tuple[WeightedOrigin, ...] = (
        WeightedOrigin(origin=NameOrigin.FRONTIER_ANGLO),
    )
    gender_distribution: tuple[UnitFloat, UnitFloat, UnitFloat] = (0.5, 0.5, 0.0)
    backstory_templates: tuple[str, ...] = ()
    description_templates: tuple[str, ...] = ()
    dialogue_tree_ids: tuple[str, ...] = ()
    quest_giver_chance: UnitFloat = 0.0
    shop_chance: UnitFloat = 0.0
    tags: tuple[str, ...] = ()
    valid_location_types: tuple[str, ...] = ()
    valid_biomes: tuple[str, ...] = ()
    min_importance: UnitFloat = 0.0
    weight: float = Field(default=1.0, gt=0.0)

    @field_validator("gender_distribution")
    @classmethod
    def _distribution_sums_to_one(cls, value: tuple[float, float, float]):
        if abs(sum(value) - 1.0) > 1e-6:
            raise ValueError(f"gender distribution must sum to 1, got {sum(value)}")
        return value

    @property
    def is_notable(self) -> bool:
        return self.min_importance >= 0.5


# === 퀘스트 ===


class ObjectiveTemplate(TemplateModel):
    type: ObjectiveType
    description_template: str
    target_type: TargetType
    target_tags: tuple[str, ...] = ()
    count_range: IntRange = (1, 1)
    optional: bool = False
    hint_template: Optional[str] = None

    @field_validator("count_range")
    @classmethod
    def _positive_count(cls, value: tuple[int, int]):
        if value[0] < 1:
            raise ValueError("objective count must be at least 1")
        return value


class QuestStageTemplate(TemplateModel):
    title_template: str
    description_template: str
    objectives: tuple[ObjectiveTemplate, ...] = Field(min_length=1)
    on_start_text_template: Optional[str] = None
    on_complete_text_template: Optional[str] = None


class QuestRewardTemplate(TemplateModel):
    xp_range: IntRange = (10, 50)
    gold_range: IntRange = (5, 25)
    item_tags: tuple[str, ...] = ()
    item_chance: UnitFloat = 0.3
    reputation_impact: dict[str, IntRange] = Field(default_factory=dict)

    @field_validator("xp_range", "gold_range")
    @classmethod
    def _non_negative(cls, value: tuple[int, int]):
        if value[0] < 0:
            raise ValueError("reward range must not be negative")
        return value


class QuestTemplate(TemplateModel):
    id: str
    name: str
    archetype: QuestArchetype
    quest_type: QuestType
    title_templates: tuple[str, ...] = Field(min_length=1)
    description_templates: tuple[str, ...] = Field(min_length=1)
    stages: tuple[QuestStageTemplate, ...] = Field(min_length=1)
    rewards: QuestRewardTemplate = QuestRewardTemplate()
    level_range: IntRange = (1, 10)
    giver_roles: tuple[str, ...] = ()
    giver_factions: tuple[str, ...] = ()
    valid_location_types: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    repeatable: bool = True
    cooldown_hours: int = Field(default=24, ge=0)
    weight: float = Field(default=1.0, gt=0.0)

    @field_validator("level_range")
    @classmethod
    def _level_in_bounds(cls, value: tuple[int, int]):
        low, high = value
        if low < MIN_QUEST_LEVEL or high > MAX_QUEST_LEVEL:
            raise ValueError(
                f"quest level range must lie within {MIN_QUEST_LEVEL}..{MAX_QUEST_LEVEL}"
            )
        return value


# === 적/조우 ===


class EnemyStats(TemplateModel):
    health: int = Field(ge=1)
    damage: int = Field(ge=0)
    armor: int = Field(ge=0)
    accuracy: int = Field(default=70, ge=0, le=100)
    evasion: int = Field(default=10, ge=0, le=100)


class LevelScaling(TemplateModel):
    health_per_level: float = Field(default=1.15, ge=1.0, le=2.0)
    damage_per_level: float = Field(default=1.12, ge=1.0, le=2.0)
    armor_per_level: float = Field(default=1.08, ge=1.0, le=1.5)
    accuracy_per_level: float = Field(default=2.0, ge=0.0, le=5.0)
    evasion_per_level: float = Field(default=1.0, ge=0.0, le=5.0)


class EnemyNamePool(TemplateModel):
    prefixes: tuple[str, ...] = ()
    titles: tuple[str, ...] = ()
    suffixes: tuple[str, ...] = ()


class EnemyTemplate(TemplateModel):
    id: str
    name: str
    description: str = ""
    base_stats: EnemyStats
    scaling: LevelScaling = LevelScaling()
    name_pool: EnemyNamePool = EnemyNamePool()
    loot_table_id: Optional[str] = None
    behavior_tags: tuple[str, ...] = ()
    factions: tuple[str, ...] = ()
    combat_tags: tuple[str, ...] = ()
    xp_modifier: float = Field(default=1.0, ge=0.1, le=5.0)
    min_level: int = Field(default=1, ge=1)
    max_level: int = Field(default=10, ge=1, le=10)


DEFAULT_ENEMY_TEMPLATE = EnemyTemplate(
    id="default",
    name="Unknown Hostile",
    description="An unidentified threat.",
    base_stats=EnemyStats(health=25, damage=8, armor=2),
    name_pool=EnemyNamePool(prefixes=("Hostile", "Aggressive", "Wild")),
    loot_table_id="generic_loot",
    behavior_tags=("aggressive", "melee"),
    factions=("neutral",),
    combat_tags=("unknown",),
)


class EncounterEnemySlot(TemplateModel):
    enemy_id_or_tag: str
    count_range: IntRange = (1, 1)
    level_scale: float = Field(default=1.0, ge=0.5, le=2.0)


class EncounterTemplate(TemplateModel):
    id: str
    name: str
    description_template: str
    enemies: tuple[EncounterEnemySlot, ...] = Field(min_length=1)
    difficulty_range: IntRange = (1, 5)
    valid_biomes: tuple[str, ...] = ()
    valid_location_types: tuple[str, ...] = ()
    valid_time_of_day: tuple[TimeOfDay, ...] = ()
    faction_tags: tuple[str, ...] = ()
    loot_table_id: Optional[str] = None
    xp_range: IntRange = (10, 50)
    gold_range: IntRange = (0, 20)
    tags: tuple[str, ...] = ()
    weight: float = Field(default=1.0, gt=0.0)


# === 대화 ===


class DialogueSnippet(TemplateModel):
    id: str
    category: SnippetCategory
    text_templates: tuple[str, ...] = Field(min_length=1)
    personality_min: dict[str, UnitFloat] = Field(default_factory=dict)
    personality_max: dict[str, UnitFloat] = Field(default_factory=dict)
    valid_roles: tuple[str, ...] = ()
    valid_factions: tuple[str, ...] = ()
    valid_time_of_day: tuple[TimeOfDay, ...] = ()
    tags: tuple[str, ...] = ()


class ChoicePattern(TemplateModel):
    text_template: str
    next_role: Optional[NodeRole] = None
    tags: tuple[str, ...] = ()


class NodePattern(TemplateModel):
    role: NodeRole
    snippet_categories: tuple[SnippetCategory, ...] = Field(min_length=1)
    choice_patterns: tuple[ChoicePattern, ...] = ()


class DialogueTreeTemplate(TemplateModel):
    id: str
    name: str
    description: str = ""
    node_patterns: tuple[NodePattern, ...] = Field(min_length=1)
    valid_roles: tuple[str, ...] = ()
    valid_factions: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()


# === 장소 ===


class NPCSlot(TemplateModel):
    role: str
    required: bool = False
    count: int = Field(default=1, ge=1)


class BuildingTemplate(TemplateModel):
    id: str
    type: str
    npc_slots: tuple[NPCSlot, ...] = ()
    shop_type: Optional[str] = None
    tags: tuple[str, ...] = ()


class BuildingPlacement(TemplateModel):
    template_id: str
    count_range: IntRange = (1, 1)
    required: bool = False


class LocationTemplate(TemplateModel):
    id: str
    name: str
    location_type: str
    size: LocationSize
    name_pool_id: str
    buildings: tuple[BuildingPlacement, ...] = ()
    background_npc_range: IntRange = (0, 5)
    notable_npc_range: IntRange = (1, 3)
    valid_biomes: tuple[str, ...] = ()
    description_templates: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
