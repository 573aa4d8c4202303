"""생성 결과 엔티티 (DB 무관)

템플릿 + 컨텍스트 + 난수 추출로 한 번 만들어지는 구체 인스턴스.
범위/플레이스홀더 없음. 생성 후 소유권은 호출자에게 있다.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional

from src.core.dialogue.models import DialogueTree
from src.core.quest.enums import ObjectiveType, QuestType
from src.core.quest.models import (
    ItemReward,
    Objective,
    Quest,
    QuestRewards,
    QuestStage,
)

from .enums import Gender, NameOrigin, QuestArchetype, TargetType


@dataclass
class GeneratedName:
    full_name: str
    first_name: str
    last_name: str
    origin: NameOrigin
    gender: Gender
    nickname: Optional[str] = None
    title: Optional[str] = None


@dataclass
class GeneratedPlaceName:
    name: str
    pool_id: str
    tags: list[str] = field(default_factory=list)


@dataclass
class Personality:
    aggression: float
    friendliness: float
    curiosity: float
    greed: float
    honesty: float
    lawfulness: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class GeneratedNPC:
    id: str
    template_id: str
    name: str
    name_details: GeneratedName
    gender: Gender
    role: str
    faction: str
    personality: Personality
    backstory: str
    description: str
    is_quest_giver: bool
    has_shop: bool
    is_notable: bool = False
    tags: list[str] = field(default_factory=list)
    dialogue_tree_ids: list[str] = field(default_factory=list)
    location_id: Optional[str] = None
    region_id: Optional[str] = None
    seed: int = 0

    def as_target(self) -> TargetRef:
        return TargetRef(id=self.id, name=self.name, tags=[self.role, *self.tags])


# ── 퀘스트 ────────────────────────────────────────────


@dataclass
class TargetRef:
    """퀘스트 목표 후보 (NPC/아이템/장소/적)"""

    id: str
    name: str
    tags: list[str] = field(default_factory=list)


@dataclass
class GeneratedObjective:
    id: str
    type: ObjectiveType
    description: str
    target_type: TargetType
    count: int
    optional: bool = False
    target_id: Optional[str] = None
    target_name: Optional[str] = None
    hint: Optional[str] = None


@dataclass
class GeneratedQuestStage:
    id: str
    title: str
    description: str
    objectives: list[GeneratedObjective]
    on_start_text: Optional[str] = None
    on_complete_text: Optional[str] = None


@dataclass
class GeneratedQuestRewards:
    xp: int
    gold: int
    items: list[str] = field(default_factory=list)
    reputation_changes: dict[str, int] = field(default_factory=dict)


@dataclass
class GeneratedQuest:
    id: str
    template_id: str
    archetype: QuestArchetype
    quest_type: QuestType
    title: str
    description: str
    stages: list[GeneratedQuestStage]
    rewards: GeneratedQuestRewards
    level: int
    giver_id: Optional[str] = None
    giver_name: Optional[str] = None
    target_ids: list[str] = field(default_factory=list)
    target_names: dict[str, str] = field(default_factory=dict)
    location_ids: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    repeatable: bool = True
    cooldown_hours: int = 24
    seed: int = 0

    def to_quest(self) -> Quest:
        """퀘스트 상태 머신이 다루는 런타임 정의로 변환"""
        stages = []
        for stage in self.stages:
            objectives = tuple(
                Objective(
                    id=o.id,
                    description=o.description,
                    type=o.type,
                    target=o.target_id or o.target_type.value,
                    count=o.count,
                    optional=o.optional,
                    hint=o.hint,
                )
                for o in stage.objectives
            )
            stages.append(
                QuestStage(
                    id=stage.id,
                    title=stage.title,
                    description=stage.description,
                    objectives=objectives,
                    on_start_text=stage.on_start_text,
                    on_complete_text=stage.on_complete_text,
                )
            )

        return Quest(
            id=self.id,
            title=self.title,
            description=self.description,
            type=self.quest_type,
            giver_npc_id=self.giver_id,
            recommended_level=self.level,
            stages=tuple(stages),
            rewards=QuestRewards(
                xp=self.rewards.xp,
                gold=self.rewards.gold,
                items=tuple(ItemReward(item_id=i) for i in self.rewards.items),
                reputation=dict(self.rewards.reputation_changes),
            ),
            tags=tuple(self.tags),
            repeatable=self.repeatable,
        )


# ── 조우 ──────────────────────────────────────────────


@dataclass
class GeneratedEnemy:
    id: str
    template_id: str
    enemy_type: str
    name: str
    level: int
    health: int
    max_health: int
    damage: int
    armor: int
    accuracy: int
    evasion: int
    xp_value: int
    behavior_tags: list[str] = field(default_factory=list)
    combat_tags: list[str] = field(default_factory=list)
    loot_table_id: Optional[str] = None

    @property
    def power(self) -> int:
        return self.health + self.damage * 3 + self.armor * 2


@dataclass
class GeneratedEncounter:
    id: str
    template_id: str
    name: str
    description: str
    enemies: list[GeneratedEnemy]
    difficulty: int
    xp_reward: int
    gold_reward: int
    loot_table_id: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    seed: int = 0


# ── 월드 ──────────────────────────────────────────────


@dataclass
class GeneratedLocation:
    id: str
    name: str
    type: str
    size: str
    description: str
    npcs: list[GeneratedNPC]
    quests: list[GeneratedQuest]
    buildings: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    coord: tuple[int, int] = (0, 0)
    region_id: Optional[str] = None
    seed: int = 0


@dataclass
class GeneratedRegion:
    id: str
    name: str
    description: str
    locations: list[GeneratedLocation]
    faction_presence: dict[str, float] = field(default_factory=dict)
    seed: int = 0


@dataclass
class GenerationCounts:
    npcs: int = 0
    quests: int = 0
    dialogue_trees: int = 0
    locations: int = 0
    regions: int = 0
    encounters: int = 0
    rumors: int = 0
    lore_fragments: int = 0


@dataclass
class GenerationManifest:
    world_seed: int
    schema_version: str
    counts: GenerationCounts
    templates_used: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    generated_at: Optional[datetime] = field(default=None, compare=False)


@dataclass
class GeneratedWorld:
    id: str
    name: str
    seed: int
    regions: list[GeneratedRegion]
    manifest: GenerationManifest

    def all_npcs(self) -> list[GeneratedNPC]:
        return [n for r in self.regions for loc in r.locations for n in loc.npcs]


@dataclass
class LocationContent:
    """ProceduralWorld가 장소별로 생성/캐시하는 콘텐츠 묶음"""

    location_id: str
    seed: int
    npcs: list[GeneratedNPC]
    quests: list[GeneratedQuest]
    dialogue_trees: dict[str, DialogueTree] = field(default_factory=dict)
    shop_price_modifiers: dict[str, float] = field(default_factory=dict)
    encounter_chance: float = 0.0
