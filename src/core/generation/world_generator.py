"""
World Generation: 지역/장소/주민/퀘스트 일괄 생성
==================================================
월드 시드 하나에서 지역 → 장소 → NPC/퀘스트 순으로 펼친다.

시드 파생은 SeedArena 키 기반이다:
- 지역: ("region", index)
- 장소: ("location", region_id, index)
따라서 generate_region(2)만 따로 호출해도 전체 생성 때와 같은 결과가 나온다.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from src.core.logging import get_logger
from src.core.numeric import round_half_up
from src.core.rng import SeedArena, SeededRandom, combine_seeds, hash_string

from .library import TemplateLibrary
from .models import (
    GeneratedLocation,
    GeneratedNPC,
    GeneratedQuest,
    GeneratedRegion,
    GeneratedWorld,
    GenerationCounts,
    GenerationManifest,
)
from .naming import generate_place_name
from .npc_generator import generate_npcs_for_building, generate_npcs_for_location
from .quest_generator import QuestGenerationContext, QuestGiver, generate_random_quest
from .schemas import GENERATION_SCHEMA_VERSION, GenerationContext
from .templating import substitute_template

logger = get_logger(__name__)

DEFAULT_WORLD_NAME = "Iron Frontier"

LOCATION_TYPES = (
    "frontier_town",
    "mining_town",
    "cattle_town",
    "outpost",
    "ranch",
    "homestead",
)

REGION_FACTIONS = (
    "law_enforcement",
    "desperados",
    "railroad_company",
    "mining_consortium",
)

LOCATION_SIZES = {
    "frontier_town": "large",
    "mining_town": "medium",
    "cattle_town": "medium",
    "outpost": "small",
    "ranch": "small",
    "homestead": "tiny",
}

# 규모별 (배경, 주요) 인원
NPC_COUNTS = {
    "tiny": (1, 1),
    "small": (3, 2),
    "medium": (6, 4),
    "large": (10, 6),
}

LOCATION_DESCRIPTIONS = {
    "frontier_town": (
        "{{name}} is a bustling frontier town, where law and outlaws uneasily coexist.",
        "The town of {{name}} rises from the dust, a beacon of civilization in the wilderness.",
    ),
    "mining_town": (
        "{{name}} grew up around the mines, its residents seeking fortune in the earth.",
        "The mining town of {{name}} echoes with the sound of picks and the dreams of prospectors.",
    ),
    "outpost": (
        "{{name}} is little more than a few buildings and determined souls.",
        "The small outpost of {{name}} offers shelter to weary travelers.",
    ),
}
DEFAULT_LOCATION_DESCRIPTION = "{{name}} awaits exploration."


@dataclass
class GenerationStats:
    npcs_generated: int = 0
    quests_generated: int = 0
    locations_generated: int = 0
    regions_generated: int = 0


class WorldGenerator:
    """
    절차적 월드 생성기

    주요 기능:
    1. 지역별 장소 배치 (원형 분포 좌표)
    2. 장소 규모별 NPC 인원 / 건물 슬롯 채우기
    3. 퀘스트 의뢰인 NPC별 퀘스트 생성
    """

    def __init__(
        self,
        library: TemplateLibrary,
        seed: int,
        world_name: Optional[str] = None,
        region_count: int = 3,
        locations_per_region: tuple[int, int] = (3, 6),
        context_overrides: Optional[dict[str, Any]] = None,
    ):
        self.library = library
        self.world_name = world_name or DEFAULT_WORLD_NAME
        self.seed = combine_seeds(seed, hash_string(self.world_name))
        self.region_count = region_count
        self.locations_per_region = locations_per_region
        self.context_overrides = dict(context_overrides or {})
        self.arena = SeedArena(self.seed)

        self._stats = GenerationStats()
        self._templates_used: set[str] = set()
        self._warnings: list[str] = []

    def _context(self, **overrides: Any) -> GenerationContext:
        return GenerationContext(
            world_seed=self.seed, **{**self.context_overrides, **overrides}
        )

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self._warnings.append(message)

    # ── 장소 ──

    def _location_description(
        self, rng: SeededRandom, location_type: str, name: str, region_name: Optional[str]
    ) -> str:
        template = self.library.location_template_for(location_type)
        if template is not None and template.description_templates:
            options = template.description_templates
        else:
            options = LOCATION_DESCRIPTIONS.get(
                location_type, (DEFAULT_LOCATION_DESCRIPTION,)
            )
        variables = {"name": name, "region": region_name or "the frontier"}
        return substitute_template(rng.pick(options), variables)

    def _location_name(self, rng: SeededRandom, location_type: str) -> str:
        template = self.library.location_template_for(location_type)
        pool = None
        if template is not None:
            pool = self.library.place_name_pool(template.name_pool_id)
        if pool is None:
            pool = self.library.place_name_pool_for(location_type)
        if pool is None:
            self._warn(f"No place name pool for location type: {location_type}")
            return location_type.replace("_", " ").title()
        return generate_place_name(rng, pool).name

    def _npc_counts(self, rng: SeededRandom, location_type: str, size: str) -> tuple[int, int]:
        template = self.library.location_template_for(location_type)
        if template is not None:
            return (
                rng.randint(*template.background_npc_range),
                rng.randint(*template.notable_npc_range),
            )
        return NPC_COUNTS.get(size, NPC_COUNTS["small"])

    def _place_buildings(
        self, rng: SeededRandom, location_type: str, context: GenerationContext
    ) -> tuple[list[str], list[GeneratedNPC]]:
        template = self.library.location_template_for(location_type)
        if template is None:
            return [], []

        buildings: list[str] = []
        npcs: list[GeneratedNPC] = []
        for placement in template.buildings:
            building = self.library.building_template(placement.template_id)
            if building is None:
                if placement.required:
                    self._warn(f"Missing required building template: {placement.template_id}")
                continue
            for _ in range(rng.randint(*placement.count_range)):
                buildings.append(building.id)
                npcs.extend(
                    generate_npcs_for_building(rng, self.library, building.npc_slots, context)
                )
        return buildings, npcs

    def generate_location(
        self,
        location_type: str,
        region_id: str,
        coord: tuple[int, int],
        index: int | str = 0,
        region_name: Optional[str] = None,
    ) -> GeneratedLocation:
        """한 장소의 이름/규모/설명/주민/퀘스트 생성"""
        location_seed = self.arena.seed_for("location", region_id, index)
        rng = SeededRandom(location_seed)
        location_id = f"loc_{location_seed:x}"

        name = self._location_name(rng, location_type)
        context = self._context(
            region_id=region_id,
            region_name=region_name,
            location_id=location_id,
            location_name=name,
        )

        template = self.library.location_template_for(location_type)
        if template is not None:
            size = template.size.value
            self._templates_used.add(template.id)
        else:
            size = LOCATION_SIZES.get(location_type, "small")

        background, notable = self._npc_counts(rng, location_type, size)
        npcs = generate_npcs_for_location(
            rng, self.library, location_type, context, background, notable
        )
        if not npcs and background + notable > 0:
            self._warn(f"No NPCs generated for {location_type} {location_id}")

        buildings, staff = self._place_buildings(rng, location_type, context)
        npcs.extend(staff)
        self._templates_used.update(n.template_id for n in npcs)
        self._stats.npcs_generated += len(npcs)

        quests = self._generate_quests(rng, npcs, context, location_type)

        description = self._location_description(rng, location_type, name, region_name)
        self._stats.locations_generated += 1

        return GeneratedLocation(
            id=location_id,
            name=name,
            type=location_type,
            size=size,
            description=description,
            npcs=npcs,
            quests=quests,
            buildings=buildings,
            tags=list(template.tags) if template else [],
            coord=coord,
            region_id=region_id,
            seed=location_seed,
        )

    def _generate_quests(
        self,
        rng: SeededRandom,
        npcs: list[GeneratedNPC],
        context: GenerationContext,
        location_type: str,
    ) -> list[GeneratedQuest]:
        """퀘스트 의뢰인마다 하나씩 (맞는 템플릿이 없으면 건너뜀)"""
        quests = []
        targets = [n.as_target() for n in npcs]
        for giver in (n for n in npcs if n.is_quest_giver):
            quest_context = QuestGenerationContext(
                context=context,
                available_npcs=[t for t in targets if t.id != giver.id],
                location_type=location_type,
            )
            quest = generate_random_quest(
                rng, self.library, quest_context, QuestGiver.from_npc(giver)
            )
            if quest is not None:
                quests.append(quest)
                self._templates_used.add(quest.template_id)
                self._stats.quests_generated += 1
        return quests

    # ── 지역 ──

    def _region_name(self, rng: SeededRandom) -> str:
        pool = self.library.place_name_pool("landmark_names")
        if pool is None:
            pool = self.library.place_name_pool_for("landmark")
        if pool is None:
            return "Unnamed"
        return generate_place_name(rng, pool).name

    def generate_region(self, index: int) -> GeneratedRegion:
        region_seed = self.arena.seed_for("region", index)
        rng = SeededRandom(region_seed)
        region_id = f"region_{region_seed:x}"

        name = f"{self._region_name(rng)} Territory"
        location_count = rng.randint(*self.locations_per_region)

        locations = []
        for i in range(location_count):
            location_type = rng.pick(LOCATION_TYPES)
            angle = (i / location_count) * math.pi * 2
            radius = 3 + rng.randint(0, 3)
            coord = (
                round_half_up(math.cos(angle) * radius),
                round_half_up(math.sin(angle) * radius),
            )
            locations.append(
                self.generate_location(location_type, region_id, coord, i, name)
            )

        faction_presence = {f: rng.uniform(0, 1) for f in REGION_FACTIONS}
        self._stats.regions_generated += 1

        return GeneratedRegion(
            id=region_id,
            name=name,
            description=(
                f"The {name} stretches across the frontier, "
                f"home to {len(locations)} settlements."
            ),
            locations=locations,
            faction_presence=faction_presence,
            seed=region_seed,
        )

    # ── 월드 ──

    def generate_world(self) -> GeneratedWorld:
        self.reset_stats()
        logger.info("Generating world '%s' with seed %d", self.world_name, self.seed)

        regions = []
        for i in range(self.region_count):
            region = self.generate_region(i)
            regions.append(region)
            logger.info(
                "Generated region: %s with %d locations", region.name, len(region.locations)
            )

        manifest = GenerationManifest(
            world_seed=self.seed,
            schema_version=GENERATION_SCHEMA_VERSION,
            counts=GenerationCounts(
                npcs=self._stats.npcs_generated,
                quests=self._stats.quests_generated,
                locations=self._stats.locations_generated,
                regions=self._stats.regions_generated,
            ),
            templates_used=sorted(self._templates_used),
            warnings=list(self._warnings),
            generated_at=datetime.now(timezone.utc),
        )

        logger.info(
            "Generation complete: %d regions, %d locations, %d NPCs, %d quests",
            self._stats.regions_generated,
            self._stats.locations_generated,
            self._stats.npcs_generated,
            self._stats.quests_generated,
        )

        return GeneratedWorld(
            id=f"world_{self.seed:x}",
            name=self.world_name,
            seed=self.seed,
            regions=regions,
            manifest=manifest,
        )

    def get_stats(self) -> dict[str, int]:
        return asdict(self._stats)

    def reset_stats(self) -> None:
        self._stats = GenerationStats()
        self._templates_used.clear()
        self._warnings.clear()
