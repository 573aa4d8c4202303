"""생성 Service: TemplateLibrary + 스트림 키 → 생성 결과

architecture: Service → Core 허용. 상태는 ProceduralWorld 캐시뿐.
모든 요청은 (world_seed, key)로 스트림을 정하므로 같은 요청 = 같은 결과.
"""

import logging
from typing import Optional

from src.core.dialogue.models import DialogueTree
from src.core.generation.dialogue_generator import (
    generate_dialogue_for_npc,
    generate_simple_dialogue_tree,
)
from src.core.generation.encounter_generator import generate_random_encounter
from src.core.generation.enums import Gender, TimeOfDay
from src.core.generation.library import TemplateLibrary
from src.core.generation.models import (
    GeneratedEncounter,
    GeneratedLocation,
    GeneratedNPC,
    GeneratedQuest,
    GeneratedWorld,
    LocationContent,
    TargetRef,
)
from src.core.generation.npc_generator import generate_npc, select_npc_template
from src.core.generation.procedural_world import ProceduralWorld
from src.core.generation.quest_generator import (
    QuestGenerationContext,
    QuestGiver,
    generate_quest,
    generate_random_quest,
)
from src.core.generation.schemas import GenerationContext
from src.core.generation.world_generator import WorldGenerator
from src.core.rng import SeededRandom, combine_seeds

logger = logging.getLogger(__name__)


class GenerationService:
    """요청 단위 절차 생성"""

    def __init__(self, library: TemplateLibrary, world_name: Optional[str] = None):
        self._library = library
        self._world_name = world_name
        self._world = ProceduralWorld(library)

    @property
    def library(self) -> TemplateLibrary:
        return self._library

    def stream(self, context: GenerationContext, key: str) -> SeededRandom:
        return SeededRandom(combine_seeds(context.world_seed, key))

    # === 단일 엔티티 ===

    def generate_npc(
        self,
        context: GenerationContext,
        key: str,
        template_id: Optional[str] = None,
        location_type: Optional[str] = None,
        faction: Optional[str] = None,
        biome: Optional[str] = None,
        gender: Optional[Gender] = None,
    ) -> Optional[GeneratedNPC]:
        """template_id가 없으면 필터에 맞는 템플릿을 가중 선택. 없으면 None."""
        rng = self.stream(context, key)
        if template_id is not None:
            template = self._library.npc_template(template_id)
        else:
            template = select_npc_template(rng, self._library, location_type, faction, biome)
        if template is None:
            logger.debug("No NPC template (id=%s, location=%s)", template_id, location_type)
            return None
        return generate_npc(
            rng, template, context, self._library, force_gender=gender, force_faction=faction
        )

    def generate_quest(
        self,
        context: GenerationContext,
        key: str,
        template_id: Optional[str] = None,
        giver: Optional[QuestGiver] = None,
        location_type: Optional[str] = None,
        available_npcs: Optional[list[TargetRef]] = None,
        available_items: Optional[list[TargetRef]] = None,
        available_locations: Optional[list[TargetRef]] = None,
        available_enemies: Optional[list[TargetRef]] = None,
    ) -> Optional[GeneratedQuest]:
        rng = self.stream(context, key)
        quest_context = QuestGenerationContext(
            context=context,
            available_npcs=list(available_npcs or []),
            available_items=list(available_items or []),
            available_locations=list(available_locations or []),
            available_enemies=list(available_enemies or []),
            location_type=location_type,
        )
        if template_id is not None:
            template = self._library.quest_template(template_id)
            if template is None:
                logger.debug("Unknown quest template: %s", template_id)
                return None
            return generate_quest(rng, template, quest_context, giver)
        return generate_random_quest(rng, self._library, quest_context, giver)

    def generate_encounter(
        self,
        context: GenerationContext,
        key: str,
        biome: Optional[str] = None,
        location_type: Optional[str] = None,
        time_of_day: Optional[TimeOfDay] = None,
        min_difficulty: int = 1,
        max_difficulty: int = 10,
    ) -> Optional[GeneratedEncounter]:
        rng = self.stream(context, key)
        return generate_random_encounter(
            rng,
            self._library,
            context,
            biome=biome,
            location_type=location_type,
            time_of_day=time_of_day,
            min_difficulty=min_difficulty,
            max_difficulty=max_difficulty,
        )

    def generate_dialogue(
        self,
        context: GenerationContext,
        key: str,
        npc_template_id: Optional[str] = None,
        location_type: Optional[str] = None,
        quest_id: Optional[str] = None,
        simple: bool = False,
    ) -> Optional[tuple[GeneratedNPC, DialogueTree]]:
        """같은 키의 NPC를 만든 뒤 그 NPC의 대화 트리를 만든다"""
        npc = self.generate_npc(context, key, npc_template_id, location_type)
        if npc is None:
            return None
        rng = self.stream(context, f"{key}:dialogue")
        if simple:
            tree = generate_simple_dialogue_tree(
                rng, npc, context, self._library, quest_id=quest_id
            )
        else:
            tree = generate_dialogue_for_npc(rng, npc, context, self._library, quest_id)
        return npc, tree

    # === 장소 / 월드 ===

    def generate_location(
        self,
        context: GenerationContext,
        key: str,
        location_type: str,
        region_id: Optional[str] = None,
    ) -> GeneratedLocation:
        generator = WorldGenerator(self._library, context.world_seed, self._world_name)
        return generator.generate_location(
            location_type,
            region_id or context.region_id or "region_0",
            coord=(0, 0),
            index=key,
            region_name=context.region_name,
        )

    def generate_world(
        self,
        world_seed: int,
        world_name: Optional[str] = None,
        region_count: int = 3,
    ) -> GeneratedWorld:
        generator = WorldGenerator(
            self._library,
            world_seed,
            world_name or self._world_name,
            region_count=region_count,
        )
        return generator.generate_world()

    def location_content(
        self,
        world_seed: int,
        location_id: str,
        location_type: str,
        region_id: Optional[str] = None,
        player_level: int = 1,
        game_hour: float = 12,
    ) -> LocationContent:
        """시드가 바뀌면 장소 캐시를 비우고 다시 생성"""
        self._world.initialize(world_seed)
        return self._world.location_content(
            location_id,
            location_type,
            region_id=region_id,
            player_level=player_level,
            game_hour=game_hour,
        )

    def shutdown(self) -> None:
        self._world.teardown()
