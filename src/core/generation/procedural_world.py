"""
Procedural World: 장소 방문 시 주민/퀘스트/대화를 지연 생성
=============================================================
호출자가 소유하는 인스턴스 (전역 싱글톤 없음).

장소 시드 = combine_seeds(world_seed, location_id) 이므로
방문 순서와 무관하게 같은 장소는 같은 콘텐츠를 얻는다.
"""

from __future__ import annotations

from typing import Optional

from src.core.dialogue.models import DialogueTree
from src.core.logging import get_logger
from src.core.rng import SeededRandom, combine_seeds

from .dialogue_generator import generate_dialogue_for_npc
from .encounter_generator import encounter_chance
from .library import TemplateLibrary
from .models import GeneratedNPC, GeneratedQuest, LocationContent
from .npc_generator import generate_npcs_for_location
from .quest_generator import QuestGenerationContext, QuestGiver, generate_random_quest
from .schemas import GenerationContext

logger = get_logger(__name__)

# 장소 유형별 (배경, 주요) 인원. 장소 템플릿이 있으면 템플릿 범위가 우선.
LOCATION_NPC_COUNTS = {
    "city": (12, 6),
    "town": (8, 4),
    "frontier_town": (8, 4),
    "mining_town": (6, 3),
    "cattle_town": (6, 3),
    "mine": (6, 3),
    "ranch": (5, 3),
    "outpost": (3, 2),
    "homestead": (2, 1),
    "camp": (2, 1),
    "ruin": (1, 0),
}
DEFAULT_NPC_COUNTS = (4, 2)

# 상점 가격 배율 편차 (기준 1.0)
SHOP_PRICE_SPREAD = (-0.1, 0.2)


class ProceduralWorld:
    """
    장소별 콘텐츠 생성 + 캐시

    사용법:
        world = ProceduralWorld(library)
        world.initialize(12345)
        content = world.location_content("loc_dusty_springs", "frontier_town")
    """

    def __init__(self, library: TemplateLibrary):
        self.library = library
        self._world_seed: Optional[int] = None
        self._cache: dict[str, LocationContent] = {}

    # ── 수명 주기 ──

    @property
    def is_initialized(self) -> bool:
        return self._world_seed is not None

    @property
    def world_seed(self) -> int:
        self._require_initialized()
        return self._world_seed

    def initialize(self, world_seed: int) -> None:
        """같은 시드로 재초기화하면 캐시 유지 (no-op)"""
        if self._world_seed == world_seed:
            return
        self._world_seed = world_seed
        self._cache.clear()
        logger.info("ProceduralWorld initialized with seed %d", world_seed)

    def teardown(self) -> None:
        self._world_seed = None
        self._cache.clear()

    def clear_cache(self) -> None:
        self._cache.clear()

    def _require_initialized(self) -> None:
        if self._world_seed is None:
            raise RuntimeError("ProceduralWorld not initialized. Call initialize() first.")

    # ── 장소 콘텐츠 ──

    def has_generated_content(self, location_id: str) -> bool:
        return location_id in self._cache

    def _npc_counts(self, rng: SeededRandom, location_type: str) -> tuple[int, int]:
        template = self.library.location_template_for(location_type)
        if template is not None:
            return (
                rng.randint(*template.background_npc_range),
                rng.randint(*template.notable_npc_range),
            )
        return LOCATION_NPC_COUNTS.get(location_type, DEFAULT_NPC_COUNTS)

    def location_content(
        self,
        location_id: str,
        location_type: str,
        region_id: Optional[str] = None,
        player_level: int = 1,
        game_hour: float = 12,
        location_name: Optional[str] = None,
    ) -> LocationContent:
        """캐시에 있으면 그대로, 없으면 생성 후 캐시"""
        self._require_initialized()
        cached = self._cache.get(location_id)
        if cached is not None:
            return cached

        seed = combine_seeds(self._world_seed, location_id)
        rng = SeededRandom(seed)
        context = GenerationContext(
            world_seed=self._world_seed,
            region_id=region_id,
            location_id=location_id,
            location_name=location_name,
            player_level=player_level,
            game_hour=game_hour,
        )

        background, notable = self._npc_counts(rng, location_type)
        npcs = generate_npcs_for_location(
            rng, self.library, location_type, context, background, notable
        )
        quests = self._quests_for(rng, npcs, context, location_type)

        quest_by_giver = {q.giver_id: q.id for q in quests}
        dialogue_trees = {
            npc.id: generate_dialogue_for_npc(
                rng, npc, context, self.library, quest_id=quest_by_giver.get(npc.id)
            )
            for npc in npcs
        }

        shop_price_modifiers = {
            npc.id: 1 + rng.uniform(*SHOP_PRICE_SPREAD) for npc in npcs if npc.has_shop
        }

        content = LocationContent(
            location_id=location_id,
            seed=seed,
            npcs=npcs,
            quests=quests,
            dialogue_trees=dialogue_trees,
            shop_price_modifiers=shop_price_modifiers,
            encounter_chance=encounter_chance(context),
        )
        self._cache[location_id] = content

        logger.info(
            "Generated content for %s: %d NPCs, %d quests, %d dialogue trees",
            location_id,
            len(npcs),
            len(quests),
            len(dialogue_trees),
        )
        return content

    def _quests_for(
        self,
        rng: SeededRandom,
        npcs: list[GeneratedNPC],
        context: GenerationContext,
        location_type: str,
    ) -> list[GeneratedQuest]:
        quests = []
        targets = [n.as_target() for n in npcs]
        for npc in npcs:
            if not npc.is_quest_giver:
                continue
            quest_context = QuestGenerationContext(
                context=context,
                available_npcs=[t for t in targets if t.id != npc.id],
                location_type=location_type,
            )
            quest = generate_random_quest(
                rng, self.library, quest_context, QuestGiver.from_npc(npc)
            )
            if quest is not None:
                quests.append(quest)
        return quests

    # ── 조회 (생성된 장소만) ──

    def get_npcs(self, location_id: str) -> list[GeneratedNPC]:
        content = self._cache.get(location_id)
        return list(content.npcs) if content else []

    def get_quests(self, location_id: str) -> list[GeneratedQuest]:
        content = self._cache.get(location_id)
        return list(content.quests) if content else []

    def get_npc(self, npc_id: str) -> Optional[GeneratedNPC]:
        for content in self._cache.values():
            for npc in content.npcs:
                if npc.id == npc_id:
                    return npc
        return None

    def get_dialogue_tree(self, npc_id: str) -> Optional[DialogueTree]:
        for content in self._cache.values():
            tree = content.dialogue_trees.get(npc_id)
            if tree is not None:
                return tree
        return None

    def get_quest(self, quest_id: str) -> Optional[GeneratedQuest]:
        for content in self._cache.values():
            for quest in content.quests:
                if quest.id == quest_id:
                    return quest
        return None
