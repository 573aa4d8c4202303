"""NPC 생성기: 템플릿 + 이름 풀 + 컨텍스트 → GeneratedNPC

NPC 하나마다 부모 스트림에서 32비트 시드를 뽑아 자식 스트림을 만든다.
부모 스트림 소비량이 NPC당 1회로 고정되므로 배치 순서가 안정적이다.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from src.core.rng import SeededRandom, UINT32_MASK

from .enums import Gender
from .library import TemplateLibrary
from .models import GeneratedName, GeneratedNPC, Personality
from .naming import generate_name_weighted, roll_gender
from .schemas import PERSONALITY_TRAITS, GenerationContext, NPCSlot, NPCTemplate
from .selection import matches_filter, select_weighted
from .templating import substitute_template

logger = logging.getLogger(__name__)

MAX_NAME_ATTEMPTS = 10

_PRONOUNS = {
    Gender.MALE: ("he", "his"),
    Gender.FEMALE: ("she", "her"),
    Gender.NEUTRAL: ("they", "their"),
}


def npc_template_variables(
    name: GeneratedName,
    role: str,
    faction: str,
    gender: Gender,
    context: GenerationContext,
) -> dict[str, str]:
    """배경/묘사 템플릿 치환 변수"""
    pronoun, possessive = _PRONOUNS[gender]
    return {
        "name": name.full_name,
        "firstName": name.first_name,
        "lastName": name.last_name,
        "nickname": name.nickname or name.first_name,
        "title": name.title or "",
        "role": role,
        "faction": faction,
        "gender": gender.value,
        "pronoun": pronoun,
        "possessive": possessive,
        "location": context.location_name or context.location_id or "the frontier",
        "region": context.region_name or context.region_id or "these parts",
    }


def generate_npc(
    rng: SeededRandom,
    template: NPCTemplate,
    context: GenerationContext,
    library: TemplateLibrary,
    force_gender: Optional[Gender] = None,
    force_faction: Optional[str] = None,
) -> GeneratedNPC:
    """템플릿 하나로 NPC 생성"""
    npc_seed = rng.randint(0, UINT32_MASK)
    npc_rng = SeededRandom(npc_seed)

    gender = roll_gender(npc_rng, template.gender_distribution)
    if force_gender is not None:
        gender = force_gender

    include_nickname = npc_rng.chance(0.3)
    name = generate_name_weighted(
        npc_rng,
        library,
        template.name_origins,
        gender=gender,
        include_nickname=include_nickname,
        include_title=template.min_importance > 0.5,
    )

    faction = force_faction or npc_rng.pick(template.allowed_factions)

    personality = Personality(
        **{
            trait: npc_rng.uniform(*getattr(template.personality, trait))
            for trait in PERSONALITY_TRAITS
        }
    )

    variables = npc_template_variables(name, template.role, faction, gender, context)

    backstory = ""
    if template.backstory_templates:
        backstory = substitute_template(
            npc_rng.pick(template.backstory_templates), variables
        )

    description = ""
    if template.description_templates:
        description = substitute_template(
            npc_rng.pick(template.description_templates), variables
        )

    is_quest_giver = npc_rng.chance(template.quest_giver_chance)
    has_shop = npc_rng.chance(template.shop_chance)

    return GeneratedNPC(
        id=f"npc_{template.id}_{npc_seed:x}",
        template_id=template.id,
        name=name.full_name,
        name_details=name,
        gender=gender,
        role=template.role,
        faction=faction,
        personality=personality,
        backstory=backstory,
        description=description,
        is_quest_giver=is_quest_giver,
        has_shop=has_shop,
        is_notable=template.is_notable,
        tags=list(template.tags),
        dialogue_tree_ids=list(template.dialogue_tree_ids),
        location_id=context.location_id,
        region_id=context.region_id,
        seed=npc_seed,
    )


def select_npc_template(
    rng: SeededRandom,
    library: TemplateLibrary,
    location_type: Optional[str] = None,
    faction: Optional[str] = None,
    biome: Optional[str] = None,
) -> Optional[NPCTemplate]:
    """장소 유형/세력/생물군계 필터 후 가중 선택. 없으면 None."""
    candidates = [
        t
        for t in library.npc_templates
        if matches_filter(t.valid_location_types, location_type)
        and (faction is None or faction in t.allowed_factions)
        and matches_filter(t.valid_biomes, biome)
    ]
    if not candidates:
        logger.debug(
            "No NPC template for location=%s faction=%s biome=%s",
            location_type,
            faction,
            biome,
        )
    return select_weighted(rng, candidates, lambda t: t.weight)


def _generate_unique(
    rng: SeededRandom,
    template: NPCTemplate,
    context: GenerationContext,
    library: TemplateLibrary,
    used_names: set[str],
) -> GeneratedNPC:
    npc = generate_npc(rng, template, context, library)
    attempts = 0
    while npc.name.lower() in used_names and attempts < MAX_NAME_ATTEMPTS:
        npc = generate_npc(rng, template, context, library)
        attempts += 1
    used_names.add(npc.name.lower())
    return npc


def generate_npcs_for_location(
    rng: SeededRandom,
    library: TemplateLibrary,
    location_type: str,
    context: GenerationContext,
    background: int,
    notable: int,
) -> list[GeneratedNPC]:
    """장소 주민 생성: 주요 인물 먼저, 이후 배경 인물

    이름은 장소 안에서 (대소문자 무시) 최대 10회 재시도로 중복을 피한다.
    """
    valid = library.npc_templates_for_location(location_type)
    if not valid:
        logger.warning("No NPC templates valid for location type: %s", location_type)
        return []

    notable_templates = [t for t in valid if t.is_notable] or valid
    background_templates = [t for t in valid if not t.is_notable] or valid

    npcs: list[GeneratedNPC] = []
    used_names: set[str] = set()

    for _ in range(notable):
        template = select_weighted(rng, notable_templates, lambda t: t.weight)
        npcs.append(_generate_unique(rng, template, context, library, used_names))

    for _ in range(background):
        template = select_weighted(rng, background_templates, lambda t: t.weight)
        npcs.append(_generate_unique(rng, template, context, library, used_names))

    return npcs


def generate_npcs_for_building(
    rng: SeededRandom,
    library: TemplateLibrary,
    slots: Sequence[NPCSlot],
    context: GenerationContext,
) -> list[GeneratedNPC]:
    """건물 슬롯(역할 × 인원) 채우기. 템플릿 없는 필수 슬롯은 경고 후 건너뛴다."""
    npcs: list[GeneratedNPC] = []
    for slot in slots:
        templates = library.npc_templates_for_role(slot.role)
        if not templates:
            if slot.required:
                logger.warning("No NPC templates for required role: %s", slot.role)
            continue
        for _ in range(slot.count):
            npcs.append(generate_npc(rng, rng.pick(templates), context, library))
    return npcs
