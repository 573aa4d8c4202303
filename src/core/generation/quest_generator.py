"""퀘스트 생성기: 아키타입 템플릿 + 목표 후보 → GeneratedQuest

하나의 변수 집합(의뢰인/장소/대상/목적지)을 제목, 설명, 모든 단계와 목표에
같이 치환한다. 목표 대상은 유형/태그로 고르고 한 퀘스트 안에서 재사용하지 않는다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from src.core.rng import SeededRandom, UINT32_MASK

from .enums import TargetType
from .library import TemplateLibrary
from .models import (
    GeneratedNPC,
    GeneratedObjective,
    GeneratedQuest,
    GeneratedQuestRewards,
    GeneratedQuestStage,
    TargetRef,
)
from .schemas import GenerationContext, ObjectiveTemplate, QuestTemplate
from .selection import matches_filter, select_weighted
from .templating import substitute_template

logger = logging.getLogger(__name__)


@dataclass
class QuestGiver:
    id: str
    name: str
    role: Optional[str] = None
    faction: Optional[str] = None

    @classmethod
    def from_npc(cls, npc: GeneratedNPC) -> QuestGiver:
        return cls(id=npc.id, name=npc.name, role=npc.role, faction=npc.faction)


@dataclass
class QuestGenerationContext:
    """생성 컨텍스트 + 목표로 쓸 수 있는 후보 목록"""

    context: GenerationContext
    available_npcs: list[TargetRef] = field(default_factory=list)
    available_items: list[TargetRef] = field(default_factory=list)
    available_locations: list[TargetRef] = field(default_factory=list)
    available_enemies: list[TargetRef] = field(default_factory=list)
    location_type: Optional[str] = None

    def candidates(self, target_type: TargetType) -> list[TargetRef]:
        if target_type == TargetType.NPC:
            return list(self.available_npcs)
        if target_type == TargetType.ITEM:
            return list(self.available_items)
        if target_type == TargetType.LOCATION:
            return list(self.available_locations)
        if target_type == TargetType.ENEMY:
            return list(self.available_enemies)
        # any: 적은 포함하지 않는다
        return self.available_npcs + self.available_items + self.available_locations


def select_target(
    rng: SeededRandom,
    target_type: TargetType,
    target_tags: tuple[str, ...] | list[str],
    quest_context: QuestGenerationContext,
    exclude_ids: set[str],
) -> Optional[TargetRef]:
    """유형 → 태그(하나라도 일치) → 사용된 id 제외 → 균등 선택"""
    candidates = quest_context.candidates(target_type)
    if target_tags:
        candidates = [c for c in candidates if set(target_tags) & set(c.tags)]
    candidates = [c for c in candidates if c.id not in exclude_ids]
    if not candidates:
        return None
    return rng.pick(candidates)


def _generate_objective(
    rng: SeededRandom,
    template: ObjectiveTemplate,
    quest_context: QuestGenerationContext,
    variables: dict[str, str],
    used_targets: set[str],
    index: int,
) -> GeneratedObjective:
    target: Optional[TargetRef] = None
    if template.target_type != TargetType.ANY or template.target_tags:
        target = select_target(
            rng, template.target_type, template.target_tags, quest_context, used_targets
        )
        if target is not None:
            used_targets.add(target.id)
            variables["target"] = target.name

    count = rng.randint(*template.count_range)
    hint = (
        substitute_template(template.hint_template, variables)
        if template.hint_template
        else None
    )

    return GeneratedObjective(
        id=f"obj_{index}_{rng.randint(0, 0xFFFF):x}",
        type=template.type,
        description=substitute_template(template.description_template, variables),
        target_type=template.target_type,
        count=count,
        optional=template.optional,
        target_id=target.id if target else None,
        target_name=target.name if target else None,
        hint=hint,
    )


def _optional_text(template: Optional[str], variables: dict[str, str]) -> Optional[str]:
    return substitute_template(template, variables) if template else None


def generate_quest(
    rng: SeededRandom,
    template: QuestTemplate,
    quest_context: QuestGenerationContext,
    giver: Optional[QuestGiver] = None,
) -> GeneratedQuest:
    """템플릿 하나로 퀘스트 생성 (단계/목표/보상 포함)"""
    quest_seed = rng.randint(0, UINT32_MASK)
    quest_rng = SeededRandom(quest_seed)
    context = quest_context.context

    used_targets: set[str] = set()
    target_ids: list[str] = []
    target_names: dict[str, str] = {}
    location_ids: list[str] = []

    variables: dict[str, str] = {
        "giver": giver.name if giver else "someone",
        "giverId": giver.id if giver else "",
        "giverRole": (giver.role if giver else None) or "",
        "giverFaction": (giver.faction if giver else None) or "",
        "location": context.location_name or context.location_id or "the frontier",
        "region": context.region_name or context.region_id or "these parts",
        "player": "stranger",
    }

    primary = select_target(quest_rng, TargetType.ANY, (), quest_context, used_targets)
    if primary is not None:
        variables["target"] = primary.name
        variables["targetId"] = primary.id
        used_targets.add(primary.id)
        target_ids.append(primary.id)
        target_names[primary.id] = primary.name

    destination = select_target(
        quest_rng, TargetType.LOCATION, (), quest_context, used_targets
    )
    if destination is not None:
        variables["destination"] = destination.name
        variables["destinationId"] = destination.id
        used_targets.add(destination.id)
        location_ids.append(destination.id)

    title = substitute_template(quest_rng.pick(template.title_templates), variables)
    description = substitute_template(
        quest_rng.pick(template.description_templates), variables
    )

    stages: list[GeneratedQuestStage] = []
    for stage_index, stage_template in enumerate(template.stages):
        objectives = [
            _generate_objective(
                quest_rng,
                objective_template,
                quest_context,
                dict(variables),
                used_targets,
                stage_index * 100 + objective_index,
            )
            for objective_index, objective_template in enumerate(stage_template.objectives)
        ]
        for objective in objectives:
            if objective.target_id:
                target_ids.append(objective.target_id)
                if objective.target_name:
                    target_names[objective.target_id] = objective.target_name

        stages.append(
            GeneratedQuestStage(
                id=f"stage_{stage_index}_{quest_rng.randint(0, 0xFFFF):x}",
                title=substitute_template(stage_template.title_template, variables),
                description=substitute_template(
                    stage_template.description_template, variables
                ),
                objectives=objectives,
                on_start_text=_optional_text(
                    stage_template.on_start_text_template, variables
                ),
                on_complete_text=_optional_text(
                    stage_template.on_complete_text_template, variables
                ),
            )
        )

    level, rewards = _roll_rewards(quest_rng, template, quest_context)

    return GeneratedQuest(
        id=f"quest_{template.id}_{quest_seed:x}",
        template_id=template.id,
        archetype=template.archetype,
        quest_type=template.quest_type,
        title=title,
        description=description,
        stages=stages,
        rewards=rewards,
        level=level,
        giver_id=giver.id if giver else None,
        giver_name=giver.name if giver else None,
        target_ids=target_ids,
        target_names=target_names,
        location_ids=location_ids,
        tags=list(template.tags),
        repeatable=template.repeatable,
        cooldown_hours=template.cooldown_hours,
        seed=quest_seed,
    )


def _roll_rewards(
    rng: SeededRandom, template: QuestTemplate, quest_context: QuestGenerationContext
) -> tuple[int, GeneratedQuestRewards]:
    """레벨 추출 → xp/gold에 (1 + (level-1)*0.2) 배율 → 아이템/평판"""
    level = rng.randint(*template.level_range)
    multiplier = 1 + (level - 1) * 0.2
    reward = template.rewards

    xp = int(rng.randint(*reward.xp_range) * multiplier)
    gold = int(rng.randint(*reward.gold_range) * multiplier)

    items: list[str] = []
    if rng.chance(reward.item_chance):
        matching = [
            item
            for item in quest_context.available_items
            if not reward.item_tags or set(reward.item_tags) & set(item.tags)
        ]
        if matching:
            items.append(rng.pick(matching).id)

    reputation = {
        faction: rng.randint(*value_range)
        for faction, value_range in reward.reputation_impact.items()
    }

    return level, GeneratedQuestRewards(
        xp=xp, gold=gold, items=items, reputation_changes=reputation
    )


def select_quest_template(
    rng: SeededRandom,
    library: TemplateLibrary,
    quest_context: QuestGenerationContext,
    giver: Optional[QuestGiver] = None,
) -> Optional[QuestTemplate]:
    """플레이어 레벨 / 의뢰인 역할·세력 / 장소 유형으로 필터 후 가중 선택"""
    candidates = library.quest_templates_for_level(quest_context.context.player_level)
    if giver is not None:
        allowed = {
            t.id for t in library.quest_templates_for_giver(giver.role, giver.faction)
        }
        candidates = [t for t in candidates if t.id in allowed]
    if quest_context.location_type is not None:
        candidates = [
            t
            for t in candidates
            if matches_filter(t.valid_location_types, quest_context.location_type)
        ]
    return select_weighted(rng, candidates, lambda t: t.weight)


def generate_random_quest(
    rng: SeededRandom,
    library: TemplateLibrary,
    quest_context: QuestGenerationContext,
    giver: Optional[QuestGiver] = None,
) -> Optional[GeneratedQuest]:
    """맞는 템플릿이 없으면 None"""
    template = select_quest_template(rng, library, quest_context, giver)
    if template is None:
        logger.debug(
            "No quest template for level %d giver=%s",
            quest_context.context.player_level,
            giver.role if giver else None,
        )
        return None
    return generate_quest(rng, template, quest_context, giver)
