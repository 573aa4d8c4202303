"""대화 생성기: 스니펫 + NPC → 런타임 DialogueTree

생성된 트리는 대화 엔진이 그대로 실행할 수 있는 형태이며
항상 무결성 검사를 통과한다 (없는 노드를 가리키는 선택지는 만들지 않음).
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from src.core.dialogue.models import (
    DialogueChoice,
    DialogueNode,
    DialogueTree,
    EntryPoint,
    OpenShopEffect,
    StartQuestEffect,
)
from src.core.rng import SeededRandom, UINT32_MASK

from .enums import NodeRole, SnippetCategory, TimeOfDay
from .library import TemplateLibrary
from .models import GeneratedNPC
from .schemas import (
    ChoicePattern,
    DialogueSnippet,
    DialogueTreeTemplate,
    GenerationContext,
    NodePattern,
)
from .templating import substitute_template, time_of_day

logger = logging.getLogger(__name__)

NEUTRAL_TRAIT = 0.5

# build_dialogue_tree: 스니펫이 없을 때의 역할별 대사
ROLE_FALLBACK_TEXT = {
    NodeRole.GREETING: "Howdy.",
    NodeRole.FAREWELL: "Be seein' ya.",
    NodeRole.RUMOR: "Ain't heard nothin' interesting.",
    NodeRole.QUEST: "I might have somethin' for ya...",
    NodeRole.SHOP: "Take a look around.",
}


def node_id_for(role: NodeRole) -> str:
    return f"node_{role.value}"


# === 스니펫 선택 ===


def snippet_matches_npc(
    snippet: DialogueSnippet, npc: GeneratedNPC, period: Optional[TimeOfDay] = None
) -> bool:
    """역할/세력/성격 최소·최대/시간대 조건 (없는 성격 값은 0.5)"""
    if snippet.valid_roles and npc.role not in snippet.valid_roles:
        return False
    if snippet.valid_factions and npc.faction not in snippet.valid_factions:
        return False

    traits = npc.personality.as_dict()
    for trait, minimum in snippet.personality_min.items():
        if traits.get(trait, NEUTRAL_TRAIT) < minimum:
            return False
    for trait, maximum in snippet.personality_max.items():
        if traits.get(trait, NEUTRAL_TRAIT) > maximum:
            return False

    if period is not None and snippet.valid_time_of_day:
        return period in snippet.valid_time_of_day
    return True


def snippets_for_npc(
    library: TemplateLibrary,
    category: SnippetCategory,
    npc: GeneratedNPC,
    hour: Optional[float] = None,
) -> list[DialogueSnippet]:
    period = time_of_day(hour) if hour is not None else None
    return [
        s for s in library.snippets_by_category(category) if snippet_matches_npc(s, npc, period)
    ]


def select_snippet(
    rng: SeededRandom,
    library: TemplateLibrary,
    category: SnippetCategory,
    npc: GeneratedNPC,
    hour: Optional[float] = None,
    preferred_tags: Iterable[str] = (),
) -> Optional[DialogueSnippet]:
    """조건에 맞는 스니펫 하나. preferred_tags와 겹치는 것이 있으면 그 중에서."""
    candidates = snippets_for_npc(library, category, npc, hour)
    wanted = set(preferred_tags)
    if wanted:
        tagged = [s for s in candidates if wanted & set(s.tags)]
        if tagged:
            candidates = tagged
    if not candidates:
        return None
    return rng.pick(candidates)


def dialogue_variables(
    npc: GeneratedNPC, context: GenerationContext, **extras: str
) -> dict[str, str]:
    return {
        "npcName": npc.name,
        "npcFirstName": npc.name_details.first_name,
        "npcRole": npc.role,
        "npcFaction": npc.faction,
        "playerName": "stranger",
        "location": context.location_name or context.location_id or "here",
        "region": context.region_name or context.region_id or "these parts",
        "timeOfDay": time_of_day(context.game_hour).value,
        **extras,
    }


def _snippet_text(
    rng: SeededRandom,
    library: TemplateLibrary,
    category: SnippetCategory,
    npc: GeneratedNPC,
    context: GenerationContext,
    variables: dict[str, str],
    fallback: str,
) -> str:
    snippet = select_snippet(rng, library, category, npc, context.game_hour)
    if snippet is None:
        return fallback
    return substitute_template(rng.pick(snippet.text_templates), variables)


# === 단순 트리 ===


def generate_simple_dialogue_tree(
    rng: SeededRandom,
    npc: GeneratedNPC,
    context: GenerationContext,
    library: TemplateLibrary,
    include_rumors: bool = True,
    include_quest: bool = True,
    include_shop: bool = True,
    quest_id: Optional[str] = None,
) -> DialogueTree:
    """인사 → (소문 / 일거리 / 상점) → 작별 구조의 기본 트리

    일거리 분기는 퀘스트 의뢰인, 상점 분기는 상점 주인에게만 붙는다.
    """
    tree_seed = rng.randint(0, UINT32_MASK)
    tree_rng = SeededRandom(tree_seed)
    variables = dialogue_variables(npc, context)

    greeting_text = _snippet_text(
        tree_rng, library, SnippetCategory.GREETING, npc, context, variables,
        "Howdy, stranger.",
    )

    with_quest = include_quest and npc.is_quest_giver
    with_shop = include_shop and npc.has_shop

    greeting_choices: list[DialogueChoice] = []
    if include_rumors:
        greeting_choices.append(
            DialogueChoice(text="Heard any news?", next_node_id="node_rumor", tags=("rumor",))
        )
    if with_quest:
        greeting_choices.append(
            DialogueChoice(text="Got any work?", next_node_id="node_quest", tags=("quest",))
        )
    if with_shop:
        greeting_choices.append(
            DialogueChoice(
                text="Let's see what you got.", next_node_id="node_shop", tags=("shop",)
            )
        )
    greeting_choices.append(DialogueChoice(text="Goodbye.", tags=("farewell",)))

    nodes = [
        DialogueNode(
            id="node_greeting",
            text=greeting_text,
            speaker=npc.name,
            choices=tuple(greeting_choices),
            tags=("greeting",),
        )
    ]

    if include_rumors:
        rumor_text = _snippet_text(
            tree_rng, library, SnippetCategory.RUMOR, npc, context, variables,
            "Ain't heard nothin' worth repeatin'.",
        )
        nodes.append(
            DialogueNode(
                id="node_rumor",
                text=rumor_text,
                speaker=npc.name,
                choices=(DialogueChoice(text="Thanks.", next_node_id="node_greeting"),),
                tags=("rumor",),
            )
        )

    if with_quest:
        quest_text = _snippet_text(
            tree_rng, library, SnippetCategory.QUEST_OFFER, npc, context, variables,
            "I might have somethin' for ya...",
        )
        accept_effects = (StartQuestEffect(quest_id=quest_id),) if quest_id else ()
        nodes.append(
            DialogueNode(
                id="node_quest",
                text=quest_text,
                speaker=npc.name,
                choices=(
                    DialogueChoice(
                        text="I'll do it.", effects=accept_effects, tags=("accept",)
                    ),
                    DialogueChoice(
                        text="Not interested.",
                        next_node_id="node_greeting",
                        tags=("decline",),
                    ),
                ),
                tags=("quest",),
            )
        )

    if with_shop:
        shop_text = _snippet_text(
            tree_rng, library, SnippetCategory.SHOP_WELCOME, npc, context, variables,
            "Take a look at what I got.",
        )
        nodes.append(
            DialogueNode(
                id="node_shop",
                text=shop_text,
                speaker=npc.name,
                choices=(
                    DialogueChoice(
                        text="[Open Shop]",
                        effects=(OpenShopEffect(shop_id=npc.id),),
                        tags=("shop",),
                    ),
                    DialogueChoice(text="Maybe later.", next_node_id="node_greeting"),
                ),
                tags=("shop",),
            )
        )

    return DialogueTree(
        id=f"dialogue_{tree_seed:x}",
        name=f"{npc.name} Conversation",
        npc_id=npc.id,
        nodes=tuple(nodes),
        entry_points=(EntryPoint(node_id="node_greeting"),),
        tags=("generated", npc.role),
    )


# === 템플릿 트리 ===

# 템플릿에 없어도 덧붙이는 노드: 역할 → (스니펫 분류, 루트에서 이어 주는 선택지 문구)
SERVICE_NODES = {
    NodeRole.QUEST: (SnippetCategory.QUEST_OFFER, "Got any work?"),
    NodeRole.SHOP: (SnippetCategory.SHOP_WELCOME, "Let's see what you got."),
}


def _role_available(role: NodeRole, npc: GeneratedNPC) -> bool:
    """일거리 노드는 의뢰인에게, 상점 노드는 상점 주인에게만"""
    if role == NodeRole.QUEST:
        return npc.is_quest_giver
    if role == NodeRole.SHOP:
        return npc.has_shop
    return True


def _service_choices(
    npc: GeneratedNPC, quest_id: Optional[str]
) -> dict[NodeRole, list[DialogueChoice]]:
    """일거리 노드의 수락(퀘스트 시작), 상점 노드의 상점 열기 선택지"""
    choices: dict[NodeRole, list[DialogueChoice]] = {}
    if quest_id is not None:
        choices[NodeRole.QUEST] = [
            DialogueChoice(
                text="I'll do it.",
                effects=(StartQuestEffect(quest_id=quest_id),),
                tags=("accept",),
            )
        ]
    if npc.has_shop:
        choices[NodeRole.SHOP] = [
            DialogueChoice(
                text="[Open Shop]",
                effects=(OpenShopEffect(shop_id=npc.id),),
                tags=("shop",),
            )
        ]
    return choices


def _pattern_node(
    rng: SeededRandom,
    library: TemplateLibrary,
    pattern: NodePattern,
    present_roles: set[NodeRole],
    npc: GeneratedNPC,
    context: GenerationContext,
    variables: dict[str, str],
    leading: Iterable[DialogueChoice] = (),
) -> DialogueNode:
    snippet = None
    for category in pattern.snippet_categories:
        snippet = select_snippet(rng, library, category, npc, context.game_hour)
        if snippet is not None:
            break

    if snippet is None:
        text = ROLE_FALLBACK_TEXT.get(pattern.role, "...")
        snippet_tags: tuple[str, ...] = ()
    else:
        text = substitute_template(rng.pick(snippet.text_templates), variables)
        snippet_tags = snippet.tags

    choices = []
    for choice in pattern.choice_patterns:
        if choice.next_role is not None and choice.next_role not in present_roles:
            # 트리에 없는 역할로 가는 선택지는 만들지 않는다
            continue
        choices.append(
            DialogueChoice(
                text=substitute_template(choice.text_template, variables),
                next_node_id=node_id_for(choice.next_role) if choice.next_role else None,
                tags=choice.tags,
            )
        )

    if not choices and pattern.role != NodeRole.FAREWELL:
        choices.append(DialogueChoice(text="Goodbye.", tags=("farewell",)))

    return DialogueNode(
        id=node_id_for(pattern.role),
        text=text,
        speaker=npc.name,
        choices=(*leading, *choices),
        tags=(pattern.role.value, *snippet_tags),
    )


def build_dialogue_tree(
    rng: SeededRandom,
    template: DialogueTreeTemplate,
    npc: GeneratedNPC,
    context: GenerationContext,
    library: TemplateLibrary,
    quest_id: Optional[str] = None,
) -> Optional[DialogueTree]:
    """노드 패턴마다 node_{role} 노드 생성. 역할이 겹치면 첫 패턴만 쓴다.

    일거리/상점 노드는 NPC가 의뢰인/상점 주인일 때만 남는다.
    quest_id가 있으면 일거리 노드에 수락 선택지(start_quest)를, 상점 주인이면
    상점 노드에 open_shop 선택지를 붙인다. 템플릿에 해당 노드가 없으면
    새로 만들고 루트 노드에서 이어 준다.
    """
    tree_seed = rng.randint(0, UINT32_MASK)
    tree_rng = SeededRandom(tree_seed)
    variables = dialogue_variables(npc, context)

    patterns: list[NodePattern] = []
    seen_roles: set[NodeRole] = set()
    for pattern in template.node_patterns:
        if pattern.role in seen_roles:
            logger.debug("Duplicate node role %s in %s", pattern.role.value, template.id)
            continue
        if not _role_available(pattern.role, npc):
            logger.debug("Skipping %s node of %s for %s", pattern.role.value, template.id, npc.id)
            continue
        seen_roles.add(pattern.role)
        patterns.append(pattern)

    if not patterns:
        return None

    root = patterns[0]
    for pattern in patterns:
        if pattern.role == NodeRole.GREETING:
            root = pattern
            break

    leading = _service_choices(npc, quest_id if npc.is_quest_giver else None)
    for role, (category, link_text) in SERVICE_NODES.items():
        if role in seen_roles or role not in leading:
            continue
        seen_roles.add(role)
        patterns.append(
            NodePattern(
                role=role,
                snippet_categories=(category,),
                choice_patterns=(ChoicePattern(text_template="Maybe later.", next_role=root.role),),
            )
        )
        if not any(c.next_role == role for c in root.choice_patterns):
            leading.setdefault(root.role, []).append(
                DialogueChoice(text=link_text, next_node_id=node_id_for(role), tags=(role.value,))
            )

    nodes = [
        _pattern_node(
            tree_rng, library, p, seen_roles, npc, context, variables, leading.get(p.role, ())
        )
        for p in patterns
    ]

    return DialogueTree(
        id=f"dialogue_{tree_seed:x}",
        name=template.name,
        description=template.description,
        npc_id=npc.id,
        nodes=tuple(nodes),
        entry_points=(EntryPoint(node_id=node_id_for(root.role)),),
        tags=template.tags,
    )


def generate_dialogue_for_npc(
    rng: SeededRandom,
    npc: GeneratedNPC,
    context: GenerationContext,
    library: TemplateLibrary,
    quest_id: Optional[str] = None,
) -> DialogueTree:
    """역할/세력에 맞는 템플릿이 있으면 그것으로, 없으면 단순 트리"""
    templates = library.dialogue_tree_templates_for(npc.role, npc.faction)
    if templates:
        tree = build_dialogue_tree(
            rng, rng.pick(templates), npc, context, library, quest_id=quest_id
        )
        if tree is not None:
            return tree
    return generate_simple_dialogue_tree(rng, npc, context, library, quest_id=quest_id)
