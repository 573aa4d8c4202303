"""대화 생성기 테스트"""

from src.core.dialogue import (
    ConversationState,
    check_dialogue_integrity,
    choose,
    find_unreachable_nodes,
    start_dialogue,
)
from src.core.generation.dialogue_generator import (
    build_dialogue_tree,
    dialogue_variables,
    generate_dialogue_for_npc,
    generate_simple_dialogue_tree,
    select_snippet,
    snippet_matches_npc,
)
from src.core.generation.enums import Gender, NameOrigin, SnippetCategory, TimeOfDay
from src.core.generation.library import library_from_dicts
from src.core.generation.models import GeneratedName, GeneratedNPC, Personality
from src.core.generation.schemas import DialogueSnippet
from src.core.rng import SeededRandom


def _npc(role="merchant", faction="townsfolk", quest_giver=True, shop=True, **traits) -> GeneratedNPC:
    personality = dict(
        aggression=0.5, friendliness=0.5, curiosity=0.5, greed=0.5, honesty=0.5, lawfulness=0.5
    )
    personality.update(traits)
    name = GeneratedName(
        full_name="Martha Colton",
        first_name="Martha",
        last_name="Colton",
        origin=NameOrigin.FRONTIER_ANGLO,
        gender=Gender.FEMALE,
    )
    return GeneratedNPC(
        id="npc_martha",
        template_id="general_store_owner",
        name=name.full_name,
        name_details=name,
        gender=Gender.FEMALE,
        role=role,
        faction=faction,
        personality=Personality(**personality),
        backstory="",
        description="",
        is_quest_giver=quest_giver,
        has_shop=shop,
    )


def _snippet(**overrides) -> DialogueSnippet:
    data = {"id": "s", "category": "greeting", "text_templates": ["Howdy"]}
    data.update(overrides)
    return DialogueSnippet.model_validate(data)


class TestSnippetMatching:
    def test_role_and_faction(self):
        npc = _npc()
        assert snippet_matches_npc(_snippet(valid_roles=["merchant"]), npc)
        assert not snippet_matches_npc(_snippet(valid_roles=["sheriff"]), npc)
        assert not snippet_matches_npc(_snippet(valid_factions=["desperados"]), npc)

    def test_personality_bounds(self):
        greedy = _npc(greed=0.8)
        assert snippet_matches_npc(_snippet(personality_min={"greed": 0.6}), greedy)
        assert not snippet_matches_npc(_snippet(personality_max={"greed": 0.6}), greedy)

    def test_unknown_trait_treated_as_neutral(self):
        npc = _npc()
        assert snippet_matches_npc(_snippet(personality_min={"charisma": 0.5}), npc)
        assert not snippet_matches_npc(_snippet(personality_min={"charisma": 0.6}), npc)

    def test_time_of_day_only_when_known(self):
        snippet = _snippet(valid_time_of_day=["morning"])
        assert snippet_matches_npc(snippet, _npc())
        assert snippet_matches_npc(snippet, _npc(), TimeOfDay.MORNING)
        assert not snippet_matches_npc(snippet, _npc(), TimeOfDay.NIGHT)

    def test_preferred_tags(self):
        library = library_from_dicts(
            {
                "dialogue_snippets": [
                    {"id": "a", "category": "rumor", "text_templates": ["a"]},
                    {"id": "b", "category": "rumor", "text_templates": ["b"], "tags": ["gold"]},
                ]
            }
        )
        rng = SeededRandom(1)
        picks = {
            select_snippet(rng, library, SnippetCategory.RUMOR, _npc(), preferred_tags=["gold"]).id
            for _ in range(20)
        }
        assert picks == {"b"}

    def test_no_snippet_returns_none(self):
        library = library_from_dicts({})
        assert select_snippet(SeededRandom(1), library, SnippetCategory.THREAT, _npc()) is None

    def test_variables(self, context):
        variables = dialogue_variables(_npc(), context, questTitle="Dust Up")
        assert variables["npcFirstName"] == "Martha"
        assert variables["location"] == "Test Gulch"
        assert variables["timeOfDay"] == "afternoon"
        assert variables["questTitle"] == "Dust Up"


class TestSimpleTree:
    """인사 → 소문/일거리/상점 → 작별"""

    def test_all_branches(self, library, context):
        tree = generate_simple_dialogue_tree(SeededRandom(3), _npc(), context, library, quest_id="q1")
        assert {n.id for n in tree.nodes} == {"node_greeting", "node_rumor", "node_quest", "node_shop"}
        assert check_dialogue_integrity(tree) == []
        assert find_unreachable_nodes(tree) == []
        assert tree.npc_id == "npc_martha"

    def test_branches_follow_npc_flags(self, library, context):
        npc = _npc(quest_giver=False, shop=False)
        tree = generate_simple_dialogue_tree(SeededRandom(3), npc, context, library)
        assert {n.id for n in tree.nodes} == {"node_greeting", "node_rumor"}

    def test_quest_accept_starts_quest(self, library, context):
        tree = generate_simple_dialogue_tree(SeededRandom(3), _npc(), context, library, quest_id="q1")
        accept = tree.get_node("node_quest").choices[0]
        assert [e.type for e in accept.effects] == ["start_quest"]
        assert accept.effects[0].quest_id == "q1"

    def test_quest_accept_without_id_has_no_effect(self, library, context):
        tree = generate_simple_dialogue_tree(SeededRandom(3), _npc(), context, library)
        assert tree.get_node("node_quest").choices[0].effects == ()

    def test_shop_opens_npc_shop(self, library, context):
        tree = generate_simple_dialogue_tree(SeededRandom(3), _npc(), context, library)
        effect = tree.get_node("node_shop").choices[0].effects[0]
        assert effect.type == "open_shop"
        assert effect.shop_id == "npc_martha"

    def test_fallback_text_without_snippets(self, context):
        tree = generate_simple_dialogue_tree(SeededRandom(1), _npc(), context, library_from_dicts({}))
        assert tree.get_node("node_greeting").text == "Howdy, stranger."

    def test_engine_can_walk_generated_tree(self, library, context):
        tree = generate_simple_dialogue_tree(SeededRandom(3), _npc(), context, library)
        state = ConversationState(npc_id="npc_martha")
        step = start_dialogue(tree, state)
        assert step.node.id == "node_greeting"
        goodbye = step.choices[-1].index
        assert choose(tree, "node_greeting", goodbye, state).ended


class TestTemplateTree:
    def test_build_from_template(self, library, context):
        template = library.dialogue_tree_template("merchant_conversation")
        tree = build_dialogue_tree(SeededRandom(5), template, _npc(), context, library)
        assert [n.id for n in tree.nodes] == ["node_greeting", "node_shop", "node_rumor", "node_farewell"]
        assert tree.entry_points[0].node_id == "node_greeting"
        assert check_dialogue_integrity(tree) == []

    def test_choices_to_missing_roles_dropped(self, context):
        library = library_from_dicts(
            {
                "dialogue_tree_templates": [
                    {
                        "id": "short",
                        "name": "Short",
                        "node_patterns": [
                            {
                                "role": "greeting",
                                "snippet_categories": ["greeting"],
                                "choice_patterns": [
                                    {"text_template": "Shop?", "next_role": "shop"},
                                ],
                            }
                        ],
                    }
                ]
            }
        )
        tree = build_dialogue_tree(
            SeededRandom(1), library.dialogue_tree_template("short"), _npc(shop=False), context, library
        )
        node = tree.get_node("node_greeting")
        assert node.text == "Howdy."
        assert [c.text for c in node.choices] == ["Goodbye."]

    def test_for_npc_prefers_matching_template(self, library, context):
        tree = generate_dialogue_for_npc(SeededRandom(2), _npc(), context, library)
        assert "merchant" in tree.tags

    def test_for_npc_falls_back_to_simple_tree(self, library, context):
        npc = _npc(role="prospector", shop=False)
        tree = generate_dialogue_for_npc(SeededRandom(2), npc, context, library, quest_id="q9")
        assert "generated" in tree.tags
        assert tree.get_node("node_quest").choices[0].effects[0].quest_id == "q9"

    def test_deterministic(self, library, context):
        a = generate_dialogue_for_npc(SeededRandom(2), _npc(), context, library)
        b = generate_dialogue_for_npc(SeededRandom(2), _npc(), context, library)
        assert a == b


def _effects_of(tree, effect_type):
    return [
        effect
        for node in tree.nodes
        for choice in node.choices
        for effect in choice.effects
        if effect.type == effect_type
    ]


class TestTemplateTreeServices:
    """템플릿 트리에도 퀘스트 시작 / 상점 열기 선택지가 붙는다"""

    def test_shop_node_opens_shop(self, library, context):
        template = library.dialogue_tree_template("merchant_conversation")
        tree = build_dialogue_tree(SeededRandom(5), template, _npc(), context, library)
        first = tree.get_node("node_shop").choices[0]
        assert [e.type for e in first.effects] == ["open_shop"]
        assert first.effects[0].shop_id == "npc_martha"

    def test_quest_node_added_for_giver(self, library, context):
        template = library.dialogue_tree_template("merchant_conversation")
        tree = build_dialogue_tree(
            SeededRandom(5), template, _npc(), context, library, quest_id="q7"
        )
        accept = tree.get_node("node_quest").choices[0]
        assert accept.effects[0].type == "start_quest"
        assert accept.effects[0].quest_id == "q7"
        links = [c.next_node_id for c in tree.get_node("node_greeting").choices]
        assert "node_quest" in links
        assert check_dialogue_integrity(tree) == []
        assert find_unreachable_nodes(tree) == []

    def test_accept_starts_quest_through_engine(self, library, context):
        template = library.dialogue_tree_template("merchant_conversation")
        tree = build_dialogue_tree(
            SeededRandom(5), template, _npc(), context, library, quest_id="q7"
        )
        state = ConversationState(npc_id="npc_martha")
        step = start_dialogue(tree, state)
        to_quest = next(c.index for c in step.choices if c.choice.next_node_id == "node_quest")
        step = choose(tree, "node_greeting", to_quest, state)
        assert step.node.id == "node_quest"
        done = choose(tree, "node_quest", 0, state)
        assert done.ended
        assert [e.quest_id for e in done.effects] == ["q7"]

    def test_no_quest_node_without_quest(self, library, context):
        template = library.dialogue_tree_template("merchant_conversation")
        tree = build_dialogue_tree(SeededRandom(5), template, _npc(), context, library)
        assert _effects_of(tree, "start_quest") == []

    def test_shop_node_dropped_for_non_shopkeeper(self, library, context):
        template = library.dialogue_tree_template("merchant_conversation")
        tree = build_dialogue_tree(
            SeededRandom(5), template, _npc(shop=False), context, library
        )
        assert "node_shop" not in {n.id for n in tree.nodes}
        assert _effects_of(tree, "open_shop") == []
        assert check_dialogue_integrity(tree) == []

    def test_shop_node_added_when_template_lacks_one(self, library, context):
        template = library.dialogue_tree_template("lawman_conversation")
        npc = _npc(role="deputy", faction="law_enforcement", quest_giver=False)
        tree = build_dialogue_tree(SeededRandom(5), template, npc, context, library)
        assert [e.shop_id for e in _effects_of(tree, "open_shop")] == ["npc_martha"]
        assert "node_shop" in [c.next_node_id for c in tree.get_node("node_greeting").choices]
        assert check_dialogue_integrity(tree) == []

    def test_for_npc_passes_quest_to_template_tree(self, library, context):
        tree = generate_dialogue_for_npc(SeededRandom(2), _npc(), context, library, quest_id="q3")
        assert "merchant" in tree.tags
        assert [e.quest_id for e in _effects_of(tree, "start_quest")] == ["q3"]
