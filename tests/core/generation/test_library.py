"""템플릿 라이브러리 로딩/검증 테스트"""

import json

import pytest

from src.core.generation.enums import NameOrigin, SnippetCategory
from src.core.generation.library import (
    CONTENT_FILES,
    library_from_dicts,
    load_content_pack,
    parse_entries,
)
from src.core.generation.schemas import NPCTemplate, QuestTemplate
from src.core.validation import ContentValidationError


def _npc(template_id: str, **overrides) -> dict:
    data = {"id": template_id, "name": template_id.title(), "role": "drifter"}
    data.update(overrides)
    return data


def _quest(**overrides) -> dict:
    data = {
        "id": "q",
        "name": "Q",
        "archetype": "fetch_item",
        "quest_type": "side",
        "title_templates": ["t"],
        "description_templates": ["d"],
        "stages": [
            {
                "title_template": "s",
                "description_template": "s",
                "objectives": [
                    {"type": "collect", "description_template": "c", "target_type": "item"}
                ],
            }
        ],
    }
    data.update(overrides)
    return data


class TestBundledContentPack:
    """패키지에 포함된 콘텐츠 팩"""

    def test_loads_strictly_without_issues(self):
        _, report = load_content_pack(strict=True)
        assert report.ok
        assert report.integrity_warnings == []

    def test_every_content_type_present(self, library):
        counts = library.counts()
        assert set(counts) == set(CONTENT_FILES)
        assert all(n > 0 for n in counts.values())

    def test_all_name_origins_have_pools(self, library):
        assert set(library.name_origins) == set(NameOrigin)

    def test_location_templates_reference_existing_pools_and_buildings(self, library):
        for template in library.location_templates:
            assert library.place_name_pool(template.name_pool_id) is not None
            for placement in template.buildings:
                assert library.building_template(placement.template_id) is not None

    def test_encounter_slots_resolve_to_enemies(self, library):
        for template in library.encounter_templates:
            for slot in template.enemies:
                assert library.enemy_template(slot.enemy_id_or_tag) or (
                    library.enemy_templates_by_tag(slot.enemy_id_or_tag)
                ), slot.enemy_id_or_tag

    def test_lookups(self, library):
        assert library.npc_template("sheriff").is_notable
        assert library.quest("silver_vein_sabotage") is not None
        assert library.dialogue_tree("foreman_intro") is not None
        assert library.snippets_by_category(SnippetCategory.GREETING)
        assert library.place_name_pool_for("ranch").id == "ranch_names"


class TestParseEntries:
    """항목 단위 검증"""

    def test_invalid_entry_dropped_with_field_issue(self):
        raw = [
            _npc("ok"),
            _npc("bad", personality={"greed": [0.9, 0.1]}),
        ]
        entries, issues = parse_entries(NPCTemplate, raw, "npc_templates")
        assert [e.id for e in entries] == ["ok"]
        assert len(issues) == 1
        assert issues[0].entry_id == "bad"
        assert issues[0].field.startswith("personality.greed")

    def test_unknown_field_rejected(self):
        _, issues = parse_entries(NPCTemplate, [_npc("x", colour="red")], "npc_templates")
        assert issues and issues[0].field == "colour"

    def test_gender_distribution_must_sum_to_one(self):
        _, issues = parse_entries(
            NPCTemplate, [_npc("x", gender_distribution=[0.5, 0.2, 0.1])], "npc_templates"
        )
        assert issues and "gender_distribution" in issues[0].field

    def test_duplicate_ids_keep_first(self):
        entries, issues = parse_entries(
            NPCTemplate, [_npc("dup", role="a"), _npc("dup", role="b")], "npc_templates"
        )
        assert len(entries) == 1
        assert entries[0].role == "a"
        assert issues[0].message == "duplicate id"

    def test_entry_without_id_labelled_by_index(self):
        _, issues = parse_entries(QuestTemplate, [{}, {}], "quest_templates")
        assert {i.entry_id for i in issues} == {"#0", "#1"}

    def test_objective_count_must_be_positive(self):
        raw = _quest()
        raw["stages"][0]["objectives"][0]["count_range"] = [0, 2]
        entries, issues = parse_entries(QuestTemplate, [raw], "quest_templates")
        assert entries == []
        assert issues

    def test_empty_faction_list_rejected(self):
        entries, issues = parse_entries(
            NPCTemplate, [_npc("x", allowed_factions=[])], "npc_templates"
        )
        assert entries == []
        assert issues[0].field == "allowed_factions"

    def test_faction_defaults_to_neutral(self):
        entries, _ = parse_entries(NPCTemplate, [_npc("x")], "npc_templates")
        assert entries[0].allowed_factions == ("neutral",)

    @pytest.mark.parametrize("level_range", [[12, 12], [0, 3], [5, 11]])
    def test_quest_level_range_within_bounds(self, level_range):
        entries, issues = parse_entries(
            QuestTemplate, [_quest(level_range=level_range)], "quest_templates"
        )
        assert entries == []
        assert issues[0].field == "level_range"

    @pytest.mark.parametrize("field", ["xp_range", "gold_range"])
    def test_reward_ranges_non_negative(self, field):
        rewards = {"xp_range": [1, 5], "gold_range": [1, 5]}
        rewards[field] = [-5, 5]
        entries, issues = parse_entries(
            QuestTemplate, [_quest(rewards=rewards)], "quest_templates"
        )
        assert entries == []
        assert issues[0].field.startswith(f"rewards.{field}")


class TestLibraryFromDicts:
    def test_strict_raises_with_all_issues(self):
        with pytest.raises(ContentValidationError) as exc_info:
            library_from_dicts(
                {"npc_templates": [_npc("a", weight=0), _npc("b", weight=-1)]}
            )
        assert len(exc_info.value.issues) == 2

    def test_unknown_content_type(self):
        with pytest.raises(ContentValidationError):
            library_from_dicts({"mystery_meat": []})

    def test_lenient_keeps_valid_entries(self):
        library = library_from_dicts(
            {"npc_templates": [_npc("a"), _npc("b", weight=0)]}, strict=False
        )
        assert [t.id for t in library.npc_templates] == ["a"]


class TestLoadContentPack:
    """디렉토리 로딩"""

    def test_missing_files_are_empty(self, tmp_path):
        library, report = load_content_pack(tmp_path)
        assert report.ok
        assert all(n == 0 for n in library.counts().values())

    def test_bad_entry_reported_not_fatal(self, tmp_path):
        (tmp_path / "npc_templates.json").write_text(
            json.dumps([_npc("good"), _npc("broken", quest_giver_chance=2.0)]),
            encoding="utf-8",
        )
        library, report = load_content_pack(tmp_path)
        assert not report.ok
        assert report.counts["npc_templates"] == 1
        assert library.npc_template("broken") is None

    def test_strict_rejects_pack(self, tmp_path):
        (tmp_path / "npc_templates.json").write_text(
            json.dumps([_npc("broken", weight=0)]), encoding="utf-8"
        )
        with pytest.raises(ContentValidationError):
            load_content_pack(tmp_path, strict=True)

    def test_invalid_json_reported(self, tmp_path):
        (tmp_path / "quests.json").write_text("{not json", encoding="utf-8")
        _, report = load_content_pack(tmp_path)
        assert len(report.issues) == 1
        assert "invalid JSON" in report.issues[0].message

    def test_non_array_reported(self, tmp_path):
        (tmp_path / "quests.json").write_text("{}", encoding="utf-8")
        _, report = load_content_pack(tmp_path)
        assert report.issues[0].message == "expected a JSON array"

    def test_dangling_tree_reference_is_warning(self, tmp_path):
        tree = {
            "id": "t",
            "name": "T",
            "nodes": [{"id": "a", "text": "hi", "next_node_id": "missing"}],
            "entry_points": [{"node_id": "a"}],
        }
        (tmp_path / "dialogue_trees.json").write_text(json.dumps([tree]), encoding="utf-8")
        library, report = load_content_pack(tmp_path)
        assert report.ok
        assert library.dialogue_tree("t") is not None
        assert report.integrity_warnings == ["t: Node a references unknown next node: missing"]
