"""템플릿 라이브러리: 콘텐츠 팩 로더 + 조회

콘텐츠 팩 = JSON 파일 디렉토리. 파일 하나가 한 종류의 템플릿 배열이다.
로드 후에는 변경하지 않는다 (조회 전용).
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from pydantic import BaseModel

from src.core.dialogue.models import DialogueTree
from src.core.dialogue.validation import check_dialogue_integrity
from src.core.economy.pricing import PriceModifier
from src.core.quest.models import Quest
from src.core.validation import (
    ContentIssue,
    ContentValidationError,
    parse_entry,
)

from .enums import NameOrigin, SnippetCategory
from .schemas import (
    BuildingTemplate,
    DialogueSnippet,
    DialogueTreeTemplate,
    EncounterTemplate,
    EnemyTemplate,
    LocationTemplate,
    NamePool,
    NPCTemplate,
    PlaceNamePool,
    QuestTemplate,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_DIR = Path(__file__).resolve().parents[2] / "data"

# 파일명(확장자 제외) → (모델, TemplateLibrary 인자명)
CONTENT_FILES: dict[str, tuple[type[BaseModel], str]] = {
    "name_pools": (NamePool, "name_pools"),
    "place_name_pools": (PlaceNamePool, "place_name_pools"),
    "npc_templates": (NPCTemplate, "npc_templates"),
    "quest_templates": (QuestTemplate, "quest_templates"),
    "enemy_templates": (EnemyTemplate, "enemy_templates"),
    "encounter_templates": (EncounterTemplate, "encounter_templates"),
    "dialogue_snippets": (DialogueSnippet, "dialogue_snippets"),
    "dialogue_tree_templates": (DialogueTreeTemplate, "dialogue_tree_templates"),
    "building_templates": (BuildingTemplate, "building_templates"),
    "location_templates": (LocationTemplate, "location_templates"),
    "price_modifiers": (PriceModifier, "price_modifiers"),
    "dialogue_trees": (DialogueTree, "dialogue_trees"),
    "quests": (Quest, "quests"),
}


def _key_of(entry: BaseModel) -> str:
    if isinstance(entry, NamePool):
        return entry.origin.value
    return str(getattr(entry, "id"))


class TemplateLibrary:
    """로드된 콘텐츠 팩. 모든 조회는 읽기 전용."""

    def __init__(
        self,
        name_pools: Iterable[NamePool] = (),
        place_name_pools: Iterable[PlaceNamePool] = (),
        npc_templates: Iterable[NPCTemplate] = (),
        quest_templates: Iterable[QuestTemplate] = (),
        enemy_templates: Iterable[EnemyTemplate] = (),
        encounter_templates: Iterable[EncounterTemplate] = (),
        dialogue_snippets: Iterable[DialogueSnippet] = (),
        dialogue_tree_templates: Iterable[DialogueTreeTemplate] = (),
        building_templates: Iterable[BuildingTemplate] = (),
        location_templates: Iterable[LocationTemplate] = (),
        price_modifiers: Iterable[PriceModifier] = (),
        dialogue_trees: Iterable[DialogueTree] = (),
        quests: Iterable[Quest] = (),
    ) -> None:
        self._name_pools = {p.origin: p for p in name_pools}
        self._place_name_pools = {p.id: p for p in place_name_pools}
        self._npc_templates = {t.id: t for t in npc_templates}
        self._quest_templates = {t.id: t for t in quest_templates}
        self._enemy_templates = {t.id: t for t in enemy_templates}
        self._encounter_templates = {t.id: t for t in encounter_templates}
        self._dialogue_snippets = tuple(dialogue_snippets)
        self._dialogue_tree_templates = {t.id: t for t in dialogue_tree_templates}
        self._building_templates = {t.id: t for t in building_templates}
        self._location_templates = {t.id: t for t in location_templates}
        self._price_modifiers = tuple(price_modifiers)
        self._dialogue_trees = {t.id: t for t in dialogue_trees}
        self._quests = {q.id: q for q in quests}

    # ── 이름 ──

    def name_pool(self, origin: NameOrigin | str) -> NamePool:
        """출신별 이름 풀. 없으면 ValueError."""
        try:
            pool = self._name_pools.get(NameOrigin(origin))
        except ValueError:
            pool = None
        if pool is None:
            raise ValueError(f"Unknown name origin: {origin}")
        return pool

    @property
    def name_origins(self) -> list[NameOrigin]:
        return list(self._name_pools)

    def place_name_pool(self, pool_id: str) -> Optional[PlaceNamePool]:
        return self._place_name_pools.get(pool_id)

    def place_name_pool_for(self, location_type: str) -> Optional[PlaceNamePool]:
        """장소 유형에 맞는 지명 풀 (유형 목록에 명시된 것 우선)"""
        for pool in self._place_name_pools.values():
            if location_type in pool.location_types:
                return pool
        return self._place_name_pools.get("town_names")

    # ── NPC ──

    @property
    def npc_templates(self) -> list[NPCTemplate]:
        return list(self._npc_templates.values())

    def npc_template(self, template_id: str) -> Optional[NPCTemplate]:
        return self._npc_templates.get(template_id)

    def npc_templates_for_role(self, role: str) -> list[NPCTemplate]:
        return [t for t in self._npc_templates.values() if t.role == role]

    def npc_templates_for_location(self, location_type: str) -> list[NPCTemplate]:
        return [
            t
            for t in self._npc_templates.values()
            if not t.valid_location_types or location_type in t.valid_location_types
        ]

    # ── 퀘스트 ──

    @property
    def quest_templates(self) -> list[QuestTemplate]:
        return list(self._quest_templates.values())

    def quest_template(self, template_id: str) -> Optional[QuestTemplate]:
        return self._quest_templates.get(template_id)

    def quest_templates_for_level(self, level: int) -> list[QuestTemplate]:
        return [
            t
            for t in self._quest_templates.values()
            if t.level_range[0] <= level <= t.level_range[1]
        ]

    def quest_templates_for_giver(
        self, role: Optional[str] = None, faction: Optional[str] = None
    ) -> list[QuestTemplate]:
        result = []
        for t in self._quest_templates.values():
            if role is not None and t.giver_roles and role not in t.giver_roles:
                continue
            if (
                faction is not None
                and t.giver_factions
                and faction not in t.giver_factions
            ):
                continue
            result.append(t)
        return result

    # ── 적/조우 ──

    @property
    def enemy_templates(self) -> list[EnemyTemplate]:
        return list(self._enemy_templates.values())

    def enemy_template(self, template_id: str) -> Optional[EnemyTemplate]:
        return self._enemy_templates.get(template_id)

    def enemy_templates_by_tag(self, tag: str) -> list[EnemyTemplate]:
        return [t for t in self._enemy_templates.values() if tag in t.combat_tags]

    @property
    def encounter_templates(self) -> list[EncounterTemplate]:
        return list(self._encounter_templates.values())

    def encounter_template(self, template_id: str) -> Optional[EncounterTemplate]:
        return self._encounter_templates.get(template_id)

    # ── 대화 ──

    @property
    def dialogue_snippets(self) -> list[DialogueSnippet]:
        return list(self._dialogue_snippets)

    def snippets_by_category(self, category: SnippetCategory | str) -> list[DialogueSnippet]:
        category = SnippetCategory(category)
        return [s for s in self._dialogue_snippets if s.category == category]

    @property
    def dialogue_tree_templates(self) -> list[DialogueTreeTemplate]:
        return list(self._dialogue_tree_templates.values())

    def dialogue_tree_template(self, template_id: str) -> Optional[DialogueTreeTemplate]:
        return self._dialogue_tree_templates.get(template_id)

    def dialogue_tree_templates_for(
        self, role: str, faction: Optional[str] = None
    ) -> list[DialogueTreeTemplate]:
        return [
            t
            for t in self._dialogue_tree_templates.values()
            if (not t.valid_roles or role in t.valid_roles)
            and (not t.valid_factions or faction in t.valid_factions)
        ]

    def dialogue_tree(self, tree_id: str) -> Optional[DialogueTree]:
        """저작된(고정) 대화 트리"""
        return self._dialogue_trees.get(tree_id)

    @property
    def dialogue_trees(self) -> list[DialogueTree]:
        return list(self._dialogue_trees.values())

    # ── 장소 ──

    def building_template(self, template_id: str) -> Optional[BuildingTemplate]:
        return self._building_templates.get(template_id)

    @property
    def location_templates(self) -> list[LocationTemplate]:
        return list(self._location_templates.values())

    def location_template_for(self, location_type: str) -> Optional[LocationTemplate]:
        for t in self._location_templates.values():
            if t.location_type == location_type:
                return t
        return None

    # ── 경제/퀘스트 정의 ──

    @property
    def price_modifiers(self) -> list[PriceModifier]:
        return list(self._price_modifiers)

    def quest(self, quest_id: str) -> Optional[Quest]:
        """저작된 런타임 퀘스트 정의"""
        return self._quests.get(quest_id)

    @property
    def quests(self) -> list[Quest]:
        return list(self._quests.values())

    def counts(self) -> dict[str, int]:
        return {
            "name_pools": len(self._name_pools),
            "place_name_pools": len(self._place_name_pools),
            "npc_templates": len(self._npc_templates),
            "quest_templates": len(self._quest_templates),
            "enemy_templates": len(self._enemy_templates),
            "encounter_templates": len(self._encounter_templates),
            "dialogue_snippets": len(self._dialogue_snippets),
            "dialogue_tree_templates": len(self._dialogue_tree_templates),
            "building_templates": len(self._building_templates),
            "location_templates": len(self._location_templates),
            "price_modifiers": len(self._price_modifiers),
            "dialogue_trees": len(self._dialogue_trees),
            "quests": len(self._quests),
        }


# === 로딩 ===


@dataclass
class LoadReport:
    """콘텐츠 팩 로드 결과 요약"""

    issues: list[ContentIssue] = field(default_factory=list)
    integrity_warnings: list[str] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.issues


def parse_entries(
    model: type[BaseModel], raw_entries: Sequence[Any], source: str
) -> tuple[list[BaseModel], list[ContentIssue]]:
    """항목별 검증. 실패 항목과 중복 id는 제외하고 이슈로 보고."""
    parsed: list[BaseModel] = []
    issues: list[ContentIssue] = []
    for index, raw in enumerate(raw_entries):
        entry, entry_issues = parse_entry(model, raw, source, index)
        issues.extend(entry_issues)
        if entry is not None:
            parsed.append(entry)

    duplicates = {k for k, n in Counter(_key_of(e) for e in parsed).items() if n > 1}
    if duplicates:
        for key in sorted(duplicates):
            issues.append(ContentIssue(source, key, "id", "duplicate id"))
        seen: set[str] = set()
        unique = []
        for entry in parsed:
            key = _key_of(entry)
            if key in seen:
                continue
            seen.add(key)
            unique.append(entry)
        parsed = unique

    return parsed, issues


def _read_json_array(path: Path, source: str) -> tuple[list[Any], list[ContentIssue]]:
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            return [], [ContentIssue(source, path.name, "", f"invalid JSON: {e}")]
    if not isinstance(data, list):
        return [], [ContentIssue(source, path.name, "", "expected a JSON array")]
    return data, []


def load_content_pack(
    directory: str | Path = DEFAULT_CONTENT_DIR, strict: bool = False
) -> tuple[TemplateLibrary, LoadReport]:
    """디렉토리의 *.json 콘텐츠를 검증해 TemplateLibrary 구성

    strict=True면 이슈가 하나라도 있을 때 ContentValidationError.
    아니면 잘못된 항목만 빼고 LoadReport.issues로 돌려준다.
    없는 파일은 빈 목록으로 취급한다.
    """
    directory = Path(directory)
    report = LoadReport()
    kwargs: dict[str, list[BaseModel]] = {}

    for source, (model, arg_name) in CONTENT_FILES.items():
        path = directory / f"{source}.json"
        if not path.exists():
            logger.debug("Content file not found, skipping: %s", path)
            kwargs[arg_name] = []
            continue

        raw_entries, read_issues = _read_json_array(path, source)
        entries, issues = parse_entries(model, raw_entries, source)
        issues = read_issues + issues

        for issue in issues:
            logger.warning("Dropped content entry %s", issue)
        report.issues.extend(issues)
        kwargs[arg_name] = entries
        logger.info("Loaded %d %s from %s", len(entries), source, path)

    for tree in kwargs.get("dialogue_trees", []):
        for warning in check_dialogue_integrity(tree):
            logger.warning("Dialogue tree %s: %s", tree.id, warning)
            report.integrity_warnings.append(f"{tree.id}: {warning}")

    if strict and report.issues:
        raise ContentValidationError(report.issues)

    library = TemplateLibrary(**kwargs)
    report.counts = library.counts()
    return library, report


def library_from_dicts(
    content: dict[str, Sequence[Any]], strict: bool = True
) -> TemplateLibrary:
    """메모리 상의 원시 콘텐츠 → TemplateLibrary (테스트/임베딩용)"""
    kwargs: dict[str, list[BaseModel]] = {}
    all_issues: list[ContentIssue] = []
    for source, raw_entries in content.items():
        if source not in CONTENT_FILES:
            all_issues.append(
                ContentIssue(source, source, "", "unknown content type")
            )
            continue
        model, arg_name = CONTENT_FILES[source]
        entries, issues = parse_entries(model, raw_entries, source)
        all_issues.extend(issues)
        kwargs[arg_name] = entries

    if strict and all_issues:
        raise ContentValidationError(all_issues)
    return TemplateLibrary(**kwargs)
