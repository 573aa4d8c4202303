"""이름 생성기: 인명 / 무법자 별칭 / 기계 식별명 / 지명

모든 함수는 호출자가 넘긴 SeededRandom 하나만 소비한다.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Collection, Optional, Sequence

from src.core.rng import SeededRandom

from .enums import Gender
from .models import GeneratedName, GeneratedPlaceName
from .schemas import NamePool, PlaceNamePool, WeightedOrigin
from .templating import extract_template_variables, substitute_template

if TYPE_CHECKING:
    from .library import TemplateLibrary

logger = logging.getLogger(__name__)

DEFAULT_NAME_PATTERN = "{{first}} {{last}}"
DEFAULT_PLACE_PATTERN = "{{adj}} {{noun}}"

# 브랜드식 지명용 (I, O 제외)
BRAND_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"

AUTOMATON_PREFIXES = ("Unit", "Model", "Mark", "Series", "Serial")
AUTOMATON_SUFFIXES = ("", "", "", " Prime", " Mk II", " Revised")

_SPACES_RE = re.compile(r"\s+")


def _tidy(text: str) -> str:
    return _SPACES_RE.sub(" ", text).strip()


def roll_gender(
    rng: SeededRandom, distribution: Sequence[float] = (0.5, 0.5, 0.0)
) -> Gender:
    """[남, 여, 중성] 3분포에서 성별 추출"""
    roll = rng.random()
    male, female = distribution[0], distribution[1]
    if roll < male:
        return Gender.MALE
    if roll < male + female:
        return Gender.FEMALE
    return Gender.NEUTRAL


def _first_names(pool: NamePool, gender: Gender) -> Sequence[str]:
    if gender == Gender.MALE:
        return pool.male_first
    if gender == Gender.FEMALE:
        return pool.female_first
    # 중성 풀이 비면 남/여 합집합
    return pool.neutral_first or pool.male_first + pool.female_first


# === 인명 ===


def generate_name(
    rng: SeededRandom,
    pool: NamePool,
    gender: Optional[Gender] = None,
    distribution: Sequence[float] = (0.5, 0.5, 0.0),
    include_nickname: bool = False,
    include_title: bool = False,
) -> GeneratedName:
    """성별 → 이름 → 성 → (별명/칭호) → 패턴 조립

    패턴은 채울 수 있는 변수만 쓰는 것 중에서 고른다.
    """
    if gender is None:
        gender = roll_gender(rng, distribution)

    first = rng.pick(_first_names(pool, gender))
    last = rng.pick(pool.surnames)

    nickname = rng.pick(pool.nicknames) if include_nickname and pool.nicknames else None
    title = rng.pick(pool.titles) if include_title and pool.titles else None

    variables = {"first": first, "last": last, "nickname": nickname, "title": title}
    available = {k for k, v in variables.items() if v is not None}
    patterns = [
        p for p in pool.patterns if set(extract_template_variables(p)) <= available
    ]
    pattern = rng.pick(patterns) if patterns else DEFAULT_NAME_PATTERN

    return GeneratedName(
        full_name=_tidy(substitute_template(pattern, variables)),
        first_name=first,
        last_name=last,
        origin=pool.origin,
        gender=gender,
        nickname=nickname,
        title=title,
    )


def generate_name_weighted(
    rng: SeededRandom,
    library: TemplateLibrary,
    origins: Sequence[WeightedOrigin],
    gender: Optional[Gender] = None,
    distribution: Sequence[float] = (0.5, 0.5, 0.0),
    include_nickname: bool = False,
    include_title: bool = False,
) -> GeneratedName:
    """가중 출신 목록에서 이름 풀을 고른 뒤 generate_name"""
    origin = rng.weighted_pick((o.origin, o.weight) for o in origins)
    return generate_name(
        rng,
        library.name_pool(origin),
        gender=gender,
        distribution=distribution,
        include_nickname=include_nickname,
        include_title=include_title,
    )


def generate_unique_name(
    rng: SeededRandom,
    pool: NamePool,
    existing: Collection[str],
    gender: Optional[Gender] = None,
    max_attempts: int = 10,
) -> Optional[GeneratedName]:
    """기존 이름(대소문자 무시)과 겹치지 않는 이름. 시도 초과 시 None."""
    taken = {name.lower() for name in existing}
    for _ in range(max_attempts):
        name = generate_name(rng, pool, gender=gender)
        if name.full_name.lower() not in taken:
            return name
    logger.debug("No unique name after %d attempts (%s)", max_attempts, pool.origin)
    return None


def generate_outlaw_alias(rng: SeededRandom, pool: NamePool) -> str:
    """별명 기반 무법자 별칭 ("Snake Dalton" / "The Kid")"""
    if not pool.nicknames:
        raise ValueError(f"Name pool {pool.origin.value} has no nicknames")
    nickname = rng.pick(pool.nicknames)
    if rng.chance(0.5):
        return f"{nickname} {rng.pick(pool.surnames)}"
    if nickname.startswith("The "):
        return nickname
    return f"The {nickname}"


def generate_automaton_designation(rng: SeededRandom) -> str:
    """기계 식별명 ("Unit KT-042")"""
    prefix = rng.pick(AUTOMATON_PREFIXES)
    letters = rng.pick(BRAND_LETTERS) + rng.pick(BRAND_LETTERS)
    number = rng.randint(1, 999)
    return f"{prefix} {letters}-{number:03d}{rng.pick(AUTOMATON_SUFFIXES)}"


# === 지명 ===


def _place_word_lists(pool: PlaceNamePool) -> dict[str, Sequence[str]]:
    return {
        "adj": pool.adjectives,
        "noun": pool.nouns,
        "suffix": pool.suffixes,
        "possessive": pool.possessives,
    }


def generate_place_name(rng: SeededRandom, pool: PlaceNamePool) -> GeneratedPlaceName:
    """패턴 선택 후 {{adj}} {{noun}} {{suffix}} {{possessive}} {{letter}} {{number}} 치환

    {{letter}}는 등장할 때마다 새로 뽑는다 ("B-Bar", "K-T Ranch").
    """
    words = _place_word_lists(pool)
    patterns = [
        p
        for p in pool.patterns
        if all(
            words[var] for var in extract_template_variables(p) if var in words
        )
    ]
    pattern = rng.pick(patterns) if patterns else DEFAULT_PLACE_PATTERN

    while "{{letter}}" in pattern:
        pattern = pattern.replace("{{letter}}", rng.pick(BRAND_LETTERS), 1)

    variables: dict[str, str] = {}
    for var in extract_template_variables(pattern):
        if var in words:
            variables[var] = rng.pick(words[var])
        elif var == "number":
            variables[var] = str(rng.randint(1, 99))

    return GeneratedPlaceName(
        name=_tidy(substitute_template(pattern, variables)),
        pool_id=pool.id,
        tags=list(pool.tags),
    )


def generate_place_names(
    rng: SeededRandom, pool: PlaceNamePool, count: int
) -> list[str]:
    """서로 다른 지명 최대 count개 (시도 횟수 count × 10)"""
    names: list[str] = []
    for _ in range(count * 10):
        if len(names) >= count:
            break
        name = generate_place_name(rng, pool).name
        if name not in names:
            names.append(name)
    return names
