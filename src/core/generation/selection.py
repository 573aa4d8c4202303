"""템플릿 필터링 + 가중 선택

빈 필터 목록 = 모든 값에 적용.
필터를 통과한 템플릿이 없으면 None (오류 아님).
"""

from typing import Callable, Iterable, Optional, Sequence, TypeVar

from src.core.rng import SeededRandom

T = TypeVar("T")


def matches_filter(allowed: Sequence[str], value: Optional[str]) -> bool:
    """allowed가 비어 있으면 항상 True.
    value가 None이면 범용(빈) 필터만 통과한다.
    """
    if not allowed:
        return True
    if value is None:
        return False
    return value in allowed


def matches_any_tag(tags: Sequence[str], wanted: Iterable[str]) -> bool:
    return bool(set(tags) & set(wanted))


def select_weighted(
    rng: SeededRandom,
    candidates: Sequence[T],
    weight_of: Callable[[T], float] = lambda _: 1.0,
) -> Optional[T]:
    """후보 중 가중치 비례 선택. 후보가 없으면 None."""
    if not candidates:
        return None
    return rng.weighted_pick((c, weight_of(c)) for c in candidates)
