"""결정론적 난수 소스: 시드 기반 스트림 + 시드 결합

같은 시드 + 같은 호출 순서 → 어느 프로세스/플랫폼에서도 같은 결과.
알고리즘: mulberry32 (32비트 상태).
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence, TypeVar

T = TypeVar("T")

UINT32_MASK = 0xFFFFFFFF
_UINT32_RANGE = 4294967296.0

_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193
_GOLDEN = 0x9E3779B9

_DICE_RE = re.compile(r"^(\d+)d(\d+)([+-]\d+)?$")


def _imul(a: int, b: int) -> int:
    """32비트 곱셈 (오버플로 절삭)"""
    return (a * b) & UINT32_MASK


def _fmix32(h: int) -> int:
    """murmur3 finalizer: 32비트 전단사 혼합"""
    h ^= h >> 16
    h = _imul(h, 0x85EBCA6B)
    h ^= h >> 13
    h = _imul(h, 0xC2B2AE35)
    h ^= h >> 16
    return h


def hash_string(text: str) -> int:
    """문자열 → 부호 없는 32비트 정수 (FNV-1a, UTF-8 바이트 단위)"""
    h = _FNV_OFFSET
    for byte in text.encode("utf-8"):
        h ^= byte
        h = _imul(h, _FNV_PRIME)
    return h


def combine_seeds(*parts: int | str) -> int:
    """여러 시드/키를 하나의 자식 시드로 결합.

    순서에 민감하다: combine_seeds(a, b) != combine_seeds(b, a).
    문자열은 hash_string으로 먼저 정수화한다. 음수 시드는 부호 없는 값으로 변환.
    """
    result = 0
    for part in parts:
        value = hash_string(part) if isinstance(part, str) else part & UINT32_MASK
        result = _fmix32((_imul(result, 31) + value + _GOLDEN) & UINT32_MASK)
    return result


class SeededRandom:
    """시드 기반 의사난수 스트림.

    한 인스턴스는 반드시 순차적으로 사용한다.
    독립 스트림이 필요하면 child()/SeedArena로 파생할 것.
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed & UINT32_MASK
        self._state = self._seed

    @property
    def seed(self) -> int:
        return self._seed

    def random(self) -> float:
        """[0, 1) 실수"""
        self._state = (self._state + 0x6D2B79F5) & UINT32_MASK
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t = (t ^ ((t + _imul(t ^ (t >> 7), t | 61)) & UINT32_MASK)) & UINT32_MASK
        return ((t ^ (t >> 14)) & UINT32_MASK) / _UINT32_RANGE

    next = random

    def randint(self, low: int, high: int) -> int:
        """[low, high] 정수 (양끝 포함)"""
        if low > high:
            low, high = high, low
        return low + int(self.random() * (high - low + 1))

    def uniform(self, low: float, high: float) -> float:
        """[low, high) 실수. low == high면 low."""
        return low + self.random() * (high - low)

    def chance(self, probability: float = 0.5) -> bool:
        """확률 probability로 True"""
        return self.random() < probability

    def pick(self, items: Sequence[T]) -> T:
        """균등 선택. 빈 시퀀스면 ValueError."""
        if not items:
            raise ValueError("Cannot pick from an empty sequence")
        return items[self.randint(0, len(items) - 1)]

    def pick_n(self, items: Sequence[T], count: int) -> list[T]:
        """서로 다른 위치의 원소 count개 (부분 Fisher-Yates)"""
        if count > len(items):
            raise ValueError(
                f"Cannot pick {count} items from a sequence of {len(items)}"
            )
        pool = list(items)
        for i in range(count):
            j = self.randint(i, len(pool) - 1)
            pool[i], pool[j] = pool[j], pool[i]
        return pool[:count]

    def weighted_pick(self, pairs: Iterable[tuple[T, float]]) -> T:
        """(item, weight) 쌍에서 가중치 비례 선택.

        random() * 총합을 뽑고 누적합을 따라 걷는다.
        """
        entries = [(item, weight) for item, weight in pairs if weight > 0]
        total = sum(weight for _, weight in entries)
        if not entries or total <= 0:
            raise ValueError("Cannot pick from an empty or zero-weight pool")

        threshold = self.random() * total
        cumulative = 0.0
        for item, weight in entries:
            cumulative += weight
            if threshold < cumulative:
                return item
        # 부동소수 누적 오차 대비
        return entries[-1][0]

    def weighted_choice(self, items: Sequence[T], weights: Sequence[float]) -> T:
        """병렬 시퀀스 버전. 길이가 다르면 ValueError."""
        if len(items) != len(weights):
            raise ValueError("Items and weights must have the same length")
        return self.weighted_pick(zip(items, weights))

    def shuffle(self, items: list[T]) -> list[T]:
        """제자리 Fisher-Yates. 같은 리스트를 반환."""
        for i in range(len(items) - 1, 0, -1):
            j = self.randint(0, i)
            items[i], items[j] = items[j], items[i]
        return items

    def sub_seed(self, key: int | str) -> int:
        """현재 시드 + 키 → 자식 시드. 스트림 상태는 건드리지 않는다."""
        return combine_seeds(self._seed, key)

    def child(self, key: int | str) -> SeededRandom:
        return SeededRandom(self.sub_seed(key))

    def roll(self, notation: str) -> int:
        """주사위 표기 ("2d6+3") 굴림"""
        match = _DICE_RE.match(notation.strip().lower())
        if match is None:
            raise ValueError(f"Invalid dice notation: {notation}")
        count, sides = int(match.group(1)), int(match.group(2))
        if sides < 1:
            raise ValueError(f"Invalid dice notation: {notation}")
        modifier = int(match.group(3) or 0)
        return sum(self.randint(1, sides) for _ in range(count)) + modifier

    def uuid(self) -> str:
        """결정론적 UUID v4 형식 문자열"""
        chars = []
        for ch in "xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx":
            if ch == "x":
                chars.append("%x" % self.randint(0, 15))
            elif ch == "y":
                chars.append("%x" % ((self.randint(0, 15) & 0x3) | 0x8))
            else:
                chars.append(ch)
        return "".join(chars)


class SeedArena:
    """루트 시드 하나에서 용도별 자식 스트림을 파생.

    arena.stream("npcs", location_id)처럼 용도 키를 명시해서,
    호출 순서와 무관하게 같은 키 → 같은 스트림이 되도록 한다.
    """

    def __init__(self, root_seed: int) -> None:
        self.root_seed = root_seed & UINT32_MASK

    def seed_for(self, purpose: str, *keys: int | str) -> int:
        return combine_seeds(self.root_seed, purpose, *keys)

    def stream(self, purpose: str, *keys: int | str) -> SeededRandom:
        return SeededRandom(self.seed_for(purpose, *keys))

    def sub_arena(self, purpose: str, *keys: int | str) -> SeedArena:
        return SeedArena(self.seed_for(purpose, *keys))
