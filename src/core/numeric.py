"""수치 유틸"""

import math


def round_half_up(value: float) -> int:
    """0.5는 항상 위로 (내장 round의 은행가 반올림과 다름).

    곱셈 누적 오차(110.49999999999999 등)는 소수 9자리에서 정리한 뒤 반올림한다.
    """
    return math.floor(round(value, 9) + 0.5)


def clamp(value, low, high):
    return max(low, min(high, value))
