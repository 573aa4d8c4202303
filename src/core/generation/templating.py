"""{{variable}} 텍스트 치환

해석되지 않은 토큰은 원문 그대로 남긴다 (예외를 던지지 않음).
부분적인 변수 맵으로도 읽을 수 있고 디버깅 가능한 출력이 나오도록 하는 계약이다.
"""

import re
from typing import Mapping

from .enums import TimeOfDay

_TOKEN_RE = re.compile(r"\{\{(\w+)\}\}")


def substitute_template(text: str, variables: Mapping[str, object]) -> str:
    """{{name}} → variables[name]. 없는 키는 그대로 둔다."""

    def _replace(match: re.Match) -> str:
        value = variables.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return _TOKEN_RE.sub(_replace, text)


def extract_template_variables(text: str) -> list[str]:
    """등장 순서대로 중복 없는 변수명 목록"""
    return list(dict.fromkeys(_TOKEN_RE.findall(text)))


def time_of_day(game_hour: float) -> TimeOfDay:
    if game_hour < 6:
        return TimeOfDay.NIGHT
    if game_hour < 12:
        return TimeOfDay.MORNING
    if game_hour < 18:
        return TimeOfDay.AFTERNOON
    return TimeOfDay.EVENING


def is_night(game_hour: float) -> bool:
    """조우 확률 보정용 야간 판정 (6시 전, 20시 후)"""
    return game_hour < 6 or game_hour > 20
