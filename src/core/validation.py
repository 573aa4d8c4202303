"""콘텐츠 검증 오류: 필드 단위 이슈 목록

pydantic ValidationError를 ContentIssue 목록으로 풀어서,
로더(호출자)가 팩 전체 거부 / 항목 제외를 결정할 수 있게 한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, Field, ValidationError

M = TypeVar("M", bound=BaseModel)


def _ordered_range(value: tuple) -> tuple:
    low, high = value
    if low > high:
        raise ValueError(f"range min ({low}) must not exceed max ({high})")
    return value


# [min, max] 2-튜플 범위 필드
UnitFloat = Annotated[float, Field(ge=0.0, le=1.0)]
FloatRange = Annotated[tuple[float, float], AfterValidator(_ordered_range)]
IntRange = Annotated[tuple[int, int], AfterValidator(_ordered_range)]
UnitRange = Annotated[tuple[UnitFloat, UnitFloat], AfterValidator(_ordered_range)]


@dataclass(frozen=True)
class ContentIssue:
    """필드 단위 검증 오류 1건"""

    source: str  # "npc_templates" 등
    entry_id: str
    field: str  # "personality.greed" 형태, 항목 자체면 ""
    message: str

    def __str__(self) -> str:
        location = f"{self.entry_id}.{self.field}" if self.field else self.entry_id
        return f"[{self.source}] {location}: {self.message}"


class ContentValidationError(ValueError):
    """strict 로딩에서 이슈가 하나라도 있으면 발생"""

    def __init__(self, issues: list[ContentIssue]):
        self.issues = issues
        preview = "; ".join(str(i) for i in issues[:5])
        more = f" (+{len(issues) - 5} more)" if len(issues) > 5 else ""
        super().__init__(f"{len(issues)} content issue(s): {preview}{more}")


def entry_label(raw: Any, index: int) -> str:
    """오류 보고용 항목 식별자"""
    if isinstance(raw, dict):
        for key in ("id", "origin"):
            if raw.get(key):
                return str(raw[key])
    return f"#{index}"


def issues_from_error(
    source: str, entry_id: str, error: ValidationError
) -> list[ContentIssue]:
    return [
        ContentIssue(
            source=source,
            entry_id=entry_id,
            field=".".join(str(part) for part in err["loc"]),
            message=err["msg"],
        )
        for err in error.errors()
    ]


def parse_entry(
    model: type[M], raw: Any, source: str, index: int = 0
) -> tuple[Optional[M], list[ContentIssue]]:
    """단일 항목 검증. 실패하면 (None, 이슈 목록)."""
    try:
        return model.model_validate(raw), []
    except ValidationError as e:
        return None, issues_from_error(source, entry_label(raw, index), e)
