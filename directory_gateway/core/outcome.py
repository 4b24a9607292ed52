"""Tagged outcome returned by every directory operation.

Expected failures (bad input, missing records, upstream refusals, exhausted
retries, missing capabilities) are values, not exceptions. Callers branch on
``outcome.ok`` and read either ``value`` or ``kind``/``detail``.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class FailureKind(str, Enum):
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    UPSTREAM_REJECTED = "upstream_rejected"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Success-with-value or failure-with-kind."""
    ok: bool
    value: Optional[T] = None
    kind: Optional[FailureKind] = None
    detail: str = ""
    field: Optional[str] = None
    # Upstream HTTP status of the failing attempt, when there was one
    status_code: Optional[int] = None

    @classmethod
    def success(cls, value: Any) -> "Outcome":
        return cls(ok=True, value=value)

    @classmethod
    def failure(
        cls,
        kind: FailureKind,
        detail: str,
        field: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> "Outcome":
        return cls(ok=False, kind=kind, detail=detail, field=field, status_code=status_code)

