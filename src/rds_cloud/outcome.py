"""
Outcome of a cloud call: either a value or a failure reason.

The public cloud operations never raise; they return an Outcome so callers can
branch on `ok` while tests and logs still see why a call failed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class FailureKind(str, Enum):
    """Coarse failure classes of a cloud call."""

    TRANSPORT = "transport"  # connection, DNS, invalid URL
    PROTOCOL = "protocol"  # non-200 HTTP status
    PAYLOAD = "payload"  # empty body, bad encoding, malformed JSON, missing field


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: Optional[T] = None
    kind: Optional[FailureKind] = None
    reason: str = ""
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.kind is None

    @classmethod
    def success(cls, value: T, *, status_code: Optional[int] = None) -> "Outcome[T]":
        return cls(value=value, status_code=status_code)

    @classmethod
    def failure(
        cls,
        kind: FailureKind,
        reason: str,
        *,
        status_code: Optional[int] = None,
    ) -> "Outcome[T]":
        return cls(kind=kind, reason=reason, status_code=status_code)


__all__ = ["FailureKind", "Outcome"]
