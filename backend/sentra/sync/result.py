# Overview: Outcome of a store mutation.

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    ok=True carries the saved record in value.

    ok=False carries the reason; value may still hold a locally
    synthesised record when the caller asked for an optimistic fallback.
    """
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str, value: Optional[T] = None) -> "Result[T]":
        return cls(ok=False, value=value, error=reason)

    def __bool__(self) -> bool:
        return self.ok
