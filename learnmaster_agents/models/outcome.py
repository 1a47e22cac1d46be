"""Result type for operations that degrade instead of raising."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Computed value plus a marker telling whether a fallback produced it.

    Attributes:
        value: The usable result (AI output or fallback)
        fallback_used: True when the AI path was skipped or failed
        reason: Why the fallback was used ("ai_disabled", "llm_error", ...)
    """

    value: T
    fallback_used: bool = False
    reason: str | None = None

    @classmethod
    def ok(cls, value: T) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def fallback(cls, value: T, reason: str) -> Outcome[T]:
        return cls(value=value, fallback_used=True, reason=reason)
