"""Result values for lookups that may legitimately find nothing.

``NotFound`` is an expected outcome; ``LookupFailed`` records a transient error in a
lookup stage that callers treat as a miss for that stage only.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Found[T]:
    value: T


@dataclass(frozen=True, slots=True)
class NotFound:
    reason: str = "not found"


@dataclass(frozen=True, slots=True)
class LookupFailed:
    error: Exception

    @property
    def reason(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"


type Lookup[T] = Found[T] | NotFound | LookupFailed


def value_or_none[T](result: Lookup[T]) -> T | None:
    if isinstance(result, Found):
        return result.value
    return None
