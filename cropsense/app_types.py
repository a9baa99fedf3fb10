"""Shared dataclasses and lightweight types used across modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, List, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Cached payload with the monotonic time it was written and its TTL."""
    data: T
    written_at: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        """An entry is logically absent once its age exceeds the TTL."""
        return (now - self.written_at) > self.ttl_seconds


@dataclass(frozen=True)
class CacheKey(Generic[T]):
    """Well-known cache key bound to the payload type and TTL stored under it."""
    name: str
    value_type: type
    ttl_seconds: float


@dataclass
class CacheStats:
    """Entry counts for observability; never used for correctness."""
    total_entries: int = 0
    valid_entries: int = 0
    expired_entries: int = 0
    keys: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Result produced by the primary path."""
    value: T

    @property
    def degraded(self) -> bool:
        return False


@dataclass(frozen=True)
class Degraded(Generic[T]):
    """Usable result produced by a fallback path, with the reason it was needed."""
    value: T
    reason: str

    @property
    def degraded(self) -> bool:
        return True


Outcome = Union[Ok[T], Degraded[T]]
