"""Shared protocol for cache storage backends."""

from typing import Any, Optional, Protocol

from cropsense.app_types import CacheStats

# Returned by get() on a miss when the caller needs to tell a miss from a stored None.
MISSING = object()


class CacheStore(Protocol):
    """Protocol for key/value stores with per-entry TTL."""
    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a value, overwriting any existing entry and restarting its TTL."""

    def get(self, key: str, default: Any = None) -> Optional[Any]:
        """Return the value, or `default` if missing or expired."""

    def has(self, key: str) -> bool:
        """Return True if a non-expired value exists."""

    def delete(self, key: str) -> bool:
        """Delete an entry; return True if one was present."""

    def clear(self) -> None:
        """Drop every entry."""

    def cleanup(self) -> int:
        """Evict expired entries and return how many were removed."""

    def stats(self) -> CacheStats:
        """Return entry counts."""
