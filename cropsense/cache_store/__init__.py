"""Cache storage backends."""

from .base import MISSING, CacheStore
from .memory import ExpiringCacheStore

__all__ = [
    "MISSING",
    "CacheStore",
    "ExpiringCacheStore",
]
