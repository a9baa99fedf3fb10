"""Typed cache facade over a pluggable cache store."""
from __future__ import annotations

import functools
import json
from typing import Any, Callable, Optional, TypeVar

from cropsense.app_types import CacheKey, CacheStats
from cropsense.cache_store import MISSING, CacheStore, ExpiringCacheStore
from cropsense.config import Settings
from cropsense.domain import Domain, SoilSnapshot, WeatherSnapshot
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_manager")

T = TypeVar("T")

WEATHER_SNAPSHOT_KEY = "weather:current"
SOIL_SNAPSHOT_KEY = "soil:current"
MODEL_STATUS_PREFIX = "api:inference:status"


class SnapshotCache:
    """Domain-aware wrapper that stores and returns values under typed keys."""

    def __init__(self, store: CacheStore, settings: Settings) -> None:
        self.store = store
        self.weather_snapshot: CacheKey[WeatherSnapshot] = CacheKey(
            WEATHER_SNAPSHOT_KEY, WeatherSnapshot, settings.weather_ttl_seconds
        )
        self.soil_snapshot: CacheKey[SoilSnapshot] = CacheKey(
            SOIL_SNAPSHOT_KEY, SoilSnapshot, settings.soil_ttl_seconds
        )

    def snapshot_key(self, domain: Domain) -> CacheKey:
        """Return the well-known snapshot key for a domain."""
        return self.weather_snapshot if domain is Domain.WEATHER else self.soil_snapshot

    def get(self, key: CacheKey[T]) -> Optional[T]:
        """Return the cached value, or None on miss or on a payload of the wrong type."""
        value = self.store.get(key.name)
        if value is None:
            logger.debug(f"[Cache MISS] {key.name}")
            return None
        if not isinstance(value, key.value_type):
            logger.warning(
                "Ignoring cached value of unexpected type",
                extra={"key": key.name, "expected": key.value_type.__name__, "actual": type(value).__name__},
            )
            self.store.delete(key.name)
            return None
        logger.debug(f"[Cache HIT] {key.name}")
        return value

    def set(self, key: CacheKey[T], value: T) -> None:
        """Store a value under its key with the key's TTL."""
        if not isinstance(value, key.value_type):
            raise TypeError(f"{key.name} expects {key.value_type.__name__}, got {type(value).__name__}")
        self.store.set(key.name, value, key.ttl_seconds)

    def has(self, key: CacheKey) -> bool:
        """Return True if a valid, correctly-typed value is cached."""
        return self.get(key) is not None

    def invalidate(self, key: CacheKey) -> None:
        """Drop a single key."""
        self.store.delete(key.name)

    def invalidate_domain(self, domain: Domain | None = None) -> None:
        """Drop everything derived from a domain's upstream data (or all when None)."""
        if domain is None:
            self.store.clear()
            logger.info("Cleared all cache entries")
            return
        self.invalidate(self.snapshot_key(domain))
        logger.info("Invalidated cache", extra={"domain": domain.value})

    def stats(self) -> CacheStats:
        """Return store statistics."""
        stats = self.store.stats()
        logger.debug(
            "[Cache Stats]",
            extra={
                "total": stats.total_entries,
                "valid": stats.valid_entries,
                "expired": stats.expired_entries,
                "keys": stats.keys[:5],
            },
        )
        return stats

    def cached(self, key_prefix: str, ttl_seconds: float) -> Callable[[Callable[..., T]], Callable[..., T]]:
        """Decorator memoising a function per argument tuple under `key_prefix`."""
        def decorator(fn: Callable[..., T]) -> Callable[..., T]:
            @functools.wraps(fn)
            def wrapper(*args: Any, **kwargs: Any) -> T:
                args_hash = json.dumps([args, kwargs], sort_keys=True, default=str)
                full_key = f"{key_prefix}:{args_hash}"
                cached_value = self.store.get(full_key, MISSING)
                if cached_value is not MISSING:
                    logger.debug(f"[Cache HIT] {full_key}")
                    return cached_value
                logger.debug(f"[Cache MISS] {full_key}")
                result = fn(*args, **kwargs)
                self.store.set(full_key, result, ttl_seconds)
                return result
            return wrapper
        return decorator


def build_snapshot_cache(settings: Settings, store: CacheStore | None = None) -> SnapshotCache:
    """Create the process cache; created once at startup and passed to the orchestrator."""
    store = store or ExpiringCacheStore()
    logger.debug(f"Initializing snapshot cache on {type(store).__name__}")
    return SnapshotCache(store, settings)
