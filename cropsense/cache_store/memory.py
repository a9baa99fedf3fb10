"""In-memory cache store with per-entry TTL and a background sweeper."""

import threading
import time
from typing import Any, Callable, Optional

from cropsense.app_types import CacheEntry, CacheStats
from cropsense.cache_store.base import MISSING, CacheStore

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/expiring_cache_store")


class ExpiringCacheStore(CacheStore):
    """Thread-safe, TTL-aware in-memory store.

    Expired entries are dropped lazily on read and periodically by a sweeper
    thread, so keys written once and never read again do not accumulate.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty store; `clock` returns seconds and is injectable for tests."""
        logger.debug("Initializing ExpiringCacheStore")
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._sweeper: threading.Thread | None = None

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a value, replacing any existing entry."""
        entry = CacheEntry(data=value, written_at=self._clock(), ttl_seconds=ttl_seconds)
        with self._lock:
            self._entries[key] = entry
        logger.debug(f"[Cache SET] {key} (TTL: {ttl_seconds}s)")

    def get(self, key: str, default: Any = None) -> Optional[Any]:
        """Return the value, or `default` if missing/expired (expired entries are evicted)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if entry.is_expired(self._clock()):
                self._entries.pop(key, None)
                return default
            return entry.data

    def has(self, key: str) -> bool:
        """Return True if a non-expired value exists."""
        return self.get(key, MISSING) is not MISSING

    def delete(self, key: str) -> bool:
        """Remove an entry if it exists."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all entries."""
        with self._lock:
            self._entries.clear()

    def cleanup(self) -> int:
        """Evict expired entries; return the number removed."""
        with self._lock:
            snapshot = list(self._entries.items())
        now = self._clock()
        expired = [(key, entry) for key, entry in snapshot if entry.is_expired(now)]

        cleaned = 0
        for key, entry in expired:
            with self._lock:
                # skip keys that were rewritten since the snapshot
                if self._entries.get(key) is entry:
                    del self._entries[key]
                    cleaned += 1
        return cleaned

    def stats(self) -> CacheStats:
        """Return total/valid/expired counts without evicting anything."""
        with self._lock:
            snapshot = list(self._entries.items())
        now = self._clock()
        stats = CacheStats(total_entries=len(snapshot), keys=[key for key, _ in snapshot])
        for _key, entry in snapshot:
            if entry.is_expired(now):
                stats.expired_entries += 1
            else:
                stats.valid_entries += 1
        return stats

    # ------------------------------------------------------------------
    # Background sweep
    # ------------------------------------------------------------------

    @property
    def sweeper_running(self) -> bool:
        """True while the sweeper thread is alive."""
        return self._sweeper is not None and self._sweeper.is_alive()

    def start_sweeper(self, interval_seconds: float) -> None:
        """Start the periodic sweep thread; no-op if already running."""
        if self.sweeper_running:
            return
        self._stop_event.clear()
        self._sweeper = threading.Thread(
            target=self._sweep_loop,
            args=(interval_seconds,),
            name="cache-sweeper",
            daemon=True,
        )
        self._sweeper.start()
        logger.info("Cache sweeper started", extra={"interval_seconds": interval_seconds})

    def stop_sweeper(self, timeout: float | None = 5.0) -> None:
        """Signal the sweep thread to exit and wait for it."""
        self._stop_event.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout=timeout)
            self._sweeper = None
            logger.info("Cache sweeper stopped")

    def _sweep_loop(self, interval_seconds: float) -> None:
        """Run cleanup() every interval until stopped."""
        while not self._stop_event.wait(interval_seconds):
            try:
                cleaned = self.cleanup()
            except Exception:  # pragma: no cover - keep the sweeper alive
                logger.exception("Cache sweep failed")
                continue
            if cleaned > 0:
                logger.info(f"[Cache] Cleaned {cleaned} expired entries")
