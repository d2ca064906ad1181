# =============================================================================
# core/cache.py  —  Bounded In-Memory TTL Cache
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   A process-local key/value store with:
#     - per-entry time-to-live (lazy check on read + periodic sweep)
#     - an approximate byte budget (JSON length of each value)
#     - least-recently-USED eviction when the budget would be exceeded
#     - hit/miss statistics
#
# LRU ORDER:
#   Entries live in an OrderedDict.  A hit on get() moves the key to the end,
#   so the front of the dict is always the least recently accessed entry.
#   has() is an observation only: it never changes recency or statistics.
#
# THE SWEEP:
#   The periodic cleanup is an asyncio task on the running loop.  It is
#   started by start_cleanup() (the server lifespan calls it) or lazily by
#   the first set() made inside a running loop.  destroy() cancels it; a
#   destroyed cache is inert and every call becomes a no-op.
# =============================================================================

import asyncio
import json
import logging
import time
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3600.0
DEFAULT_MAX_SIZE = 104_857_600
DEFAULT_CLEANUP_INTERVAL = 300.0


class CacheEntry:
    """Single cache entry with TTL and access metadata."""

    __slots__ = ("value", "stored_at", "ttl", "last_accessed", "size")

    def __init__(self, value: Any, stored_at: float, ttl: float, size: int):
        self.value = value
        self.stored_at = stored_at
        self.ttl = ttl
        self.last_accessed = stored_at
        self.size = size

    def is_expired(self, now: float) -> bool:
        return now >= self.stored_at + self.ttl


def estimate_size(key: str, value: Any) -> int:
    """Approximate byte cost of an entry: UTF-8 JSON of the value plus the key."""
    try:
        payload = json.dumps(value, default=str)
    except (TypeError, ValueError):
        payload = repr(value)
    return len(payload.encode("utf-8")) + len(key.encode("utf-8"))


class MemoryCache:
    """
    TTL cache bounded by an estimated byte size.

    Args:
        ttl: Default time-to-live in seconds.
        max_size: Upper bound on the estimated total payload, in bytes.
        cleanup_interval: Seconds between background sweeps.
        clock: Monotonic time source; tests pass a fake one.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        max_size: int = DEFAULT_MAX_SIZE,
        cleanup_interval: float = DEFAULT_CLEANUP_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = ttl
        self.max_size = max_size
        self.cleanup_interval = cleanup_interval
        self._clock = clock

        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._memory_usage = 0
        self._hits = 0
        self._misses = 0

        self._cleanup_task: Optional[asyncio.Task] = None
        self._destroyed = False

        self._ensure_cleanup()

    # -------------------------------------------------------------------------
    # Public contract
    # -------------------------------------------------------------------------
    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""
        if self._destroyed:
            return
        self._ensure_cleanup()

        if ttl is None:
            ttl = self.default_ttl

        now = self._clock()
        size = estimate_size(key, value)

        self._remove(key)
        if self._memory_usage + size > self.max_size:
            self.cleanup()
            self._evict_for(size)

        self._entries[key] = CacheEntry(value, now, ttl, size)
        self._memory_usage += size

    def get(self, key: str) -> Optional[Any]:
        """Return the live value for ``key`` or None; a hit refreshes recency."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        now = self._clock()
        if entry.is_expired(now):
            self._remove(key)
            self._misses += 1
            return None

        entry.last_accessed = now
        self._entries.move_to_end(key)
        self._hits += 1
        return entry.value

    def has(self, key: str) -> bool:
        """Liveness check.  Does not touch recency or hit statistics."""
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry.is_expired(self._clock()):
            self._remove(key)
            return False
        return True

    def delete(self, key: str) -> bool:
        return self._remove(key)

    def clear(self) -> None:
        self._entries.clear()
        self._memory_usage = 0
        self._hits = 0
        self._misses = 0

    def size(self) -> int:
        """Number of stored entries (not bytes)."""
        return len(self._entries)

    def get_stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "memory_usage": self._memory_usage,
            "hit_rate": (self._hits / total) if total else 0.0,
        }

    def cleanup(self) -> int:
        """Remove every expired entry.  Returns how many were removed."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            self._remove(key)
        if expired:
            logger.debug("Cache cleanup removed %d expired entries", len(expired))
        return len(expired)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    def start_cleanup(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._destroyed or self._cleanup_task is not None:
            return
        loop = asyncio.get_running_loop()
        self._cleanup_task = loop.create_task(self._cleanup_loop())

    def destroy(self) -> None:
        """Stop the sweep and drop all state.  Safe to call repeatedly."""
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            self._cleanup_task = None
        self.clear()
        self._destroyed = True

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.cleanup_interval)
            self.cleanup()

    def _ensure_cleanup(self) -> None:
        if self._cleanup_task is not None or self._destroyed:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return  # no loop yet; the first set() inside one starts the sweep
        self.start_cleanup()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------
    def _remove(self, key: str) -> bool:
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        self._memory_usage -= entry.size
        return True

    def _evict_for(self, incoming: int) -> None:
        # Front of the OrderedDict = least recently accessed.
        while self._entries and self._memory_usage + incoming > self.max_size:
            key, entry = self._entries.popitem(last=False)
            self._memory_usage -= entry.size
            logger.debug("Cache evicted %s (%d bytes)", key, entry.size)


# -----------------------------------------------------------------------------
# Cache keys
# -----------------------------------------------------------------------------
# Stable, human-readable keys.  Identical inputs always give identical keys.
# -----------------------------------------------------------------------------
def _flag(value: bool) -> str:
    return "true" if value else "false"


class CacheKeys:
    """Key builders, exposed as the module-level ``create_cache_key``."""

    @staticmethod
    def image_info(full_name: str, tag: str) -> str:
        return f"img_info:{full_name}:{tag}"

    @staticmethod
    def image_readme(full_name: str, tag: str) -> str:
        return f"img_readme:{full_name}:{tag}"

    @staticmethod
    def image_tags(full_name: str) -> str:
        today = datetime.now(timezone.utc).date().isoformat()
        return f"tags:{full_name}:{today}"

    @staticmethod
    def search_results(
        query: str,
        limit: int,
        is_official: Optional[bool] = None,
        is_automated: Optional[bool] = None,
    ) -> str:
        key = f"search:{query}:{limit}"
        if is_official is not None:
            key += f":official:{_flag(is_official)}"
        if is_automated is not None:
            key += f":automated:{_flag(is_automated)}"
        return key


create_cache_key = CacheKeys()
