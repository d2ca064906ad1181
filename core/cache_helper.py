# =============================================================================
# core/cache_helper.py  —  Cache-Aside ("get or fetch and store")
# =============================================================================
#
# One helper shared by every cached call site:
#
#   hit   →  return the stored value; the fetcher is never called
#   miss  →  await fetcher() once, store the result, return it
#   error →  the exception propagates and NOTHING is stored
#
# Concurrent misses on the same key are not collapsed: two callers racing
# may both run the fetcher and the last one to finish wins the slot.
# =============================================================================

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from core.cache import MemoryCache

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_cache(
    cache: MemoryCache,
    key: str,
    fetcher: Callable[[], Awaitable[T]],
    ttl: Optional[float] = None,
    label: Optional[str] = None,
) -> T:
    """Return the cached value for ``key``, fetching and storing it on a miss.

    Args:
        cache: The cache to read from and write to.
        key: Cache key (see core.cache.create_cache_key).
        fetcher: Zero-argument coroutine factory producing the value.
        ttl: Lifetime in seconds; the cache default when omitted.
        label: Operation name; enables the debug log lines when given.
    """
    cached = cache.get(key)
    if cached is not None:
        if label:
            logger.debug("Cache hit for %s: %s", label, key)
        return cached

    if label:
        logger.debug("Cache miss for %s, fetching data: %s", label, key)

    result = await fetcher()
    cache.set(key, result, ttl)

    if label:
        logger.debug("Data fetched and cached for %s: %s", label, key)
    return result
