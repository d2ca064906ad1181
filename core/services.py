# =============================================================================
# core/services.py  —  Composition Root
# =============================================================================
#
# Every collaborator (settings, cache, Docker Hub client, GitHub fallback)
# is built once here and handed to the tool operations explicitly.  Nothing
# in core/ reaches for a global.
#
# The ONE process-wide instance is get_services(), and only
# tools/mcp_server.py calls it.  Tests build their own with create_services()
# and pass an httpx.AsyncClient wired to a MockTransport.
# =============================================================================

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from core.cache import MemoryCache
from core.config import Settings
from core.dockerhub import DockerHubClient
from core.github import GitHubReadmeSource
from core.retry import Sleep

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    cache: MemoryCache
    client: DockerHubClient
    readme_source: GitHubReadmeSource

    async def aclose(self) -> None:
        """Stop the cache sweep and close owned HTTP clients."""
        self.cache.destroy()
        await self.client.aclose()
        await self.readme_source.aclose()


def create_services(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Optional[Sleep] = None,
) -> Services:
    """Wire up a fresh set of services.

    Args:
        settings: Defaults to Settings.from_env().
        http_client: Shared by the Docker Hub and GitHub clients when given
            (the caller then owns it); otherwise each builds its own.
        clock: Time source for the cache.
        sleep: Backoff sleep for the retry engine.
    """
    if settings is None:
        settings = Settings.from_env()

    cache = MemoryCache(
        ttl=settings.cache_ttl.default,
        max_size=settings.cache_max_size,
        cleanup_interval=settings.cache_cleanup_interval,
        clock=clock,
    )
    return Services(
        settings=settings,
        cache=cache,
        client=DockerHubClient(settings, cache, http_client, sleep=sleep),
        readme_source=GitHubReadmeSource(settings, http_client, sleep=sleep),
    )


_default: Optional[Services] = None


def get_services() -> Services:
    """The process-wide services, created on first use."""
    global _default
    if _default is None or _default.cache.destroyed:
        _default = create_services()
        logger.debug("Created default services (api_url=%s)", _default.settings.api_url)
    return _default
