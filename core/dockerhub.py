# =============================================================================
# core/dockerhub.py  —  Docker Hub REST API Client
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Async access to the Docker Hub v2 API (https://hub.docker.com/v2):
#     - GET /repositories/{namespace}/{name}/           → repository info
#     - GET /repositories/{namespace}/{name}/tags/      → tag pages
#     - GET /search/repositories/?q=...                  → search
#
# EVERY REQUEST GOES THROUGH THE SAME THREE LAYERS:
#
#   with_cache  (core/cache_helper.py)   : skip the network on a hit
#     └─ with_retry  (core/retry.py)     : backoff on 429/5xx/network
#          └─ _get_json                  : one HTTP GET, errors classified
#
# Classification happens HERE, once, at the boundary:
#   - non-2xx statuses → handle_http_error() → typed domain errors
#   - httpx transport failures (timeouts, DNS, refused) → NetworkError
#   - a 2xx body that is not JSON → DockerHubMcpError INVALID_RESPONSE
# so the retry engine above only ever sees the closed error taxonomy.
# =============================================================================

import logging
from typing import Any, Optional

import httpx

from core.cache import MemoryCache, create_cache_key
from core.cache_helper import with_cache
from core.config import USER_AGENT, Settings
from core.errors import (
    DockerHubMcpError,
    ImageNotFoundError,
    NetworkError,
    TagNotFoundError,
    handle_api_error,
    handle_http_error,
)
from core.retry import Sleep, with_retry

logger = logging.getLogger(__name__)

MAX_TAG_PAGES = 5


class DockerHubClient:
    """Docker Hub API client with caching and retries.

    Args:
        settings: Base URL, timeout and retry tuning.
        cache: Shared cache for repository and tag responses.
        http_client: Optional pre-built httpx.AsyncClient (tests pass one
            wired to httpx.MockTransport).  When omitted the client builds
            and owns its own.
        sleep: Passed through to with_retry.
    """

    def __init__(
        self,
        settings: Settings,
        cache: MemoryCache,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.settings = settings
        self.cache = cache
        self._sleep = sleep
        self._owns_client = http_client is None
        self._headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        self._http = http_client or httpx.AsyncClient(timeout=settings.request_timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------
    async def _get_json(self, path: str, context: str, params: Optional[dict] = None) -> Any:
        url = f"{self.settings.api_url}{path}"
        try:
            response = await self._http.get(url, params=params, headers=self._headers)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request timeout for {context}", e) from e
        except httpx.TransportError as e:
            raise NetworkError(f"Connection failed for {context}: {e}", e) from e

        if not response.is_success:
            handle_http_error(response.status_code, response, context)

        try:
            return response.json()
        except ValueError as e:
            raise DockerHubMcpError(
                f"Invalid JSON response for {context}", "INVALID_RESPONSE", response.status_code, e
            ) from e

    async def _retry(self, operation, label: str):
        return await with_retry(
            operation,
            self.settings.max_retries,
            self.settings.retry_base_delay_ms,
            label,
            sleep=self._sleep,
        )

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------
    async def get_repository(self, namespace: str, name: str) -> dict:
        full_name = f"{namespace}/{name}"

        async def fetch():
            logger.debug("Fetching repository info: %s", full_name)
            return await self._get_json(f"/repositories/{namespace}/{name}/", full_name)

        return await with_cache(
            self.cache,
            create_cache_key.image_info(full_name, "repository"),
            lambda: self._retry(fetch, f"DockerHub repository info for {full_name}"),
            self.settings.cache_ttl.repository_info,
            "repository info",
        )

    async def get_tags(self, namespace: str, name: str, page: int = 1, page_size: int = 25) -> dict:
        full_name = f"{namespace}/{name}"
        params = {"page": page, "page_size": page_size}

        async def fetch():
            logger.debug("Fetching tags: %s (page %d)", full_name, page)
            return await self._get_json(
                f"/repositories/{namespace}/{name}/tags/", full_name, params
            )

        return await with_cache(
            self.cache,
            create_cache_key.image_tags(f"{full_name}:{page}:{page_size}"),
            lambda: self._retry(fetch, f"DockerHub tags for {full_name}"),
            self.settings.cache_ttl.tags_info,
            "tags",
        )

    async def search_repositories(
        self,
        query: str,
        page: int = 1,
        page_size: int = 25,
        is_official: Optional[bool] = None,
        is_automated: Optional[bool] = None,
    ) -> dict:
        params: dict[str, Any] = {"q": query, "page": page, "page_size": page_size}
        if is_official is not None:
            params["is_official"] = "true" if is_official else "false"
        if is_automated is not None:
            params["is_automated"] = "true" if is_automated else "false"

        async def fetch():
            logger.debug("Searching repositories: %s", query)
            return await self._get_json("/search/repositories/", f"search: {query}", params)

        return await self._retry(fetch, f"DockerHub search for {query}")

    async def get_tag_details(self, namespace: str, name: str, tag: str) -> Optional[dict]:
        """Find ``tag`` in the first MAX_TAG_PAGES pages of tags, or None."""
        try:
            page = 1
            while page <= MAX_TAG_PAGES:
                response = await self.get_tags(namespace, name, page)
                for candidate in response.get("results") or []:
                    if candidate.get("name") == tag:
                        return candidate
                if not response.get("next"):
                    break
                page += 1
            return None
        except Exception as error:
            handle_api_error(error, f"get tag details for {namespace}/{name}:{tag}")

    async def get_repository_readme(self, namespace: str, name: str) -> Optional[str]:
        try:
            repository = await self.get_repository(namespace, name)
        except ImageNotFoundError:
            return None
        except Exception as error:
            handle_api_error(error, f"get repository readme for {namespace}/{name}")
        return repository.get("full_description") or None

    async def validate_image_exists(self, namespace: str, name: str) -> bool:
        try:
            await self.get_repository(namespace, name)
        except ImageNotFoundError:
            return False
        return True

    async def validate_tag_exists(self, namespace: str, name: str, tag: str) -> bool:
        try:
            details = await self.get_tag_details(namespace, name, tag)
        except (ImageNotFoundError, TagNotFoundError):
            return False
        return details is not None
