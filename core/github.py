# =============================================================================
# core/github.py  —  GitHub README Fallback
# =============================================================================
#
# Some images ship an empty Docker Hub "full description".  When the
# repository text links to a GitHub project we can still fetch its README
# from the GitHub REST API:
#
#   GET /repos/{owner}/{repo}/readme   (Accept: application/vnd.github.raw)
#
# Unauthenticated calls are limited to 60/hour; set GITHUB_TOKEN to raise it.
# =============================================================================

import logging
import re
from typing import Optional

import httpx

from core.config import USER_AGENT, Settings
from core.errors import DockerHubMcpError, NetworkError, handle_http_error
from core.models import RepositoryInfo
from core.retry import Sleep, with_retry

logger = logging.getLogger(__name__)

_GITHUB_LINK = re.compile(r"github\.com/([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+)")

# github.com/<these>/... are site pages, not repositories.
_RESERVED_OWNERS = {"orgs", "topics", "features", "marketplace", "sponsors", "settings"}


def infer_github_repository(repository: dict) -> Optional[RepositoryInfo]:
    """Return the first GitHub repository linked from a Docker Hub repository."""
    for text in (repository.get("description"), repository.get("full_description")):
        if not text:
            continue
        for owner, repo in _GITHUB_LINK.findall(text):
            if owner.lower() in _RESERVED_OWNERS:
                continue
            repo = repo.rstrip(".")
            if repo.endswith(".git"):
                repo = repo[: -len(".git")]
            if repo:
                return RepositoryInfo(type="git", url=f"https://github.com/{owner}/{repo}")
    return None


def _owner_and_repo(repository: RepositoryInfo) -> Optional[tuple[str, str]]:
    match = _GITHUB_LINK.search(repository.url)
    if match is None:
        return None
    return match.group(1), match.group(2)


class GitHubReadmeSource:
    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.settings = settings
        self._sleep = sleep
        self._owns_client = http_client is None

        headers = {"User-Agent": USER_AGENT, "Accept": "application/vnd.github.raw"}
        if settings.github_token:
            headers["Authorization"] = f"Bearer {settings.github_token}"
        self._headers = headers
        self._http = http_client or httpx.AsyncClient(timeout=settings.request_timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def fetch_readme(self, repository: RepositoryInfo) -> Optional[str]:
        """README text of a GitHub repository, or None if it has none.

        This is a secondary source: any failure that survives the retries
        (rate limit, 403, 5xx, network) is logged and answered with None.
        """
        parts = _owner_and_repo(repository)
        if parts is None:
            return None
        owner, repo = parts
        context = f"{owner}/{repo}"

        async def fetch() -> str:
            try:
                response = await self._http.get(
                    f"{self.settings.github_api_url}/repos/{owner}/{repo}/readme",
                    headers=self._headers,
                )
            except httpx.TimeoutException as e:
                raise NetworkError(f"GitHub request timeout for {context}", e) from e
            except httpx.TransportError as e:
                raise NetworkError(f"GitHub connection failed for {context}: {e}", e) from e

            # No README is an answer, not an image lookup failure.
            if response.status_code == 404:
                return ""
            if not response.is_success:
                handle_http_error(response.status_code, response, context, service="GitHub")
            return response.text

        try:
            text = await with_retry(
                fetch,
                self.settings.max_retries,
                self.settings.retry_base_delay_ms,
                f"GitHub README for {context}",
                sleep=self._sleep,
            )
        except DockerHubMcpError as error:
            logger.warning("GitHub README unavailable for %s: %s", context, error.message)
            return None

        if not text:
            logger.debug("No README on GitHub for %s", context)
            return None
        return text
