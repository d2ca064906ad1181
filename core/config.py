# =============================================================================
# core/config.py  —  Runtime Settings
# =============================================================================
#
# Every tunable lives here, read from environment variables.  Entry points
# (tools/mcp_server.py, main.py) call load_dotenv() first, so a local .env
# file works the same way as exported variables.
#
# UNITS:
#   Cache TTLs and intervals are in SECONDS (time.monotonic() units).
#   Retry delays and the request timeout are in MILLISECONDS, matching the
#   retry log lines ("retrying in 1000ms").
# =============================================================================

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_API_URL = "https://hub.docker.com/v2"
DEFAULT_GITHUB_API_URL = "https://api.github.com"

USER_AGENT = "docker-hub-readme-mcp/1.0.0"


@dataclass(frozen=True)
class CacheTTL:
    """Per-kind cache lifetimes, in seconds."""

    repository_info: float = 300.0     # 5 minutes
    tags_info: float = 300.0           # 5 minutes
    search_results: float = 600.0      # 10 minutes
    default: float = 3600.0            # 1 hour


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    github_api_url: str = DEFAULT_GITHUB_API_URL
    github_token: Optional[str] = None

    request_timeout_ms: int = 30_000
    max_retries: int = 3
    retry_base_delay_ms: int = 1000

    cache_ttl: CacheTTL = CacheTTL()
    cache_max_size: int = 104_857_600  # 100 MB (estimated)
    cache_cleanup_interval: float = 300.0

    log_level: str = "WARNING"

    @property
    def request_timeout(self) -> float:
        """Request timeout in seconds, for httpx."""
        return self.request_timeout_ms / 1000

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "Settings":
        """Build settings from ``environ`` (defaults to os.environ).

        Raises:
            ValueError: if a numeric variable cannot be parsed or is negative.
        """
        env = os.environ if environ is None else environ

        ttl = CacheTTL(
            repository_info=_number(env, "CACHE_TTL_REPOSITORY", CacheTTL.repository_info),
            tags_info=_number(env, "CACHE_TTL_TAGS", CacheTTL.tags_info),
            search_results=_number(env, "CACHE_TTL_SEARCH", CacheTTL.search_results),
            default=_number(env, "CACHE_TTL_DEFAULT", CacheTTL.default),
        )

        return cls(
            api_url=env.get("DOCKERHUB_API_URL", DEFAULT_API_URL).rstrip("/"),
            github_api_url=env.get("GITHUB_API_URL", DEFAULT_GITHUB_API_URL).rstrip("/"),
            github_token=env.get("GITHUB_TOKEN") or None,
            request_timeout_ms=int(_number(env, "DOCKERHUB_REQUEST_TIMEOUT_MS", 30_000)),
            max_retries=int(_number(env, "DOCKERHUB_MAX_RETRIES", 3)),
            retry_base_delay_ms=int(_number(env, "DOCKERHUB_RETRY_BASE_DELAY_MS", 1000)),
            cache_ttl=ttl,
            cache_max_size=int(_number(env, "CACHE_MAX_SIZE", 104_857_600)),
            cache_cleanup_interval=_number(env, "CACHE_CLEANUP_INTERVAL", 300.0),
            log_level=env.get("LOG_LEVEL", "WARNING").upper(),
        )


def _number(env, name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value
