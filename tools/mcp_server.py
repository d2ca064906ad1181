# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes the three Docker Hub operations as MCP tools.  Each tool is a
#   thin wrapper around a core/ function: it checks the raw arguments,
#   calls core/, converts the dataclass answer to a dict and logs both ends.
#
# HOW IT WORKS (the flow):
#   1. An MCP client (the ADK agent in agent/, or any IDE) calls a tool
#   2. FastMCP routes the call to the decorated function below
#   3. The function validates arguments (core/validators.py)
#   4. core/ does the work: cache → retry → Docker Hub API
#   5. The answer goes back as a plain dict
#
# TOOL NAMING CONVENTIONS:
#   - get_*     → Read-only retrieval (idempotent, safe to retry)
#   - search_*  → Query with filters (idempotent, safe to retry)
#   Every tool here is read-only.
#
# ERRORS:
#   Domain errors (bad arguments, unknown tag, exhausted retries) are
#   re-raised as fastmcp ToolError with "[CODE] message", which the client
#   sees as a failed tool call.  A missing IMAGE is not an error: the
#   readme/info tools answer with exists=False.
#
# RUNNING THIS SERVER:
#     a) Run standalone:  python -m tools.mcp_server
#     b) Connected to the Google ADK agent via stdio transport
# =============================================================================

import json
import logging
import sys
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Optional

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

# .env must be loaded before Settings.from_env() runs in get_services().
load_dotenv()

# --- Import core logic ---
# The tools layer depends on core/ and nothing else.
from core.config import Settings
from core.errors import DockerHubMcpError
from core.package_info import get_package_info
from core.readme import get_package_readme
from core.search import search_packages
from core.services import get_services
from core.validators import (
    validate_info_params,
    validate_readme_params,
    validate_search_params,
)

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because the MCP server communicates with the client via
# STDOUT (stdin/stdout is the MCP transport).  Anything printed to stdout
# would corrupt the JSON-RPC stream.
#
# LOG_LEVEL controls core/ (cache hits, retries, ...).  The request /
# response lines below always show at INFO on their own logger.
#
# ANSI COLOR CODES:
#     - CYAN for incoming requests (tool name + parameters)
#     - GREEN for response JSON
#     - YELLOW for intermediate status/progress messages
# =============================================================================

_CYAN = "\033[36m"     # Requests (tool calls with params)
_GREEN = "\033[32m"    # Responses (JSON output)
_YELLOW = "\033[33m"   # Status/progress messages
_RESET = "\033[0m"

# Long README bodies are cut in the log line only, never in the response.
_MAX_LOGGED_RESPONSE = 2000

logging.basicConfig(
    level=Settings.from_env().log_level,
    format="%(asctime)s [MCP] %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger("tools.mcp_server")
logger.setLevel(logging.INFO)


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    """Log the tool response as compact JSON in GREEN, then return it."""
    payload = json.dumps(result, separators=(",", ":"))
    if len(payload) > _MAX_LOGGED_RESPONSE:
        payload = payload[:_MAX_LOGGED_RESPONSE] + "…"
    logger.info(f"{_GREEN}  ← {tool_name} response: {payload}{_RESET}")
    return result


def _tool_error(tool_name: str, error: DockerHubMcpError) -> ToolError:
    _log_status(f"{tool_name} failed: [{error.code}] {error.message}")
    return ToolError(f"[{error.code}] {error.message}")


# =============================================================================
# Server lifecycle
# =============================================================================
# The cache sweep is an asyncio task, so it can only start once the server's
# event loop is running.  On shutdown the sweep is cancelled and the HTTP
# connection pools are closed.
# =============================================================================
@asynccontextmanager
async def lifespan(server: FastMCP):
    services = get_services()
    services.cache.start_cleanup()
    logger.info(f"Docker Hub API: {services.settings.api_url}")
    try:
        yield
    finally:
        await services.aclose()


mcp = FastMCP("docker-hub-readme-mcp", lifespan=lifespan)


# =============================================================================
# TOOL 1: get_readme_from_docker
# =============================================================================
@mcp.tool()
async def get_readme_from_docker(
    package_name: str,
    version: str = "latest",
    include_examples: bool = True,
) -> dict:
    """Get the README and usage examples of a Docker Hub image.

    WHEN TO CALL THIS: When you need to know HOW to use an image: what it
    does, how to run it, which environment variables and ports it expects.

    Args:
        package_name: Image name, "[namespace/]name" (e.g. "nginx",
                      "bitnami/redis").  Official images need no namespace.
        version: Tag to describe (default "latest").
        include_examples: Extract code examples from usage sections.

    Returns:
        A dict with fields:
          - package_name, version, description
          - readme_content: README markdown without badges/relative links
          - usage_examples: up to 10 {title, description, code, language}
          - installation: {pull, run, compose?} commands
          - basic_info: namespace, full_name, author, keywords,
                        architecture and os of the tag
          - repository: linked GitHub repository, if any
          - exists: False when the image is not on Docker Hub
    """
    _log_request(
        "get_readme_from_docker",
        package_name=package_name, version=version, include_examples=include_examples,
    )
    try:
        params = validate_readme_params({
            "package_name": package_name,
            "version": version,
            "include_examples": include_examples,
        })
        result = await get_package_readme(get_services(), **params)
    except DockerHubMcpError as error:
        raise _tool_error("get_readme_from_docker", error) from error

    if result.exists:
        _log_status(f"{len(result.usage_examples)} usage examples extracted")
    else:
        _log_status(f"Image '{package_name}' does not exist")
    return _log_response("get_readme_from_docker", asdict(result))


# =============================================================================
# TOOL 2: get_package_info_from_docker
# =============================================================================
@mcp.tool()
async def get_package_info_from_docker(
    package_name: str,
    include_dependencies: bool = True,
    include_dev_dependencies: bool = False,
) -> dict:
    """Get metadata of a Docker Hub image: tags, pull/star counts, owner.

    WHEN TO CALL THIS: To pick a tag, or to judge how popular and how
    recently maintained an image is.

    Args:
        package_name: Image name, "[namespace/]name" (e.g. "postgres").
        include_dependencies: List available tags under "dependencies".
        include_dev_dependencies: List pre-release looking tags (rc, beta,
                                  nightly, ...) separately under
                                  "dev_dependencies".

    Returns:
        A dict with package_name, latest_version, description, author,
        license, keywords, dependencies ({tag: "latest"}), dev_dependencies,
        download_stats {pull_count, star_count, last_updated}, repository
        and exists (False when the image is not on Docker Hub).
    """
    _log_request(
        "get_package_info_from_docker",
        package_name=package_name,
        include_dependencies=include_dependencies,
        include_dev_dependencies=include_dev_dependencies,
    )
    try:
        params = validate_info_params({
            "package_name": package_name,
            "include_dependencies": include_dependencies,
            "include_dev_dependencies": include_dev_dependencies,
        })
        result = await get_package_info(get_services(), **params)
    except DockerHubMcpError as error:
        raise _tool_error("get_package_info_from_docker", error) from error

    _log_status(f"{len(result.dependencies)} tags, latest={result.latest_version!r}")
    return _log_response("get_package_info_from_docker", asdict(result))


# =============================================================================
# TOOL 3: search_packages_from_docker
# =============================================================================
@mcp.tool()
async def search_packages_from_docker(
    query: str,
    limit: int = 20,
    quality: Optional[float] = None,
    popularity: Optional[float] = None,
    is_official: Optional[bool] = None,
    is_automated: Optional[bool] = None,
) -> dict:
    """Search Docker Hub for images.

    WHEN TO CALL THIS: When the user describes what they need ("a postgres
    admin UI") rather than naming an image.

    Args:
        query: Search terms (e.g. "nginx", "database").
        limit: Maximum results, 1-100 (default 20).
        quality: Minimum quality score 0-1 (official images score 1.0).
        popularity: Minimum popularity score 0-1 (from pull counts).
        is_official: Only official images (True) or only community ones (False).
        is_automated: Filter on automated builds.

    Returns:
        A dict with query, total (Docker Hub's match count) and packages:
        each with name, full_name, description, author, star_count,
        pull_count, is_official, score {final, detail} and searchScore.
    """
    _log_request(
        "search_packages_from_docker",
        query=query, limit=limit, quality=quality, popularity=popularity,
        is_official=is_official, is_automated=is_automated,
    )
    try:
        params = validate_search_params({
            "query": query,
            "limit": limit,
            "quality": quality,
            "popularity": popularity,
            "is_official": is_official,
            "is_automated": is_automated,
        })
        if "limit" in params:
            params["limit"] = int(params["limit"])
        result = await search_packages(get_services(), **params)
    except DockerHubMcpError as error:
        raise _tool_error("search_packages_from_docker", error) from error

    _log_status(f"{len(result.packages)} of {result.total} results returned")
    return _log_response("search_packages_from_docker", asdict(result))


# =============================================================================
# Server entry point
# =============================================================================
if __name__ == "__main__":
    mcp.run()
