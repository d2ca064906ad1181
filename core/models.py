# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the *shape* of every tool response.  They carry
# no behavior.  Tools turn them into plain dicts with dataclasses.asdict()
# right before handing them to MCP.
#
# Raw Docker Hub payloads (repository, tags, search pages) are NOT modeled
# here: they stay plain dicts, exactly as the API returned them, and only
# the fields we actually read are touched (see core/dockerhub.py).
#
# FIELD NAMES:
#   Response fields follow package-registry vocabulary (version, keywords,
#   dependencies, searchScore) so MCP clients written for npm/PyPI style
#   servers read these answers without special cases.
# =============================================================================

from dataclasses import dataclass, field
from typing import Optional


# -----------------------------------------------------------------------------
# UsageExample: one code snippet lifted out of a README "usage" section
# -----------------------------------------------------------------------------
@dataclass
class UsageExample:
    """A titled code block extracted from README usage sections."""

    title: str                         # "Run Container", "Docker Compose", ...
    code: str                          # Trimmed body of the fenced block
    language: str                      # Normalized: "bash", "yaml", "dockerfile", ...
    description: Optional[str] = None  # Prose line right above the block, if any


@dataclass
class InstallationInfo:
    """Copy-pasteable commands for getting the image running."""

    pull: str                          # "docker pull library/nginx:latest"
    run: str                           # "docker run library/nginx:latest"
    compose: Optional[str] = None      # Only for well-known services


@dataclass
class RepositoryInfo:
    """Source repository backing an image (when one can be inferred)."""

    type: str                          # "git"
    url: str                           # "https://github.com/owner/repo"
    directory: Optional[str] = None


@dataclass
class PackageBasicInfo:
    name: str
    version: str
    description: str
    namespace: str
    full_name: str                     # namespace/name
    homepage: Optional[str] = None
    dockerfile: Optional[str] = None
    license: Optional[str] = None
    author: Optional[str] = None
    keywords: list[str] = field(default_factory=list)
    architecture: list[str] = field(default_factory=list)
    os: list[str] = field(default_factory=list)


@dataclass
class DownloadStats:
    pull_count: int = 0
    star_count: int = 0
    last_updated: str = ""


# -----------------------------------------------------------------------------
# Search scoring
# -----------------------------------------------------------------------------
# Docker Hub search results carry stars, pulls and a last-updated date but
# no score.  core/search.py derives one in [0, 1] so the agent can filter
# by quality/popularity the same way it would on a package registry.
# -----------------------------------------------------------------------------
@dataclass
class ScoreDetail:
    quality: float
    popularity: float
    maintenance: float


@dataclass
class SearchScore:
    final: float
    detail: ScoreDetail


@dataclass
class PackageSearchResult:
    name: str                          # "nginx" (repository name only)
    full_name: str                     # "library/nginx" style repo_name
    version: str                       # Always "latest": search has no tag data
    description: str
    keywords: list[str]
    author: str
    publisher: str
    maintainers: list[str]
    score: SearchScore
    searchScore: float
    star_count: int = 0
    pull_count: int = 0
    is_official: bool = False
    is_automated: bool = False
    last_updated: str = ""


# -----------------------------------------------------------------------------
# Tool responses
# -----------------------------------------------------------------------------
@dataclass
class PackageReadmeResponse:
    """What get_readme_from_docker returns.

    ``exists`` is False (and the content fields are empty) when the image
    is not on Docker Hub; that case is an answer, not an error.
    """

    package_name: str
    version: str
    description: str
    readme_content: str
    usage_examples: list[UsageExample]
    installation: InstallationInfo
    basic_info: PackageBasicInfo
    repository: Optional[RepositoryInfo] = None
    exists: bool = True


@dataclass
class PackageInfoResponse:
    package_name: str
    latest_version: str
    description: str
    author: str
    license: str
    keywords: list[str] = field(default_factory=list)
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    download_stats: DownloadStats = field(default_factory=DownloadStats)
    repository: Optional[RepositoryInfo] = None
    exists: bool = True


@dataclass
class SearchPackagesResponse:
    query: str
    total: int
    packages: list[PackageSearchResult] = field(default_factory=list)
