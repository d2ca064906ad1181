# =============================================================================
# core/package_info.py  —  get_info operation
# =============================================================================
#
# Metadata for one image in package-registry terms:
#   dependencies      →  available tags ({tag: "latest"}), first page of 50
#   dev_dependencies  →  the pre-release looking subset of those tags
#   latest_version    →  "latest" if tagged, else the first tag listed
#
# Tag listing is best effort: if it fails the answer still goes out with
# {"latest": "latest"} and a warning in the log.
# =============================================================================

import logging
import re

from core.cache import create_cache_key
from core.cache_helper import with_cache
from core.errors import DockerHubMcpError, ImageNotFoundError
from core.github import infer_github_repository
from core.models import DownloadStats, PackageInfoResponse
from core.readme_parser import NO_DESCRIPTION
from core.services import Services
from core.validators import parse_image_name

logger = logging.getLogger(__name__)

TAGS_PAGE_SIZE = 50

# Whole tag segments only: "latest" is not a "test" tag.
_DEV_TAG = re.compile(
    r"(?:^|[._-])(alpha|beta|rc|dev|nightly|edge|test|snapshot|preview)\d*(?:$|[._-])",
    re.IGNORECASE,
)


def is_dev_tag(tag: str) -> bool:
    return _DEV_TAG.search(tag) is not None


def _missing(package_name: str) -> PackageInfoResponse:
    return PackageInfoResponse(
        package_name=package_name,
        latest_version="",
        description="",
        author="",
        license="",
        exists=False,
    )


async def _list_tags(services: Services, namespace: str, name: str) -> list[str]:
    full_name = f"{namespace}/{name}"
    try:
        response = await services.client.get_tags(namespace, name, 1, TAGS_PAGE_SIZE)
    except DockerHubMcpError as error:
        logger.warning("Failed to fetch tags for %s: %s", full_name, error.message)
        return ["latest"]
    tags = [t["name"] for t in response.get("results") or [] if t.get("name")]
    logger.debug("Found %d tags for %s", len(tags), full_name)
    return tags


async def _build(
    services: Services,
    package_name: str,
    namespace: str,
    name: str,
    include_dependencies: bool,
    include_dev_dependencies: bool,
) -> PackageInfoResponse:
    try:
        repository = await services.client.get_repository(namespace, name)
    except ImageNotFoundError:
        logger.debug("Package not found: %s", package_name)
        return _missing(package_name)

    tags = []
    if include_dependencies or include_dev_dependencies:
        tags = await _list_tags(services, namespace, name)

    dependencies = {}
    dev_dependencies = {}
    for tag in tags:
        if include_dev_dependencies and is_dev_tag(tag):
            dev_dependencies[tag] = "latest"
        elif include_dependencies:
            dependencies[tag] = "latest"

    if "latest" in tags:
        latest_version = "latest"
    else:
        latest_version = tags[0] if tags else "latest"

    return PackageInfoResponse(
        package_name=package_name,
        latest_version=latest_version,
        description=repository.get("description") or NO_DESCRIPTION,
        author=repository.get("user") or repository.get("namespace") or namespace,
        license="",  # Docker Hub does not expose licensing
        keywords=[c["name"] for c in repository.get("categories") or [] if c.get("name")],
        dependencies=dependencies,
        dev_dependencies=dev_dependencies,
        download_stats=DownloadStats(
            pull_count=repository.get("pull_count") or 0,
            star_count=repository.get("star_count") or 0,
            last_updated=repository.get("last_updated") or "",
        ),
        repository=infer_github_repository(repository),
        exists=True,
    )


async def get_package_info(
    services: Services,
    package_name: str,
    include_dependencies: bool = True,
    include_dev_dependencies: bool = False,
) -> PackageInfoResponse:
    """Tags, stats and ownership for a Docker Hub image."""
    namespace, name = parse_image_name(package_name)
    full_name = f"{namespace}/{name}"
    logger.info("Fetching Docker image info: %s", full_name)

    key = create_cache_key.image_info(full_name, "info")
    if include_dependencies is not True or include_dev_dependencies is not False:
        key += f":deps:{str(include_dependencies).lower()}:{str(include_dev_dependencies).lower()}"

    return await with_cache(
        services.cache,
        key,
        lambda: _build(
            services, package_name, namespace, name,
            include_dependencies, include_dev_dependencies,
        ),
        services.settings.cache_ttl.repository_info,
        "image info",
    )
