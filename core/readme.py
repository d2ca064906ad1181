# =============================================================================
# core/readme.py  —  get_readme operation
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Builds the full README answer for one image:
#
#     1. validate + parse "[namespace/]name"
#     2. load the RAW bundle (cached under img_readme:<ns/name>:<version>):
#          repository fields, README text + its source, tag platforms,
#          linked GitHub repository
#     3. derive the answer from the bundle on every call:
#          cleaned markdown, description, usage examples, install commands
#
# Only step 2 is cached.  Step 3 is cheap and depends on include_examples,
# so caching its output would pin one flavour of the answer.
#
# README SOURCES (first that yields text wins):
#   Docker Hub full_description  →  GitHub README of a linked repository
#
# A missing image is an answer (exists=False), not an error, and is cached
# like any other bundle as {"exists": False}.  A missing non-"latest" tag
# IS an error: the caller asked for something specific.
# =============================================================================

import logging

from core.cache_helper import with_cache
from core.cache import create_cache_key
from core.errors import ImageNotFoundError, TagNotFoundError
from core.github import infer_github_repository
from core.models import (
    InstallationInfo,
    PackageBasicInfo,
    PackageReadmeResponse,
    RepositoryInfo,
)
from core.readme_parser import (
    NO_DESCRIPTION,
    clean_markdown,
    extract_description,
    parse_usage_examples,
)
from core.services import Services
from core.validators import parse_image_name, validate_tag

logger = logging.getLogger(__name__)

COMMON_DOCKER_SERVICES = frozenset({
    "nginx", "apache", "httpd", "mysql", "postgres", "postgresql",
    "redis", "mongodb", "mongo", "node", "python", "ubuntu",
    "alpine", "debian", "centos", "jenkins", "wordpress",
})


def is_common_service(name: str) -> bool:
    return name.lower() in COMMON_DOCKER_SERVICES


def generate_compose_example(full_name: str, tag: str) -> str:
    service_name = full_name.split("/")[-1] or "app"
    return (
        "version: '3.8'\n"
        "services:\n"
        f"  {service_name}:\n"
        f"    image: {full_name}:{tag}\n"
        "    ports:\n"
        '      - "8080:80"'
    )


def build_installation(full_name: str, name: str, tag: str) -> InstallationInfo:
    installation = InstallationInfo(
        pull=f"docker pull {full_name}:{tag}",
        run=f"docker run {full_name}:{tag}",
    )
    if is_common_service(name):
        installation.compose = generate_compose_example(full_name, tag)
    return installation


def _unique(values) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


async def _load_bundle(services: Services, namespace: str, name: str, version: str) -> dict:
    """Fetch everything the README answer is derived from.

    A missing image yields ``{"exists": False}`` so the answer is cached too.
    """
    client = services.client
    full_name = f"{namespace}/{name}"

    try:
        repository = await client.get_repository(namespace, name)
    except ImageNotFoundError:
        logger.info("Docker image not found: %s", full_name)
        return {"exists": False}

    tag_details = await client.get_tag_details(namespace, name, version)
    if tag_details is None and version != "latest":
        raise TagNotFoundError(full_name, version)

    linked = infer_github_repository(repository)

    readme = repository.get("full_description") or ""
    source = "docker-hub" if readme else "none"
    if not readme and linked is not None:
        readme = await services.readme_source.fetch_readme(linked) or ""
        if readme:
            source = "github"

    images = (tag_details or {}).get("images") or []
    return {
        "exists": True,
        "description": repository.get("description") or "",
        "user": repository.get("user") or repository.get("namespace") or namespace,
        "categories": [c.get("name") for c in repository.get("categories") or [] if c.get("name")],
        "readme": readme,
        "readme_source": source,
        "architectures": _unique(img.get("architecture") for img in images),
        "os": _unique(img.get("os") for img in images),
        "repository": linked.url if linked else None,
    }


async def get_package_readme(
    services: Services,
    package_name: str,
    version: str = "latest",
    include_examples: bool = True,
) -> PackageReadmeResponse:
    """README, usage examples and install commands for a Docker Hub image.

    Raises:
        ValidationError: bad image name or tag.
        TagNotFoundError: ``version`` is not "latest" and no such tag exists.
    """
    namespace, name = parse_image_name(package_name)
    if version != "latest":
        validate_tag(version)
    full_name = f"{namespace}/{name}"

    logger.info("Fetching Docker image README: %s:%s", full_name, version)

    bundle = await with_cache(
        services.cache,
        create_cache_key.image_readme(full_name, version),
        lambda: _load_bundle(services, namespace, name, version),
        services.settings.cache_ttl.repository_info,
        "image README",
    )

    installation = build_installation(full_name, name, version)

    if not bundle["exists"]:
        return PackageReadmeResponse(
            package_name=package_name,
            version=version,
            description="",
            readme_content="",
            usage_examples=[],
            installation=installation,
            basic_info=PackageBasicInfo(
                name=name,
                version=version,
                description="",
                namespace=namespace,
                full_name=full_name,
            ),
            exists=False,
        )

    readme = bundle["readme"]
    description = bundle["description"] or (
        extract_description(readme) if readme else NO_DESCRIPTION
    )
    repository = RepositoryInfo(type="git", url=bundle["repository"]) if bundle["repository"] else None

    basic_info = PackageBasicInfo(
        name=name,
        version=version,
        description=description,
        namespace=namespace,
        full_name=full_name,
        homepage=bundle["repository"],
        author=bundle["user"],
        keywords=list(bundle["categories"]),
        architecture=list(bundle["architectures"]),
        os=list(bundle["os"]),
    )

    logger.info(
        "Fetched image README: %s:%s (README source: %s)",
        full_name, version, bundle["readme_source"],
    )
    return PackageReadmeResponse(
        package_name=package_name,
        version=version,
        description=description,
        readme_content=clean_markdown(readme) if readme else "",
        usage_examples=parse_usage_examples(readme, include_examples),
        installation=installation,
        basic_info=basic_info,
        repository=repository,
        exists=True,
    )
