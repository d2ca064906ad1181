# =============================================================================
# core/search.py  —  search operation
# =============================================================================
#
# Docker Hub search results carry stars, pulls and a last-updated date but
# no score.  We derive one so callers can filter by quality / popularity:
#
#   quality      1.0 for official images, else log-scaled stars (1000★ → 1.0)
#   popularity   log10(pulls + 1) / 10, capped at 1.0   (10^10 pulls → 1.0)
#   maintenance  1.0 when updated today, falling linearly to 0 over 2 years
#   final        mean of the three
#
# The assembled, filtered response is cached under the search key.
# =============================================================================

import logging
import math
from datetime import datetime, timezone
from typing import Optional

from core.cache import create_cache_key
from core.cache_helper import with_cache
from core.models import (
    PackageSearchResult,
    ScoreDetail,
    SearchPackagesResponse,
    SearchScore,
)
from core.readme_parser import NO_DESCRIPTION
from core.services import Services
from core.validators import validate_limit, validate_score, validate_search_query

logger = logging.getLogger(__name__)

MAINTENANCE_WINDOW_DAYS = 730


def _quality(result: dict) -> float:
    if result.get("is_official"):
        return 1.0
    stars = result.get("star_count") or 0
    return min(1.0, math.log10(stars + 1) / 3)


def _popularity(result: dict) -> float:
    pulls = result.get("pull_count") or 0
    return min(1.0, math.log10(pulls + 1) / 10)


def _maintenance(result: dict, now: datetime) -> float:
    last_updated = result.get("last_updated")
    if not last_updated:
        return 0.0
    try:
        updated = datetime.fromisoformat(last_updated.replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    if updated.tzinfo is None:
        updated = updated.replace(tzinfo=timezone.utc)
    age_days = (now - updated).total_seconds() / 86400
    return max(0.0, min(1.0, 1 - age_days / MAINTENANCE_WINDOW_DAYS))


def score_result(result: dict, now: Optional[datetime] = None) -> SearchScore:
    now = now or datetime.now(timezone.utc)
    detail = ScoreDetail(
        quality=round(_quality(result), 4),
        popularity=round(_popularity(result), 4),
        maintenance=round(_maintenance(result, now), 4),
    )
    final = round((detail.quality + detail.popularity + detail.maintenance) / 3, 4)
    return SearchScore(final=final, detail=detail)


def to_search_result(result: dict, now: Optional[datetime] = None) -> PackageSearchResult:
    repo_name = result.get("repo_name") or ""
    owner = result.get("repo_owner") or (repo_name.split("/")[0] if "/" in repo_name else "library")
    score = score_result(result, now)
    return PackageSearchResult(
        name=repo_name.split("/")[-1] or repo_name,
        full_name=repo_name,
        version="latest",
        description=result.get("short_description") or NO_DESCRIPTION,
        keywords=[],
        author=owner,
        publisher=owner,
        maintainers=[owner],
        score=score,
        searchScore=score.final,
        star_count=result.get("star_count") or 0,
        pull_count=result.get("pull_count") or 0,
        is_official=bool(result.get("is_official")),
        is_automated=bool(result.get("is_automated")),
        last_updated=result.get("last_updated") or "",
    )


async def _search(
    services: Services,
    query: str,
    limit: int,
    quality: Optional[float],
    popularity: Optional[float],
    is_official: Optional[bool],
    is_automated: Optional[bool],
) -> SearchPackagesResponse:
    response = await services.client.search_repositories(
        query, 1, limit, is_official, is_automated
    )

    now = datetime.now(timezone.utc)
    packages = [to_search_result(r, now) for r in response.get("results") or []]
    if quality is not None:
        packages = [p for p in packages if p.score.detail.quality >= quality]
    if popularity is not None:
        packages = [p for p in packages if p.score.detail.popularity >= popularity]

    total = response.get("count", len(packages))
    logger.info("Searched images: %s (found %d/%d results)", query, len(packages), total)
    return SearchPackagesResponse(query=query, total=total, packages=packages[:limit])


async def search_packages(
    services: Services,
    query: str,
    limit: int = 20,
    quality: Optional[float] = None,
    popularity: Optional[float] = None,
    is_official: Optional[bool] = None,
    is_automated: Optional[bool] = None,
) -> SearchPackagesResponse:
    """Search Docker Hub and score the results.

    Raises:
        ValidationError: empty/oversized query, limit outside 1..100,
            or a minimum score outside 0..1.
    """
    validate_search_query(query)
    validate_limit(limit)
    if quality is not None:
        validate_score("quality", quality)
    if popularity is not None:
        validate_score("popularity", popularity)

    logger.info("Searching Docker images: %s (limit: %d)", query, limit)

    key = create_cache_key.search_results(query, limit, is_official, is_automated)
    if quality is not None or popularity is not None:
        key += f":quality:{quality}:popularity:{popularity}"

    return await with_cache(
        services.cache,
        key,
        lambda: _search(services, query, limit, quality, popularity, is_official, is_automated),
        services.settings.cache_ttl.search_results,
        "search",
    )
