# =============================================================================
# core/validators.py  —  Input Validation for Tool Arguments
# =============================================================================
#
# Two layers:
#   1. Value rules (validate_image_name, validate_tag, ...): Docker Hub's
#      own naming rules.
#   2. Argument checks (validate_*_params): the shape of the raw tool
#      arguments: required keys present, types right, ranges respected.
#
# Everything raises ValidationError, which is never retried.  Messages
# include an example because the reader is usually an LLM that will try
# again with corrected arguments.
# =============================================================================

import re
from typing import Any, Optional

from core.errors import ValidationError

_NAME_PART = re.compile(r"^[a-z0-9]([a-z0-9._-]*[a-z0-9])?$")
_REPEATED_SEPARATORS = re.compile(r"[._-]{2,}")
_PORT = re.compile(r":\d+")
_TAG = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9._-]*$")

MAX_QUERY_LENGTH = 250
MAX_TAG_LENGTH = 128
MIN_LIMIT, MAX_LIMIT = 1, 100


# -----------------------------------------------------------------------------
# Value rules
# -----------------------------------------------------------------------------
def validate_image_name(image_name: Any) -> None:
    if not image_name or not isinstance(image_name, str):
        raise ValidationError("Image name is required and must be a string", "INVALID_IMAGE_NAME")

    trimmed = image_name.strip()
    if not trimmed:
        raise ValidationError("Image name cannot be empty", "INVALID_IMAGE_NAME")

    name_without_tag = trimmed.split(":")[0]

    if "." in name_without_tag or _PORT.search(name_without_tag):
        raise ValidationError(
            "Registry host not supported, use Docker Hub image names only",
            "INVALID_IMAGE_NAME",
        )

    parts = name_without_tag.split("/")
    if len(parts) > 2:
        raise ValidationError(
            "Invalid image name format. Use: [namespace/]name", "INVALID_IMAGE_NAME"
        )

    for part in parts:
        if not _NAME_PART.match(part):
            raise ValidationError(
                "Image name parts must start and end with lowercase letters or numbers, "
                "and can contain dots, underscores, and hyphens. "
                'Example: "nginx" or "library/postgres"',
                "INVALID_IMAGE_NAME",
            )
        if len(part) < 2 or len(part) > 255:
            raise ValidationError(
                "Image name parts must be between 2 and 255 characters. "
                'Example: "db" (2 chars) or "very-long-service-name" (longer)',
                "INVALID_IMAGE_NAME",
            )
        if _REPEATED_SEPARATORS.search(part):
            raise ValidationError(
                "Image name cannot contain consecutive dots, underscores, or hyphens. "
                'Example: use "my-app" not "my--app"',
                "INVALID_IMAGE_NAME",
            )


def validate_tag(tag: Any) -> None:
    if not tag or not isinstance(tag, str):
        raise ValidationError("Tag must be a string", "INVALID_TAG")

    trimmed = tag.strip()
    if not trimmed:
        raise ValidationError("Tag cannot be empty", "INVALID_TAG")
    if len(trimmed) > MAX_TAG_LENGTH:
        raise ValidationError(f"Tag cannot exceed {MAX_TAG_LENGTH} characters", "INVALID_TAG")
    if not _TAG.match(trimmed):
        raise ValidationError(
            "Tag must start with alphanumeric character and can contain letters, "
            "numbers, dots, dashes, and underscores",
            "INVALID_TAG",
        )


def validate_search_query(query: Any) -> None:
    if not query or not isinstance(query, str):
        raise ValidationError("Search query is required and must be a string", "INVALID_SEARCH_QUERY")

    trimmed = query.strip()
    if not trimmed:
        raise ValidationError("Search query cannot be empty", "INVALID_SEARCH_QUERY")
    if len(trimmed) > MAX_QUERY_LENGTH:
        raise ValidationError(
            f"Search query cannot exceed {MAX_QUERY_LENGTH} characters", "INVALID_SEARCH_QUERY"
        )


def validate_limit(limit: Any) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or not MIN_LIMIT <= limit <= MAX_LIMIT:
        raise ValidationError(
            f"Limit must be an integer between {MIN_LIMIT} and {MAX_LIMIT}", "INVALID_LIMIT"
        )


def validate_score(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
        raise ValidationError(
            f"{name} must be a number between 0 and 1. Example: 0.8", "INVALID_SCORE"
        )


def parse_image_name(full_name: str) -> tuple[str, str]:
    """Split ``[namespace/]name[:tag]`` into (namespace, name).

    Official images have no namespace on the command line; Docker Hub
    files them under ``library``.
    """
    validate_image_name(full_name)

    parts = full_name.strip().split(":")[0].split("/")
    if len(parts) == 1:
        return "library", parts[0]
    return parts[0], parts[1]


# -----------------------------------------------------------------------------
# Tool argument checks
# -----------------------------------------------------------------------------
def _require_object(args: Any) -> dict:
    if not args or not isinstance(args, dict):
        raise ValidationError(
            'Arguments must be an object with required parameters. Example: { "package_name": "nginx" }'
        )
    return args


def _check_bool(params: dict, key: str) -> Optional[bool]:
    value = params.get(key)
    if value is not None and not isinstance(value, bool):
        raise ValidationError(f"{key} must be a boolean value (true or false)")
    return value


def _require_package_name(params: dict) -> str:
    package_name = params.get("package_name")
    if not package_name or not isinstance(package_name, str):
        raise ValidationError(
            'package_name is required and must be a string. Example: "nginx" or "library/postgres"'
        )
    return package_name


def validate_readme_params(args: Any) -> dict:
    params = _require_object(args)
    result = {"package_name": _require_package_name(params)}

    version = params.get("version")
    if version is not None:
        if not isinstance(version, str):
            raise ValidationError('version must be a string. Example: "latest", "1.0.0", or "alpine"')
        result["version"] = version

    include_examples = _check_bool(params, "include_examples")
    if include_examples is not None:
        result["include_examples"] = include_examples

    return result


def validate_info_params(args: Any) -> dict:
    params = _require_object(args)
    result = {"package_name": _require_package_name(params)}

    for key in ("include_dependencies", "include_dev_dependencies"):
        value = _check_bool(params, key)
        if value is not None:
            result[key] = value

    return result


def validate_search_params(args: Any) -> dict:
    params = _require_object(args)

    query = params.get("query")
    if not query or not isinstance(query, str):
        raise ValidationError(
            'query is required and must be a string. Example: "nginx", "database", or "python"'
        )
    result = {"query": query}

    limit = params.get("limit")
    if limit is not None:
        if isinstance(limit, bool) or not isinstance(limit, (int, float)) or not MIN_LIMIT <= limit <= MAX_LIMIT:
            raise ValidationError(
                f"limit must be a number between {MIN_LIMIT} and {MAX_LIMIT}. Example: 20 (default) or 50"
            )
        result["limit"] = limit

    for key, example in (("quality", "0.8 for high quality results"),
                         ("popularity", "0.5 for moderately popular images")):
        value = params.get(key)
        if value is not None:
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
                raise ValidationError(f"{key} must be a number between 0 and 1. Example: {example}")
            result[key] = value

    for key in ("is_official", "is_automated"):
        value = _check_bool(params, key)
        if value is not None:
            result[key] = value

    return result
