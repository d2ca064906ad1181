# =============================================================================
# core/errors.py  —  Error Taxonomy & HTTP Error Mapping
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Defines every exception the system raises and the ONE place where raw
#   failures (HTTP status codes, transport errors) are turned into them.
#
# THE CLOSED CLASSIFICATION:
#   Every error is tagged with an ErrorKind at the moment it is raised.
#   The retry engine (core/retry.py) switches on that finite enum instead
#   of sniffing messages or status codes:
#
#     ErrorKind          Retried?   Raised for
#     ---------------    --------   -----------------------------------
#     NOT_FOUND          no         404, unknown image/tag
#     CLIENT_ERROR       no         other 4xx, bad tool arguments
#     RATE_LIMITED       yes        429 (may carry a retry-after hint)
#     SERVER_ERROR       yes        500/502/503/504
#     NETWORK_FAILURE    yes        DNS, connection refused, timeouts
#     UNKNOWN            yes        anything else (re-raised unchanged)
# =============================================================================

import enum
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    CLIENT_ERROR = "client_error"
    NETWORK_FAILURE = "network_failure"
    UNKNOWN = "unknown"


# Kinds that must fail fast: retrying cannot change the answer.
NON_RETRYABLE_KINDS = frozenset({ErrorKind.NOT_FOUND, ErrorKind.CLIENT_ERROR})

SERVER_ERROR_STATUSES = frozenset({500, 502, 503, 504})


def kind_for_status(status_code: Optional[int]) -> ErrorKind:
    """Map an HTTP status code to its ErrorKind."""
    if status_code is None:
        return ErrorKind.UNKNOWN
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code >= 500:
        return ErrorKind.SERVER_ERROR
    if 400 <= status_code < 500:
        return ErrorKind.CLIENT_ERROR
    return ErrorKind.UNKNOWN


# -----------------------------------------------------------------------------
# Exception hierarchy
# -----------------------------------------------------------------------------
class DockerHubMcpError(Exception):
    """Base error: a machine-readable code plus a human message.

    Subclasses pin their ``kind``; a bare DockerHubMcpError derives it
    from the upstream status code (if any).
    """

    default_kind: Optional[ErrorKind] = None

    def __init__(
        self,
        message: str,
        code: str,
        status_code: Optional[int] = None,
        details: Optional[object] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        self.kind = self.default_kind or kind_for_status(status_code)

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "code": self.code,
            "kind": self.kind.value,
            "status_code": self.status_code,
        }


class ValidationError(DockerHubMcpError):
    """Bad tool input.  Surfaced immediately, never retried."""

    default_kind = ErrorKind.CLIENT_ERROR

    def __init__(self, message: str, code: str = "INVALID_PARAMS"):
        super().__init__(message, code)


class ImageNotFoundError(DockerHubMcpError):
    default_kind = ErrorKind.NOT_FOUND

    def __init__(self, image_name: str):
        super().__init__(f"Docker image '{image_name}' not found", "IMAGE_NOT_FOUND", 404)
        self.image_name = image_name


class TagNotFoundError(DockerHubMcpError):
    default_kind = ErrorKind.NOT_FOUND

    def __init__(self, image_name: str, tag: str):
        super().__init__(
            f"Tag '{tag}' of image '{image_name}' not found", "TAG_NOT_FOUND", 404
        )
        self.image_name = image_name
        self.tag = tag


class RateLimitError(DockerHubMcpError):
    """429 from upstream.  ``retry_after`` is in seconds when the server sent one."""

    default_kind = ErrorKind.RATE_LIMITED

    def __init__(self, service: str, retry_after: Optional[int] = None):
        super().__init__(
            f"Rate limit exceeded for {service}",
            "RATE_LIMIT_EXCEEDED",
            429,
            {"retry_after": retry_after},
        )
        self.retry_after = retry_after


class NetworkError(DockerHubMcpError):
    default_kind = ErrorKind.NETWORK_FAILURE

    def __init__(self, message: str, original: Optional[BaseException] = None):
        super().__init__(f"Network error: {message}", "NETWORK_ERROR", None, original)
        self.original = original


class ServerError(DockerHubMcpError):
    default_kind = ErrorKind.SERVER_ERROR

    def __init__(self, context: str, status_code: int, service: str = "Docker Hub"):
        super().__init__(
            f"{service} server error ({status_code}) for {context}",
            "SERVER_ERROR",
            status_code,
        )


# -----------------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ClassifiedError:
    """The retry engine's view of a failure.  Built on demand, never stored."""

    kind: ErrorKind
    status_code: Optional[int] = None
    retry_after: Optional[int] = None

    @property
    def retryable(self) -> bool:
        return self.kind not in NON_RETRYABLE_KINDS


def classify_error(error: BaseException) -> ClassifiedError:
    """Tag a raised exception with its ErrorKind."""
    if isinstance(error, DockerHubMcpError):
        return ClassifiedError(
            kind=error.kind,
            status_code=error.status_code,
            retry_after=getattr(error, "retry_after", None),
        )
    if isinstance(error, (httpx.TransportError, TimeoutError, ConnectionError)):
        return ClassifiedError(kind=ErrorKind.NETWORK_FAILURE)
    return ClassifiedError(kind=ErrorKind.UNKNOWN)


# -----------------------------------------------------------------------------
# Boundary mapping: HTTP status → domain error
# -----------------------------------------------------------------------------
def _parse_retry_after(response: Optional[httpx.Response]) -> Optional[int]:
    if response is None:
        return None
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        # HTTP-date form is not supported; fall back to exponential backoff.
        return None


def handle_http_error(
    status_code: int,
    response: Optional[httpx.Response],
    context: str,
    service: str = "Docker Hub",
) -> None:
    """Raise the domain error for a non-2xx status.  No-op for 2xx.

    ``service`` names the upstream in server-error messages.  Callers for
    which a 404 is not a missing image handle 404 before calling this.
    """
    if 200 <= status_code < 300:
        return

    if status_code == 404:
        raise ImageNotFoundError(context)

    if status_code == 429:
        raise RateLimitError(context, _parse_retry_after(response))

    if status_code in SERVER_ERROR_STATUSES:
        raise ServerError(context, status_code, service)

    reason = response.reason_phrase if response is not None else ""
    message = f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}"
    raise DockerHubMcpError(f"{message} ({context})", "HTTP_ERROR", status_code)


def handle_api_error(error: BaseException, context: str) -> None:
    """Log ``error`` and re-raise it as a domain error.  Always raises."""
    if isinstance(error, DockerHubMcpError):
        logger.error(
            "%s: %s", context, error.message,
            extra={"code": error.code, "details": error.details},
        )
        raise error

    if isinstance(error, httpx.TimeoutException):
        logger.error("Request timeout in %s", context, extra={"original_error": str(error)})
        raise NetworkError(f"Request timeout in {context}", error) from error

    if isinstance(error, (httpx.ConnectError, ConnectionError)):
        logger.error("Connection failed in %s", context, extra={"original_error": str(error)})
        raise NetworkError(f"Connection failed in {context}", error) from error

    logger.error("Unexpected error in %s: %s", context, error, exc_info=error)
    raise DockerHubMcpError(
        f"Unexpected error in {context}: {error}", "UNEXPECTED_ERROR", None, error
    ) from error
