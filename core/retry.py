# =============================================================================
# core/retry.py  —  Retry Engine with Exponential Backoff
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Wraps any async operation and re-invokes it when it fails with a
#   RETRYABLE error (see the table in core/errors.py).
#
# THE SCHEDULE:
#   total attempts = max_retries + 1
#   delay before retry n (n = 1, 2, 3, ...) = base_delay_ms * 2 ** (n - 1)
#     base 1000ms  →  1000ms, 2000ms, 4000ms, ...
#   A rate-limit error carrying a retry-after hint waits exactly that many
#   seconds instead.
#
# WHAT IT DOES NOT DO:
#   There is no cancellation token.  A caller that wants to give up relies
#   on the request timeout: a timed-out attempt fails as a network error
#   and is retried like any other until the attempts run out.
# =============================================================================

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from core.errors import ClassifiedError, ErrorKind, classify_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


def backoff_delay_ms(base_delay_ms: float, retry_number: int) -> float:
    """Delay before the ``retry_number``-th retry (1-based)."""
    return base_delay_ms * (2 ** (retry_number - 1))


def _delay_for(classified: ClassifiedError, base_delay_ms: float, retry_number: int) -> float:
    if classified.kind is ErrorKind.RATE_LIMITED and classified.retry_after is not None:
        return classified.retry_after * 1000
    return backoff_delay_ms(base_delay_ms, retry_number)


def _format_ms(delay_ms: float) -> str:
    return str(int(delay_ms)) if float(delay_ms).is_integer() else f"{delay_ms:g}"


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay_ms: float = 1000,
    label: str = "operation",
    *,
    sleep: Optional[Sleep] = None,
) -> T:
    """Run ``operation`` until it succeeds, fails fatally, or attempts run out.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt.
        max_retries: Retries after the first attempt (0 = single attempt).
        base_delay_ms: First backoff delay, doubled on every retry.
        label: Human name for the operation, used in log lines.
        sleep: Awaitable sleep taking seconds (defaults to asyncio.sleep).

    Returns:
        Whatever ``operation`` returns on its first successful attempt.

    Raises:
        The last exception raised by ``operation``, unchanged.
    """
    if sleep is None:
        sleep = asyncio.sleep

    total_attempts = max_retries + 1
    attempt = 0

    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as error:
            classified = classify_error(error)

            if not classified.retryable:
                logger.debug(
                    "%s failed with non-retryable %s error", label, classified.kind.value
                )
                raise

            if attempt >= total_attempts:
                logger.error(
                    "%s failed after %d attempts",
                    label,
                    attempt,
                    extra={"error_kind": classified.kind.value, "last_error": str(error)},
                )
                raise

            delay_ms = _delay_for(classified, base_delay_ms, attempt)
            reason = "rate limited" if classified.kind is ErrorKind.RATE_LIMITED else "failed"
            logger.warning(
                "%s %s, retrying in %sms (attempt %d/%d)",
                label,
                reason,
                _format_ms(delay_ms),
                attempt,
                total_attempts,
                extra={"error_kind": classified.kind.value, "error": str(error)},
            )
            await sleep(delay_ms / 1000)
