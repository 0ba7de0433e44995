"""Tenacity retry strategies and classification for the access layer.

Provides:
- Retryability classification (transport errors and 5xx only)
- Async Tenacity controller builder with exponential backoff
- Structured logging before each backoff sleep

Rate-limited (429) and other 4xx responses are final on the first attempt.
When the attempt budget runs out on a 5xx response the last response is
returned to the caller instead of an exception, so status handling stays in
one place; a transport error on the last attempt is re-raised.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import httpx
import tenacity
from tenacity import RetryCallState, retry_if_exception, retry_if_result

from IsoCatalog.Aggregation.config.models import RetryPolicy

LOGGER = logging.getLogger(__name__)


def is_retryable(
    *,
    status: Optional[int] = None,
    exception: Optional[BaseException] = None,
) -> bool:
    """Determine if an attempt should be retried.

    Args:
        status: HTTP status code (if the attempt produced a response)
        exception: Exception raised by the attempt (if any)

    Returns:
        True for server errors (5xx) and httpx transport errors, False otherwise
    """
    if status is not None:
        return 500 <= status < 600
    if exception is not None:
        return isinstance(exception, httpx.TransportError)
    return False


def _retry_on_exception(exception: BaseException) -> bool:
    return is_retryable(exception=exception)


def _retry_on_result(value: Any) -> bool:
    status = getattr(value, "status_code", None)
    if status is None:
        return False
    return is_retryable(status=status)


def _return_last_outcome(retry_state: RetryCallState) -> Any:
    # Returns the final 5xx response, or re-raises the final transport error.
    assert retry_state.outcome is not None
    return retry_state.outcome.result()


def build_async_retrying(
    policy: RetryPolicy,
    *,
    before_sleep_hook: Optional[Callable[[RetryCallState], None]] = None,
    sleep: Optional[Callable[[float], Any]] = None,
) -> tenacity.AsyncRetrying:
    """Build an async Tenacity controller for one request.

    Args:
        policy: Retry policy (attempt budget and backoff)
        before_sleep_hook: Optional hook to run before each sleep
        sleep: Optional async sleep override (tests pass a no-op)

    Returns:
        Configured :class:`tenacity.AsyncRetrying` controller
    """
    kwargs: dict[str, Any] = {}
    if sleep is not None:
        kwargs["sleep"] = sleep
    return tenacity.AsyncRetrying(
        retry=retry_if_exception(_retry_on_exception) | retry_if_result(_retry_on_result),
        stop=tenacity.stop_after_attempt(policy.max_attempts),
        wait=tenacity.wait_exponential(multiplier=policy.backoff_base_s, max=policy.backoff_max_s),
        before_sleep=before_sleep_hook or _default_before_sleep_hook,
        retry_error_callback=_return_last_outcome,
        **kwargs,
    )


def _default_before_sleep_hook(retry_state: RetryCallState) -> None:
    """Log the failed attempt and the upcoming backoff."""
    outcome = retry_state.outcome
    if outcome is None:
        return
    if outcome.failed:
        reason = repr(outcome.exception())
    else:
        reason = f"status={getattr(outcome.result(), 'status_code', '?')}"
    wait_s = retry_state.next_action.sleep if retry_state.next_action is not None else 0.0
    LOGGER.warning(
        "retry attempt=%d wait_ms=%d reason=%s",
        retry_state.attempt_number,
        int(wait_s * 1000),
        reason,
    )
