# === NAVMAP v1 ===
# {
#   "module": "IsoCatalog.Aggregation.errors",
#   "purpose": "Failure taxonomy and exception types for catalog aggregation.",
#   "sections": [
#     {
#       "id": "fetchfailure",
#       "name": "FetchFailure",
#       "anchor": "class-fetchfailure",
#       "kind": "class"
#     },
#     {
#       "id": "aggregationerror",
#       "name": "AggregationError",
#       "anchor": "class-aggregationerror",
#       "kind": "class"
#     },
#     {
#       "id": "log-fetch-failure",
#       "name": "log_fetch_failure",
#       "anchor": "function-log-fetch-failure",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Failure taxonomy and exception types for catalog aggregation.

Responsibilities
----------------
- Name every way a fetch can fail (:class:`FetchFailure`) so log lines and
  summaries use one vocabulary.
- Define the few exceptions that cross module boundaries. Fetch failures are
  not exceptions: the access layer returns ``None`` and callers treat that as
  "unconfirmed", discarding only the affected item.
- Centralise failure logging in :func:`log_fetch_failure` so the level matches
  the failure class (transport errors at ERROR, failing statuses at WARNING).
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

__all__ = (
    "FetchFailure",
    "AggregationError",
    "PoolClosedError",
    "SourceLookupError",
    "ConfigError",
    "log_fetch_failure",
)

LOGGER = logging.getLogger(__name__)


class FetchFailure(str, Enum):
    """Reason a fetch or probe produced no usable result."""

    MALFORMED_URL = "malformed-url"
    TRANSPORT_ERROR = "transport-error"
    HTTP_STATUS = "http-status"
    RATE_LIMITED = "rate-limited"
    EMPTY_BODY = "empty-body"
    POOL_CLOSED = "pool-closed"
    DECODE_ERROR = "decode-error"


class AggregationError(Exception):
    """Base class for aggregation errors."""


class PoolClosedError(AggregationError):
    """Raised when a permit is requested from a pool that has been closed."""

    def __init__(self, pool: str) -> None:
        super().__init__(f"Permit pool {pool!r} is closed")
        self.pool = pool


class SourceLookupError(AggregationError, LookupError):
    """Raised when a source name is not present in the registry."""


class ConfigError(AggregationError, ValueError):
    """Raised when configuration cannot be loaded or validated."""


_LEVELS = {
    FetchFailure.TRANSPORT_ERROR: logging.ERROR,
    FetchFailure.POOL_CLOSED: logging.ERROR,
    FetchFailure.MALFORMED_URL: logging.WARNING,
    FetchFailure.HTTP_STATUS: logging.WARNING,
    FetchFailure.RATE_LIMITED: logging.WARNING,
    FetchFailure.EMPTY_BODY: logging.WARNING,
    FetchFailure.DECODE_ERROR: logging.WARNING,
}


def log_fetch_failure(
    failure: FetchFailure,
    url: str,
    *,
    operation: str = "fetch",
    status: Optional[int] = None,
    detail: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log a failed fetch or probe at the level its failure class calls for."""
    log = logger or LOGGER
    parts = [f"{operation} failed for {url}: {failure.value}"]
    if status is not None:
        parts.append(f"status={status}")
    if detail:
        parts.append(detail)
    log.log(
        _LEVELS.get(failure, logging.WARNING),
        " ".join(parts),
        extra={"extra_fields": {"url": url, "failure": failure.value, "status": status}},
    )
