# === NAVMAP v1 ===
# {
#   "module": "IsoCatalog.Aggregation.validation",
#   "purpose": "Link-liveness validation for candidate records.",
#   "sections": [
#     {
#       "id": "check-url",
#       "name": "check_url",
#       "anchor": "function-check-url",
#       "kind": "function"
#     },
#     {
#       "id": "all-valid",
#       "name": "all_valid",
#       "anchor": "function-all-valid",
#       "kind": "function"
#     },
#     {
#       "id": "validate-records",
#       "name": "validate_records",
#       "anchor": "function-validate-records",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Link-liveness validation for candidate records.

A record is published only if every network URL it references answers with a
success status, or with 429: a throttling host almost certainly still serves
the file, so rate limiting is accepted here even though a content fetch would
treat it as a failure. Container references are not probed.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from IsoCatalog.concurrency import fan_out

from .errors import FetchFailure, log_fetch_failure
from .models import CandidateRecord
from .net.client import HttpAccess

__all__ = ["check_url", "all_valid", "validate_record", "validate_records"]

LOGGER = logging.getLogger(__name__)


async def check_url(access: HttpAccess, url: str) -> bool:
    """Probe ``url`` and report whether it counts as live."""
    result = await access.probe(url)
    if result.ok:
        return True
    log_fetch_failure(
        result.failure or FetchFailure.HTTP_STATUS,
        url,
        operation="probe",
        status=result.status,
        detail=result.error,
        logger=LOGGER,
    )
    return False


async def all_valid(
    access: HttpAccess,
    urls: Iterable[str],
    *,
    limit: Optional[int] = None,
) -> bool:
    """Return True iff every URL is live. An empty set is trivially valid."""
    unique = list(dict.fromkeys(urls))
    if not unique:
        return True
    results = await fan_out((check_url(access, url) for url in unique), limit=limit)
    return all(result is True for result in results)


async def validate_record(access: HttpAccess, record: CandidateRecord) -> bool:
    """Validate every network URL referenced by ``record``."""
    return await all_valid(access, record.network_urls())


async def validate_records(
    access: HttpAccess,
    records: Sequence[CandidateRecord],
    *,
    limit: Optional[int] = None,
) -> List[bool]:
    """Validate ``records`` concurrently; the result is aligned with the input.

    ``limit`` caps how many records are validated at once. A record whose
    validation raised counts as invalid.
    """
    results = await fan_out((validate_record(access, record) for record in records), limit=limit)
    return [result is True for result in results]
