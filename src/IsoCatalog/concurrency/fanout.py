# === NAVMAP v1 ===
# {
#   "module": "IsoCatalog.concurrency.fanout",
#   "purpose": "Fan-out/flatten combinator for nested concurrent fetches.",
#   "sections": [
#     {
#       "id": "flatten",
#       "name": "flatten",
#       "anchor": "function-flatten",
#       "kind": "function"
#     },
#     {
#       "id": "fan-out",
#       "name": "fan_out",
#       "anchor": "function-fan-out",
#       "kind": "function"
#     },
#     {
#       "id": "fan-out-flat",
#       "name": "fan_out_flat",
#       "anchor": "function-fan-out-flat",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Fan-out/flatten combinator for nested concurrent fetches.

Source generators compose recursive lookups (index page → release page → file
page) by handing each level's awaitables to :func:`fan_out_flat`. The
combinator schedules every unit, waits for all of them, and splices the
results back together in input order:

    async def release_configs(release):
        page = await access.fetch_text(release.url)
        if page is None:
            return None
        return [config_for(match) for match in PATTERN.finditer(page)]

    configs = await fan_out_flat((release_configs(r) for r in releases), depth=1)

A unit that raises is logged and treated as ``None``; it never aborts its
siblings. Results are returned in batch once every unit has completed.

``limit`` bounds how many units of one fan-out run at the same time. HTTP
calls are governed separately by the access layer's permit pools; the limit
protects a single slow upstream from internal over-fanout.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Iterable, List, Optional, TypeVar

__all__ = ["flatten", "fan_out", "fan_out_flat"]

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def _splice(values: Iterable[Any]) -> List[Any]:
    out: List[Any] = []
    for value in values:
        if value is None:
            continue
        if isinstance(value, list):
            out.extend(value)
        else:
            out.append(value)
    return out


def flatten(values: Iterable[Any], depth: int) -> List[Any]:
    """Collapse ``depth`` levels of optional/list wrappers into one list.

    At every level ``None`` is dropped, lists are spliced in place and any
    other item (tuples included) is kept as a single element. Levels beyond
    the actual nesting are no-ops. Order is preserved both across and within
    the spliced items.

    Args:
        values: Outer sequence, typically the per-unit results of a fan-out.
        depth: Number of wrapper levels to remove. ``0`` returns the values
            unchanged.

    Returns:
        Flat list of the surviving items.

    Raises:
        ValueError: If ``depth`` is negative.

    Example:
        >>> flatten([[1, 2], None, []], 1)
        [1, 2]
        >>> flatten([[[1], None], None, [[2, 3]]], 2)
        [1, 2, 3]
    """
    if depth < 0:
        raise ValueError(f"depth must be >= 0, got {depth}")
    current = list(values)
    for _ in range(depth):
        current = _splice(current)
    return current


async def _bounded(unit: Awaitable[T], semaphore: asyncio.Semaphore) -> T:
    async with semaphore:
        return await unit


async def fan_out(
    units: Iterable[Awaitable[T]],
    *,
    limit: Optional[int] = None,
) -> List[Optional[T]]:
    """Run every unit concurrently and return results aligned with the input.

    Args:
        units: Awaitables to schedule. The iterable is consumed eagerly.
        limit: Optional ceiling on concurrently running units.

    Returns:
        One entry per unit, in input order. Units that raised contribute
        ``None``.

    Raises:
        ValueError: If ``limit`` is smaller than 1.
    """
    if limit is not None and limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    pending = list(units)
    if not pending:
        return []
    if limit is not None:
        semaphore = asyncio.Semaphore(limit)
        pending = [_bounded(unit, semaphore) for unit in pending]

    outcomes = await asyncio.gather(*pending, return_exceptions=True)

    results: List[Optional[T]] = []
    for index, outcome in enumerate(outcomes):
        if isinstance(outcome, Exception):
            LOGGER.error(
                "Fan-out unit %d failed: %s",
                index,
                outcome,
                exc_info=(type(outcome), outcome, outcome.__traceback__),
            )
            results.append(None)
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results.append(outcome)
    return results


async def fan_out_flat(
    units: Iterable[Awaitable[Any]],
    *,
    depth: int = 1,
    limit: Optional[int] = None,
) -> List[Any]:
    """Run every unit, then :func:`flatten` the aligned results ``depth`` levels."""
    if depth < 0:
        raise ValueError(f"depth must be >= 0, got {depth}")
    return flatten(await fan_out(units, limit=limit), depth)
