# === NAVMAP v1 ===
# {
#   "module": "IsoCatalog.Aggregation.net.limits",
#   "purpose": "Global and per-host permit pools bounding in-flight requests",
#   "sections": [
#     {
#       "id": "host-key",
#       "name": "host_key",
#       "anchor": "function-host-key",
#       "kind": "function"
#     },
#     {
#       "id": "permitpool",
#       "name": "PermitPool",
#       "anchor": "class-permitpool",
#       "kind": "class"
#     },
#     {
#       "id": "governor",
#       "name": "Governor",
#       "anchor": "class-governor",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Admission control for outbound requests.

**Design:**

One global pool caps every in-flight request in the process; a static map of
host pools adds a tighter cap for hosts known to throttle:

    governor = Governor(global_limit=150, host_limits={"sourceforge.net": 5})

    async with governor.permits("https://sourceforge.net/projects/x/files/"):
        ...  # at most 5 of these, and at most 150 requests overall

The host pool (if any) is taken first, then the global pool, so a request
queued behind a throttled host never holds a global permit while it waits.
Both permits are released on every exit path exactly once.

Exhaustion is backpressure: callers suspend until a permit frees up. Only a
closed pool (shutdown) fails acquisition, with :class:`PoolClosedError`.

Pools are built once from configuration and never resized at runtime.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncIterator, Dict, Mapping, Optional

import httpx

from ..errors import PoolClosedError

__all__ = ["PermitPool", "Governor", "host_key"]

logger = logging.getLogger(__name__)


def host_key(url: str) -> Optional[str]:
    """Extract the lower-cased host name used to look up a host pool.

    Args:
        url: Full URL (e.g., "https://SourceForge.net:443/projects/x")

    Returns:
        Host key (e.g., "sourceforge.net"), or ``None`` when the URL cannot be
        parsed or has no host.
    """
    try:
        host = httpx.URL(url).host
    except (httpx.InvalidURL, TypeError, ValueError):
        return None
    return host.lower() or None


class PermitPool:
    """Counting admission pool with in-flight instrumentation.

    ``in_flight`` is the number of permits currently held; ``peak`` is the
    highest value it has reached since construction.
    """

    def __init__(self, name: str, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Pool capacity must be >= 1, got {capacity}")
        self.name = name
        self.capacity = capacity
        self.in_flight = 0
        self.peak = 0
        self._semaphore = asyncio.Semaphore(capacity)
        self._closed = False
        self._waiters: set[asyncio.Future] = set()

    @property
    def closed(self) -> bool:
        return self._closed

    async def _wait(self) -> None:
        if not self._semaphore.locked():
            await self._semaphore.acquire()
            return
        # Blocked waiters are tracked so close() can wake them with PoolClosedError.
        waiter = asyncio.ensure_future(self._semaphore.acquire())
        self._waiters.add(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                self._semaphore.release()
            raise
        finally:
            self._waiters.discard(waiter)

    @contextlib.asynccontextmanager
    async def acquire(self) -> AsyncIterator[None]:
        """Hold one permit for the duration of the ``async with`` block.

        Raises:
            PoolClosedError: If the pool is closed before or while waiting.
        """
        if self._closed:
            raise PoolClosedError(self.name)
        try:
            await self._wait()
        except asyncio.CancelledError:
            if self._closed:
                raise PoolClosedError(self.name) from None
            raise

        # A permit granted before close() is honoured; holders release normally.
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            yield
        finally:
            self.in_flight -= 1
            self._semaphore.release()

    def close(self) -> None:
        """Refuse further acquisitions and fail every pending waiter."""
        if self._closed:
            return
        self._closed = True
        for waiter in list(self._waiters):
            waiter.cancel()
        logger.debug("Permit pool %s closed (in_flight=%d)", self.name, self.in_flight)

    def __repr__(self) -> str:
        return (
            f"PermitPool(name={self.name!r}, capacity={self.capacity}, "
            f"in_flight={self.in_flight}, peak={self.peak}, closed={self._closed})"
        )


class Governor:
    """Owns the global pool and the static host→pool map.

    Example:
        >>> governor = Governor(global_limit=2, host_limits={"sourceforge.net": 1})
        >>> governor.host_pool("https://sourceforge.net/x").capacity
        1
        >>> governor.host_pool("https://example.org/x") is None
        True
    """

    def __init__(self, global_limit: int, host_limits: Optional[Mapping[str, int]] = None) -> None:
        self.global_pool = PermitPool("global", global_limit)
        self.host_pools: Dict[str, PermitPool] = {
            host.lower(): PermitPool(host.lower(), limit)
            for host, limit in (host_limits or {}).items()
        }
        logger.debug(
            "Governor initialized: global_limit=%d, host_limits=%s",
            global_limit,
            {host: pool.capacity for host, pool in self.host_pools.items()},
        )

    def host_pool(self, url: str) -> Optional[PermitPool]:
        """Return the override pool registered for the URL's host, if any."""
        key = host_key(url)
        if key is None:
            return None
        return self.host_pools.get(key)

    @contextlib.asynccontextmanager
    async def permits(self, url: str) -> AsyncIterator[None]:
        """Hold the host permit (if registered) and then the global permit."""
        async with contextlib.AsyncExitStack() as stack:
            pool = self.host_pool(url)
            if pool is not None:
                await stack.enter_async_context(pool.acquire())
            await stack.enter_async_context(self.global_pool.acquire())
            yield

    @property
    def closed(self) -> bool:
        return self.global_pool.closed

    def close(self) -> None:
        """Close every pool; in-flight holders still release normally."""
        for pool in self.host_pools.values():
            pool.close()
        self.global_pool.close()
