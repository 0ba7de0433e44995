"""
HTTP access layer shared by every source generator.

Best-effort async HTTP with:
- One explicitly constructed client per :class:`HttpAccess` (no module singleton)
- Admission control through the :class:`~.limits.Governor` permit pools
- Tenacity retries on transport errors and 5xx responses only
- Structured event hooks for per-request timing
- Absence instead of exceptions: every failure is logged and returns ``None``

Architecture:
1. HttpAccess.from_config(config) → AsyncClient + Governor
2. fetch_text(url) → parse URL → permits → GET with retry → text or None
3. probe(url) → same path, streamed GET, body never read → ProbeResult
4. fetch_json(url, model) → fetch_text + pydantic validation
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Type, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from ..config.models import AggregationConfig
from ..errors import FetchFailure, PoolClosedError, log_fetch_failure
from ..tenacity_retry import build_async_retrying
from .limits import Governor

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMITED = 429

# ============================================================================
# Probe result
# ============================================================================


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of a reachability probe."""

    url: str
    status: Optional[int] = None
    failure: Optional[FetchFailure] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True for success statuses and for rate-limited (429) responses."""
        if self.status is None:
            return False
        return 200 <= self.status < 300 or self.status == RATE_LIMITED


# ============================================================================
# Client Construction
# ============================================================================


def build_async_client(
    config: AggregationConfig,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Build a new HTTPX async client from config."""
    cfg = config.http
    timeout = httpx.Timeout(cfg.timeout_read_s, connect=cfg.timeout_connect_s)
    limits = httpx.Limits(
        max_connections=cfg.max_connections,
        max_keepalive_connections=min(cfg.max_connections, config.concurrency.global_limit),
    )
    client = httpx.AsyncClient(
        transport=transport,
        timeout=timeout,
        limits=limits,
        verify=cfg.verify_tls,
        follow_redirects=cfg.follow_redirects,
        headers={"User-Agent": cfg.user_agent, "Accept": "*/*"},
        event_hooks={"request": [_on_request], "response": [_on_response]},
    )
    logger.debug(
        "HTTPX async client created: follow_redirects=%s, max_connections=%d",
        cfg.follow_redirects,
        cfg.max_connections,
    )
    return client


# ============================================================================
# Event Hooks (Telemetry)
# ============================================================================


async def _on_request(request: httpx.Request) -> None:
    request.extensions["t0_perf"] = time.perf_counter()


async def _on_response(response: httpx.Response) -> None:
    req = response.request
    t0 = req.extensions.get("t0_perf", time.perf_counter())
    elapsed_ms = (time.perf_counter() - t0) * 1000.0
    logger.debug(
        "net.request: %s %s status=%d elapsed_ms=%.1f",
        req.method,
        req.url,
        response.status_code,
        elapsed_ms,
    )


# ============================================================================
# Access layer
# ============================================================================


def _parse_url(url: str) -> Optional[httpx.URL]:
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError, ValueError):
        return None
    if parsed.scheme not in ("http", "https") or not parsed.host:
        return None
    return parsed


class HttpAccess:
    """Process-wide HTTP access: one client, one governor, one retry policy.

    Construct once at startup and pass the instance to every component. Use it
    as an async context manager (or call :meth:`aclose`) to close the pools
    and the client.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        governor: Governor,
        config: AggregationConfig,
        *,
        sleep: Optional[Callable[[float], Any]] = None,
    ) -> None:
        self.client = client
        self.governor = governor
        self.config = config
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        config: Optional[AggregationConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Callable[[float], Any]] = None,
    ) -> "HttpAccess":
        """Build the client and permit pools described by ``config``."""
        config = config or AggregationConfig()
        governor = Governor(
            config.concurrency.global_limit,
            config.concurrency.host_limits,
        )
        client = build_async_client(config, transport=transport)
        return cls(client, governor, config, sleep=sleep)

    async def __aenter__(self) -> "HttpAccess":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the permit pools, then the underlying client."""
        self.governor.close()
        await self.client.aclose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _send(self, url: httpx.URL, *, stream: bool) -> httpx.Response:
        request = self.client.build_request("GET", url)
        response = await self.client.send(request, stream=stream)
        if stream:
            # Probes only need the status line; drop the body unread.
            await response.aclose()
        return response

    async def _request(self, url: str, *, stream: bool, operation: str) -> Optional[httpx.Response]:
        parsed = _parse_url(url)
        if parsed is None:
            log_fetch_failure(FetchFailure.MALFORMED_URL, url, operation=operation, logger=logger)
            return None

        retrying = build_async_retrying(self.config.retry, sleep=self._sleep)
        try:
            async with self.governor.permits(url):
                return await retrying(self._send, parsed, stream=stream)
        except PoolClosedError as exc:
            log_fetch_failure(
                FetchFailure.POOL_CLOSED, url, operation=operation, detail=str(exc), logger=logger
            )
        except httpx.HTTPError as exc:
            log_fetch_failure(
                FetchFailure.TRANSPORT_ERROR,
                url,
                operation=operation,
                detail=repr(exc),
                logger=logger,
            )
        return None

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def fetch_text(self, url: str) -> Optional[str]:
        """Fetch ``url`` and return its body text, or ``None`` on any failure.

        Rate-limited (429) responses are failures here; only the link
        validator treats them as acceptable.
        """
        response = await self._request(url, stream=False, operation="fetch")
        if response is None:
            return None

        status = response.status_code
        if not response.is_success:
            failure = FetchFailure.RATE_LIMITED if status == RATE_LIMITED else FetchFailure.HTTP_STATUS
            log_fetch_failure(failure, url, status=status, logger=logger)
            return None

        text = response.text
        if not text:
            log_fetch_failure(FetchFailure.EMPTY_BODY, url, status=status, logger=logger)
            return None
        return text

    async def probe(self, url: str) -> ProbeResult:
        """Check that ``url`` answers without downloading its body."""
        parsed = _parse_url(url)
        if parsed is None:
            return ProbeResult(url=url, failure=FetchFailure.MALFORMED_URL)

        retrying = build_async_retrying(self.config.retry, sleep=self._sleep)
        try:
            async with self.governor.permits(url):
                response = await retrying(self._send, parsed, stream=True)
        except PoolClosedError as exc:
            return ProbeResult(url=url, failure=FetchFailure.POOL_CLOSED, error=str(exc))
        except httpx.HTTPError as exc:
            return ProbeResult(url=url, failure=FetchFailure.TRANSPORT_ERROR, error=repr(exc))

        status = response.status_code
        if status == RATE_LIMITED:
            return ProbeResult(url=url, status=status, failure=FetchFailure.RATE_LIMITED)
        if not response.is_success:
            return ProbeResult(url=url, status=status, failure=FetchFailure.HTTP_STATUS)
        return ProbeResult(url=url, status=status)

    async def fetch_json(self, url: str, model: Type[T] | Any) -> Optional[T]:
        """Fetch ``url`` and validate its JSON body against ``model``.

        ``model`` is anything :class:`pydantic.TypeAdapter` accepts, such as a
        pydantic model or ``list[SomeModel]``.
        """
        text = await self.fetch_text(url)
        if text is None:
            return None
        try:
            return TypeAdapter(model).validate_json(text)
        except ValidationError as exc:
            log_fetch_failure(
                FetchFailure.DECODE_ERROR,
                url,
                detail=f"{exc.error_count()} validation error(s)",
                logger=logger,
            )
            return None
