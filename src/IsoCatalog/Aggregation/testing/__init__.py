"""Testing helpers for the aggregation core.

Provides a scripted HTTPX transport and a factory for :class:`HttpAccess`
instances wired to it, so tests and local experiments exercise the real
retry, admission-control and validation code without touching the network.

    transport = ScriptedTransport()
    transport.add("https://mirror.example/a.iso", 200)
    transport.add("https://mirror.example/b.iso", 503, 503, 200)
    transport.add("https://down.example/c.iso", httpx.ConnectError("refused"))

    async with build_test_access(transport) as access:
        assert await access.fetch_text("https://mirror.example/a.iso") == "ok"
"""

from __future__ import annotations

import asyncio
from collections import Counter, defaultdict, deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Mapping, Optional, Union

import httpx

from ..config.models import AggregationConfig
from ..net.client import HttpAccess

__all__ = ["ScriptedResponse", "ScriptedTransport", "build_test_access", "no_sleep"]


@dataclass(frozen=True)
class ScriptedResponse:
    """Response template served by :class:`ScriptedTransport`."""

    status: int = 200
    body: Union[str, bytes] = "ok"
    headers: Mapping[str, str] = field(default_factory=dict)

    def build(self, request: httpx.Request) -> httpx.Response:
        content = self.body.encode("utf-8") if isinstance(self.body, str) else self.body
        return httpx.Response(
            self.status, headers=dict(self.headers), content=content, request=request
        )


Step = Union[ScriptedResponse, BaseException]


class ScriptedTransport(httpx.AsyncBaseTransport):
    """Async transport replaying per-URL scripts.

    Each URL has a queue of steps (responses or exceptions). Steps are served
    in order; the last step repeats once the queue is down to one entry.
    Unscripted URLs answer 404.

    Instrumentation:
        ``requests``: URLs in the order they were received.
        ``calls``: per-URL request counts.
        ``peak_in_flight`` / ``peak_by_host``: highest concurrent requests
        observed overall and per host.
    """

    def __init__(self, *, delay_s: float = 0.0) -> None:
        self.delay_s = delay_s
        self._scripts: Dict[str, Deque[Step]] = {}
        self.requests: List[str] = []
        self.calls: Counter[str] = Counter()
        self.in_flight = 0
        self.peak_in_flight = 0
        self._in_flight_by_host: Counter[str] = Counter()
        self.peak_by_host: Dict[str, int] = defaultdict(int)

    def add(self, url: str, *steps: Union[int, str, ScriptedResponse, BaseException]) -> None:
        """Script ``url``. Ints are statuses with body ``"ok"``; strings are 200 bodies."""
        queue: Deque[Step] = deque()
        for step in steps or (200,):
            if isinstance(step, bool):
                raise TypeError("Scripted steps must be statuses, bodies, responses or exceptions")
            if isinstance(step, int):
                queue.append(ScriptedResponse(status=step))
            elif isinstance(step, str):
                queue.append(ScriptedResponse(status=200, body=step))
            else:
                queue.append(step)
        self._scripts[url] = queue

    def _next_step(self, url: str) -> Step:
        queue = self._scripts.get(url)
        if not queue:
            return ScriptedResponse(status=404, body="")
        if len(queue) > 1:
            return queue.popleft()
        return queue[0]

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        host = request.url.host
        self.requests.append(url)
        self.calls[url] += 1

        self.in_flight += 1
        self._in_flight_by_host[host] += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        self.peak_by_host[host] = max(self.peak_by_host[host], self._in_flight_by_host[host])
        try:
            # Yield even without a delay so concurrent requests overlap.
            await asyncio.sleep(self.delay_s)
            step = self._next_step(url)
            if isinstance(step, BaseException):
                raise step
            return step.build(request)
        finally:
            self.in_flight -= 1
            self._in_flight_by_host[host] -= 1


async def no_sleep(_seconds: float) -> None:
    """Backoff replacement that returns immediately."""
    return None


def build_test_access(
    transport: httpx.AsyncBaseTransport,
    config: Optional[AggregationConfig] = None,
    **overrides: Any,
) -> HttpAccess:
    """Build an :class:`HttpAccess` on ``transport`` with backoff sleeps disabled.

    Keyword overrides are merged into the config (e.g.
    ``concurrency={"global_limit": 2}``).
    """
    config = config or AggregationConfig()
    if overrides:
        data = config.model_dump()
        for key, value in overrides.items():
            if isinstance(value, Mapping) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        config = AggregationConfig.model_validate(data)
    return HttpAccess.from_config(config, transport=transport, sleep=no_sleep)
