"""
Network layer for catalog aggregation.

Architecture:
- One explicitly constructed HTTPX async client per HttpAccess instance
- Global and per-host permit pools (Governor) bounding in-flight requests
- Tenacity retries for transport errors and 5xx responses
- Fetch failures surface as ``None``, never as exceptions
"""

from .client import HttpAccess, ProbeResult, build_async_client
from .limits import Governor, PermitPool, host_key

__all__ = [
    "HttpAccess",
    "ProbeResult",
    "build_async_client",
    "Governor",
    "PermitPool",
    "host_key",
]
