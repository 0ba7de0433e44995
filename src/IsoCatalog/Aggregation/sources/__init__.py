"""
Source generators: the pluggable per-site half of catalog aggregation.

Each generator subclasses :class:`SourceGenerator`, parses its own site, and is
registered with :func:`register_source` (or advertised through the
``isocatalog.sources`` entry-point group). Shared parsing helpers live beside
the registry: checksum listings and the GitHub releases API.
"""

from .base import SourceGenerator
from .checksums import ChecksumStyle, fetch_checksums, first_token, parse_checksums
from .github import GithubAsset, GithubRelease, fetch_github_releases
from .registry import (
    ENTRY_POINT_GROUP,
    build_sources,
    get_registry,
    get_source_class,
    load_source_plugins,
    register_source,
    unregister_source,
)

__all__ = [
    "SourceGenerator",
    "ChecksumStyle",
    "parse_checksums",
    "fetch_checksums",
    "first_token",
    "GithubAsset",
    "GithubRelease",
    "fetch_github_releases",
    "ENTRY_POINT_GROUP",
    "register_source",
    "unregister_source",
    "get_registry",
    "get_source_class",
    "load_source_plugins",
    "build_sources",
]
