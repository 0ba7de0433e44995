"""
IsoCatalog aggregation core.

Fetches upstream release metadata through a shared, admission-controlled HTTP
access layer, confirms every download link of every candidate record, and
assembles the surviving records into per-source catalog entries.

Submodules:
    net: HTTP client, retry wiring and the concurrency governor
    validation: link liveness checks
    catalog: per-source assembly and ordering
    sources: generator base class, registry and parsing helpers
    config: pydantic configuration and its file/env/CLI loader
"""

from .models import (
    Arch,
    ArchiveFormat,
    CandidateRecord,
    ContainerSource,
    DiskImage,
    SourceCatalogEntry,
    WebSource,
)

__all__ = [
    "Arch",
    "ArchiveFormat",
    "CandidateRecord",
    "ContainerSource",
    "DiskImage",
    "SourceCatalogEntry",
    "WebSource",
]
