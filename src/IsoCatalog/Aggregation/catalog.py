# === NAVMAP v1 ===
# {
#   "module": "IsoCatalog.Aggregation.catalog",
#   "purpose": "Catalog assembly: generate, validate, filter and order per-source entries",
#   "sections": [
#     {"id": "assemblyreport", "name": "AssemblyReport", "anchor": "#class-assemblyreport", "kind": "dataclass"},
#     {"id": "catalogassembler", "name": "CatalogAssembler", "anchor": "#class-catalogassembler", "kind": "class"},
#     {"id": "sort-catalog", "name": "sort_catalog", "anchor": "#function-sort-catalog", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Catalog assembly.

**State Machine (per source):**

    PENDING
      ↓
    GENERATING ── None / [] / exception ──→ DROPPED
      ↓
    VALIDATING ── no record survives ──→ DROPPED
      ↓
    ASSEMBLED

**State Machine (per record):**

    GENERATED → VALIDATING → RETAINED | DROPPED

Every registered source runs concurrently; records of one source are validated
concurrently. Nothing here is fatal: a failing generator or an unreachable
mirror only drops its own source or record, and :meth:`CatalogAssembler.assemble`
always returns whatever was confirmed.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from IsoCatalog.concurrency import fan_out

from .models import CandidateRecord, SourceCatalogEntry
from .net.client import HttpAccess
from .sources.base import SourceGenerator
from .validation import validate_records

__all__ = ["AssemblyReport", "CatalogAssembler", "sort_catalog"]

LOGGER = logging.getLogger(__name__)


@dataclass
class AssemblyReport:
    """Counters describing one assembly run."""

    sources_total: int = 0
    sources_assembled: int = 0
    sources_dropped: int = 0
    records_generated: int = 0
    records_retained: int = 0
    records_dropped: int = 0

    def summary(self) -> str:
        return (
            f"sources: {self.sources_assembled}/{self.sources_total} assembled "
            f"({self.sources_dropped} dropped); records: {self.records_retained}/"
            f"{self.records_generated} retained ({self.records_dropped} dropped)"
        )


class CatalogAssembler:
    """Turns source generators into validated catalog entries.

    Args:
        access: Shared HTTP access layer.
        record_limit: Optional ceiling on records of one source validated at
            once. Defaults to the access layer's configured
            ``concurrency.record_validation_limit``.
    """

    def __init__(self, access: HttpAccess, *, record_limit: Optional[int] = None) -> None:
        self.access = access
        self.record_limit = (
            record_limit
            if record_limit is not None
            else access.config.concurrency.record_validation_limit
        )
        self.report = AssemblyReport()

    async def _generate(self, source: SourceGenerator) -> Optional[List[CandidateRecord]]:
        try:
            return await source.generate(self.access)
        except Exception:
            LOGGER.exception("Source generator for %s raised", source.label)
            return None

    async def produce_entry(self, source: SourceGenerator) -> Optional[SourceCatalogEntry]:
        """Run generate → validate → filter for one source.

        Returns:
            The catalog entry, or ``None`` when the source is dropped.
        """
        self.report.sources_total += 1
        records = await self._generate(source)
        if records is None:
            LOGGER.error("Failed to generate records for %s", source.label)
            self.report.sources_dropped += 1
            return None
        if not records:
            LOGGER.error("No releases found for %s", source.label)
            self.report.sources_dropped += 1
            return None

        self.report.records_generated += len(records)
        verdicts = await validate_records(self.access, records, limit=self.record_limit)

        retained: List[CandidateRecord] = []
        for record, valid in zip(records, verdicts):
            if valid:
                retained.append(record)
                continue
            LOGGER.warning(
                "Removing %s %s %s %s due to unresolvable URL",
                source.label,
                record.release,
                record.edition or "",
                record.arch.value,
            )
        self.report.records_retained += len(retained)
        self.report.records_dropped += len(records) - len(retained)

        if not retained:
            LOGGER.error("No reachable releases for %s; dropping source", source.label)
            self.report.sources_dropped += 1
            return None

        self.report.sources_assembled += 1
        LOGGER.info("Assembled %s with %d/%d releases", source.label, len(retained), len(records))
        return SourceCatalogEntry(
            name=source.name,
            pretty_name=source.pretty_name or source.name,
            homepage=source.homepage,
            description=source.description,
            releases=tuple(retained),
        )

    async def assemble(self, sources: Iterable[SourceGenerator]) -> List[SourceCatalogEntry]:
        """Produce entries for every source concurrently, ordered by :func:`sort_catalog`."""
        entries = await fan_out(self.produce_entry(source) for source in sources)
        catalog = sort_catalog(entry for entry in entries if entry is not None)
        LOGGER.info("Catalog assembled: %s", self.report.summary())
        return catalog


# ============================================================================
# Ordering
# ============================================================================


def _compare_releases(a: CandidateRecord, b: CandidateRecord) -> int:
    """Newest release first, then edition ascending (records without edition first)."""
    parts_a = a.release.lstrip("v").split(".")
    parts_b = b.release.lstrip("v").split(".")
    for part_a, part_b in zip(parts_a, parts_b):
        if not (part_a.isdecimal() and part_b.isdecimal()):
            break
        if int(part_a) != int(part_b):
            return -1 if int(part_a) > int(part_b) else 1

    if a.release != b.release:
        return -1 if a.release > b.release else 1
    key_a = (a.edition is not None, a.edition or "")
    key_b = (b.edition is not None, b.edition or "")
    if key_a == key_b:
        return 0
    return -1 if key_a < key_b else 1


def sort_catalog(entries: Iterable[SourceCatalogEntry]) -> List[SourceCatalogEntry]:
    """Order entries by name and each entry's releases newest first.

    Release strings are compared component-wise on their dot-separated numeric
    parts (a leading ``v`` is ignored), so ``"10"`` sorts above ``"9.1"``.
    Non-numeric releases fall back to descending string order.
    """
    ordered: List[SourceCatalogEntry] = []
    for entry in sorted(entries, key=lambda e: e.name):
        releases: Sequence[CandidateRecord] = sorted(
            entry.releases, key=functools.cmp_to_key(_compare_releases)
        )
        ordered.append(
            SourceCatalogEntry(
                name=entry.name,
                pretty_name=entry.pretty_name,
                homepage=entry.homepage,
                description=entry.description,
                releases=tuple(releases),
            )
        )
    return ordered
