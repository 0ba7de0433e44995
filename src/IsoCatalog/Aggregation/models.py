# === NAVMAP v1 ===
# {
#   "module": "IsoCatalog.Aggregation.models",
#   "purpose": "Frozen record types flowing from source generators into the catalog.",
#   "sections": [
#     {"id": "arch", "name": "Arch", "anchor": "#class-arch", "kind": "enum"},
#     {"id": "archiveformat", "name": "ArchiveFormat", "anchor": "#class-archiveformat", "kind": "enum"},
#     {"id": "websource", "name": "WebSource", "anchor": "#class-websource", "kind": "dataclass"},
#     {"id": "containersource", "name": "ContainerSource", "anchor": "#class-containersource", "kind": "dataclass"},
#     {"id": "diskimage", "name": "DiskImage", "anchor": "#class-diskimage", "kind": "dataclass"},
#     {"id": "candidaterecord", "name": "CandidateRecord", "anchor": "#class-candidaterecord", "kind": "dataclass"},
#     {"id": "sourcecatalogentry", "name": "SourceCatalogEntry", "anchor": "#class-sourcecatalogentry", "kind": "dataclass"}
#   ]
# }
# === /NAVMAP ===

"""
Canonical record types for catalog aggregation.

Data Flow:
  SourceGenerator.generate() → CandidateRecord[]
  CandidateRecord.network_urls() → link validation
  retained CandidateRecord[] → SourceCatalogEntry

Every type is a frozen dataclass: a candidate record is created once by its
generator and only read afterwards. Network resources (:class:`WebSource`) are
probed before publication; container-registry references
(:class:`ContainerSource`) are exempt.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Tuple, Union

__all__ = [
    "Arch",
    "ArchiveFormat",
    "WebSource",
    "ContainerSource",
    "ResourceReference",
    "DiskImage",
    "CandidateRecord",
    "SourceCatalogEntry",
]


class Arch(str, Enum):
    """Guest CPU architectures a release can target."""

    X86_64 = "x86_64"
    AARCH64 = "aarch64"
    RISCV64 = "riscv64"

    @classmethod
    def parse(cls, value: str) -> Optional["Arch"]:
        """Map an upstream architecture label to :class:`Arch` (``None`` if unknown)."""
        return _ARCH_ALIASES.get(value.strip().lower())


_ARCH_ALIASES = {
    "x86_64": Arch.X86_64,
    "amd64": Arch.X86_64,
    "aarch64": Arch.AARCH64,
    "arm64": Arch.AARCH64,
    "riscv64": Arch.RISCV64,
    "riscv": Arch.RISCV64,
}


class ArchiveFormat(str, Enum):
    """Compression or archive wrapping of a downloadable image."""

    TAR = "tar"
    TAR_GZ = "tar.gz"
    TAR_BZ2 = "tar.bz2"
    TAR_XZ = "tar.xz"
    GZ = "gz"
    BZ2 = "bz2"
    XZ = "xz"
    ZIP = "zip"
    ZST = "zst"
    SEVEN_ZIP = "7z"

    @classmethod
    def from_filename(cls, name: str) -> Optional["ArchiveFormat"]:
        """Guess the archive format from a file name or URL path."""
        lowered = name.lower().split("?", 1)[0]
        # Longest suffixes first so ``.tar.gz`` wins over ``.gz``.
        for suffix, fmt in _ARCHIVE_SUFFIXES:
            if lowered.endswith(suffix):
                return fmt
        return None


_ARCHIVE_SUFFIXES = (
    (".tar.gz", ArchiveFormat.TAR_GZ),
    (".tgz", ArchiveFormat.TAR_GZ),
    (".tar.bz2", ArchiveFormat.TAR_BZ2),
    (".tar.xz", ArchiveFormat.TAR_XZ),
    (".tar", ArchiveFormat.TAR),
    (".gz", ArchiveFormat.GZ),
    (".bz2", ArchiveFormat.BZ2),
    (".xz", ArchiveFormat.XZ),
    (".zip", ArchiveFormat.ZIP),
    (".zst", ArchiveFormat.ZST),
    (".7z", ArchiveFormat.SEVEN_ZIP),
)


@dataclass(frozen=True, slots=True)
class WebSource:
    """Downloadable resource reachable over HTTP(S)."""

    url: str
    """Direct download URL (required, non-empty)."""

    checksum: Optional[str] = None
    """Hex digest published by the upstream site, if any."""

    archive_format: Optional[ArchiveFormat] = None
    """Compression wrapping the payload, if any."""

    file_name: Optional[str] = None
    """Name to save the payload under when the URL path is not descriptive."""

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise ValueError("WebSource.url cannot be empty")


@dataclass(frozen=True, slots=True)
class ContainerSource:
    """Image built from a container-registry reference; never probed."""

    url: str
    output_filename: str
    env: Tuple[Tuple[str, str], ...] = ()


ResourceReference = Union[WebSource, ContainerSource]


@dataclass(frozen=True, slots=True)
class DiskImage:
    """Pre-built disk image attached to a release."""

    source: ResourceReference
    size: Optional[int] = None
    format: str = "qcow2"


def _web_urls(sources: Tuple[ResourceReference, ...]) -> Iterator[str]:
    for source in sources:
        if isinstance(source, WebSource):
            yield source.url


@dataclass(frozen=True, slots=True)
class CandidateRecord:
    """One downloadable release variant, before its links are confirmed."""

    release: str
    edition: Optional[str] = None
    arch: Arch = Arch.X86_64
    iso: Tuple[ResourceReference, ...] = ()
    img: Tuple[ResourceReference, ...] = ()
    fixed_iso: Tuple[ResourceReference, ...] = ()
    floppy: Tuple[ResourceReference, ...] = ()
    disk_images: Tuple[DiskImage, ...] = ()

    def __post_init__(self) -> None:
        if not self.release or not self.release.strip():
            raise ValueError("CandidateRecord.release cannot be empty")
        if not (self.iso or self.img or self.fixed_iso or self.floppy or self.disk_images):
            raise ValueError(
                f"CandidateRecord {self.release!r} must reference at least one resource"
            )

    def network_urls(self) -> Tuple[str, ...]:
        """URLs of every network resource, including disk images, in field order."""
        urls = []
        for group in (self.iso, self.img, self.fixed_iso, self.floppy):
            urls.extend(_web_urls(group))
        urls.extend(_web_urls(tuple(disk.source for disk in self.disk_images)))
        return tuple(urls)

    def describe(self) -> str:
        """Short ``release edition arch`` label used in log messages."""
        return f"{self.release} {self.edition or ''} {self.arch.value}".replace("  ", " ")


@dataclass(frozen=True, slots=True)
class SourceCatalogEntry:
    """Published catalog entry for one upstream source."""

    name: str
    pretty_name: str
    homepage: Optional[str] = None
    description: Optional[str] = None
    releases: Tuple[CandidateRecord, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.releases:
            raise ValueError(f"SourceCatalogEntry {self.name!r} requires at least one release")
