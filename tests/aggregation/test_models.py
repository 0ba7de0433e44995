"""Tests for the catalog record types."""

from __future__ import annotations

import dataclasses

import pytest

from IsoCatalog.Aggregation.models import (
    Arch,
    ArchiveFormat,
    CandidateRecord,
    ContainerSource,
    DiskImage,
    SourceCatalogEntry,
    WebSource,
)


@pytest.mark.parametrize(
    "label,expected",
    [
        ("x86_64", Arch.X86_64),
        ("amd64", Arch.X86_64),
        ("ARM64", Arch.AARCH64),
        ("aarch64", Arch.AARCH64),
        (" riscv ", Arch.RISCV64),
        ("sparc", None),
    ],
)
def test_arch_parse(label, expected):
    assert Arch.parse(label) is expected


@pytest.mark.parametrize(
    "name,expected",
    [
        ("disk.tar.gz", ArchiveFormat.TAR_GZ),
        ("disk.tgz", ArchiveFormat.TAR_GZ),
        ("disk.tar.xz", ArchiveFormat.TAR_XZ),
        ("disk.img.xz", ArchiveFormat.XZ),
        ("disk.img.bz2", ArchiveFormat.BZ2),
        ("disk.7z", ArchiveFormat.SEVEN_ZIP),
        ("https://dl.example/disk.ZIP?viasf=1", ArchiveFormat.ZIP),
        ("disk.iso", None),
    ],
)
def test_archive_format_from_filename(name, expected):
    assert ArchiveFormat.from_filename(name) is expected


def test_web_source_requires_url():
    with pytest.raises(ValueError):
        WebSource(url=" ")


def test_record_requires_release_and_resource():
    with pytest.raises(ValueError):
        CandidateRecord(release="", iso=(WebSource(url="https://a.example/x.iso"),))
    with pytest.raises(ValueError):
        CandidateRecord(release="1.0")


def test_record_is_frozen():
    record = CandidateRecord(release="1.0", iso=(WebSource(url="https://a.example/x.iso"),))
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.release = "2.0"


def test_network_urls_order_and_container_exclusion():
    record = CandidateRecord(
        release="1.0",
        iso=(WebSource(url="https://a.example/x.iso"),),
        img=(WebSource(url="https://a.example/x.img"),),
        fixed_iso=(WebSource(url="https://a.example/fixed.iso"),),
        floppy=(WebSource(url="https://a.example/boot.img"),),
        disk_images=(
            DiskImage(source=WebSource(url="https://a.example/disk.qcow2")),
            DiskImage(source=ContainerSource(url="docker://x:1", output_filename="x.img")),
        ),
    )
    assert record.network_urls() == (
        "https://a.example/x.iso",
        "https://a.example/x.img",
        "https://a.example/fixed.iso",
        "https://a.example/boot.img",
        "https://a.example/disk.qcow2",
    )


def test_container_only_record_has_no_network_urls():
    record = CandidateRecord(
        release="edge",
        disk_images=(DiskImage(source=ContainerSource(url="docker://x:1", output_filename="x.img")),),
    )
    assert record.network_urls() == ()


def test_describe():
    record = CandidateRecord(
        release="40", edition="server", arch=Arch.AARCH64, iso=(WebSource(url="https://a/x"),)
    )
    assert record.describe() == "40 server aarch64"


def test_entry_requires_releases():
    with pytest.raises(ValueError):
        SourceCatalogEntry(name="distro", pretty_name="Distro", releases=())
