"""Checksum file parsing shared by source generators.

Mirrors publish digests in a handful of layouts:

- ``WHITESPACE``: GNU coreutils output, ``<hash>  <file>`` (``*file`` in binary mode)
- ``SHA256_TAGGED`` / ``MD5_TAGGED``: BSD ``--tag`` output, ``SHA256 (file) = hash``

Sites with a bespoke layout pass their own compiled pattern instead.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Optional, Pattern

from ..net.client import HttpAccess

__all__ = ["ChecksumStyle", "parse_checksums", "fetch_checksums", "first_token"]

SHA256_TAGGED_RE = re.compile(r"SHA256 \(([^)]+)\) = ([0-9a-fA-F]+)")
MD5_TAGGED_RE = re.compile(r"MD5 \(([^)]+)\) = ([0-9a-fA-F]+)")


class ChecksumStyle(str, Enum):
    WHITESPACE = "whitespace"
    SHA256_TAGGED = "sha256-tagged"
    MD5_TAGGED = "md5-tagged"


def _parse_whitespace(data: str) -> Dict[str, str]:
    checksums: Dict[str, str] = {}
    for line in data.splitlines():
        parts = line.strip().split(None, 1)
        if len(parts) != 2:
            continue
        digest, file_name = parts
        file_name = file_name.strip().lstrip("*")
        if file_name:
            checksums[file_name] = digest.strip()
    return checksums


def _parse_pattern(
    data: str, pattern: Pattern[str], key_group: int, value_group: int
) -> Dict[str, str]:
    return {m.group(key_group): m.group(value_group) for m in pattern.finditer(data)}


def parse_checksums(
    data: str,
    style: ChecksumStyle = ChecksumStyle.WHITESPACE,
    *,
    pattern: Optional[Pattern[str]] = None,
    key_group: int = 1,
    value_group: int = 2,
) -> Dict[str, str]:
    """Parse a checksum listing into ``{file name: digest}``.

    Args:
        data: Checksum file contents.
        style: Built-in layout to parse; ignored when ``pattern`` is given.
        pattern: Custom regex; ``key_group`` captures the file name and
            ``value_group`` the digest.

    Example:
        >>> parse_checksums("abc123  disk.iso\\n")
        {'disk.iso': 'abc123'}
        >>> parse_checksums("SHA256 (disk.iso) = abc123", ChecksumStyle.SHA256_TAGGED)
        {'disk.iso': 'abc123'}
    """
    if pattern is not None:
        return _parse_pattern(data, pattern, key_group, value_group)
    if style is ChecksumStyle.SHA256_TAGGED:
        return _parse_pattern(data, SHA256_TAGGED_RE, 1, 2)
    if style is ChecksumStyle.MD5_TAGGED:
        return _parse_pattern(data, MD5_TAGGED_RE, 1, 2)
    return _parse_whitespace(data)


async def fetch_checksums(
    access: HttpAccess,
    url: str,
    style: ChecksumStyle = ChecksumStyle.WHITESPACE,
    *,
    pattern: Optional[Pattern[str]] = None,
    key_group: int = 1,
    value_group: int = 2,
) -> Optional[Dict[str, str]]:
    """Fetch ``url`` and parse it with :func:`parse_checksums`."""
    data = await access.fetch_text(url)
    if data is None:
        return None
    return parse_checksums(
        data, style, pattern=pattern, key_group=key_group, value_group=value_group
    )


def first_token(text: Optional[str]) -> Optional[str]:
    """First whitespace-separated token, for files holding a single digest."""
    if not text:
        return None
    parts = text.split(None, 1)
    return parts[0] if parts else None
