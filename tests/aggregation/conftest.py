"""Shared fixtures for the aggregation test suite."""

from __future__ import annotations

import pytest

from IsoCatalog.Aggregation.models import CandidateRecord, WebSource
from IsoCatalog.Aggregation.sources import registry
from IsoCatalog.Aggregation.testing import ScriptedTransport


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def clean_registry(monkeypatch):
    """Give the test an empty source registry and restore the real one afterwards."""
    monkeypatch.setattr(registry, "_REGISTRY", {})
    monkeypatch.setattr(registry, "_PLUGINS_LOADED", True)
    return registry._REGISTRY


def _make_record(release: str, *urls: str, edition=None) -> CandidateRecord:
    return CandidateRecord(
        release=release,
        edition=edition,
        iso=tuple(WebSource(url=url) for url in urls),
    )


@pytest.fixture
def make_record():
    """Factory for single-edition ISO records."""
    return _make_record
