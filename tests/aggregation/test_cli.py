"""Tests for the Typer CLI."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from IsoCatalog.Aggregation import cli
from IsoCatalog.Aggregation.models import CandidateRecord, WebSource
from IsoCatalog.Aggregation.net.client import HttpAccess
from IsoCatalog.Aggregation.sources import SourceGenerator, register_source
from IsoCatalog.Aggregation.testing import ScriptedTransport, no_sleep

runner = CliRunner()


class DemoSource(SourceGenerator):
    name = "demo"
    pretty_name = "Demo Linux"
    homepage = "https://demo.example"

    async def generate(self, access):
        return [
            CandidateRecord(release="2", iso=(WebSource(url="https://demo.example/2.iso"),)),
            CandidateRecord(release="1", iso=(WebSource(url="https://demo.example/1.iso"),)),
        ]


def _patch_access(monkeypatch, transport):
    real_from_config = HttpAccess.from_config.__func__

    def from_config(cls, config=None, **kwargs):
        return real_from_config(cls, config, transport=transport, sleep=no_sleep)

    monkeypatch.setattr(HttpAccess, "from_config", classmethod(from_config))


def test_sources_lists_registered(clean_registry):
    register_source(DemoSource)
    result = runner.invoke(cli.app, ["sources"])
    assert result.exit_code == 0
    assert "demo" in result.output
    assert "Registered: 1" in result.output


def test_config_raw(monkeypatch):
    monkeypatch.delenv("ISOCATALOG_CONFIG", raising=False)
    result = runner.invoke(cli.app, ["config", "--raw"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["concurrency"]["global_limit"] == 150


def test_config_missing_file(tmp_path):
    result = runner.invoke(cli.app, ["config", "--config", str(tmp_path / "nope.yaml")])
    assert result.exit_code == 1


def test_check_reports_results(monkeypatch):
    transport = ScriptedTransport()
    transport.add("https://a.example/ok.iso", 200)
    transport.add("https://a.example/busy.iso", 429)
    _patch_access(monkeypatch, transport)

    ok = runner.invoke(cli.app, ["check", "https://a.example/ok.iso", "https://a.example/busy.iso"])
    assert ok.exit_code == 0
    assert "valid" in ok.output

    bad = runner.invoke(cli.app, ["check", "https://a.example/gone.iso"])
    assert bad.exit_code == 1
    assert "invalid" in bad.output


def test_build_prints_summary(monkeypatch, clean_registry):
    register_source(DemoSource)
    transport = ScriptedTransport()
    transport.add("https://demo.example/2.iso", 200)
    transport.add("https://demo.example/1.iso", 404)
    _patch_access(monkeypatch, transport)

    result = runner.invoke(cli.app, ["build", "--source", "demo"])
    assert result.exit_code == 0, result.output
    assert "Demo Linux" in result.output
    assert "1/2" in result.output
    assert "retained" in result.output


def test_build_unknown_source(clean_registry):
    result = runner.invoke(cli.app, ["build", "--source", "missing"])
    assert result.exit_code == 1
    assert "Unknown source" in result.output
