"""Tests for configuration models and the file/env/CLI loader."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from IsoCatalog.Aggregation.config import (
    AggregationConfig,
    ConcurrencyConfig,
    export_config_schema,
    load_config,
)
from IsoCatalog.Aggregation.errors import ConfigError


def test_defaults():
    cfg = AggregationConfig()
    assert cfg.concurrency.global_limit == 150
    assert cfg.concurrency.host_limits == {"sourceforge.net": 5}
    assert cfg.concurrency.record_validation_limit is None
    assert cfg.retry.max_attempts == 3
    assert cfg.retry.backoff_base_s == 0.5
    assert cfg.retry.backoff_max_s == 8.0
    assert cfg.http.user_agent == "IsoCatalog/1.0"


def test_host_limit_keys_are_normalised():
    cfg = ConcurrencyConfig(host_limits={" SourceForge.NET ": 3})
    assert cfg.host_limits == {"sourceforge.net": 3}


@pytest.mark.parametrize(
    "payload",
    [
        {"global_limit": 0},
        {"host_limits": {"example.org": 0}},
        {"host_limits": {"": 2}},
        {"record_validation_limit": 0},
    ],
)
def test_concurrency_validation(payload):
    with pytest.raises(ValidationError):
        ConcurrencyConfig(**payload)


def test_unknown_fields_are_rejected():
    with pytest.raises(ValidationError):
        AggregationConfig.model_validate({"http": {"useragent": "typo"}})


def test_config_hash_is_stable():
    assert AggregationConfig().config_hash() == AggregationConfig().config_hash()
    changed = AggregationConfig.model_validate({"retry": {"max_attempts": 5}})
    assert changed.config_hash() != AggregationConfig().config_hash()


def test_load_defaults_without_sources():
    cfg = load_config(env={})
    assert cfg == AggregationConfig()


def test_load_yaml_file(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(
        "concurrency:\n  global_limit: 40\n  host_limits:\n    sourceforge.net: 2\n"
        "http:\n  user_agent: Mirror/1\n"
    )
    cfg = load_config(path, env={})
    assert cfg.concurrency.global_limit == 40
    assert cfg.concurrency.host_limits == {"sourceforge.net": 2}
    assert cfg.http.user_agent == "Mirror/1"


def test_load_json_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"retry": {"max_attempts": 1}}))
    assert load_config(path, env={}).retry.max_attempts == 1


def test_precedence_file_env_cli(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text("concurrency:\n  global_limit: 40\nretry:\n  max_attempts: 2\n")
    env = {
        "ISOCATALOG_CONCURRENCY__GLOBAL_LIMIT": "60",
        "ISOCATALOG_RETRY__MAX_ATTEMPTS": "4",
        "ISOCATALOG_CONCURRENCY__HOST_LIMITS": '{"downloads.example": 1}',
        "UNRELATED": "x",
    }
    cfg = load_config(path, env=env, cli_overrides={"retry": {"max_attempts": 6}})
    assert cfg.concurrency.global_limit == 60
    assert cfg.concurrency.host_limits == {"downloads.example": 1}
    assert cfg.retry.max_attempts == 6


def test_env_plain_string_value():
    cfg = load_config(env={"ISOCATALOG_HTTP__USER_AGENT": "Custom UA"})
    assert cfg.http.user_agent == "Custom UA"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.yaml", env={})


def test_unsupported_suffix(tmp_path):
    path = tmp_path / "catalog.toml"
    path.write_text("x = 1")
    with pytest.raises(ConfigError):
        load_config(path, env={})


def test_invalid_yaml(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text("concurrency: [unclosed\n")
    with pytest.raises(ConfigError):
        load_config(path, env={})


def test_non_mapping_top_level(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError):
        load_config(path, env={})


def test_invalid_values_raise_config_error():
    with pytest.raises(ConfigError):
        load_config(env={"ISOCATALOG_CONCURRENCY__GLOBAL_LIMIT": "0"})


def test_schema_export():
    schema = export_config_schema()
    assert "concurrency" in schema["properties"]


def test_config_path_variable_is_not_a_setting(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text("retry:\n  max_attempts: 2\n")
    cfg = load_config(path, env={"ISOCATALOG_CONFIG": str(path)})
    assert cfg.retry.max_attempts == 2
