# === NAVMAP v1 ===
# {
#   "module": "IsoCatalog.Aggregation.config.loader",
#   "purpose": "Configuration Loading with File/Env/CLI Precedence.",
#   "sections": [
#     {
#       "id": "read-file",
#       "name": "_read_file",
#       "anchor": "function-read-file",
#       "kind": "function"
#     },
#     {
#       "id": "merge-env-overrides",
#       "name": "_merge_env_overrides",
#       "anchor": "function-merge-env-overrides",
#       "kind": "function"
#     },
#     {
#       "id": "load-config",
#       "name": "load_config",
#       "anchor": "function-load-config",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Configuration Loading with File/Env/CLI Precedence

Implements three-level config composition:
1. **File level** (YAML/JSON): base configuration
2. **Environment level**: ISOCATALOG_* prefixed variables override file
3. **CLI level**: programmatic overrides win

Environment variables use double-underscore notation:
  ISOCATALOG_HTTP__USER_AGENT="Custom UA"  →  http.user_agent="Custom UA"
  ISOCATALOG_CONCURRENCY__HOST_LIMITS='{"sourceforge.net": 3}'

JSON values are automatically parsed; other strings are kept as-is and left to
pydantic for coercion.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .models import AggregationConfig

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "ISOCATALOG_"
# Names the config file itself; never merged as a setting.
CONFIG_PATH_ENV = f"{ENV_PREFIX}CONFIG"


def _read_file(path: str | Path) -> dict[str, Any]:
    """
    Read YAML or JSON config file.

    Raises:
        ConfigError: If the file is missing, unreadable, or not a mapping
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    suffix = p.suffix.lower()
    if suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    elif suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    else:
        raise ConfigError(f"Unsupported file format: {suffix}. Use .yaml or .json")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")
    return data


def _assign_nested(data: dict[str, Any], dotted_key: str, value: Any) -> None:
    keys = dotted_key.split(".")
    current = data
    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def _coerce_env_value(value: str) -> Any:
    try:
        return json.loads(value)
    except ValueError:
        return value


def _merge_env_overrides(
    data: dict[str, Any],
    env: Mapping[str, str],
    env_prefix: str = ENV_PREFIX,
) -> dict[str, Any]:
    """Overlay ``ISOCATALOG_*`` variables onto the config dict."""
    for env_key, env_value in env.items():
        if not env_key.startswith(env_prefix) or env_key == CONFIG_PATH_ENV:
            continue
        dotted_key = env_key[len(env_prefix) :].lower().replace("__", ".")
        coerced = _coerce_env_value(env_value)
        _assign_nested(data, dotted_key, coerced)
        _LOGGER.debug("Environment override: %s → %s = %r", env_key, dotted_key, coerced)
    return data


def _merge_cli_overrides(
    data: dict[str, Any], cli_overrides: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Recursively merge CLI overrides into the config dict (later values win)."""
    if not cli_overrides:
        return data
    for key, value in cli_overrides.items():
        if isinstance(value, Mapping) and isinstance(data.get(key), dict):
            data[key] = _merge_cli_overrides(data[key], value)
        else:
            data[key] = value
    return data


def load_config(
    path: str | Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    env_prefix: str = ENV_PREFIX,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AggregationConfig:
    """
    Load AggregationConfig from file, environment, and CLI with proper precedence.

    **Precedence:** file < environment < CLI

    Args:
        path: Path to YAML/JSON config file (optional)
        env: Environment mapping (default: ``os.environ``)
        env_prefix: Environment variable prefix
        cli_overrides: CLI overrides dict (optional)

    Returns:
        Validated AggregationConfig instance

    Raises:
        ConfigError: If the file cannot be read or the merged config is invalid
    """
    data: dict[str, Any] = _read_file(path) if path else {}
    if path:
        _LOGGER.info("Loaded config from %s", path)

    data = _merge_env_overrides(data, os.environ if env is None else env, env_prefix)
    data = _merge_cli_overrides(data, cli_overrides)

    try:
        config = AggregationConfig.model_validate(data)
    except ValidationError as e:
        _LOGGER.error("Configuration validation failed: %s", e)
        raise ConfigError(str(e)) from e
    _LOGGER.info("Configuration validated. Config hash: %s...", config.config_hash()[:8])
    return config


def export_config_schema() -> dict[str, Any]:
    """Export JSON Schema for AggregationConfig."""
    return AggregationConfig.model_json_schema()
