"""
Aggregation Configuration Package

Public API for loading and validating aggregation configuration.

Example:
    from IsoCatalog.Aggregation.config import load_config

    config = load_config(
        path="isocatalog.yaml",
        cli_overrides={"concurrency": {"global_limit": 64}},
    )
"""

from .loader import export_config_schema, load_config
from .models import AggregationConfig, ConcurrencyConfig, HttpClientConfig, RetryPolicy

__all__ = [
    "AggregationConfig",
    "ConcurrencyConfig",
    "HttpClientConfig",
    "RetryPolicy",
    "load_config",
    "export_config_schema",
]
