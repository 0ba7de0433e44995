"""
Pydantic v2 Configuration Models for catalog aggregation

Provides strict, typed configuration for the shared aggregation core:
- HTTP client settings (timeouts, TLS, user agent)
- Retry and backoff policy for transient failures
- Admission control (global permit ceiling and per-host overrides)
- Top-level AggregationConfig as single source of truth

All models use extra="forbid" for strict validation. Environment variables
and CLI overrides follow: file < env < CLI precedence.
"""

from __future__ import annotations

from typing import ClassVar, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ============================================================================
# Shared Policy Models
# ============================================================================


class RetryPolicy(BaseModel):
    """Retry behaviour for transport errors and server (5xx) responses."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")

    max_attempts: int = Field(default=3, description="Total attempts (initial + retries)")
    backoff_base_s: float = Field(
        default=0.5, description="Multiplier for exponential backoff between attempts"
    )
    backoff_max_s: float = Field(default=8.0, description="Maximum wait between attempts")

    @field_validator("max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_attempts must be >= 1")
        return v

    @field_validator("backoff_base_s", "backoff_max_s")
    @classmethod
    def validate_delays(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Delay values must be >= 0")
        return v


class ConcurrencyConfig(BaseModel):
    """Admission control for outbound requests and internal fan-out."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")

    global_limit: int = Field(default=150, description="Process-wide in-flight request ceiling")
    host_limits: Dict[str, int] = Field(
        default_factory=lambda: {"sourceforge.net": 5},
        description="Per-host in-flight ceilings for known throttling hosts",
    )
    record_validation_limit: Optional[int] = Field(
        default=None,
        description="Ceiling on records of one source validated at once (None = unbounded)",
    )

    @field_validator("global_limit")
    @classmethod
    def validate_global_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("global_limit must be >= 1")
        return v

    @field_validator("host_limits")
    @classmethod
    def validate_host_limits(cls, v: Dict[str, int]) -> Dict[str, int]:
        normalized: Dict[str, int] = {}
        for host, limit in v.items():
            key = host.strip().lower()
            if not key:
                raise ValueError("host_limits keys must be non-empty host names")
            if limit < 1:
                raise ValueError(f"host_limits[{host!r}] must be >= 1, got {limit}")
            normalized[key] = limit
        return normalized

    @field_validator("record_validation_limit")
    @classmethod
    def validate_record_limit(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("record_validation_limit must be >= 1 or None")
        return v


class HttpClientConfig(BaseModel):
    """Configuration for HTTP client behavior."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")

    user_agent: str = Field(default="IsoCatalog/1.0", description="User-Agent string")
    timeout_connect_s: float = Field(default=10.0, description="Connection timeout in seconds")
    timeout_read_s: float = Field(default=60.0, description="Read timeout in seconds")
    verify_tls: bool = Field(default=True, description="Verify TLS certificates")
    follow_redirects: bool = Field(default=True, description="Follow 3xx responses")
    max_connections: int = Field(default=200, description="Connection pool size")

    @field_validator("timeout_connect_s", "timeout_read_s")
    @classmethod
    def validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be > 0")
        return v

    @field_validator("max_connections")
    @classmethod
    def validate_max_connections(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_connections must be >= 1")
        return v


# ============================================================================
# Top-Level Configuration
# ============================================================================


class AggregationConfig(BaseModel):
    """
    Single source of truth for aggregation configuration.

    Loaded from file (YAML/JSON), overlaid with environment variables,
    and finally overridden by CLI arguments. Precedence: file < env < CLI.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid", validate_assignment=True)

    http: HttpClientConfig = Field(
        default_factory=HttpClientConfig, description="HTTP client configuration"
    )
    retry: RetryPolicy = Field(default_factory=RetryPolicy, description="Retry policy")
    concurrency: ConcurrencyConfig = Field(
        default_factory=ConcurrencyConfig, description="Admission control"
    )

    def config_hash(self) -> str:
        """
        Compute deterministic SHA256 hash of config for reproducibility.

        Returns:
            Hex-encoded SHA256 hash of normalized config JSON.
        """
        import hashlib
        import json

        normalized = json.dumps(self.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(normalized.encode()).hexdigest()
