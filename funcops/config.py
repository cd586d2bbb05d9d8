"""Configuration management for function operators.

Uses Pydantic Settings for environment-based configuration. Every field
can be overridden with a ``FUNCOPS_`` prefixed environment variable.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FuncOpsConfig(BaseSettings):
    """Defaults used by operators when no explicit value is passed."""

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    # delay_by / throttle
    default_delay: float = Field(default=0.1, ge=0, description="Default delay (seconds)")

    # dot_every
    dot_interval: int = Field(default=10, ge=1, description="Calls between progress markers")
    dot_marker: str = Field(default=".", description="Progress marker written every interval")

    # memoise
    memo_max_size: Optional[int] = Field(
        default=None, description="Max cached results per function (None = unbounded)"
    )

    # retry_with_backoff
    retry_max_attempts: int = Field(default=3, ge=1, description="Max attempts per call")
    retry_initial_delay: float = Field(default=0.1, ge=0, description="First backoff (seconds)")
    retry_max_delay: float = Field(default=60.0, ge=0, description="Backoff cap (seconds)")

    metrics_enabled: bool = Field(default=True, description="Record Prometheus metrics")

    model_config = SettingsConfigDict(
        env_prefix="FUNCOPS_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("memo_max_size")
    @classmethod
    def validate_memo_max_size(cls, v: Optional[int]) -> Optional[int]:
        """A bounded cache must hold at least one entry."""
        if v is not None and v < 1:
            raise ValueError("memo_max_size must be None or >= 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"invalid log level: {v}")
        return level


# Global config instance
_config_instance: FuncOpsConfig | None = None


def get_config() -> FuncOpsConfig:
    """Get or create configuration instance.

    Returns:
        FuncOpsConfig instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = FuncOpsConfig()
    return _config_instance


def reset_config() -> None:
    """Drop the cached instance so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None
