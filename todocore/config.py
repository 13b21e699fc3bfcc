"""
Runtime settings for todocore.

The service and gateways never read the environment themselves; whoever
builds a ServiceContainer decides whether to call Settings.from_env().
"""
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from todocore.exceptions import ValidationError

DEFAULT_DATABASE_URL = "sqlite:///./data/todos.db"


def _env_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Storage, logging and tracing configuration."""
    database_url: str = Field(DEFAULT_DATABASE_URL, min_length=1)
    log_level: str = "INFO"
    slow_query_threshold: float = Field(0.1, ge=0)
    tracing_enabled: bool = False
    service_name: str = "todocore"
    otlp_endpoint: Optional[str] = None
    console_exporter_enabled: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        v = v.strip().upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {', '.join(valid_levels)}")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Raises:
            ValidationError: If a variable holds an unusable value
        """
        env = os.environ if environ is None else environ

        threshold_raw = env.get("TODOCORE_SLOW_QUERY_THRESHOLD", "0.1")
        try:
            threshold = float(threshold_raw)
        except ValueError as e:
            raise ValidationError(
                f"TODOCORE_SLOW_QUERY_THRESHOLD must be a number, got '{threshold_raw}'",
                field="TODOCORE_SLOW_QUERY_THRESHOLD",
                value=threshold_raw,
                original_error=e,
            )

        try:
            return cls(
                database_url=env.get("TODOCORE_DATABASE_URL", DEFAULT_DATABASE_URL),
                log_level=env.get("TODOCORE_LOG_LEVEL", "INFO"),
                slow_query_threshold=threshold,
                tracing_enabled=_env_flag(env.get("TODOCORE_TRACING_ENABLED")),
                service_name=env.get("OTEL_SERVICE_NAME", "todocore"),
                otlp_endpoint=env.get("OTEL_EXPORTER_OTLP_ENDPOINT"),
                console_exporter_enabled=_env_flag(env.get("OTEL_CONSOLE_EXPORTER_ENABLED")),
            )
        except ValueError as e:
            # pydantic.ValidationError subclasses ValueError
            raise ValidationError(f"Invalid settings: {e}", original_error=e)
