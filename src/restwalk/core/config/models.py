"""
Pydantic configuration models for restwalk.

These models provide type-safe configuration with validation for:
- API client settings (base URL, rate ceiling, pagination)
- Logging settings
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Client Configuration
# =============================================================================


class ClientConfig(BaseModel):
    """Remote API connection and politeness settings."""

    base_url: str = Field(
        default="",
        description="Base URL that relative resource URLs are resolved against",
    )
    max_requests_per_second: int = Field(
        default=10,
        ge=1,
        description="Maximum requests per second accepted by the remote service",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers sent with every request",
    )
    window_size: int | None = Field(
        default=None,
        ge=1,
        description="Pages fetched at once when the total page count is known "
        "(default: number of CPUs)",
    )
    buffered_pages: int = Field(
        default=3,
        ge=1,
        description="Pages fetched ahead of the consumer when streaming",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        """Normalize and validate the level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from restwalk.yaml.
    """

    client: ClientConfig = Field(default_factory=ClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
