"""Server configuration loaded from environment variables."""

import os
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


ENV_PREFIX = "COGNATUS_"

SUPPORTED_CONFIDENCE_LEVELS = (0.90, 0.95, 0.99)


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseModel):
    """Runtime settings for the Cognatus server and CLI."""

    server_name: str = Field("cognatus-server", min_length=1, description="MCP server name")
    log_level: LogLevel = Field(LogLevel.INFO, description="Root logging level")
    confidence_level: float = Field(
        0.95, description="Confidence level used for intervals in the analysis stage"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("confidence_level")
    @classmethod
    def _check_confidence_level(cls, value: float) -> float:
        for supported in SUPPORTED_CONFIDENCE_LEVELS:
            if abs(value - supported) < 1e-9:
                return supported
        raise ValueError(
            f"confidence_level must be one of {', '.join(str(c) for c in SUPPORTED_CONFIDENCE_LEVELS)}"
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "Settings":
        """Build settings from COGNATUS_* variables, then apply explicit overrides.

        Overrides whose value is None are ignored so CLI flags can be passed through
        unconditionally.
        """
        if environ is None:
            environ = os.environ

        values = {}
        for name in cls.model_fields:
            key = f"{ENV_PREFIX}{name.upper()}"
            if key in environ:
                values[name] = environ[key]
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except PydanticValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigurationError(f"Invalid configuration: {errors}") from e
