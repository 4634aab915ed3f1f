"""
imagesorter - configuration via Pydantic Settings.

Values come from IMAGESORTER_* environment variables; the command line
itself only takes the root directory.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from imagesorter.config.exceptions import ConfigError

LOG_FORMATS = {"console", "json"}


class ImagesorterSettings(BaseSettings):
    """Run configuration loaded from environment variables."""

    # Store (recreated on every run)
    db_path: Path = Path("imagesorter.db")

    # Hashing
    chunk_size: int = Field(default=65536, gt=0)

    # Deletion
    use_trash: bool = False
    verify_before_delete: bool = True

    # CSV audit report, written after resolution when set
    report_path: Optional[Path] = None

    # Logging (stderr)
    log_level: str = "WARNING"
    log_format: str = "console"

    model_config = {"env_prefix": "IMAGESORTER_", "case_sensitive": False}

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {sorted(LOG_FORMATS)}")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return value


@lru_cache
def get_settings() -> ImagesorterSettings:
    """Factory for settings (cached singleton)."""
    return ImagesorterSettings()


def load_settings() -> ImagesorterSettings:
    """
    Load settings, mapping validation failures to ConfigError.

    Raises:
        ConfigError: an IMAGESORTER_* variable holds an invalid value
    """
    try:
        return get_settings()
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}") from e
