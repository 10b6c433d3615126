"""Configuration management for sheet record extraction.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
SRE_ prefix, or via a .env file in the working directory.

Environment Variables:
    SRE_DATE_PATTERN: Default pattern for displaying/validating dates
        (default: yyyy/MM/dd)
    SRE_NUMBER_FORMAT: Default pattern for displaying numbers (default: #.##)
    SRE_START_TAG: Comment expected on the header cell of every table
    SRE_END_TAG: Leading cell value that terminates a table
    SRE_LOG_LEVEL: Logging level (default: INFO)
    SRE_DEBUG: Enable debug mode (default: false)
"""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sheet_record_extraction.utils.patterns import (
    PatternSyntaxError,
    compile_number_pattern,
)


class Settings(BaseSettings):
    """Library settings loaded from environment variables.

    These seed the configuration of every new extraction session; a session
    can still override them through its setters.

    Example .env file:
        SRE_DATE_PATTERN=yyyy-MM-dd
        SRE_END_TAG=END
        SRE_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="SRE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Display Settings
    # =========================================================================

    date_pattern: str = "yyyy/MM/dd"
    """Pattern used to display date cells and validate date fields."""

    number_format: str = "#.##"
    """Pattern used to display numeric cells."""

    # =========================================================================
    # Table Fencing Settings
    # =========================================================================

    start_tag: str | None = None
    """Comment expected one line before the first data line."""

    end_tag: str | None = None
    """Leading cell value that ends a table (the line itself is not read)."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with per-line scan logging."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("date_pattern", "number_format")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        """Validate display patterns are non-empty."""
        if not v.strip():
            raise ValueError("display patterns must be non-empty strings")
        return v

    @field_validator("start_tag", "end_tag")
    @classmethod
    def blank_tag_is_unset(cls, v: str | None) -> str | None:
        """Treat blank tags as not configured."""
        if v is not None and not v.strip():
            return None
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Logs a configuration summary and warns about patterns that will fail
    on the first numeric cell.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    try:
        compile_number_pattern(s.number_format)
    except PatternSyntaxError:
        logger.warning(
            f"SRE_NUMBER_FORMAT '{s.number_format}' has no digit placeholders; "
            "numeric cells cannot be displayed with it."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"date_pattern={s.date_pattern}, number_format={s.number_format}"
    )


# Create the global settings instance
settings = Settings()
