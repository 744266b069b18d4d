"""Configuration management using pydantic-settings."""
import logging
import sys
from functools import lru_cache
from typing import Any, List, Literal, Optional

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Import pipeline settings loaded from environment variables.

    All settings prefixed with EQUIPMENT_IMPORT_ (e.g., EQUIPMENT_IMPORT_LOG_LEVEL=DEBUG)
    """

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment (production switches logs to JSON)"
    )

    # Delimited text decoding
    csv_encoding: str = Field(
        default="utf-8-sig",
        description="Primary encoding for delimited text files (BOM tolerated)"
    )
    csv_fallback_encoding: str = Field(
        default="latin-1",
        description="Encoding retried when the primary encoding fails to decode"
    )

    model_config = SettingsConfigDict(
        env_prefix="EQUIPMENT_IMPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache so the environment is only read once per process.
    Tests that change the environment call get_settings.cache_clear().
    """
    return Settings()


def configure_logging(log_level: Optional[str] = None) -> None:
    """Configure structlog for the import pipeline.

    JSON output in production, plain console output otherwise.

    Args:
        log_level: Overrides the configured level when given
    """
    settings = get_settings()
    level_name = (log_level or settings.log_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )
    logging.getLogger().setLevel(level)

    shared_processors: List[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.is_production:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
