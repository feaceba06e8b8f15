"""
Runtime configuration and logging setup for LaserCalc.

Settings are read from environment variables prefixed with ``LASERCALC_``
(e.g. ``LASERCALC_LOG_LEVEL=DEBUG``). Entry points call
:func:`configure_logging` once at startup; library modules only create
module-level loggers.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).parent / "data"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_prefix="LASERCALC_")

    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    locale: str = "en"
    materials_file: Path = DATA_DIR / "materials.yaml"
    locales_dir: Path = DATA_DIR / "locales"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept standard logging level names only."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings (read once)."""
    return Settings()


def configure_logging(settings: Settings = None) -> None:
    """Configure root logging from settings."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=settings.log_format)
