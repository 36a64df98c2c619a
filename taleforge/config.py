"""
Configuration - Environment-driven settings.

Variables:
    TALEFORGE_ENV         deployment name (default: development)
    TALEFORGE_SAVES_DIR   directory for save folders (default: ./saves)
    TALEFORGE_LOG_LEVEL   root log level for the taleforge logger (default: INFO)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import logging
import os


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_SAVES_DIR = "saves"


def _default_saves_dir() -> Path:
    return Path.cwd() / DEFAULT_SAVES_DIR


@dataclass
class Settings:
    """Runtime settings resolved from the environment."""
    env: str = "development"
    saves_dir: Path = field(default_factory=_default_saves_dir)
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.env == "development"


def get_settings() -> Settings:
    """Read settings from the environment."""
    saves_dir = os.getenv("TALEFORGE_SAVES_DIR")
    return Settings(
        env=os.getenv("TALEFORGE_ENV", "development"),
        saves_dir=Path(saves_dir) if saves_dir else _default_saves_dir(),
        log_level=os.getenv("TALEFORGE_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: Settings | None = None) -> None:
    """Attach a stream handler to the package logger at the configured level."""
    settings = settings or get_settings()
    logger = logging.getLogger("taleforge")
    level = getattr(logging, settings.log_level, logging.INFO)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
