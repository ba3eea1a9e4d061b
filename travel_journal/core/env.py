from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from travel_journal.core.errors import ConfigError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
# Client libraries that log every request at INFO.
CHATTY_LOGGERS = ("httpx", "httpcore", "multipart")


def load_dotenv_if_present(path: str | Path = ".env") -> bool:
    """Load gallery settings from a .env file; returns whether one was found.

    Variables already set in the process environment win over the file.
    """
    dotenv_path = Path(path)
    if not dotenv_path.is_file():
        return False
    load_dotenv(dotenv_path=dotenv_path, override=False)
    return True


def env_number(name: str, default: float) -> float:
    """Read a numeric setting, raising ConfigError that names a malformed variable."""
    raw: Optional[str] = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def configure_logging(default_level: str = "INFO") -> None:
    """Set the root level from LOG_LEVEL; request chatter stays at WARNING unless debugging."""
    level_name = os.getenv("LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if level > logging.DEBUG:
        for name in CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
