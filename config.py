# config.py
# Role: Environment-driven settings for the transactions tracker.
#       Values come from the process environment, optionally seeded from a .env file.

"""
Application settings.

All values are read from environment variables (a local .env file is loaded
first if present). get_settings() is cached, so the environment is read once
per process; tests call get_settings.cache_clear() after changing it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Base directory of the project (where this module lives)
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Default on-disk SQLite location: <project_root>/database/transactions.db
DEFAULT_DB_PATH = os.path.join(BASE_DIR, "database", "transactions.db")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        logger.warning("Ignoring %s=%r, expected a positive integer; using %d", name, raw, default)
        return default
    return value


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str
    log_format: str
    cors_origins: List[str]
    page_size: int


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL") or f"sqlite:///{DEFAULT_DB_PATH}",
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_format=os.getenv("LOG_FORMAT", "text").lower(),
        cors_origins=_env_list("CORS_ORIGINS", "*"),
        page_size=_env_int("PAGE_SIZE", 10),
    )
