"""Centralized environment-driven settings.

Keep this module lightweight: stdlib only, no app imports, to avoid circular deps.
"""

from __future__ import annotations

import os


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

# Seeding defaults to on for local development only.
SEED_DATA: bool = _bool_env("SEED_DATA", ENVIRONMENT == "development")
SEED_ADMIN_PASSWORD: str = os.getenv("SEED_ADMIN_PASSWORD", "changeme")

CORS_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost").split(",")
    if origin.strip()
]

# Post listing
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# How many times a post write is retried after losing a slug race.
SLUG_RETRY_ATTEMPTS: int = max(1, _int_env("SLUG_RETRY_ATTEMPTS", 5))

WORDS_PER_MINUTE = 200
