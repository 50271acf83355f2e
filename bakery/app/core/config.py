from __future__ import annotations

import os
from dataclasses import dataclass

STORE_BACKENDS = ("sql", "memory")


@dataclass(frozen=True)
class Settings:
    database_url: str | None
    store_backend: str
    log_level: str
    log_format: str


def get_settings() -> Settings:
    """
    Read configuration from the environment.

    - DATABASE_URL : SQLAlchemy URL, optional
    - BAKERY_STORE : "sql" | "memory" (default: sql if DATABASE_URL is set)
    - LOG_LEVEL    : default INFO
    - LOG_FORMAT   : "json" | "text" (default json)
    """
    database_url = os.getenv("DATABASE_URL", "").strip() or None

    store_backend = os.getenv("BAKERY_STORE", "").strip().lower()
    if not store_backend:
        store_backend = "sql" if database_url else "memory"
    if store_backend not in STORE_BACKENDS:
        raise ValueError(f"BAKERY_STORE must be one of {STORE_BACKENDS}, got {store_backend!r}")
    if store_backend == "sql" and not database_url:
        raise ValueError("BAKERY_STORE=sql requires DATABASE_URL")

    return Settings(
        database_url=database_url,
        store_backend=store_backend,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_format=os.getenv("LOG_FORMAT", "json").lower(),
    )
