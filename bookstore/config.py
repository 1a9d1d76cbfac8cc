"""
Configuration for the bookstore service.

Everything is read from environment variables once and cached, so
routes and the registry never touch ``os.environ`` directly. Tests
build their own ``Settings`` and hand it to ``create_app``.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

from .catalog.googlebooks_service import GOOGLE_BOOKS_URL
from .storage import PERSIST_FAILURE_POLICIES


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    books_file: str = "books.json"
    lookup_url: str = GOOGLE_BOOKS_URL
    persist_failure: str = "log"
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    policy = (os.getenv("BOOKS_PERSIST_FAILURE") or "log").strip().lower()
    if policy not in PERSIST_FAILURE_POLICIES:
        policy = "log"

    return Settings(
        books_file=os.getenv("BOOKS_FILE", "books.json"),
        lookup_url=os.getenv("BOOKS_LOOKUP_URL", GOOGLE_BOOKS_URL).rstrip("/"),
        persist_failure=policy,
        log_level=(os.getenv("BOOKS_LOG_LEVEL") or "INFO").upper(),
        host=os.getenv("BOOKS_HOST", "127.0.0.1"),
        port=_int(os.getenv("BOOKS_PORT", "8000"), 8000),
    )
