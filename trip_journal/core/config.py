"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
client works against a local development server out of the box.
"""

import os
from dataclasses import dataclass, field
from typing import Callable, Optional


def _env(name: str, default: str) -> Callable[[], str]:
    return lambda: os.getenv(name, default)


def _env_flag(name: str) -> Callable[[], bool]:
    return lambda: os.getenv(name, "false").lower() in {"1", "true", "yes"}


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return float(raw)


@dataclass
class Settings:
    """Client settings loaded from environment variables."""

    base_url: str = field(default_factory=_env("TRIP_JOURNAL_BASE_URL", "http://localhost:8000"))
    log_level: str = field(default_factory=_env("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE") or None)

    # Key under which the serialized token is kept in the key-value store.
    token_key: str = field(
        default_factory=_env("TRIP_JOURNAL_TOKEN_KEY", "com.tripjournal.authToken")
    )

    # JSON file backing the on-disk token store.  ``~`` is expanded by
    # the store itself.
    token_file: str = field(
        default_factory=_env("TRIP_JOURNAL_TOKEN_FILE", "~/.trip_journal/credentials.json")
    )

    # Request timeout in seconds.  Unset means the transport default
    # (``requests`` waits indefinitely).
    timeout: Optional[float] = field(
        default_factory=lambda: _optional_float("TRIP_JOURNAL_TIMEOUT")
    )

    # When true, trip operations use the same error translation as
    # events and media instead of reporting a bare transport failure.
    unify_trip_errors: bool = field(default_factory=_env_flag("TRIP_JOURNAL_UNIFY_TRIP_ERRORS"))
