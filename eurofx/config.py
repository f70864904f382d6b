"""Environment-driven settings for the eurofx daemon and CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from eurofx.db import DEFAULT_DB_PATH

__all__ = ["DEFAULT_UPDATE_INTERVAL", "Settings"]

DEFAULT_UPDATE_INTERVAL = 360.0


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime configuration.

    ``update_interval`` is the number of seconds between reconciliation ticks.
    """

    db_location: Path = DEFAULT_DB_PATH
    update_interval: float = DEFAULT_UPDATE_INTERVAL
    request_timeout: float = 30.0
    fetch_attempts: int = 3

    def __post_init__(self) -> None:
        object.__setattr__(self, "db_location", Path(self.db_location))
        if self.update_interval < 1:
            raise ValueError("update interval must be at least 1 second")
        if self.request_timeout <= 0:
            raise ValueError("request timeout must be positive")
        if self.fetch_attempts < 1:
            raise ValueError("fetch attempts must be at least 1")

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        """Build settings from ``EUROFX_*`` variables, loading ``.env`` first."""

        if dotenv:
            load_dotenv(find_dotenv(usecwd=True), override=False)
        return cls(
            db_location=Path(os.getenv("EUROFX_DB_LOCATION") or DEFAULT_DB_PATH),
            update_interval=_env_float("EUROFX_UPDATE_INTERVAL", DEFAULT_UPDATE_INTERVAL),
            request_timeout=_env_float("EUROFX_REQUEST_TIMEOUT", 30.0),
            fetch_attempts=_env_int("EUROFX_FETCH_ATTEMPTS", 3),
        )

    def with_overrides(self, **changes: object) -> "Settings":
        """Return a copy with every non-``None`` value in ``changes`` applied."""

        return replace(self, **{key: value for key, value in changes.items() if value is not None})
