"""Helpers for locating the snapshot database."""

from __future__ import annotations

from pathlib import Path
from typing import Final

__all__ = ["DEFAULT_DB_PATH"]

# Relative to the working directory of the daemon, mirroring how container
# deployments mount a data volume next to the process.
DEFAULT_DB_PATH: Final[Path] = Path("eurofx.db")
