"""Error hierarchy for the eurofx package."""

from __future__ import annotations

from datetime import date

__all__ = [
    "EuroFxError",
    "StoreError",
    "MalformedKey",
    "StoreCorrupt",
    "StoreIO",
    "SourceError",
    "SourceUnavailable",
    "SourceRegressed",
]


class EuroFxError(Exception):
    """Base exception for every error raised by eurofx."""


class StoreError(EuroFxError):
    """Raised for failures inside the snapshot store."""


class MalformedKey(StoreError):
    """An on-disk key is not a validly encoded date."""


class StoreCorrupt(StoreError):
    """The pointer/snapshot invariant is broken or a record cannot be decoded.

    Never expected in normal operation. It points at a bug or at external
    tampering with the database file and is not repaired automatically.
    """


class StoreIO(StoreError):
    """The underlying storage engine failed; callers may retry."""


class SourceError(EuroFxError):
    """Raised for failures talking to the remote rate publisher."""


class SourceUnavailable(SourceError):
    """A remote fetch failed or returned no data when data was required."""


class SourceRegressed(SourceError):
    """The remote latest date is older than the local current date."""

    def __init__(self, remote: date, local: date) -> None:
        super().__init__(
            f"remote latest date {remote.isoformat()} is older than "
            f"local current date {local.isoformat()}"
        )
        self.remote = remote
        self.local = local
