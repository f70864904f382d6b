"""Abstractions for pluggable remote rate sources."""

from __future__ import annotations

from typing import Protocol, Sequence

from eurofx.ingestion.models import RateSnapshot


class RateSource(Protocol):
    """Contract for fetching reference rates from a remote publisher.

    The publisher only offers a few fixed windows, so the contract mirrors
    them: the full history, the last ninety days and the latest day. History
    sequences are returned oldest first. Implementations raise
    :class:`~eurofx.exceptions.SourceUnavailable` on any transport or parse
    failure.
    """

    def fetch_history(self) -> Sequence[RateSnapshot]:
        ...  # pragma: no cover - protocol definition

    def fetch_last_90_days(self) -> Sequence[RateSnapshot]:
        ...  # pragma: no cover - protocol definition

    def fetch_latest(self) -> RateSnapshot:
        ...  # pragma: no cover - protocol definition


__all__ = ["RateSource"]
