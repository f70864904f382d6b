"""Incremental synchronisation of the snapshot store with the ECB."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Sequence

from eurofx.db.snapshot_store import PersistenceResult, SnapshotStore
from eurofx.exceptions import SourceRegressed, SourceUnavailable, StoreCorrupt
from eurofx.ingestion.models import RateSnapshot
from eurofx.ingestion.strategy import RateSource
from eurofx.utils.date_range import days_between
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = [
    "LAST_90_DAYS_WINDOW",
    "FetchTier",
    "ReconcileResult",
    "ReconcileStatus",
    "reconcile",
    "select_fetch_tier",
]

LAST_90_DAYS_WINDOW = 90


class FetchTier(str, Enum):
    """Remote windows the ECB publishes."""

    DAILY = "daily"
    LAST_90_DAYS = "last_90_days"
    HISTORY = "history"


class ReconcileStatus(str, Enum):
    """Whether a reconciliation tick committed anything."""

    NOOP = "noop"
    UPDATED = "updated"


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """Outcome of one reconciliation tick."""

    status: ReconcileStatus
    previous: date
    current: date
    tier: FetchTier | None = None
    committed: int = 0

    @property
    def changed(self) -> bool:
        return self.committed > 0


def select_fetch_tier(gap_days: int) -> FetchTier:
    """Pick the cheapest remote window that covers a gap of ``gap_days``.

    The ECB exposes no arbitrary date-range endpoint, only the daily,
    ninety-day and full-history documents.
    """

    if gap_days < 1:
        raise ValueError("gap_days must be positive")
    if gap_days == 1:
        return FetchTier.DAILY
    if gap_days <= LAST_90_DAYS_WINDOW:
        return FetchTier.LAST_90_DAYS
    return FetchTier.HISTORY


def _fetch_window(source: RateSource, tier: FetchTier, latest: RateSnapshot) -> list[RateSnapshot]:
    if tier is FetchTier.DAILY:
        return [latest]
    if tier is FetchTier.LAST_90_DAYS:
        snapshots: Sequence[RateSnapshot] = source.fetch_last_90_days()
    else:
        snapshots = source.fetch_history()
    if not snapshots:
        raise SourceUnavailable(f"{tier.value} rates fetched from ECB are empty")
    return sorted(snapshots, key=lambda snapshot: snapshot.rate_date)


def reconcile(store: SnapshotStore, source: RateSource) -> ReconcileResult:
    """Bring ``store`` up to date with the remote latest snapshot.

    Snapshots are committed oldest first and the pointer is advanced after
    each one, so an interrupted tick leaves the pointer on the last fully
    committed date.
    """

    latest = source.fetch_latest()
    local = store.current_date()
    if local is None:
        raise StoreCorrupt("could not find the current pointer in the database")
    remote = latest.rate_date

    if remote == local:
        LOGGER.debug("Database currencies up to date (%s)", local)
        return ReconcileResult(status=ReconcileStatus.NOOP, previous=local, current=local)
    if remote < local:
        raise SourceRegressed(remote=remote, local=local)

    gap = days_between(local, remote)
    tier = select_fetch_tier(gap)
    LOGGER.info("Database is %s days behind ECB, fetching %s window", gap, tier.value)

    cursor = local
    total = PersistenceResult()
    for snapshot in _fetch_window(source, tier, latest):
        if snapshot.rate_date <= cursor:
            continue
        total.merge(store.put(snapshot.with_reference_rate()))
        store.set_current(snapshot.rate_date)
        cursor = snapshot.rate_date
        LOGGER.info("Inserted rates for %s", cursor.isoformat())
    store.flush()

    LOGGER.info(
        "Reconciliation finished: inserted %s snapshots, updated %s snapshots, current %s",
        total.inserted,
        total.updated,
        cursor,
    )
    return ReconcileResult(
        status=ReconcileStatus.UPDATED if total.total else ReconcileStatus.NOOP,
        previous=local,
        current=cursor,
        tier=tier,
        committed=total.total,
    )
