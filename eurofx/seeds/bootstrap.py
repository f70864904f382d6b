"""First-run population of the snapshot store from the full ECB history."""

from __future__ import annotations

from pathlib import Path

from eurofx.db import DEFAULT_DB_PATH
from eurofx.db.snapshot_store import SnapshotStore
from eurofx.exceptions import SourceUnavailable
from eurofx.ingestion.strategy import RateSource
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["bootstrap_store", "init_store"]


def bootstrap_store(
    db_path: str | Path,
    source: RateSource,
    *,
    rebuild: bool = False,
) -> SnapshotStore:
    """Create (or rebuild) the store at ``db_path`` from the full remote history.

    The history is fetched before the store is opened, so a failed or empty
    fetch never leaves a database file behind. With ``rebuild`` every record
    already in the store is dropped before the history is written.
    """

    LOGGER.info("Downloading the full ECB reference rate history")
    snapshots = sorted(source.fetch_history(), key=lambda snapshot: snapshot.rate_date)
    if not snapshots:
        raise SourceUnavailable("fetched historical reference rates from ECB are empty")

    store = SnapshotStore(db_path)
    try:
        if rebuild:
            LOGGER.warning("Dropped %s stale records from %s", store.clear(), store.db_path)
        LOGGER.info("Populating %s with %s snapshots", store.db_path, len(snapshots))
        result = store.put_many(snapshot.with_reference_rate() for snapshot in snapshots)
        latest = snapshots[-1].rate_date
        store.set_current(latest)
        store.flush()
    except Exception:
        store.close()
        raise
    LOGGER.info(
        "Bootstrap finished: inserted %s snapshots, updated %s snapshots, current %s",
        result.inserted,
        result.updated,
        latest,
    )
    return store


def init_store(
    db_path: str | Path = DEFAULT_DB_PATH,
    *,
    source: RateSource,
) -> SnapshotStore:
    """Open the store at ``db_path``, bootstrapping it when no usable store exists.

    A database without a current pointer is what an interrupted bootstrap
    leaves behind; it is treated exactly like a missing database and
    bootstrapped again from scratch.
    """

    path = Path(db_path)
    if path.exists():
        store = SnapshotStore(path)
        if store.has_current():
            LOGGER.info("Previous database found at %s, opening it", store.db_path)
            return store
        store.close()
        LOGGER.warning("Database at %s has no current pointer, bootstrapping again", path)
        return bootstrap_store(path, source, rebuild=True)
    LOGGER.info("No database found at %s, going to bootstrap a new one", path)
    return bootstrap_store(path, source)
