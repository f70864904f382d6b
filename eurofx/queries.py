"""Read-only queries over the snapshot store."""

from __future__ import annotations

from datetime import date

from eurofx.db.snapshot_store import SnapshotStore
from eurofx.ingestion.models import RateSnapshot

__all__ = ["RateQueries"]


class RateQueries:
    """Thin read-only facade consumed by the public API layers."""

    __slots__ = ("store",)

    def __init__(self, store: SnapshotStore) -> None:
        self.store = store

    def get_current(self) -> RateSnapshot:
        return self.store.get_current()

    def get_day(self, day: date) -> RateSnapshot | None:
        """Return the snapshot for ``day``; ``None`` means no rates were published."""

        return self.store.get(day)

    def get_range(self, start: date, end: date) -> list[RateSnapshot]:
        """Return snapshots between ``start`` and ``end`` inclusive, oldest first."""

        return self.store.range(start, end)
