"""Ordered, date-keyed snapshot store backed by SQLite through SQLAlchemy."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Iterator

from sqlalchemy import Column, LargeBinary, create_engine, delete, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from eurofx.db import DEFAULT_DB_PATH
from eurofx.db.keys import CURRENT_KEY, KEY_WIDTH, decode_key, encode_date
from eurofx.db.records import decode_snapshot, encode_snapshot
from eurofx.exceptions import MalformedKey, StoreCorrupt, StoreIO
from eurofx.ingestion.models import RateSnapshot
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["PersistenceResult", "SnapshotStore"]


class Base(DeclarativeBase):
    pass


class _Record(Base):
    __tablename__ = "records"

    # SQLite compares BLOBs with memcmp, so key order is byte-lexicographic.
    key = Column(LargeBinary, primary_key=True)
    value = Column(LargeBinary, nullable=False)


@dataclass(slots=True)
class PersistenceResult:
    """Represents how many snapshots were inserted or updated in a batch."""

    inserted: int = 0
    updated: int = 0

    @property
    def total(self) -> int:
        """Return the total number of affected snapshots."""

        return self.inserted + self.updated

    def merge(self, other: "PersistenceResult") -> None:
        self.inserted += other.inserted
        self.updated += other.updated


def _configure_sqlite(dbapi_connection, _connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=FULL")
    cursor.close()


class SnapshotStore:
    """Embedded key-value store holding one snapshot per date plus the current pointer.

    Snapshots live under :func:`~eurofx.db.keys.encode_date` keys; the pointer
    lives under :data:`~eurofx.db.keys.CURRENT_KEY` and holds the date key of
    the most recent committed snapshot. Every read returns freshly decoded
    objects.
    """

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH) -> None:
        self.db_path = Path(db_path).expanduser().resolve()
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                future=True,
                connect_args={"check_same_thread": False},
            )
            event.listen(self.engine, "connect", _configure_sqlite)
            Base.metadata.create_all(self.engine)
        except (OSError, SQLAlchemyError) as exc:
            raise StoreIO(f"could not open database {self.db_path}, {exc}") from exc
        self._SessionFactory: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False, future=True
        )

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        try:
            with self._SessionFactory() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StoreIO(f"could not {action}, {exc}") from exc

    @staticmethod
    def _upsert(session: Session, key: bytes, value: bytes, result: PersistenceResult) -> None:
        existing = session.get(_Record, key)
        if existing is None:
            session.add(_Record(key=key, value=value))
            result.inserted += 1
        else:
            setattr(existing, "value", value)
            result.updated += 1

    def put(self, snapshot: RateSnapshot) -> PersistenceResult:
        """Insert or overwrite the snapshot stored for ``snapshot.rate_date``."""

        return self.put_many([snapshot])

    def put_many(self, snapshots: Iterable[RateSnapshot]) -> PersistenceResult:
        """Upsert ``snapshots`` in a single transaction."""

        result = PersistenceResult()
        with self._session("put snapshots") as session:
            for snapshot in snapshots:
                self._upsert(
                    session, encode_date(snapshot.rate_date), encode_snapshot(snapshot), result
                )
            session.commit()
        return result

    def get(self, day: date) -> RateSnapshot | None:
        """Return the snapshot for ``day`` or ``None`` when it is absent."""

        with self._session(f"get snapshot for {day.isoformat()}") as session:
            record = session.get(_Record, encode_date(day))
            blob = None if record is None else bytes(record.value)
        if blob is None:
            return None
        return decode_snapshot(blob)

    def current_date(self) -> date | None:
        """Return the date named by the current pointer, if one has been set."""

        with self._session("read current pointer") as session:
            record = session.get(_Record, CURRENT_KEY)
            pointer = None if record is None else bytes(record.value)
        if pointer is None:
            return None
        try:
            return decode_key(pointer)
        except MalformedKey as exc:
            raise StoreCorrupt(f"current pointer holds an invalid key, {exc}") from exc

    def has_current(self) -> bool:
        return self.current_date() is not None

    def get_current(self) -> RateSnapshot:
        """Return the snapshot named by the current pointer."""

        current = self.current_date()
        if current is None:
            raise StoreCorrupt("could not find the current pointer in the database")
        snapshot = self.get(current)
        if snapshot is None:
            raise StoreCorrupt(
                f"current pointer names {current.isoformat()} but no snapshot is stored for it"
            )
        return snapshot

    def set_current(self, day: date) -> None:
        """Move the current pointer to ``day``.

        The snapshot for ``day`` must already be committed.
        """

        with self._session("set current pointer") as session:
            self._upsert(session, CURRENT_KEY, encode_date(day), PersistenceResult())
            session.commit()

    def range(self, start: date, end: date) -> list[RateSnapshot]:
        """Return snapshots between ``start`` and ``end`` inclusive, oldest first."""

        if start > end:
            return []
        stmt = (
            select(_Record)
            .where(_Record.key >= encode_date(start))
            .where(_Record.key <= encode_date(end))
            .where(func.length(_Record.key) == KEY_WIDTH)
            .order_by(_Record.key)
        )
        with self._session(f"get range {start.isoformat()} - {end.isoformat()}") as session:
            rows = [(bytes(row.key), bytes(row.value)) for row in session.execute(stmt).scalars()]
        snapshots: list[RateSnapshot] = []
        for key, blob in rows:
            day = decode_key(key)
            snapshot = decode_snapshot(blob)
            if snapshot.rate_date != day:
                raise StoreCorrupt(
                    f"record under key {day.isoformat()} holds rates for "
                    f"{snapshot.rate_date.isoformat()}"
                )
            snapshots.append(snapshot)
        return snapshots

    def count(self) -> int:
        """Return the number of stored snapshots (the pointer is not counted)."""

        stmt = select(func.count()).select_from(_Record).where(
            func.length(_Record.key) == KEY_WIDTH
        )
        with self._session("count snapshots") as session:
            return int(session.execute(stmt).scalar_one())

    def clear(self) -> int:
        """Delete every snapshot and the current pointer; return the rows removed."""

        with self._session("clear database") as session:
            removed = session.execute(delete(_Record)).rowcount
            session.commit()
        return int(removed or 0)

    def flush(self) -> None:
        """Checkpoint the write-ahead log into the main database file."""

        try:
            with self.engine.connect() as connection:
                busy, log_frames, checkpointed = connection.exec_driver_sql(
                    "PRAGMA wal_checkpoint(FULL)"
                ).one()
        except SQLAlchemyError as exc:
            raise StoreIO(f"could not flush database, {exc}") from exc
        LOGGER.debug(
            "WAL checkpoint: busy=%s log_frames=%s checkpointed=%s",
            busy,
            log_frames,
            checkpointed,
        )

    def close(self) -> None:
        self.engine.dispose()

    def __enter__(self) -> "SnapshotStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
