"""Public interface for the eurofx package."""

from __future__ import annotations

import threading
from datetime import date
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Any, Dict, Iterable

from eurofx.config import Settings
from eurofx.db.snapshot_store import PersistenceResult, SnapshotStore
from eurofx.exceptions import (
    EuroFxError,
    MalformedKey,
    SourceRegressed,
    SourceUnavailable,
    StoreCorrupt,
    StoreIO,
)
from eurofx.ingestion.ecb import ECBClient
from eurofx.ingestion.models import REFERENCE_CURRENCY, RateSnapshot
from eurofx.ingestion.strategy import RateSource
from eurofx.queries import RateQueries
from eurofx.seeds.bootstrap import init_store
from eurofx.seeds.reconcile import ReconcileResult, ReconcileStatus, reconcile
from eurofx.utils.currency import (
    parse_symbols,
    rebase_rates,
    resolve_base,
    sort_currencies,
    validate_symbols,
)
from eurofx.utils.ecb import enforce_ecb_min_date

__all__ = [
    "__version__",
    "EuroFx",
    "EuroFxError",
    "MalformedKey",
    "PersistenceResult",
    "RateSnapshot",
    "ReconcileResult",
    "ReconcileStatus",
    "Settings",
    "SnapshotStore",
    "SourceRegressed",
    "SourceUnavailable",
    "StoreCorrupt",
    "StoreIO",
    "RateService",
]

try:
    __version__ = importlib_metadata.version("eurofx")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"


class EuroFx:
    """Package facade that owns the snapshot store and its remote source."""

    __slots__ = ("settings", "source", "_store", "_queries", "_lock")

    # Provide direct access to the package version as a class attribute.
    __version__ = __version__

    def __init__(
        self,
        settings: Settings | str | Path | None = None,
        *,
        source: RateSource | None = None,
    ) -> None:
        """Configure where snapshots live and where they come from.

        ``settings`` may be a :class:`Settings` instance or a database path.
        When omitted the settings are read from the environment. The ECB
        client is used unless another ``source`` is supplied.
        """

        self.settings = self._build_settings(settings)
        self.source: RateSource = source or ECBClient(
            timeout=self.settings.request_timeout,
            max_attempts=self.settings.fetch_attempts,
        )
        self._store: SnapshotStore | None = None
        self._queries: RateQueries | None = None
        self._lock = threading.Lock()

    @staticmethod
    def _build_settings(settings: Settings | str | Path | None) -> Settings:
        if isinstance(settings, Settings):
            return settings
        if settings is None:
            return Settings.from_env()
        return Settings(db_location=Path(settings))

    def open(self) -> SnapshotStore:
        """Return the store, bootstrapping it on first use when necessary."""

        with self._lock:
            if self._store is None:
                self._store = init_store(self.settings.db_location, source=self.source)
                self._queries = RateQueries(self._store)
            return self._store

    @property
    def is_open(self) -> bool:
        return self._store is not None

    @property
    def queries(self) -> RateQueries:
        self.open()
        assert self._queries is not None  # for type checkers
        return self._queries

    def update(self) -> ReconcileResult:
        """Run one reconciliation tick against the remote source."""

        return reconcile(self.open(), self.source)

    def rate(
        self,
        rate_date: date | None = None,
        *,
        base: str | None = None,
        symbols: str | Iterable[str] | None = None,
    ) -> Dict[str, Any] | None:
        """Return the rates for ``rate_date`` (or the latest day).

        ``None`` means the ECB published no rates on ``rate_date``.
        """

        if rate_date is None:
            snapshot = self.queries.get_current()
        else:
            enforce_ecb_min_date(rate_date)
            found = self.queries.get_day(rate_date)
            if found is None:
                return None
            snapshot = found
        return self._snapshot_payload(snapshot, base, parse_symbols(symbols))

    def history(
        self,
        from_date: date,
        to_date: date,
        *,
        base: str | None = None,
        symbols: str | Iterable[str] | None = None,
    ) -> Dict[str, Any]:
        """Return rates between ``from_date`` and ``to_date`` keyed by ISO date.

        Days on which the requested base currency was not quoted are left out.
        """

        if from_date > to_date:
            raise ValueError("start_at must be older than end_at")
        enforce_ecb_min_date(from_date)
        wanted = parse_symbols(symbols)
        snapshots = self.queries.get_range(from_date, to_date)
        base_code = REFERENCE_CURRENCY if base is None else base.strip().upper()
        rates: Dict[str, Dict[str, float]] = {}
        if snapshots:
            base_code, _ = resolve_base(snapshots[0].rates, base)
            validate_symbols(snapshots[0].rates, wanted)
            for snapshot in snapshots:
                base_rate = snapshot.rates.get(base_code)
                if base_rate is None:
                    continue
                rates[snapshot.rate_date.isoformat()] = self._ordered(
                    rebase_rates(snapshot.rates, base_rate, wanted)
                )
        return {
            "base": base_code,
            "start_at": from_date.isoformat(),
            "end_at": to_date.isoformat(),
            "rates": rates,
        }

    @staticmethod
    def _ordered(rates: Dict[str, float]) -> Dict[str, float]:
        return {code: rates[code] for code in sort_currencies(sorted(rates))}

    @staticmethod
    def _snapshot_payload(
        snapshot: RateSnapshot, base: str | None, symbols: list[str] | None
    ) -> Dict[str, Any]:
        base_code, base_rate = resolve_base(snapshot.rates, base)
        validate_symbols(snapshot.rates, symbols)
        return {
            "date": snapshot.rate_date.isoformat(),
            "base": base_code,
            "rates": EuroFx._ordered(rebase_rates(snapshot.rates, base_rate, symbols)),
        }

    def close(self) -> None:
        with self._lock:
            if self._store is not None:
                self._store.close()
                self._store = None
                self._queries = None
        closer = getattr(self.source, "close", None)
        if callable(closer):
            closer()

    def __enter__(self) -> "EuroFx":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def __getattr__(name: str) -> Any:
    """Lazily import the asyncio service so plain library use stays light."""

    if name == "RateService":
        from eurofx.service import RateService as _service

        return _service
    raise AttributeError(f"module 'eurofx' has no attribute {name}")
