"""asyncio front-end that keeps blocking store I/O off the event loop."""

from __future__ import annotations

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Callable, TypeVar

from eurofx import EuroFx
from eurofx.db.snapshot_store import SnapshotStore
from eurofx.ingestion.models import RateSnapshot
from eurofx.seeds.reconcile import ReconcileResult
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

T = TypeVar("T")

__all__ = ["RateService"]


class RateService:
    """Dispatch writes to one dedicated thread and reads to a small pool.

    The single writer thread is what serialises bootstrap and reconciliation;
    readers run concurrently with it and with each other.
    """

    def __init__(self, fx: EuroFx, *, reader_workers: int = 4) -> None:
        if reader_workers < 1:
            raise ValueError("reader_workers must be at least 1")
        self.fx = fx
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="eurofx-writer")
        self._readers = ThreadPoolExecutor(
            max_workers=reader_workers, thread_name_prefix="eurofx-reader"
        )

    async def _run(self, executor: ThreadPoolExecutor, func: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, functools.partial(func, *args))

    async def start(self) -> SnapshotStore:
        """Open the store, bootstrapping it on the writer thread if needed."""

        return await self._run(self._writer, self.fx.open)

    async def _read(self, func: Callable[[], T]) -> T:
        # Bootstrap belongs to the writer; readers only ever see an open store.
        if not self.fx.is_open:
            await self.start()
        return await self._run(self._readers, func)

    async def refresh(self) -> ReconcileResult:
        return await self._run(self._writer, self.fx.update)

    async def get_current(self) -> RateSnapshot:
        return await self._read(lambda: self.fx.queries.get_current())

    async def get_day(self, day: date) -> RateSnapshot | None:
        return await self._read(lambda: self.fx.queries.get_day(day))

    async def get_range(self, start: date, end: date) -> list[RateSnapshot]:
        return await self._read(lambda: self.fx.queries.get_range(start, end))

    def shutdown(self) -> None:
        LOGGER.info("Shutting down rate service executors")
        self._writer.shutdown(wait=True)
        self._readers.shutdown(wait=True)

    async def __aenter__(self) -> "RateService":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
