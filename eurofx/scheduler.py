"""Periodic, non-overlapping reconciliation ticks."""

from __future__ import annotations

import asyncio

from eurofx.exceptions import EuroFxError, SourceRegressed
from eurofx.service import RateService
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["run_periodic"]


async def run_periodic(
    service: RateService,
    interval: float,
    *,
    stop_event: asyncio.Event | None = None,
    max_ticks: int | None = None,
) -> int:
    """Reconcile immediately and then every ``interval`` seconds.

    Each tick is awaited before the next wait starts, so ticks never overlap.
    A failed tick is logged and retried at the next interval, never sooner.
    Returns the number of ticks run once ``stop_event`` is set or
    ``max_ticks`` is reached.
    """

    if interval <= 0:
        raise ValueError("interval must be positive")
    stop = stop_event or asyncio.Event()
    ticks = 0
    LOGGER.info("Starting periodic updates every %.1fs", interval)
    while not stop.is_set():
        try:
            result = await service.refresh()
        except SourceRegressed as exc:
            LOGGER.warning("Skipping update, %s", exc)
        except EuroFxError:
            LOGGER.exception("Error updating database, retrying in %.1fs", interval)
        else:
            if result.changed:
                LOGGER.info(
                    "Database advanced from %s to %s (%s window, %s snapshots)",
                    result.previous,
                    result.current,
                    result.tier.value if result.tier else "none",
                    result.committed,
                )
        ticks += 1
        if max_ticks is not None and ticks >= max_ticks:
            break
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass
    LOGGER.info("Periodic updates stopped after %s ticks", ticks)
    return ticks
