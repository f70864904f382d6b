"""In-memory rate source and snapshot builders shared by the tests."""

from __future__ import annotations

from datetime import date
from typing import Sequence

from eurofx.exceptions import SourceUnavailable
from eurofx.ingestion.models import RateSnapshot


def snapshot(day: str, **rates: float) -> RateSnapshot:
    return RateSnapshot(
        rate_date=date.fromisoformat(day),
        rates=rates or {"USD": 1.1, "GBP": 0.85},
    )


class FakeSource:
    """Rate source serving canned snapshots and recording every call."""

    def __init__(
        self,
        *,
        history: Sequence[RateSnapshot] = (),
        last_90: Sequence[RateSnapshot] = (),
        latest: RateSnapshot | None = None,
    ) -> None:
        self.history = list(history)
        self.last_90 = list(last_90)
        self.latest = latest
        self.calls: list[str] = []
        self.closed = False

    def fetch_history(self) -> list[RateSnapshot]:
        self.calls.append("history")
        return list(self.history)

    def fetch_last_90_days(self) -> list[RateSnapshot]:
        self.calls.append("last_90")
        return list(self.last_90)

    def fetch_latest(self) -> RateSnapshot:
        self.calls.append("latest")
        if self.latest is None:
            raise SourceUnavailable("daily rates fetched from ECB are empty")
        return self.latest

    def close(self) -> None:
        self.closed = True
