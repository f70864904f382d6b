"""requests-based client for the ECB euro foreign exchange reference rates."""

from __future__ import annotations

import logging
import warnings
from datetime import date

import requests
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from eurofx.exceptions import SourceUnavailable
from eurofx.ingestion.models import RateSnapshot
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

ECB_DAILY_URL = "https://www.ecb.europa.eu/stats/eurofxref/eurofxref-daily.xml"
ECB_HISTORY_URL = "https://www.ecb.europa.eu/stats/eurofxref/eurofxref-hist.xml"
ECB_LAST_90_DAYS_URL = "https://www.ecb.europa.eu/stats/eurofxref/eurofxref-hist-90d.xml"

__all__ = [
    "ECB_DAILY_URL",
    "ECB_HISTORY_URL",
    "ECB_LAST_90_DAYS_URL",
    "ECBClient",
    "parse_cubes",
]


def parse_cubes(document: bytes | str) -> list[RateSnapshot]:
    """Parse an ECB ``Cube`` document into snapshots sorted oldest first.

    The ECB nests one ``Cube time="..."`` element per day, each holding
    ``Cube currency="..." rate="..."`` children. ``html.parser`` lowercases tag
    names, hence the ``cube`` lookups.
    """

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
        soup = BeautifulSoup(document, "html.parser")
    snapshots: list[RateSnapshot] = []
    for day in soup.find_all("cube", attrs={"time": True}):
        raw_date = day["time"]
        try:
            rate_date = date.fromisoformat(raw_date)
            rates: dict[str, float] = {}
            for cube in day.find_all("cube", attrs={"currency": True, "rate": True}):
                code = cube["currency"].strip().upper()
                if code in rates:
                    raise ValueError(f"duplicate currency {code}")
                rates[code] = float(cube["rate"])
            snapshots.append(RateSnapshot(rate_date=rate_date, rates=rates))
        except ValueError as exc:
            raise SourceUnavailable(f"could not parse ECB rates for {raw_date!r}, {exc}") from exc
    snapshots.sort(key=lambda snapshot: snapshot.rate_date)
    return snapshots


class ECBClient:
    """Fetch the three fixed-window ECB reference rate documents."""

    def __init__(
        self,
        *,
        timeout: float = 30,
        max_attempts: int = 3,
        backoff_seconds: float = 2.0,
        session: requests.Session | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/xml,text/xml;q=0.9,*/*;q=0.8"})

    def _download(self, url: str) -> bytes:
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content

    def fetch(self, url: str) -> list[RateSnapshot]:
        """Download ``url`` and return its snapshots oldest first."""

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_seconds, max=30),
            retry=retry_if_exception_type(requests.RequestException),
            before_sleep=before_sleep_log(LOGGER, logging.WARNING),
            reraise=True,
        )
        try:
            document = retrying(self._download, url)
        except requests.RequestException as exc:
            raise SourceUnavailable(f"error fetching currencies from ECB ({url}), {exc}") from exc
        snapshots = parse_cubes(document)
        LOGGER.debug("Fetched %s snapshots from %s", len(snapshots), url)
        return snapshots

    def fetch_history(self) -> list[RateSnapshot]:
        return self.fetch(ECB_HISTORY_URL)

    def fetch_last_90_days(self) -> list[RateSnapshot]:
        return self.fetch(ECB_LAST_90_DAYS_URL)

    def fetch_latest(self) -> RateSnapshot:
        snapshots = self.fetch(ECB_DAILY_URL)
        if not snapshots:
            raise SourceUnavailable("daily rates fetched from ECB are empty")
        return snapshots[-1]

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ECBClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
