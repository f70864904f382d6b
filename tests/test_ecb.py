"""Tests for ECB document parsing and the requests-based client."""

from __future__ import annotations

from datetime import date

import pytest
import requests

from eurofx.exceptions import SourceUnavailable
from eurofx.ingestion.ecb import (
    ECB_DAILY_URL,
    ECB_HISTORY_URL,
    ECB_LAST_90_DAYS_URL,
    ECBClient,
    parse_cubes,
)

HISTORY_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<gesmes:Envelope xmlns:gesmes="http://www.gesmes.org/xml/2002-08-01" xmlns="http://www.ecb.int/vocabulary/2002-08-01/eurofxref">
  <gesmes:subject>Reference rates</gesmes:subject>
  <gesmes:Sender><gesmes:name>European Central Bank</gesmes:name></gesmes:Sender>
  <Cube>
    <Cube time="2024-01-03">
      <Cube currency="USD" rate="1.0919"/>
      <Cube currency="JPY" rate="155.52"/>
    </Cube>
    <Cube time="2024-01-02">
      <Cube currency="USD" rate="1.0956"/>
      <Cube currency="JPY" rate="155.34"/>
      <Cube currency="GBP" rate="0.86645"/>
    </Cube>
  </Cube>
</gesmes:Envelope>
"""

EMPTY_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<gesmes:Envelope xmlns:gesmes="http://www.gesmes.org/xml/2002-08-01"><Cube></Cube></gesmes:Envelope>
"""


class _Response:
    def __init__(self, content: bytes, status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class _Session:
    def __init__(self, responses: list) -> None:
        self.responses = list(responses)
        self.headers: dict[str, str] = {}
        self.urls: list[str] = []
        self.closed = False

    def get(self, url: str, timeout: float):  # type: ignore[no-untyped-def]
        self.urls.append(url)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


def _client(*responses) -> ECBClient:  # type: ignore[no-untyped-def]
    return ECBClient(session=_Session(list(responses)), backoff_seconds=0, max_attempts=3)


def test_parse_cubes_returns_snapshots_oldest_first() -> None:
    snapshots = parse_cubes(HISTORY_XML)

    assert [snap.rate_date for snap in snapshots] == [date(2024, 1, 2), date(2024, 1, 3)]
    assert snapshots[0].rates == {"USD": 1.0956, "JPY": 155.34, "GBP": 0.86645}
    assert "EUR" not in snapshots[1].rates


def test_parse_cubes_rejects_bad_values() -> None:
    document = b'<Cube><Cube time="2024-01-02"><Cube currency="USD" rate="n/a"/></Cube></Cube>'

    with pytest.raises(SourceUnavailable, match="2024-01-02"):
        parse_cubes(document)

    with pytest.raises(SourceUnavailable):
        parse_cubes(b'<Cube><Cube time="02/01/2024"></Cube></Cube>')


def test_parse_cubes_rejects_duplicate_and_infinite_rates() -> None:
    duplicated = (
        b'<Cube><Cube time="2024-01-02">'
        b'<Cube currency="USD" rate="1.1"/><Cube currency="USD" rate="9.9"/>'
        b"</Cube></Cube>"
    )
    with pytest.raises(SourceUnavailable, match="duplicate currency USD"):
        parse_cubes(duplicated)

    with pytest.raises(SourceUnavailable, match="positive number"):
        parse_cubes(b'<Cube><Cube time="2024-01-02"><Cube currency="USD" rate="inf"/></Cube></Cube>')


def test_fetch_endpoints_hit_expected_urls() -> None:
    client = _client(_Response(HISTORY_XML), _Response(HISTORY_XML), _Response(HISTORY_XML))

    assert len(client.fetch_history()) == 2
    assert len(client.fetch_last_90_days()) == 2
    assert client.fetch_latest().rate_date == date(2024, 1, 3)
    assert client.session.urls == [ECB_HISTORY_URL, ECB_LAST_90_DAYS_URL, ECB_DAILY_URL]


def test_fetch_latest_rejects_empty_document() -> None:
    with pytest.raises(SourceUnavailable, match="empty"):
        _client(_Response(EMPTY_XML)).fetch_latest()


def test_fetch_retries_transport_errors() -> None:
    client = _client(requests.ConnectionError("reset"), _Response(HISTORY_XML))

    assert client.fetch_latest().rate_date == date(2024, 1, 3)
    assert len(client.session.urls) == 2


def test_fetch_gives_up_after_max_attempts() -> None:
    client = _client(
        requests.ConnectionError("reset"),
        _Response(b"", status_code=503),
        requests.Timeout("slow"),
    )

    with pytest.raises(SourceUnavailable, match="error fetching currencies from ECB") as excinfo:
        client.fetch_history()

    assert isinstance(excinfo.value.__cause__, requests.Timeout)
    assert len(client.session.urls) == 3


def test_client_validates_attempts_and_closes_session() -> None:
    with pytest.raises(ValueError):
        ECBClient(session=_Session([]), max_attempts=0)

    with _client() as client:
        pass
    assert client.session.closed
