"""Tests for the EuroFx facade: payload shape, rebasing and validation."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from eurofx import EuroFx, Settings, StoreCorrupt

from fakes import FakeSource, snapshot


def _source() -> FakeSource:
    return FakeSource(
        history=[
            snapshot("2024-01-02", USD=1.10, GBP=0.86, JPY=155.0),
            snapshot("2024-01-03", USD=1.20, GBP=0.80, JPY=150.0),
            snapshot("2024-01-05", USD=1.25, GBP=0.90),
        ],
        latest=snapshot("2024-01-05", USD=1.25, GBP=0.90),
    )


@pytest.fixture
def fx(db_path: Path):
    with EuroFx(Settings(db_location=db_path), source=_source()) as facade:
        yield facade


def test_version_is_exposed() -> None:
    assert isinstance(EuroFx.__version__, str)


def test_path_argument_builds_settings(db_path: Path) -> None:
    facade = EuroFx(db_path, source=FakeSource())

    assert facade.settings.db_location == db_path


def test_rate_defaults_to_latest_in_euro(fx: EuroFx) -> None:
    payload = fx.rate()

    assert payload == {
        "date": "2024-01-05",
        "base": "EUR",
        "rates": {"EUR": 1.0, "USD": 1.25, "GBP": 0.9},
    }
    assert list(payload["rates"]) == ["EUR", "USD", "GBP"]


def test_rate_for_day_rebases_and_filters(fx: EuroFx) -> None:
    payload = fx.rate(date(2024, 1, 2), base="usd", symbols="EUR,JPY")

    assert payload["base"] == "USD"
    assert payload["rates"] == pytest.approx({"EUR": 1 / 1.10, "JPY": 155.0 / 1.10})


def test_rate_returns_none_for_missing_day(fx: EuroFx) -> None:
    assert fx.rate(date(2024, 1, 4)) is None


def test_rate_rejects_dates_before_first_publication(fx: EuroFx) -> None:
    with pytest.raises(ValueError, match="1999-01-04"):
        fx.rate(date(1998, 12, 31))


def test_rate_rejects_unknown_base_and_symbols(fx: EuroFx) -> None:
    with pytest.raises(ValueError, match="invalid base currency"):
        fx.rate(base="XXX")
    with pytest.raises(ValueError, match="invalid symbols"):
        fx.rate(symbols=["USD", "ABC"])


def test_history_keys_rates_by_iso_date(fx: EuroFx) -> None:
    payload = fx.history(date(2024, 1, 1), date(2024, 1, 31), symbols=["USD"])

    assert payload["base"] == "EUR"
    assert payload["start_at"] == "2024-01-01"
    assert payload["end_at"] == "2024-01-31"
    assert payload["rates"] == {
        "2024-01-02": {"USD": 1.10},
        "2024-01-03": {"USD": 1.20},
        "2024-01-05": {"USD": 1.25},
    }


def test_history_skips_days_without_the_base_currency(fx: EuroFx) -> None:
    payload = fx.history(date(2024, 1, 2), date(2024, 1, 5), base="JPY")

    assert list(payload["rates"]) == ["2024-01-02", "2024-01-03"]
    assert payload["rates"]["2024-01-03"]["JPY"] == 1.0


def test_history_of_empty_window(fx: EuroFx) -> None:
    payload = fx.history(date(2023, 1, 1), date(2023, 12, 31), base="usd")

    assert payload["rates"] == {}
    assert payload["base"] == "USD"


def test_history_rejects_inverted_window(fx: EuroFx) -> None:
    with pytest.raises(ValueError, match="start_at must be older than end_at"):
        fx.history(date(2024, 1, 5), date(2024, 1, 2))


def test_update_bootstraps_then_reconciles(db_path: Path) -> None:
    source = _source()
    with EuroFx(Settings(db_location=db_path), source=source) as facade:
        first = facade.update()
        assert first.status == "noop"
        assert source.calls == ["history", "latest"]

        source.latest = snapshot("2024-01-08", USD=1.3)
        source.last_90 = [snapshot("2024-01-08", USD=1.3)]
        second = facade.update()

    assert second.current == date(2024, 1, 8)
    assert second.committed == 1
    assert source.closed


def test_queries_surface_store_corruption(db_path: Path) -> None:
    with EuroFx(Settings(db_location=db_path), source=_source()) as facade:
        store = facade.open()
        store.set_current(date(2030, 1, 1))

        with pytest.raises(StoreCorrupt):
            facade.rate()
