"""Data models shared across ingestion and storage modules."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Mapping

REFERENCE_CURRENCY = "EUR"

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


@dataclass(frozen=True, slots=True)
class RateSnapshot:
    """All known reference rates for one calendar date.

    Rates are expressed against :data:`REFERENCE_CURRENCY`. Instances are
    immutable; :meth:`with_reference_rate` returns a new snapshot.
    """

    rate_date: date
    rates: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.rate_date, date):
            raise ValueError(f"rate_date must be a date, got {self.rate_date!r}")
        cleaned: dict[str, float] = {}
        for currency, rate in self.rates.items():
            if not isinstance(currency, str) or not _CURRENCY_CODE.match(currency):
                raise ValueError(f"invalid currency code {currency!r}")
            value = float(rate)
            if not (math.isfinite(value) and value > 0):
                raise ValueError(f"rate for {currency} must be a positive number, got {rate!r}")
            cleaned[currency] = value
        object.__setattr__(self, "rates", cleaned)

    def with_reference_rate(self) -> "RateSnapshot":
        """Return a copy holding the reference currency at exactly ``1.0``."""

        rates = dict(self.rates)
        rates[REFERENCE_CURRENCY] = 1.0
        return RateSnapshot(rate_date=self.rate_date, rates=rates)


__all__ = ["REFERENCE_CURRENCY", "RateSnapshot"]
