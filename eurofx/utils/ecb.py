"""ECB-specific helpers and invariants used across the package."""

from __future__ import annotations

from datetime import date

ECB_MIN_AVAILABLE_DATE = date(1999, 1, 4)
ECB_MIN_DATE_MESSAGE = "there are no currency rates for dates older than 1999-01-04."


def enforce_ecb_min_date(*dates: date) -> None:
    """Ensure all provided dates are on/after :data:`ECB_MIN_AVAILABLE_DATE`."""

    for day in dates:
        if day < ECB_MIN_AVAILABLE_DATE:
            raise ValueError(f"{day.isoformat()} is invalid, {ECB_MIN_DATE_MESSAGE}")


__all__ = ["ECB_MIN_AVAILABLE_DATE", "ECB_MIN_DATE_MESSAGE", "enforce_ecb_min_date"]
