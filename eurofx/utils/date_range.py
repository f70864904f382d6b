"""Utility helpers for working with calendar dates."""

from __future__ import annotations

from datetime import date, datetime


def parse_date(value: str | date) -> date:
    """Parse a date string in ISO format to :class:`date`."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def days_between(older: date, newer: date) -> int:
    """Return the number of calendar days from ``older`` to ``newer``."""

    return (newer - older).days
