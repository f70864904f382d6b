"""Rebasing, filtering and display ordering of rate mappings."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from eurofx.ingestion.models import REFERENCE_CURRENCY

# Displayed ahead of every other currency, in this order.
_PRIORITY = (REFERENCE_CURRENCY, "USD", "GBP")


def parse_symbols(value: str | Iterable[str] | None) -> list[str] | None:
    """Normalise a ``"USD,GBP"`` string or iterable of codes into a list."""

    if value is None:
        return None
    items = value.split(",") if isinstance(value, str) else list(value)
    symbols = [item.strip().upper() for item in items if item.strip()]
    return symbols or None


def resolve_base(reference: Mapping[str, float], base: str | None) -> tuple[str, float]:
    """Return ``(base, rate)`` for ``base`` as quoted in ``reference``."""

    if base is None:
        return REFERENCE_CURRENCY, 1.0
    code = base.strip().upper()
    if code not in reference:
        raise ValueError(f"{base} is an invalid base currency")
    return code, reference[code]


def validate_symbols(reference: Mapping[str, float], symbols: Sequence[str] | None) -> None:
    if symbols and not all(symbol in reference for symbol in symbols):
        raise ValueError("symbol list contains invalid symbols")


def rebase_rates(
    rates: Mapping[str, float],
    base_rate: float,
    symbols: Sequence[str] | None = None,
) -> dict[str, float]:
    """Divide every rate by ``base_rate``, keeping only ``symbols`` when given."""

    return {
        currency: rate / base_rate
        for currency, rate in rates.items()
        if not symbols or currency in symbols
    }


def sort_currencies(codes: Iterable[str]) -> list[str]:
    """Order codes with EUR first, then USD and GBP, then the rest as given."""

    ordered = list(codes)
    return sorted(
        ordered,
        key=lambda code: _PRIORITY.index(code) if code in _PRIORITY else len(_PRIORITY),
    )


__all__ = [
    "parse_symbols",
    "rebase_rates",
    "resolve_base",
    "sort_currencies",
    "validate_symbols",
]
