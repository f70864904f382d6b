"""Order-preserving binary keys for date-indexed records.

A date is stored as its Unix timestamp at midnight UTC, written as an 8-byte
big-endian integer with the sign bit flipped. Byte-lexicographic order of the
keys is therefore calendar order, including dates before 1970.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Final

from eurofx.exceptions import MalformedKey

__all__ = ["KEY_WIDTH", "CURRENT_KEY", "encode_date", "decode_key"]

KEY_WIDTH: Final[int] = 8
# Sentinel slot for the current pointer. Its width differs from KEY_WIDTH so it
# can never collide with a date key and is skipped by range scans.
CURRENT_KEY: Final[bytes] = b"current"

_EPOCH: Final[date] = date(1970, 1, 1)
_SECONDS_PER_DAY: Final[int] = 86_400
_SIGN_FLIP: Final[int] = 1 << 63


def encode_date(day: date) -> bytes:
    """Return the fixed-width key for ``day``."""

    timestamp = (day - _EPOCH).days * _SECONDS_PER_DAY
    return (timestamp + _SIGN_FLIP).to_bytes(KEY_WIDTH, "big")


def decode_key(key: bytes) -> date:
    """Return the date encoded in ``key`` or raise :class:`MalformedKey`."""

    if len(key) != KEY_WIDTH:
        raise MalformedKey(f"date key must be {KEY_WIDTH} bytes, got {len(key)}: {key!r}")
    timestamp = int.from_bytes(key, "big") - _SIGN_FLIP
    days, remainder = divmod(timestamp, _SECONDS_PER_DAY)
    if remainder:
        raise MalformedKey(f"key {key.hex()} is not aligned to midnight UTC")
    try:
        return _EPOCH + timedelta(days=days)
    except OverflowError as exc:
        raise MalformedKey(f"key {key.hex()} is outside the supported date range") from exc
