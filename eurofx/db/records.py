"""Versioned serialization of :class:`RateSnapshot` records."""

from __future__ import annotations

import json
from datetime import date
from typing import Final

from eurofx.exceptions import StoreCorrupt
from eurofx.ingestion.models import RateSnapshot

__all__ = ["RECORD_VERSION", "encode_snapshot", "decode_snapshot"]

RECORD_VERSION: Final[int] = 1


def encode_snapshot(snapshot: RateSnapshot) -> bytes:
    """Serialize ``snapshot`` as a version byte followed by compact JSON."""

    payload = {
        "date": snapshot.rate_date.isoformat(),
        "rates": dict(sorted(snapshot.rates.items())),
    }
    body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return bytes([RECORD_VERSION]) + body


def decode_snapshot(blob: bytes) -> RateSnapshot:
    """Rebuild a snapshot from ``blob`` or raise :class:`StoreCorrupt`."""

    if not blob:
        raise StoreCorrupt("empty snapshot record")
    version = blob[0]
    if version != RECORD_VERSION:
        raise StoreCorrupt(f"unsupported snapshot record version {version}")
    try:
        payload = json.loads(blob[1:].decode("utf-8"))
        return RateSnapshot(
            rate_date=date.fromisoformat(payload["date"]),
            rates=payload["rates"],
        )
    except (UnicodeDecodeError, ValueError, KeyError, TypeError, AttributeError) as exc:
        raise StoreCorrupt(f"could not deserialize snapshot record, {exc}") from exc
