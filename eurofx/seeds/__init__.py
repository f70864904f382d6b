"""Store population procedures for :mod:`eurofx`."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__all__ = [
    "bootstrap_store",
    "init_store",
    "reconcile",
    "select_fetch_tier",
]

if TYPE_CHECKING:  # pragma: no cover - import only for static analyzers
    from eurofx.seeds.bootstrap import bootstrap_store as bootstrap_store
    from eurofx.seeds.bootstrap import init_store as init_store
    from eurofx.seeds.reconcile import reconcile as reconcile
    from eurofx.seeds.reconcile import select_fetch_tier as select_fetch_tier


def __getattr__(name: str) -> Any:
    """Lazily expose the procedures to avoid import-time side effects."""

    if name in {"bootstrap_store", "init_store"}:
        from eurofx.seeds import bootstrap as _bootstrap

        return getattr(_bootstrap, name)
    if name in {"reconcile", "select_fetch_tier"}:
        from eurofx.seeds import reconcile as _reconcile

        return getattr(_reconcile, name)
    raise AttributeError(f"module 'eurofx.seeds' has no attribute {name}")
