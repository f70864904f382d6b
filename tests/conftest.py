from __future__ import annotations

from pathlib import Path

import pytest

from eurofx.db.snapshot_store import SnapshotStore


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "eurofx.db"


@pytest.fixture
def store(db_path: Path):
    snapshot_store = SnapshotStore(db_path)
    yield snapshot_store
    snapshot_store.close()
