from __future__ import annotations

from pathlib import Path

import pytest

from hits_badge.api.storage import CounterStore


@pytest.fixture()
def store():
    s = CounterStore(":memory:")
    s.initialize()
    yield s
    s.close()


@pytest.fixture()
def file_store(tmp_path: Path):
    s = CounterStore(tmp_path / "data" / "hits.db", busy_timeout_s=5.0)
    s.initialize()
    yield s
    s.close()
