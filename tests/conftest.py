"""Shared test fixtures."""

import pytest

from cardreview.app import App
from cardreview.cache import QueryCache
from cardreview.db import BlobStorage, init_db
from cardreview.store import CardStore


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def tick(self, ms: int = 1):
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_conn():
    """In-memory SQLite database with schema applied."""
    conn = init_db(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def storage(db_conn):
    return BlobStorage(db_conn)


@pytest.fixture
def store(storage, clock):
    """Loaded CardStore over an empty in-memory database with a frozen clock."""
    s = CardStore(storage, clock=clock, cache=QueryCache(ttl_ms=5000, clock=clock))
    s.load()
    return s


@pytest.fixture
def app(tmp_path):
    """App instance with tmp data_dir and in-memory DB."""
    a = App(data_dir=tmp_path)
    a.init_db(":memory:")
    yield a
    a.close()
