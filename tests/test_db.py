"""Tests for cardreview.db."""

import pytest

from cardreview.db import SCHEMA, BlobStorage, PersistError, init_db


def test_schema_creation():
    conn = init_db(":memory:")
    tables = [r[0] for r in conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name").fetchall()]
    assert "plugin_data" in tables
    conn.close()


def test_idempotent_schema():
    conn = init_db(":memory:")
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def test_file_db(tmp_path):
    db_path = tmp_path / "sub" / "test.db"
    conn = init_db(db_path)
    assert db_path.exists()
    wal = conn.execute("PRAGMA journal_mode").fetchone()[0]
    assert wal == "wal"
    conn.close()


def test_blob_round_trip(db_conn):
    storage = BlobStorage(db_conn)
    assert storage.load() is None
    storage.save({"cards": [{"id": "1", "text": "café"}]})
    storage.save({"cards": []})
    assert storage.load() == {"cards": []}
    count = db_conn.execute("SELECT COUNT(*) FROM plugin_data").fetchone()[0]
    assert count == 1


def test_separate_keys(db_conn):
    BlobStorage(db_conn, key="a").save({"x": 1})
    assert BlobStorage(db_conn, key="b").load() is None


def test_corrupt_blob_loads_as_none(db_conn):
    db_conn.execute("INSERT INTO plugin_data (key, value) VALUES ('data', 'not json')")
    assert BlobStorage(db_conn).load() is None
    db_conn.execute("UPDATE plugin_data SET value='[1, 2]' WHERE key='data'")
    assert BlobStorage(db_conn).load() is None


def test_save_failure_raises_persist_error(db_conn):
    storage = BlobStorage(db_conn)
    db_conn.execute("DROP TABLE plugin_data")
    with pytest.raises(PersistError) as exc:
        storage.save({"cards": []})
    assert exc.value.__cause__ is not None
