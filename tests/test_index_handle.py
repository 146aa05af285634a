"""Tests for opening and querying the read-only snapshot."""

import sqlite3

import pytest

from pkgsearch.domain.errors import OpenError, QueryError
from pkgsearch.storage.index_handle import IndexHandle


def test_missing_file_raises_open_error(tmp_path):
    with pytest.raises(OpenError) as exc_info:
        IndexHandle.open(tmp_path / "absent.sqlite")
    assert str(tmp_path) not in exc_info.value.reason


def test_corrupt_file_raises_open_error(tmp_path):
    path = tmp_path / "corrupt.sqlite"
    path.write_bytes(b"this is not a sqlite database" * 200)
    with pytest.raises(OpenError):
        IndexHandle.open(path)


def test_database_without_packages_table_raises_open_error(tmp_path):
    path = tmp_path / "other.sqlite"
    conn = sqlite3.connect(str(path))
    conn.execute("CREATE TABLE things (id INTEGER)")
    conn.commit()
    conn.close()

    with pytest.raises(OpenError):
        IndexHandle.open(path)


def test_handle_is_read_only(index_handle):
    with pytest.raises(QueryError):
        index_handle.query("INSERT INTO packages (name, version) VALUES (?, ?)", ("evil", "1"))
    assert index_handle.query("SELECT COUNT(*) FROM packages") == [(5,)]


def test_bad_sql_raises_query_error(index_handle):
    with pytest.raises(QueryError):
        index_handle.query("SELECT nope FROM packages")


def test_waiting_for_busy_connection_is_bounded(index_path):
    handle = IndexHandle.open(index_path, lock_timeout=0.05)
    try:
        handle._gate.acquire()
        try:
            with pytest.raises(QueryError) as exc_info:
                handle.query("SELECT name FROM packages")
            assert "timed out" in exc_info.value.reason
        finally:
            handle._gate.release()

        # Released gate lets queries through again.
        assert len(handle.query("SELECT name FROM packages")) == 5
    finally:
        handle.close()


def test_unreadable_location_raises_open_error(tmp_path, monkeypatch):
    def denied(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(type(tmp_path), "is_file", denied)

    with pytest.raises(OpenError) as exc_info:
        IndexHandle.open(tmp_path / "locked" / "index.sqlite")
    assert exc_info.value.reason == "index snapshot is not accessible"


def test_driver_message_is_not_exposed(index_handle):
    with pytest.raises(QueryError) as exc_info:
        index_handle.query("SELECT nope FROM packages")
    assert "nope" not in exc_info.value.reason
    assert "no such column" not in exc_info.value.reason
