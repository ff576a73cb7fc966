from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from dbpulse.exceptions import StorageError
from dbpulse.infrastructure.storage import StorageHandle, get_storage


def test_open_applies_tuning_pragmas(storage: StorageHandle):
    assert storage.pragma("journal_mode") == "wal"
    assert storage.pragma("cache_size") == -10000
    assert storage.pragma("synchronous") == 1  # NORMAL
    assert storage.pragma("temp_store") == 2  # MEMORY
    # builds compiled with SQLITE_MAX_MMAP_SIZE=0 report 0
    assert storage.pragma("mmap_size") in (0, 1_000_000_000)
    assert storage.pragma("busy_timeout") == 5000
    assert storage.pragma("foreign_keys") == 1


def test_open_creates_tables_and_timestamp_indexes(storage: StorageHandle):
    tables = {
        row["name"]
        for row in storage.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table'")
    }
    assert {"test_results_cache", "records"} <= tables

    cache_indexes = storage.fetch_all("PRAGMA index_list('test_results_cache')")
    record_indexes = storage.fetch_all("PRAGMA index_list('records')")
    assert any(row["name"] == "idx_test_results_cache_timestamp" for row in cache_indexes)
    assert any(row["name"] == "idx_records_created_at" for row in record_indexes)


def test_open_is_idempotent(storage: StorageHandle):
    conn = storage.connection
    assert storage.open() is storage
    assert storage.connection is conn


def test_reopening_existing_file_keeps_data(db_path: str):
    first = StorageHandle(db_path).open()
    first.execute(
        "INSERT INTO records (author, content, session_tag, created_at) VALUES (?, ?, ?, ?)",
        ("a", "b", "s", 1),
    )
    first.close()

    second = StorageHandle(db_path).open()
    try:
        assert second.fetch_one("SELECT COUNT(*) AS n FROM records")["n"] == 1
    finally:
        second.close()


def test_transaction_rolls_back_on_error(storage: StorageHandle):
    with pytest.raises(RuntimeError):
        with storage.transaction() as conn:
            conn.execute(
                "INSERT INTO test_results_cache (result, timestamp) VALUES (?, ?)", ("{}", 1)
            )
            raise RuntimeError("boom")

    assert storage.fetch_one("SELECT COUNT(*) AS n FROM test_results_cache")["n"] == 0


def test_transaction_commits(storage: StorageHandle):
    with storage.transaction() as conn:
        conn.execute("INSERT INTO test_results_cache (result, timestamp) VALUES (?, ?)", ("{}", 1))

    assert storage.fetch_one("SELECT COUNT(*) AS n FROM test_results_cache")["n"] == 1


def test_failed_commit_rolls_back_and_keeps_handle_usable(storage: StorageHandle):
    storage.execute("CREATE TABLE parent (id INTEGER PRIMARY KEY)")
    storage.execute(
        "CREATE TABLE child (id INTEGER PRIMARY KEY, parent_id INTEGER "
        "REFERENCES parent(id) DEFERRABLE INITIALLY DEFERRED)"
    )

    # The dangling reference is only checked at COMMIT.
    with pytest.raises(sqlite3.IntegrityError):
        with storage.transaction() as conn:
            conn.execute("INSERT INTO child (parent_id) VALUES (?)", (42,))

    assert storage.connection.in_transaction is False
    assert storage.fetch_one("SELECT COUNT(*) AS n FROM child")["n"] == 0

    with storage.transaction() as conn:
        conn.execute("INSERT INTO test_results_cache (result, timestamp) VALUES (?, ?)", ("{}", 2))
    assert storage.fetch_one("SELECT COUNT(*) AS n FROM test_results_cache")["n"] == 1


def test_size_bytes_reports_pages(storage: StorageHandle):
    assert storage.size_bytes() > 0
    assert storage.size_bytes() % storage.pragma("page_size") == 0


def test_open_failure_raises_storage_error(tmp_path: Path):
    # A directory cannot be opened as a database file.
    handle = StorageHandle(tmp_path)
    with pytest.raises(StorageError) as excinfo:
        handle.open()
    assert isinstance(excinfo.value.__cause__, sqlite3.Error)
    assert handle.is_open is False


def test_closed_handle_refuses_statements(db_path: str):
    handle = StorageHandle(db_path)
    with pytest.raises(StorageError):
        handle.fetch_one("SELECT 1")


def test_close_is_idempotent(db_path: str):
    handle = StorageHandle(db_path).open()
    handle.close()
    handle.close()
    assert handle.is_open is False


def test_get_storage_reuses_handle_per_path(storage_manager, db_path: str):
    first = get_storage(db_path)
    second = get_storage(db_path)
    assert first is second
    assert first.is_open


def test_get_storage_defaults_to_settings_path(storage_manager, monkeypatch, db_path: str):
    monkeypatch.setenv("DB_PATH", db_path)
    handle = get_storage()
    assert Path(handle.path) == Path(db_path)
