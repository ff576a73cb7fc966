"""
Pytest configuration for dbpulse.

Provides fixtures for:
- Settings with short phase budgets and a temporary database file
- An opened storage handle per test
- Workloads fast enough to run many times per test session
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Generator

import pytest

from dbpulse.config import Settings, get_settings
from dbpulse.infrastructure.storage import StorageHandle, StorageManager
from dbpulse.workload import Workload

FAST_PHASE_SECONDS = 0.05
FAST_BATCH_SIZE = 10


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "bench.sqlite")


@pytest.fixture
def test_settings(db_path: str) -> Settings:
    """
    Settings fixture with test-specific overrides.
    """
    return Settings(
        db_path=db_path,
        log_level="DEBUG",
        phase_seconds=FAST_PHASE_SECONDS,
        batch_size=FAST_BATCH_SIZE,
        retention_seconds=600,
        cache_ttl_seconds=300,
    )


@pytest.fixture
def storage(db_path: str) -> Generator[StorageHandle, None, None]:
    """
    Opened storage handle on a fresh database file, closed after the test.
    """
    handle = StorageHandle(db_path).open()
    try:
        yield handle
    finally:
        handle.close()


@pytest.fixture
def fast_workload(storage: StorageHandle) -> Workload:
    return Workload(
        storage,
        phase_seconds=FAST_PHASE_SECONDS,
        batch_size=FAST_BATCH_SIZE,
        retention_seconds=600,
        rng=random.Random(42),
    )


@pytest.fixture
def storage_manager() -> Generator[StorageManager, None, None]:
    manager = StorageManager()
    try:
        yield manager
    finally:
        manager.close_all()
