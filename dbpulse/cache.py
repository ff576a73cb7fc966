"""
Single-row result cache in front of the workload.

A run takes several seconds per phase, so `/api/runTest` serves the last
result until it is `ttl_seconds` old. The table keeps at most one row: a
refresh deletes every cached row and inserts the new one in one transaction.

Concurrent misses are collapsed: the check-run-store sequence holds a lock,
and a waiter re-reads the cache once it gets the lock, so it returns the
result its predecessor just stored instead of starting a second run.
"""

from __future__ import annotations

import sqlite3
import threading
import time
from typing import Callable, Optional

from pydantic import ValidationError

from dbpulse.config import get_settings
from dbpulse.domain.models import WorkloadResult
from dbpulse.exceptions import CacheError
from dbpulse.infrastructure.storage import StorageHandle
from dbpulse.utils.logging import get_logger
from dbpulse.workload import Workload

log = get_logger(__name__)

SELECT_LATEST_SQL = "SELECT result, timestamp FROM test_results_cache ORDER BY timestamp DESC LIMIT 1"
DELETE_ALL_SQL = "DELETE FROM test_results_cache"
INSERT_SQL = "INSERT INTO test_results_cache (result, timestamp) VALUES (?, ?)"


class ResultCache:
    def __init__(
        self,
        storage: StorageHandle,
        workload: Workload,
        ttl_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.storage = storage
        self.workload = workload
        self.ttl_seconds = get_settings().cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.clock = clock
        self._lock = threading.Lock()

    def _fresh(self, now: float) -> Optional[WorkloadResult]:
        row = self.storage.fetch_one(SELECT_LATEST_SQL)
        if row is None:
            return None
        age = now - row["timestamp"]
        if age >= self.ttl_seconds:
            log.debug("[CACHE STALE]", extra={"age_seconds": round(age, 1)})
            return None
        try:
            result = WorkloadResult.model_validate_json(row["result"])
        except ValidationError as exc:
            raise CacheError(f"cached workload result is unreadable: {exc}") from exc
        log.info("[CACHE HIT]", extra={"age_seconds": round(age, 1)})
        return result

    def _store(self, result: WorkloadResult, now: float) -> None:
        payload = result.model_dump_json(by_alias=True)
        with self.storage.transaction() as conn:
            conn.execute(DELETE_ALL_SQL)
            conn.execute(INSERT_SQL, (payload, int(now)))

    def get_or_run(self) -> WorkloadResult:
        """
        Return the cached result if fresh, otherwise run the workload and cache it.

        Raises
        ------
        StorageError, WorkloadError, CacheError
            Propagated unchanged; nothing is retried.
        """
        self.storage.open()
        with self._lock:
            cached = self._fresh(self.clock())
            if cached is not None:
                return cached

            log.info("[CACHE MISS] running workload")
            result = self.workload.run()
            self._store(result, self.clock())
            return result

    def invalidate(self) -> None:
        """Drop the cached row so the next call runs the workload."""
        self.storage.open()
        with self._lock:
            try:
                self.storage.execute(DELETE_ALL_SQL)
            except sqlite3.Error as exc:
                raise CacheError(f"failed to clear cached result: {exc}") from exc
        log.info("[CACHE INVALIDATED]")


__all__ = ["ResultCache"]
