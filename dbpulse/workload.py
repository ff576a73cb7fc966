"""
Workload runner: four timed phases against the records table, then metrics.

Usage:
    from dbpulse.infrastructure.storage import get_storage
    from dbpulse.workload import Workload

    result = Workload(get_storage(), phase_seconds=5.0, batch_size=10).run()
    print(result.to_payload())

Phases run strictly one after another on the caller's thread, so each rate
reflects a single operation type on a single connection.
"""

from __future__ import annotations

import random
import sqlite3
import time
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional

from dbpulse.config import get_settings
from dbpulse.domain.models import WorkloadResult
from dbpulse.exceptions import WorkloadError
from dbpulse.infrastructure.storage import StorageHandle
from dbpulse.phases import (
    DeletePhase,
    PhaseContext,
    ReadPhase,
    UpdatePhase,
    WorkloadPhase,
    WritePhase,
)
from dbpulse.utils.logging import get_logger
from dbpulse.utils.profiler import profile_block

log = get_logger(__name__)

BYTES_PER_MB = 1024 * 1024

CLEANUP_SQL = "DELETE FROM records WHERE session_tag = ? OR created_at < ?"


@dataclass(frozen=True)
class PhaseResult:
    name: str
    operations: int
    elapsed_seconds: float
    per_second: int
    cpu_percent: Optional[float] = None
    peak_rss_bytes: Optional[int] = None


def rate(operations: int, seconds: float) -> int:
    """Operations per second rounded to an integer; 0 when nothing to divide."""
    if operations <= 0 or seconds <= 0:
        return 0
    return int(round(operations / seconds))


def default_phases() -> List[WorkloadPhase]:
    """Phases in execution order."""
    return [WritePhase(), ReadPhase(), UpdatePhase(), DeletePhase()]


class Workload:
    """
    Runs the write/read/update/delete phases and aggregates a WorkloadResult.

    Parameters
    ----------
    storage : StorageHandle
        Handle the phases operate on; opened on demand.
    phase_seconds : float | None
        Time budget per phase. Defaults to settings.phase_seconds.
    batch_size : int | None
        Inserts per write transaction. Defaults to settings.batch_size.
    retention_seconds : int | None
        Rows older than this are swept after each run.
    rng : random.Random | None
        Source for identifiers and synthetic text.
    clock : callable
        Epoch-seconds clock used for `created_at` and the retention horizon.
    """

    def __init__(
        self,
        storage: StorageHandle,
        phase_seconds: Optional[float] = None,
        batch_size: Optional[int] = None,
        retention_seconds: Optional[int] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        settings = get_settings()
        self.storage = storage
        self.phase_seconds = settings.phase_seconds if phase_seconds is None else phase_seconds
        self.batch_size = settings.batch_size if batch_size is None else batch_size
        if self.batch_size < 1:
            raise WorkloadError(f"batch size must be at least 1, got {self.batch_size}")
        self.retention_seconds = (
            settings.retention_seconds if retention_seconds is None else retention_seconds
        )
        self.rng = rng or random.Random()
        self.clock = clock
        self.phases: List[WorkloadPhase] = default_phases()

    def _new_context(self) -> PhaseContext:
        now = self.clock()
        return PhaseContext(
            storage=self.storage,
            session_tag=f"test_{int(now * 1000)}_{uuid.uuid4().hex[:8]}",
            created_at=int(now),
            batch_size=self.batch_size,
            rng=self.rng,
        )

    def _run_phase(self, phase: WorkloadPhase, ctx: PhaseContext) -> PhaseResult:
        log.info(f"[PHASE START] {phase.name}", extra={"phase": phase.name})
        with profile_block(phase.name) as stats:
            operations = phase.execute(ctx, time.perf_counter() + self.phase_seconds)
        result = PhaseResult(
            name=phase.name,
            operations=operations,
            elapsed_seconds=stats.duration_seconds,
            per_second=rate(operations, stats.duration_seconds),
            cpu_percent=stats.cpu_percent,
            peak_rss_bytes=stats.peak_rss_bytes,
        )
        log.info(
            f"[PHASE COMPLETE] {phase.name}",
            extra={
                "phase": phase.name,
                "operations": result.operations,
                "elapsed_seconds": round(result.elapsed_seconds, 3),
                "per_second": result.per_second,
                "cpu_percent": result.cpu_percent,
                "peak_rss_bytes": result.peak_rss_bytes,
            },
        )
        return result

    def _cleanup(self, ctx: PhaseContext) -> int:
        horizon = int(self.clock()) - self.retention_seconds
        try:
            removed = self.storage.execute(CLEANUP_SQL, (ctx.session_tag, horizon)).rowcount
        except sqlite3.Error as exc:
            raise WorkloadError(f"cleanup of session {ctx.session_tag} failed: {exc}") from exc
        ctx.known_ids.clear()
        log.debug(
            "[CLEANUP] removed leftover rows",
            extra={"session_tag": ctx.session_tag, "removed": removed, "horizon": horizon},
        )
        return removed

    def run(self) -> WorkloadResult:
        """
        Execute one full run.

        Raises
        ------
        StorageError
            If the database cannot be opened.
        WorkloadError
            If any statement fails or a known identifier no longer resolves.
        """
        self.storage.open()
        ctx = self._new_context()
        log.info(
            "[WORKLOAD START]",
            extra={
                "session_tag": ctx.session_tag,
                "phase_seconds": self.phase_seconds,
                "batch_size": self.batch_size,
            },
        )

        start = time.perf_counter()
        results = {phase.name: self._run_phase(phase, ctx) for phase in self.phases}
        self._cleanup(ctx)
        duration = time.perf_counter() - start

        size_mb = round(self.storage.size_bytes() / BYTES_PER_MB, 2)
        total = sum(r.operations for r in results.values())
        window = self.phase_seconds * len(self.phases)

        workload_result = WorkloadResult(
            db_size_in_mb=size_mb,
            total_operations=total,
            operations_per_second=rate(total, window),
            writes=results["write"].operations,
            writes_per_second=results["write"].per_second,
            reads=results["read"].operations,
            reads_per_second=results["read"].per_second,
            updates=results["update"].operations,
            updates_per_second=results["update"].per_second,
            deletes=results["delete"].operations,
            deletes_per_second=results["delete"].per_second,
            duration=round(duration, 2),
        )
        log.info(
            "[WORKLOAD COMPLETE]",
            extra={
                "session_tag": ctx.session_tag,
                "total_operations": total,
                "operations_per_second": workload_result.operations_per_second,
                "duration": workload_result.duration,
            },
        )
        return workload_result


__all__ = ["PhaseResult", "Workload", "default_phases", "rate"]
