from __future__ import annotations

import sqlite3

from dbpulse.domain.models import Record
from dbpulse.exceptions import WorkloadError
from dbpulse.phases.abstract import AbstractWorkloadPhase, PhaseContext

SELECT_SQL = "SELECT id, author, content, session_tag, created_at FROM records WHERE id = ?"


class ReadPhase(AbstractWorkloadPhase):
    """
    Point lookups of uniformly random identifiers from this run's write phase.

    Each row is materialised as a Record so the measured cost includes what an
    application would pay to use the data.
    """

    name: str = "read"
    description: str = "SELECT by primary key on random known ids."

    def execute(self, ctx: PhaseContext, deadline: float) -> int:
        reads = 0
        if not ctx.known_ids:
            return reads
        while not self.expired(deadline):
            record_id = ctx.random_known_id()
            try:
                row = ctx.storage.fetch_one(SELECT_SQL, (record_id,))
            except sqlite3.Error as exc:
                raise WorkloadError(f"read of record {record_id} failed: {exc}") from exc
            if row is None:
                raise WorkloadError(f"record {record_id} created by this run is missing")
            Record(**dict(row))
            reads += 1
        return reads


__all__ = ["ReadPhase"]
