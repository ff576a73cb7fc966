"""
Write phase: batched inserts, one transaction per batch.

The deadline is only checked between batches, so the phase may overrun its
budget by at most one batch.
"""

from __future__ import annotations

import sqlite3

from dbpulse.exceptions import WorkloadError
from dbpulse.phases.abstract import AbstractWorkloadPhase, PhaseContext

INSERT_SQL = (
    "INSERT INTO records (author, content, session_tag, created_at) VALUES (?, ?, ?, ?)"
)


class WritePhase(AbstractWorkloadPhase):
    name: str = "write"
    description: str = "Batched INSERTs inside one transaction per batch."

    def execute(self, ctx: PhaseContext, deadline: float) -> int:
        writes = 0
        while not self.expired(deadline):
            batch = [
                (ctx.random_author(), ctx.random_content(), ctx.session_tag, ctx.created_at)
                for _ in range(ctx.batch_size)
            ]
            inserted = []
            try:
                with ctx.storage.transaction() as conn:
                    for row in batch:
                        inserted.append(conn.execute(INSERT_SQL, row).lastrowid)
            except sqlite3.Error as exc:
                raise WorkloadError(f"write phase failed after {writes} inserts: {exc}") from exc
            # Only committed rows become addressable by later phases.
            ctx.known_ids.extend(inserted)
            writes += len(inserted)
        return writes


__all__ = ["WritePhase"]
