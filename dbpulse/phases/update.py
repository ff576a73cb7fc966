from __future__ import annotations

import sqlite3

from dbpulse.exceptions import WorkloadError
from dbpulse.phases.abstract import AbstractWorkloadPhase, PhaseContext

UPDATE_SQL = "UPDATE records SET content = ? WHERE id = ?"


class UpdatePhase(AbstractWorkloadPhase):
    """Overwrite the content of random known records with fresh text."""

    name: str = "update"
    description: str = "UPDATE content by primary key on random known ids."

    def execute(self, ctx: PhaseContext, deadline: float) -> int:
        updates = 0
        if not ctx.known_ids:
            return updates
        while not self.expired(deadline):
            record_id = ctx.random_known_id()
            try:
                cur = ctx.storage.execute(UPDATE_SQL, (ctx.random_content(), record_id))
            except sqlite3.Error as exc:
                raise WorkloadError(f"update of record {record_id} failed: {exc}") from exc
            if cur.rowcount != 1:
                raise WorkloadError(f"record {record_id} created by this run is missing")
            updates += 1
        return updates


__all__ = ["UpdatePhase"]
