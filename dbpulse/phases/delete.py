from __future__ import annotations

import sqlite3

from dbpulse.exceptions import WorkloadError
from dbpulse.phases.abstract import AbstractWorkloadPhase, PhaseContext

DELETE_SQL = "DELETE FROM records WHERE id = ?"


class DeletePhase(AbstractWorkloadPhase):
    """
    Delete known records newest first until the budget or the ids run out.

    Identifiers are popped before the statement runs, so none is deleted twice.
    Rows the phase does not reach are left for the run's session cleanup.
    """

    name: str = "delete"
    description: str = "DELETE by primary key, popping known ids."

    def execute(self, ctx: PhaseContext, deadline: float) -> int:
        deletes = 0
        while ctx.known_ids and not self.expired(deadline):
            record_id = ctx.known_ids.pop()
            try:
                cur = ctx.storage.execute(DELETE_SQL, (record_id,))
            except sqlite3.Error as exc:
                raise WorkloadError(f"delete of record {record_id} failed: {exc}") from exc
            if cur.rowcount != 1:
                raise WorkloadError(f"record {record_id} created by this run is missing")
            deletes += 1
        return deletes


__all__ = ["DeletePhase"]
