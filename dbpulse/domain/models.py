"""
Domain models for dbpulse.

`Record` mirrors a row of the `records` table the workload writes, reads,
updates and deletes. `WorkloadResult` is the immutable summary of one run;
it is what the cache stores and what `/api/runTest` returns, serialized with
camelCase keys.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    """
    Representation of a single row in the `records` table.
    """

    id: int = Field(..., description="Primary key (AUTOINCREMENT).")
    author: str = Field(..., description="Short synthetic author name.")
    content: str = Field(..., description="Synthetic body text.")
    session_tag: str = Field(..., description="Tag of the workload run that created the row.")
    created_at: int = Field(..., description="Creation time in epoch seconds.")

    model_config = ConfigDict(frozen=True)


class WorkloadResult(BaseModel):
    """
    Summary of one workload run.

    Rates are operations per second rounded to the nearest integer; a phase
    that performed no operations reports 0.
    """

    db_size_in_mb: float = Field(..., ge=0)
    total_operations: int = Field(..., ge=0)
    operations_per_second: int = Field(..., ge=0)
    writes: int = Field(..., ge=0)
    writes_per_second: int = Field(..., ge=0)
    reads: int = Field(..., ge=0)
    reads_per_second: int = Field(..., ge=0)
    updates: int = Field(..., ge=0)
    updates_per_second: int = Field(..., ge=0)
    deletes: int = Field(..., ge=0)
    deletes_per_second: int = Field(..., ge=0)
    duration: float = Field(..., ge=0)

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> dict:
        """JSON-ready mapping with camelCase keys."""
        return self.model_dump(by_alias=True)


__all__ = ["Record", "WorkloadResult"]
