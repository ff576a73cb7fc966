"""
Exception hierarchy for dbpulse.

Every failure in the core surfaces as a subclass of DbPulseError, chained from
the underlying sqlite3 or pydantic error, so the HTTP layer can report it
without inspecting driver-specific types.
"""

from __future__ import annotations


class DbPulseError(Exception):
    """Base class for all dbpulse errors."""


class StorageError(DbPulseError):
    """Opening or configuring the database failed."""


class WorkloadError(DbPulseError):
    """A workload phase failed or violated an identifier invariant."""


class CacheError(DbPulseError):
    """A cached payload could not be serialized or deserialized."""


__all__ = ["DbPulseError", "StorageError", "WorkloadError", "CacheError"]
