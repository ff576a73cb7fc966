"""
Domain package for dbpulse.

Exports the core value objects shared by the workload, the cache and the HTTP
layer. Keep this package focused on data definitions and validation concerns.
"""

from dbpulse.domain.models import Record, WorkloadResult

__all__ = [
    "Record",
    "WorkloadResult",
]
