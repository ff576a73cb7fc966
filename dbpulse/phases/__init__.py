"""
Phases package for dbpulse.

Re-exports the phase interfaces and the four concrete phases so the workload
can import from `dbpulse.phases` directly.
"""

from dbpulse.phases.abstract import (
    AbstractWorkloadPhase,
    PhaseContext,
    WorkloadPhase,
    random_text,
)
from dbpulse.phases.delete import DeletePhase
from dbpulse.phases.read import ReadPhase
from dbpulse.phases.update import UpdatePhase
from dbpulse.phases.write import WritePhase

__all__ = [
    # Abstracts
    "AbstractWorkloadPhase",
    "PhaseContext",
    "WorkloadPhase",
    "random_text",
    # Concrete phases
    "DeletePhase",
    "ReadPhase",
    "UpdatePhase",
    "WritePhase",
]
