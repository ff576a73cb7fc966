"""
Phase interfaces and shared state for a dbpulse workload run.

Concrete phases (write, read, update, delete) implement the WorkloadPhase
protocol. They share one PhaseContext per run: the storage handle, the
ordered list of identifiers the write phase created, and the run's session
tag and random generator.
"""

from __future__ import annotations

import abc
import random
import string
import time
from dataclasses import dataclass, field
from typing import List, Protocol, runtime_checkable

from dbpulse.infrastructure.storage import StorageHandle

_ALPHABET = string.ascii_letters + string.digits

AUTHOR_LENGTH = (6, 12)
CONTENT_LENGTH = (40, 160)


def random_text(rng: random.Random, min_len: int, max_len: int) -> str:
    """Random alphanumeric string with a length drawn from [min_len, max_len]."""
    return "".join(rng.choices(_ALPHABET, k=rng.randint(min_len, max_len)))


@dataclass
class PhaseContext:
    """
    Mutable state threaded through the phases of one run.

    `known_ids` only ever holds identifiers inserted by this run's write phase;
    the delete phase pops from it so an identifier is deleted at most once.
    """

    storage: StorageHandle
    session_tag: str
    created_at: int
    batch_size: int
    rng: random.Random = field(default_factory=random.Random)
    known_ids: List[int] = field(default_factory=list)

    def random_author(self) -> str:
        return random_text(self.rng, *AUTHOR_LENGTH)

    def random_content(self) -> str:
        return random_text(self.rng, *CONTENT_LENGTH)

    def random_known_id(self) -> int:
        return self.rng.choice(self.known_ids)


@runtime_checkable
class WorkloadPhase(Protocol):
    """
    Common interface all workload phases implement.

    Attributes
    ----------
    name : str
        Short identifier, also the key used in the result ("write", ...).
    description : str
        A human-friendly summary of the phase.
    """

    name: str
    description: str

    def execute(self, ctx: PhaseContext, deadline: float) -> int:
        """
        Run the phase until `time.perf_counter()` reaches `deadline`.

        Returns
        -------
        int
            Number of operations performed.
        """
        ...


class AbstractWorkloadPhase(abc.ABC):
    """
    ABC helper for class-based phases.

    Subclasses set `name` and `description` and implement `execute`.
    """

    name: str
    description: str

    @abc.abstractmethod
    def execute(self, ctx: PhaseContext, deadline: float) -> int:  # pragma: no cover
        raise NotImplementedError

    @staticmethod
    def expired(deadline: float) -> bool:
        return time.perf_counter() >= deadline


__all__ = [
    "AbstractWorkloadPhase",
    "PhaseContext",
    "WorkloadPhase",
    "random_text",
]
