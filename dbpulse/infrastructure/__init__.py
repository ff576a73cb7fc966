"""
Infrastructure package for dbpulse.

Centralizes SQLite connectivity: the configured storage handle and the
process-wide manager that hands it out. Keep this layer focused on I/O and
resource management, decoupled from workload and cache logic.
"""

from dbpulse.infrastructure.storage import (
    PRAGMAS,
    StorageHandle,
    StorageManager,
    get_storage,
)

__all__ = [
    "PRAGMAS",
    "StorageHandle",
    "StorageManager",
    "get_storage",
]
