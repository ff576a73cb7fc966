"""
dbpulse - SQLite micro-benchmark served as a web page.

Runs timed bursts of inserts, reads, updates and deletes against a single
table, caches the aggregate result for a few minutes, and reports host specs
alongside the numbers.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from dbpulse.cache import ResultCache
from dbpulse.config import Settings, get_settings
from dbpulse.domain.models import Record, WorkloadResult
from dbpulse.exceptions import CacheError, DbPulseError, StorageError, WorkloadError
from dbpulse.infrastructure.storage import StorageHandle, get_storage
from dbpulse.specs import collect_specs
from dbpulse.utils.logging import configure_logging, get_logger
from dbpulse.workload import Workload

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Core
    "StorageHandle",
    "get_storage",
    "Workload",
    "ResultCache",
    "collect_specs",
    # Models
    "Record",
    "WorkloadResult",
    # Errors
    "DbPulseError",
    "StorageError",
    "WorkloadError",
    "CacheError",
    # Logging
    "configure_logging",
    "get_logger",
]
