"""
HTTP layer for dbpulse: a static page plus `/api/runTest` and `/api/getSpecs`.
"""

from dbpulse.web.app import build_cache, create_app

__all__ = ["build_cache", "create_app"]
