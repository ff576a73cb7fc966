"""Starlette application serving the benchmark page and its two JSON endpoints."""

from __future__ import annotations

import traceback
from pathlib import Path
from typing import Optional

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import FileResponse, JSONResponse
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from dbpulse.cache import ResultCache
from dbpulse.config import Settings, get_settings
from dbpulse.infrastructure.storage import StorageManager
from dbpulse.specs import collect_specs
from dbpulse.utils.logging import get_logger
from dbpulse.workload import Workload

log = get_logger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


def _error_response(exc: Exception) -> JSONResponse:
    return JSONResponse(
        {
            "error": str(exc),
            "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        },
        status_code=500,
    )


def build_cache(settings: Settings) -> ResultCache:
    """Wire storage, workload and cache from settings without opening the database."""
    storage = StorageManager().get_handle(settings.db_path)
    workload = Workload(
        storage,
        phase_seconds=settings.phase_seconds,
        batch_size=settings.batch_size,
        retention_seconds=settings.retention_seconds,
    )
    return ResultCache(storage, workload, ttl_seconds=settings.cache_ttl_seconds)


def create_app(
    settings: Optional[Settings] = None,
    cache: Optional[ResultCache] = None,
) -> Starlette:
    """Create the HTTP application."""
    settings = settings or get_settings()
    result_cache = cache or build_cache(settings)

    async def index(request: Request) -> FileResponse:
        return FileResponse(STATIC_DIR / "index.html")

    async def run_test(request: Request) -> JSONResponse:
        try:
            result = await run_in_threadpool(result_cache.get_or_run)
        except Exception as exc:
            log.exception("Error in /api/runTest")
            return _error_response(exc)
        return JSONResponse(result.to_payload())

    async def get_specs(request: Request) -> JSONResponse:
        try:
            specs = await run_in_threadpool(collect_specs)
        except Exception as exc:
            log.exception("Error in /api/getSpecs")
            return _error_response(exc)
        return JSONResponse(specs)

    app = Starlette(
        routes=[
            Route("/", index, methods=["GET"]),
            Route("/api/runTest", run_test, methods=["GET"]),
            Route("/api/getSpecs", get_specs, methods=["GET"]),
            Mount("/static", app=StaticFiles(directory=STATIC_DIR), name="static"),
        ],
    )
    app.state.result_cache = result_cache
    return app


__all__ = ["create_app", "build_cache"]
