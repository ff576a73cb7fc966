from __future__ import annotations

import json
import sys
from typing import Optional

import typer

from dbpulse.config import get_settings
from dbpulse.reporter import print_result, print_specs
from dbpulse.specs import collect_specs
from dbpulse.utils.logging import configure_logging
from dbpulse.web.app import build_cache, create_app

app = typer.Typer(help="SQLite micro-benchmark page and CLI.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_path} | phase={settings.phase_seconds}s "
        f"batch={settings.batch_size} retention={settings.retention_seconds}s "
        f"cache_ttl={settings.cache_ttl_seconds}s | "
        f"http={settings.http_host}:{settings.http_port}"
    )


@app.command()
def run(
    fresh: bool = typer.Option(
        False,
        "--fresh",
        "-f",
        help="Drop the cached result and run the workload now.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """
    Return the cached workload result, running the workload when it is stale.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    cache = build_cache(settings)
    if fresh:
        cache.invalidate()
    result = cache.get_or_run()

    if as_json:
        typer.echo(json.dumps(result.to_payload(), indent=2))
    else:
        print_result(result)


@app.command()
def specs(
    as_json: bool = typer.Option(False, "--json", help="Print the specs as JSON."),
) -> None:
    """
    Show host CPU, memory and platform specs.
    """
    snapshot = collect_specs()
    if as_json:
        typer.echo(json.dumps(snapshot, indent=2))
    else:
        print_specs(snapshot)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default from settings)."),
) -> None:
    """
    Serve the benchmark page and API with uvicorn.
    """
    import uvicorn

    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    uvicorn.run(
        create_app(settings),
        host=host or settings.http_host,
        port=port or settings.http_port,
        log_config=None,
    )


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
