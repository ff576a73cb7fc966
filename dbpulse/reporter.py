from __future__ import annotations

from typing import Mapping, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from dbpulse.domain.models import WorkloadResult

_PHASES = (
    ("Write", "writes", "writes_per_second"),
    ("Read", "reads", "reads_per_second"),
    ("Update", "updates", "updates_per_second"),
    ("Delete", "deletes", "deletes_per_second"),
)


def print_result(result: WorkloadResult, console: Optional[Console] = None) -> None:
    """
    Render a workload result as a rich table, one row per phase plus a total.
    """
    console = console or Console()

    table = Table(
        title="SQLite Throughput",
        box=box.ROUNDED,
        caption=f"Database size: {result.db_size_in_mb:.2f} MB │ Duration: {result.duration:.2f} s",
    )
    table.add_column("Phase", style="cyan", no_wrap=True)
    table.add_column("Operations", justify="right", style="magenta")
    table.add_column("Ops/s", justify="right", style="bold green")

    for label, count_field, rate_field in _PHASES:
        table.add_row(
            label,
            f"{getattr(result, count_field):,}",
            f"{getattr(result, rate_field):,}",
        )
    table.add_section()
    table.add_row(
        "Total",
        f"{result.total_operations:,}",
        f"{result.operations_per_second:,}",
        style="bold",
    )

    console.print(table)


def print_specs(specs: Mapping[str, str], console: Optional[Console] = None) -> None:
    """Render the host specs as a two-column table."""
    console = console or Console()

    table = Table(title="Server", box=box.ROUNDED, show_header=False)
    table.add_column("Spec", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")
    for label, value in specs.items():
        table.add_row(label, value)

    console.print(table)


__all__ = ["print_result", "print_specs"]
