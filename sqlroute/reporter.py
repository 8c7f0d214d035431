from __future__ import annotations

from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from sqlroute.domain.models import QueryLogEntry

STATEMENT_PREVIEW_CHARS = 80


def _preview(statement: str, limit: int = STATEMENT_PREVIEW_CHARS) -> str:
    flat = " ".join(statement.split())
    if len(flat) <= limit:
        return flat
    return flat[: limit - 1] + "…"


def _format_values(entry: QueryLogEntry) -> str:
    if not entry.values:
        return ""
    return ", ".join(f"{key}={value!r}" for key, value in entry.values.items())


def _format_performed(performed: Optional[bool]) -> str:
    if performed is None:
        return ""
    return "yes" if performed else "[red]no[/red]"


def build_query_log_table(entries: Sequence[QueryLogEntry], title: str = "Query Log") -> Table:
    """
    Build a rich table for query log entries, in the order they were recorded.
    """
    table = Table(title=title, box=box.ROUNDED, caption=f"{len(entries)} entries")

    table.add_column("#", justify="right", style="dim")
    table.add_column("Connection", style="cyan", no_wrap=True)
    table.add_column("Statement", style="white")
    table.add_column("Values", style="magenta")
    table.add_column("Duration (ms)", justify="right", style="green")
    table.add_column("Performed", justify="center", style="yellow")

    for index, entry in enumerate(entries, start=1):
        duration_ms = (entry.duration or 0.0) * 1000
        table.add_row(
            str(index),
            entry.connection or "-",
            _preview(entry.statement),
            _format_values(entry),
            f"{duration_ms:.2f}",
            _format_performed(entry.performed),
        )
    return table


def print_query_log(entries: List[QueryLogEntry], console: Optional[Console] = None) -> None:
    """
    Render query log entries as a rich table.
    """
    console = console or Console()

    if not entries:
        console.print("[yellow]No queries logged.[/yellow]")
        return

    console.print(build_query_log_table(entries))


__all__ = ["build_query_log_table", "print_query_log"]
