"""Session history display."""

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .history import SessionLogEntry


def build_stats_table(entries: List[SessionLogEntry]) -> Table:
    table = Table(title="Pomodoro Sessions", box=box.ROUNDED, border_style="cyan")
    table.add_column("Date")
    table.add_column("Work Sessions", justify="right")

    for entry in entries:
        table.add_row(entry.date, str(entry.work_sessions))

    total = sum(entry.work_sessions for entry in entries)
    table.add_section()
    table.add_row("[bold]Total[/bold]", f"[bold]{total}[/bold]")
    return table


def print_stats(entries: List[SessionLogEntry], console: Optional[Console] = None) -> None:
    """Print the history table, or a notice when there is none."""
    console = console or Console()
    if not entries:
        console.print("No session data found.")
        return
    console.print(build_stats_table(entries))
