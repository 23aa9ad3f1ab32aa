"""Console output shared by the CLI commands."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from ledgertodo.ledger.types import TodoRecord

console = Console()

# Longest task text shown in a table cell before truncation
TASK_PREVIEW_CHARS = 50

NOT_SET = "[dim]-[/dim]"


def error(msg: str) -> None:
    console.print(f"[red]{msg}[/red]")


def warning(msg: str) -> None:
    console.print(f"[yellow]{msg}[/yellow]")


def success(msg: str) -> None:
    console.print(f"[green]{msg}[/green]")


def dim(msg: str) -> None:
    console.print(f"[dim]{msg}[/dim]")


def status_label(marked: bool) -> str:
    return "[green]done[/green]" if marked else "[cyan]open[/cyan]"


def preview(text: str, limit: int = TASK_PREVIEW_CHARS) -> str:
    """Shorten ``text`` to ``limit`` characters plus an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def todo_table(todos: Iterable[TodoRecord], title: str = "Todos") -> Table:
    """One row per todo, in the order given."""
    table = Table(title=title)
    table.add_column("Index", style="dim", justify="right")
    table.add_column("Status")
    table.add_column("Task")
    table.add_column("Dateline")
    for todo in todos:
        table.add_row(
            str(todo.index),
            status_label(todo.marked),
            preview(todo.content),
            todo.dateline or NOT_SET,
        )
    return table


def settings_table(
    title: str,
    rows: Iterable[tuple[str, str | None]],
    *,
    key_header: str = "Setting",
    value_header: str = "Value",
) -> Table:
    """Two-column key/value table; ``None`` values render as a dim dash."""
    table = Table(title=title)
    table.add_column(key_header, style="cyan")
    table.add_column(value_header)
    for key, value in rows:
        table.add_row(key, NOT_SET if value is None else value)
    return table
