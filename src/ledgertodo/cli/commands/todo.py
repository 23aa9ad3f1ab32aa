"""Todo management commands."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, TypeVar

import typer

from ledgertodo.cli.console import (
    console,
    dim,
    error,
    settings_table,
    success,
    todo_table,
    warning,
)
from ledgertodo.cli.runtime import bootstrap
from ledgertodo.config import ConfigError
from ledgertodo.errors import AlreadyMarked, TodoError

if TYPE_CHECKING:
    from ledgertodo.todos import TodoOrchestrator, TodoSnapshot

T = TypeVar("T")

app = typer.Typer(
    name="todo",
    help="Manage todos stored on the ledger.",
    invoke_without_command=True,
)

OwnerOption = Annotated[
    str | None,
    typer.Option("--owner", "-o", help="Owner identity (default: from config)"),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to configuration file"),
]
VerboseOption = Annotated[
    bool, typer.Option("--verbose", "-v", help="Show debug logging")
]


def register(root: typer.Typer) -> None:
    root.add_typer(app, name="todo")


def _run(
    config_path: Path | None,
    owner: str | None,
    verbose: bool,
    action: Callable[[TodoOrchestrator], Awaitable[T]],
) -> T:
    """Build an orchestrator and run one async action, mapping errors to exit 1."""
    from ledgertodo.todos import create_orchestrator

    config = bootstrap(config_path, verbose=verbose)

    async def main() -> T:
        orchestrator = create_orchestrator(config, owner=owner)
        return await action(orchestrator)

    try:
        return asyncio.run(main())
    except AlreadyMarked as e:
        warning(str(e))
        raise typer.Exit(1) from None
    except (TodoError, ConfigError) as e:
        error(str(e))
        raise typer.Exit(1) from None


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


@app.callback()
def _default(
    ctx: typer.Context,
    owner: OwnerOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Manage todos. Run without a subcommand to list open todos."""
    if ctx.invoked_subcommand is None:
        _run(config, owner, verbose, _list(show_all=False))


@app.command("list")
def list_cmd(
    show_all: Annotated[
        bool, typer.Option("--all", "-a", help="Include marked todos")
    ] = False,
    owner: OwnerOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """List todos."""
    _run(config, owner, verbose, _list(show_all=show_all))


@app.command("add")
def add_cmd(
    content: Annotated[str, typer.Argument(help="Todo text")],
    dateline: Annotated[
        str | None, typer.Option("--dateline", "-d", help="Optional dateline text")
    ] = None,
    owner: OwnerOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Add a todo, creating the profile first if needed."""

    async def action(orchestrator: TodoOrchestrator) -> None:
        snapshot = await orchestrator.add_todo(content, dateline=dateline)
        success(f"Added todo {snapshot.next_index - 1}")

    _run(config, owner, verbose, action)


@app.command("mark")
def mark_cmd(
    index: Annotated[int, typer.Argument(help="Todo index")],
    owner: OwnerOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Mark a todo as done."""

    async def action(orchestrator: TodoOrchestrator) -> None:
        await orchestrator.mark_todo(index)
        success(f"Marked todo {index}")

    _run(config, owner, verbose, action)


@app.command("remove")
def remove_cmd(
    index: Annotated[int, typer.Argument(help="Todo index")],
    owner: OwnerOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Remove a todo permanently."""

    async def action(orchestrator: TodoOrchestrator) -> None:
        await orchestrator.remove_todo(index)
        success(f"Removed todo {index}")

    _run(config, owner, verbose, action)


@app.command("init")
def init_cmd(
    owner: OwnerOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Create the owner's profile (no-op if it exists)."""

    async def action(orchestrator: TodoOrchestrator) -> None:
        address = await orchestrator.initialize_profile()
        success("Profile ready")
        dim(f"Profile address: {address}")

    _run(config, owner, verbose, action)


@app.command("status")
def status_cmd(
    owner: OwnerOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show the owner's profile and todo counts."""

    async def action(orchestrator: TodoOrchestrator) -> None:
        snapshot = await orchestrator.refresh()
        rows = [
            ("Owner", orchestrator.owner),
            ("Profile address", orchestrator.profile_address),
            ("Profile", snapshot.profile_state.value),
            ("Next index", str(snapshot.next_index)),
            ("Open", str(len(snapshot.incomplete))),
            ("Marked", str(len(snapshot.completed))),
        ]
        console.print(settings_table("Status", rows))

    _run(config, owner, verbose, action)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _list(*, show_all: bool) -> Callable[[TodoOrchestrator], Awaitable[None]]:
    async def action(orchestrator: TodoOrchestrator) -> None:
        snapshot = await orchestrator.refresh()
        _render(snapshot, show_all=show_all)

    return action


def _render(snapshot: TodoSnapshot, *, show_all: bool) -> None:
    if not snapshot.initialized:
        warning("No profile yet. Add a todo or run 'ledgertodo todo init'.")
        return

    todos = snapshot.incomplete
    if show_all:
        todos = todos + snapshot.completed

    if not todos:
        warning("No todos found")
        return

    console.print(todo_table(todos))
    console.print(f"\n[dim]Total: {len(todos)} todo(s)[/dim]")
