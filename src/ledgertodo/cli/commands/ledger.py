"""Local ledger server commands."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from ledgertodo.cli.console import console, dim, error, success
from ledgertodo.cli.runtime import bootstrap

app = typer.Typer(
    name="ledger",
    help="Run a local ledger that enforces the todo program rules.",
    no_args_is_help=True,
)


def register(root: typer.Typer) -> None:
    root.add_typer(app, name="ledger")


@app.command("serve")
def serve_cmd(
    socket_path: Annotated[
        Path | None,
        typer.Option("--socket", "-s", help="Unix socket to listen on"),
    ] = None,
    state_path: Annotated[
        Path | None,
        typer.Option("--state", help="JSON snapshot file for ledger state"),
    ] = None,
    ephemeral: Annotated[
        bool,
        typer.Option("--ephemeral", help="Keep state in memory only"),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to configuration file"),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug logging")
    ] = False,
) -> None:
    """Serve a ledger over JSON-RPC until interrupted."""
    from ledgertodo.ledger import AddressDeriver, InMemoryLedger
    from ledgertodo.rpc import RPCServer, register_ledger_methods

    cfg = bootstrap(config, verbose=verbose, server_mode=True)

    socket = (socket_path or cfg.ledger.socket_path).expanduser()
    state = None if ephemeral else (state_path or cfg.ledger.state_path)
    deriver = AddressDeriver(cfg.ledger.program_id)

    try:
        if state is not None:
            ledger = InMemoryLedger.load(state.expanduser(), deriver)
        else:
            ledger = InMemoryLedger(deriver)
    except ValueError as e:
        error(f"Could not load ledger state: {e}")
        raise typer.Exit(1) from None

    server = RPCServer(socket)
    register_ledger_methods(server, ledger)

    success(f"Ledger listening on {socket}")
    dim(f"Program: {deriver.program_id}")
    dim(f"State: {state or 'in memory'}")

    try:
        asyncio.run(server.serve_forever())
    except KeyboardInterrupt:
        console.print("\n[dim]Ledger stopped[/dim]")
