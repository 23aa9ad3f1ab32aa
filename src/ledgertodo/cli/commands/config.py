"""Configuration inspection commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from ledgertodo.cli.console import console, error, settings_table, success

if TYPE_CHECKING:
    from ledgertodo.config import LedgerTodoConfig

app = typer.Typer(
    name="config",
    help="Inspect and validate configuration.",
    no_args_is_help=True,
)

PathOption = Annotated[
    Path | None,
    typer.Option(
        "--path",
        "-p",
        help="Path to config file (default: $LEDGERTODO_HOME/config.toml)",
    ),
]


def register(root: typer.Typer) -> None:
    root.add_typer(app, name="config")


def _existing(path: Path | None) -> Path:
    from ledgertodo.config.paths import get_config_path

    resolved = path.expanduser() if path else get_config_path()
    if not resolved.exists():
        error(f"Config file not found: {resolved}")
        raise typer.Exit(1)
    return resolved


def _summary(config: LedgerTodoConfig) -> list[tuple[str, str | None]]:
    ledger = config.ledger
    sentry = "configured" if config.sentry and config.sentry.dsn else None
    return [
        ("Owner", config.owner),
        ("Program", ledger.program_id),
        ("Ledger socket", str(ledger.socket_path)),
        ("Ledger state", str(ledger.state_path) if ledger.state_path else None),
        ("Connect timeout", f"{ledger.connect_timeout:g}s"),
        ("Log level", config.logging.level),
        ("Redaction", "on" if config.logging.redact_secrets else "off"),
        ("Sentry", sentry),
    ]


@app.command("show")
def show_cmd(path: PathOption = None) -> None:
    """Print the config file with syntax highlighting."""
    from rich.syntax import Syntax

    config_path = _existing(path)
    console.print(f"[bold]Config file: {config_path}[/bold]\n")
    console.print(
        Syntax(config_path.read_text(), "toml", theme="monokai", line_numbers=True)
    )


@app.command("validate")
def validate_cmd(path: PathOption = None) -> None:
    """Load the config file and report what it resolves to."""
    import tomllib

    from pydantic import ValidationError

    from ledgertodo.config import load_config

    config_path = _existing(path)
    try:
        config = load_config(config_path)
    except tomllib.TOMLDecodeError as e:
        error(f"Invalid TOML: {e}")
        raise typer.Exit(1) from None
    except ValidationError as e:
        error("Configuration validation failed:")
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"])
            console.print(f"  [yellow]{loc}[/yellow]: {err['msg']}")
        raise typer.Exit(1) from None

    success("Configuration is valid!")
    console.print(settings_table("Configuration Summary", _summary(config)))


@app.command("path")
def path_cmd() -> None:
    """List the directories and files ledgertodo uses."""
    from ledgertodo.config.paths import get_all_paths

    rows = [(name, str(value)) for name, value in get_all_paths().items()]
    console.print(settings_table("Paths", rows, key_header="Name", value_header="Path"))
