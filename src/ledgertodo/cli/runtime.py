"""Shared bootstrap for CLI entrypoints."""

from __future__ import annotations

from pathlib import Path

import typer

from ledgertodo.cli.console import console, error
from ledgertodo.config import LedgerTodoConfig, load_config


def bootstrap(
    config_path: Path | None,
    *,
    verbose: bool = False,
    server_mode: bool = False,
) -> LedgerTodoConfig:
    """Load config, then set up logging and Sentry.

    Interactive commands keep the console quiet below WARNING unless
    ``verbose`` is set; the server logs at the configured level.
    """
    import tomllib

    from pydantic import ValidationError

    from ledgertodo.logging import configure_logging, configure_redaction
    from ledgertodo.observability import init_sentry

    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        error(str(e))
        raise typer.Exit(1) from None
    except tomllib.TOMLDecodeError as e:
        error(f"Invalid TOML in config file: {e}")
        raise typer.Exit(1) from None
    except ValidationError as e:
        error("Configuration validation failed:")
        for err in e.errors():
            loc = ".".join(str(x) for x in err["loc"])
            console.print(f"  [yellow]{loc}[/yellow]: {err['msg']}")
        raise typer.Exit(1) from None

    if verbose:
        level = "DEBUG"
    elif server_mode:
        level = config.logging.level
    else:
        level = "WARNING"

    configure_redaction(
        enabled=config.logging.redact_secrets,
        extra_patterns=config.logging.redact_patterns,
    )
    configure_logging(
        level=level,
        use_rich=True,
        log_to_file=config.logging.log_to_file,
    )
    init_sentry(config.sentry)
    return config
