"""CLI command modules."""

from ledgertodo.cli.commands import config, ledger, todo

__all__ = [
    "config",
    "ledger",
    "todo",
]
