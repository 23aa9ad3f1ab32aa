"""Main CLI application."""

import typer

from ledgertodo.cli.commands import config, ledger, todo

app = typer.Typer(
    name="ledgertodo",
    help="Manage a todo list stored on an account-based ledger",
    no_args_is_help=True,
)

config.register(app)
ledger.register(app)
todo.register(app)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
