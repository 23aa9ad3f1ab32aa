"""Tests for CLI commands."""

import json

import pytest

from ledgertodo.cli.app import app
from ledgertodo.ledger import DEFAULT_PROGRAM_ID, InMemoryLedger, Instruction
from tests.conftest import OWNER


@pytest.fixture
def shared_ledger(isolated_home, monkeypatch) -> InMemoryLedger:
    """One ledger shared by every CLI invocation in a test."""
    ledger = InMemoryLedger()
    monkeypatch.setattr(
        "ledgertodo.todos.factory.create_ledger_client", lambda config: ledger
    )
    return ledger


class TestConfigCommand:
    """Tests for 'ledgertodo config' command."""

    def test_config_show_displays_content(self, cli_runner, config_file):
        result = cli_runner.invoke(app, ["config", "show", "--path", str(config_file)])
        assert result.exit_code == 0
        assert "program_id" in result.stdout

    def test_config_show_missing_file(self, cli_runner, tmp_path):
        result = cli_runner.invoke(
            app, ["config", "show", "--path", str(tmp_path / "nonexistent.toml")]
        )
        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_config_validate_success(self, cli_runner, isolated_home, config_file):
        result = cli_runner.invoke(
            app, ["config", "validate", "--path", str(config_file)]
        )
        assert result.exit_code == 0
        assert "valid" in result.stdout

    def test_config_validate_invalid_toml(self, cli_runner, tmp_path):
        invalid = tmp_path / "invalid.toml"
        invalid.write_text("owner = [unclosed")

        result = cli_runner.invoke(app, ["config", "validate", "--path", str(invalid)])
        assert result.exit_code == 1
        assert "Invalid TOML" in result.stdout

    def test_config_validate_invalid_config(self, cli_runner, isolated_home, tmp_path):
        invalid = tmp_path / "invalid.toml"
        invalid.write_text('[ledger]\nconnect_timeout = -1\n')

        result = cli_runner.invoke(app, ["config", "validate", "--path", str(invalid)])
        assert result.exit_code == 1
        assert "connect_timeout" in result.stdout

    def test_config_path_lists_paths(self, cli_runner, isolated_home):
        result = cli_runner.invoke(app, ["config", "path"])
        assert result.exit_code == 0
        assert "ledger_socket" in result.stdout

    def test_config_unknown_subcommand(self, cli_runner):
        result = cli_runner.invoke(app, ["config", "unknown"])
        assert result.exit_code == 2

    def test_config_validate_rejects_bad_redact_pattern(
        self, cli_runner, isolated_home, tmp_path
    ):
        invalid = tmp_path / "invalid.toml"
        invalid.write_text('[logging]\nredact_patterns = ["(unclosed"]\n')

        result = cli_runner.invoke(app, ["config", "validate", "--path", str(invalid)])
        assert result.exit_code == 1
        assert "redact_patterns" in result.stdout


class TestTodoCommand:
    """Tests for 'ledgertodo todo' command."""

    def test_add_initializes_profile(self, cli_runner, shared_ledger):
        result = cli_runner.invoke(app, ["todo", "add", "buy milk", "-o", OWNER])

        assert result.exit_code == 0, result.stdout
        assert "Added todo 0" in result.stdout
        assert [r.instruction for r in shared_ledger.submissions] == [
            Instruction.INITIALIZE_USER,
            Instruction.ADD_TODO,
        ]

    def test_list_shows_open_todos(self, cli_runner, shared_ledger):
        cli_runner.invoke(app, ["todo", "add", "buy milk", "-o", OWNER])
        cli_runner.invoke(app, ["todo", "add", "walk dog", "-o", OWNER])
        cli_runner.invoke(app, ["todo", "mark", "1", "-o", OWNER])

        result = cli_runner.invoke(app, ["todo", "list", "-o", OWNER])

        assert result.exit_code == 0
        assert "buy milk" in result.stdout
        assert "walk dog" not in result.stdout
        assert "Total: 1" in result.stdout

    def test_list_all_includes_marked(self, cli_runner, shared_ledger):
        cli_runner.invoke(app, ["todo", "add", "buy milk", "-o", OWNER])
        cli_runner.invoke(app, ["todo", "mark", "0", "-o", OWNER])

        result = cli_runner.invoke(app, ["todo", "list", "--all", "-o", OWNER])

        assert result.exit_code == 0
        assert "buy milk" in result.stdout
        assert "done" in result.stdout

    def test_bare_todo_lists_for_env_owner(
        self, cli_runner, shared_ledger, monkeypatch
    ):
        monkeypatch.setenv("LEDGERTODO_OWNER", OWNER)
        cli_runner.invoke(app, ["todo", "add", "buy milk"])

        result = cli_runner.invoke(app, ["todo"])

        assert result.exit_code == 0
        assert "buy milk" in result.stdout

    def test_bare_todo_accepts_owner_option(self, cli_runner, shared_ledger):
        cli_runner.invoke(app, ["todo", "add", "buy milk", "-o", OWNER])

        result = cli_runner.invoke(app, ["todo", "--owner", OWNER])

        assert result.exit_code == 0
        assert "buy milk" in result.stdout

    def test_list_without_profile(self, cli_runner, shared_ledger):
        result = cli_runner.invoke(app, ["todo", "list", "-o", OWNER])

        assert result.exit_code == 0
        assert "No profile yet" in result.stdout
        assert shared_ledger.submissions == []

    def test_mark_twice_fails(self, cli_runner, shared_ledger):
        cli_runner.invoke(app, ["todo", "add", "buy milk", "-o", OWNER])
        first = cli_runner.invoke(app, ["todo", "mark", "0", "-o", OWNER])
        second = cli_runner.invoke(app, ["todo", "mark", "0", "-o", OWNER])

        assert first.exit_code == 0
        assert "Marked todo 0" in first.stdout
        assert second.exit_code == 1
        assert "already marked" in second.stdout

    def test_remove_then_list_empty(self, cli_runner, shared_ledger):
        cli_runner.invoke(app, ["todo", "add", "buy milk", "-o", OWNER])

        removed = cli_runner.invoke(app, ["todo", "remove", "0", "-o", OWNER])
        listed = cli_runner.invoke(app, ["todo", "list", "-o", OWNER])

        assert removed.exit_code == 0
        assert "Removed todo 0" in removed.stdout
        assert "No todos found" in listed.stdout

    def test_mark_missing_todo(self, cli_runner, shared_ledger):
        cli_runner.invoke(app, ["todo", "init", "-o", OWNER])

        result = cli_runner.invoke(app, ["todo", "mark", "4", "-o", OWNER])

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_out_of_range_index(self, cli_runner, shared_ledger):
        result = cli_runner.invoke(app, ["todo", "remove", "300", "-o", OWNER])

        assert result.exit_code == 1
        assert "invalid todo index" in result.stdout

    def test_blank_content(self, cli_runner, shared_ledger):
        result = cli_runner.invoke(app, ["todo", "add", "   ", "-o", OWNER])

        assert result.exit_code == 1
        assert "content is required" in result.stdout
        assert shared_ledger.submissions == []

    def test_init_and_status(self, cli_runner, shared_ledger):
        init = cli_runner.invoke(app, ["todo", "init", "-o", OWNER])
        status = cli_runner.invoke(app, ["todo", "status", "-o", OWNER])

        assert init.exit_code == 0
        assert "Profile ready" in init.stdout
        assert status.exit_code == 0
        assert "initialized" in status.stdout

    def test_requires_owner(self, cli_runner, shared_ledger):
        result = cli_runner.invoke(app, ["todo", "list"])

        assert result.exit_code == 1
        assert "No owner configured" in result.stdout

    def test_unreachable_ledger(self, cli_runner, isolated_home):
        result = cli_runner.invoke(app, ["todo", "add", "buy milk", "-o", OWNER])

        assert result.exit_code == 1
        assert "failed to fetch profile" in result.stdout


class TestLedgerCommand:
    """Tests for 'ledgertodo ledger' command."""

    def test_serve_rejects_foreign_state(self, cli_runner, isolated_home, tmp_path):
        state = tmp_path / "state.json"
        state.write_text(json.dumps({"program_id": "elsewhere"}))

        result = cli_runner.invoke(app, ["ledger", "serve", "--state", str(state)])

        assert result.exit_code == 1
        assert "Could not load ledger state" in result.stdout

    def test_serve_rejects_out_of_range_todo_index(
        self, cli_runner, isolated_home, tmp_path
    ):
        state = tmp_path / "state.json"
        state.write_text(
            json.dumps(
                {
                    "program_id": DEFAULT_PROGRAM_ID,
                    "todos": [{"owner": OWNER, "index": 300, "content": "x"}],
                }
            )
        )

        result = cli_runner.invoke(app, ["ledger", "serve", "--state", str(state)])

        assert result.exit_code == 1
        assert "Could not load ledger state" in result.stdout
