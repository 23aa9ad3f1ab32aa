"""Tests for configuration loading, models, and paths."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from ledgertodo.config import (
    ConfigError,
    LedgerConfig,
    LedgerTodoConfig,
    find_config_path,
    get_home,
    load_config,
)
from ledgertodo.config.loader import OWNER_ENV_VAR
from ledgertodo.config.paths import (
    ENV_VAR,
    get_all_paths,
    get_ledger_socket_path,
    get_ledger_state_path,
)
from ledgertodo.ledger import DEFAULT_PROGRAM_ID
from tests.conftest import OWNER


class TestGetHome:
    def test_default_is_home_dot_ledgertodo(self, monkeypatch):
        monkeypatch.delenv(ENV_VAR, raising=False)
        get_home.cache_clear()
        try:
            assert get_home() == Path.home() / ".ledgertodo"
        finally:
            get_home.cache_clear()

    def test_respects_env_var(self, isolated_home):
        assert get_home() == isolated_home.resolve()

    def test_ledger_paths_live_under_home(self, isolated_home):
        home = isolated_home.resolve()
        assert get_ledger_socket_path() == home / "run" / "ledger.sock"
        assert get_ledger_state_path() == home / "ledger" / "state.json"
        assert set(get_all_paths()) == {
            "home",
            "config",
            "logs",
            "run",
            "ledger_socket",
            "ledger_state",
        }


class TestModels:
    def test_defaults(self, isolated_home):
        config = LedgerTodoConfig()

        assert config.owner is None
        assert config.ledger.program_id == DEFAULT_PROGRAM_ID
        assert config.ledger.socket_path == get_ledger_socket_path()
        assert config.logging.level == "INFO"
        assert config.sentry is None

    def test_blank_program_id_is_rejected(self):
        with pytest.raises(ValidationError):
            LedgerConfig(program_id="   ")

    def test_connect_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            LedgerConfig(connect_timeout=0)

    def test_invalid_log_level_is_rejected(self):
        with pytest.raises(ValidationError):
            LedgerTodoConfig.model_validate({"logging": {"level": "LOUD"}})

    def test_redaction_defaults_on(self):
        config = LedgerTodoConfig()
        assert config.logging.redact_secrets is True
        assert config.logging.redact_patterns == []

    def test_uncompilable_redact_pattern_is_rejected(self):
        with pytest.raises(ValidationError, match="invalid pattern"):
            LedgerTodoConfig.model_validate(
                {"logging": {"redact_patterns": ["(unclosed"]}}
            )

    def test_require_owner_prefers_override(self):
        config = LedgerTodoConfig(owner=OWNER)
        assert config.require_owner() == OWNER
        assert config.require_owner("  someone-else ") == "someone-else"

    def test_require_owner_without_owner_fails(self):
        with pytest.raises(ConfigError, match="No owner configured"):
            LedgerTodoConfig().require_owner()


class TestLoadConfig:
    def test_loads_file(self, isolated_home, config_file):
        config = load_config(config_file)

        assert config.owner == OWNER
        assert config.ledger.program_id.startswith("todoTest")
        assert config.ledger.connect_timeout == 2.5
        assert config.logging.level == "DEBUG"

    def test_explicit_missing_path_raises(self, isolated_home, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_no_config_anywhere_uses_defaults(self, isolated_home, monkeypatch):
        monkeypatch.setattr(
            "ledgertodo.config.loader._get_default_config_paths",
            lambda: [isolated_home / "config.toml"],
        )

        assert find_config_path() is None
        config = load_config()
        assert config.owner is None

    def test_finds_config_in_home(self, isolated_home, config_toml_content):
        isolated_home.mkdir(parents=True)
        (isolated_home / "config.toml").write_text(config_toml_content)

        assert load_config().owner == OWNER

    def test_owner_from_environment(self, isolated_home, tmp_path, monkeypatch):
        path = tmp_path / "no-owner.toml"
        path.write_text('[logging]\nlevel = "INFO"\n')
        monkeypatch.setenv(OWNER_ENV_VAR, "env-owner")

        assert load_config(path).owner == "env-owner"

    def test_file_owner_wins_over_environment(
        self, isolated_home, config_file, monkeypatch
    ):
        monkeypatch.setenv(OWNER_ENV_VAR, "env-owner")

        assert load_config(config_file).owner == OWNER

    def test_sentry_dsn_from_environment(self, isolated_home, tmp_path, monkeypatch):
        path = tmp_path / "sentry.toml"
        path.write_text('[sentry]\nenvironment = "test"\n')
        monkeypatch.setenv("SENTRY_DSN", "https://abc@example.ingest.sentry.io/1")

        config = load_config(path)

        assert config.sentry is not None
        assert config.sentry.dsn is not None
        assert config.sentry.dsn.get_secret_value().startswith("https://abc@")

    def test_invalid_toml_raises(self, isolated_home, tmp_path):
        import tomllib

        path = tmp_path / "broken.toml"
        path.write_text("owner = \n")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_config(path)
