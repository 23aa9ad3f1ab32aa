"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import SecretStr

from ledgertodo.config.models import LedgerTodoConfig
from ledgertodo.config.paths import get_config_path

OWNER_ENV_VAR = "LEDGERTODO_OWNER"


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("config.toml"),  # Current directory
        get_config_path(),  # ~/.ledgertodo/config.toml (or LEDGERTODO_HOME)
        Path("/etc/ledgertodo/config.toml"),  # System-wide
    ]


def _resolve_env(config: dict[str, Any]) -> dict[str, Any]:
    """Fill values from the environment where the file leaves them unset."""
    if not config.get("owner"):
        if owner := os.environ.get(OWNER_ENV_VAR):
            config["owner"] = owner

    sentry = config.get("sentry")
    if isinstance(sentry, dict) and sentry.get("dsn") is None:
        if dsn := os.environ.get("SENTRY_DSN"):
            sentry["dsn"] = SecretStr(dsn)

    return config


def find_config_path(path: Path | None = None) -> Path | None:
    """Return the config file to load, or None if no default exists.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
    """
    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return config_path

    for default_path in _get_default_config_paths():
        expanded = default_path.expanduser()
        if expanded.exists():
            return expanded
    return None


def load_config(path: Path | None = None) -> LedgerTodoConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default
            locations and falls back to defaults when none exists.

    Returns:
        Validated LedgerTodoConfig instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
        pydantic.ValidationError: If the config does not validate.
    """
    config_path = find_config_path(path)

    raw_config: dict[str, Any] = {}
    if config_path is not None:
        with config_path.open("rb") as f:
            raw_config = tomllib.load(f)

    raw_config = _resolve_env(raw_config)

    return LedgerTodoConfig.model_validate(raw_config)
