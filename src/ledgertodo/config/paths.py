"""Centralized path management.

All local state (config, logs, the served ledger's socket and snapshot) lives
under a single base directory, overridable with LEDGERTODO_HOME.

Default locations:
- Linux/macOS: ~/.ledgertodo
- Windows: %USERPROFILE%\\.ledgertodo
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "LEDGERTODO_HOME"


@lru_cache(maxsize=1)
def get_home() -> Path:
    """Get the base directory for all ledgertodo data.

    Resolution order:
    1. LEDGERTODO_HOME environment variable (if set)
    2. Platform default (~/.ledgertodo)
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".ledgertodo"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_home() / "config.toml"


def get_logs_path() -> Path:
    """Get the default logs directory path."""
    return get_home() / "logs"


def get_run_path() -> Path:
    """Get the runtime directory path (sockets)."""
    return get_home() / "run"


def get_ledger_socket_path() -> Path:
    """Get the socket path of the locally served ledger."""
    return get_run_path() / "ledger.sock"


def get_ledger_state_path() -> Path:
    """Get the snapshot file of the locally served ledger."""
    return get_home() / "ledger" / "state.json"


def get_all_paths() -> dict[str, Path]:
    """Get all standard paths for display."""
    return {
        "home": get_home(),
        "config": get_config_path(),
        "logs": get_logs_path(),
        "run": get_run_path(),
        "ledger_socket": get_ledger_socket_path(),
        "ledger_state": get_ledger_state_path(),
    }
