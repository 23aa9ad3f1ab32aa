"""Configuration module."""

from ledgertodo.config.loader import find_config_path, load_config
from ledgertodo.config.models import (
    ConfigError,
    LedgerConfig,
    LedgerTodoConfig,
    LoggingConfig,
    SentryConfig,
)
from ledgertodo.config.paths import (
    get_config_path,
    get_home,
    get_ledger_socket_path,
    get_ledger_state_path,
    get_logs_path,
)

__all__ = [
    "ConfigError",
    "LedgerConfig",
    "LedgerTodoConfig",
    "LoggingConfig",
    "SentryConfig",
    "find_config_path",
    "get_config_path",
    "get_home",
    "get_ledger_socket_path",
    "get_ledger_state_path",
    "get_logs_path",
    "load_config",
]
