"""Configuration models using Pydantic."""

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator

from ledgertodo.config.paths import get_ledger_socket_path, get_ledger_state_path
from ledgertodo.ledger.derive import DEFAULT_PROGRAM_ID


class ConfigError(Exception):
    """Configuration error."""

    pass


class LedgerConfig(BaseModel):
    """Where the ledger lives and which program owns the todo accounts."""

    program_id: str = DEFAULT_PROGRAM_ID
    socket_path: Path = Field(default_factory=get_ledger_socket_path)
    # Bounds connecting only; requests wait on the transport.
    connect_timeout: float = Field(default=5.0, gt=0)
    # Snapshot file used by `ledgertodo ledger serve`
    state_path: Path | None = Field(default_factory=get_ledger_state_path)

    @field_validator("program_id")
    @classmethod
    def _program_id_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("program_id must not be empty")
        return value


class LoggingConfig(BaseModel):
    """Logging options applied by the CLI."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_to_file: bool = False
    redact_secrets: bool = True
    # Extra regexes to mask; group 1 is masked when present
    redact_patterns: list[str] = Field(default_factory=list)

    @field_validator("redact_patterns")
    @classmethod
    def _patterns_compile(cls, value: list[str]) -> list[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid pattern {pattern!r}: {e}") from None
        return value


class SentryConfig(BaseModel):
    """Configuration for Sentry error tracking."""

    dsn: SecretStr | None = None
    environment: str | None = None
    release: str | None = None
    traces_sample_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    profiles_sample_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    send_default_pii: bool = False
    debug: bool = False


class LedgerTodoConfig(BaseModel):
    """Root configuration model."""

    # Owner identity (public key) whose todos are managed
    owner: str | None = None
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sentry: SentryConfig | None = None

    def require_owner(self, override: str | None = None) -> str:
        """Resolve the owner identity, preferring an explicit override."""
        owner = (override or self.owner or "").strip()
        if not owner:
            raise ConfigError(
                "No owner configured. Set 'owner' in config.toml, "
                "LEDGERTODO_OWNER, or pass --owner."
            )
        return owner
