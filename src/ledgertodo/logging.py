"""Logging setup shared by the CLI and the ledger server.

Events are snake_case messages with structured ``extra`` fields:

    logger.info("ledger_submission_confirmed", extra={"slot": 12})

Levels:
- DEBUG: ledger internals, RPC failures seen by the client
- INFO: confirmed submissions, profile creation, server lifecycle
- WARNING: rejected submissions, failed refreshes, dropped connections
- ERROR: unexpected failures

Anything written to disk passes through SecretRedactor first; keypair files
and signing keys must never land in a log.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TextIO

DEFAULT_LOG_RETENTION_DAYS = 7

LEVEL_ENV_VAR = "LEDGERTODO_LOG_LEVEL"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Third-party loggers that are too chatty below WARNING
NOISY_LOGGERS = ("asyncio", "sentry_sdk")

# Attributes every LogRecord has; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime", "component"}


# ---------------------------------------------------------------------------
# Redaction
# ---------------------------------------------------------------------------


def _partial(secret: str) -> str:
    if len(secret) < 12:
        return "***"
    return f"{secret[:4]}...{secret[-4:]}"


def _mask_group(match: re.Match[str]) -> str:
    """Partially mask group 1 (or the whole match) and keep the context."""
    full = match.group(0)
    if not match.lastindex:
        return _partial(full)
    secret = match.group(1)
    start, end = match.span(1)
    offset = match.start(0)
    return full[: start - offset] + _partial(secret) + full[end - offset :]


def _mask_keypair(match: re.Match[str]) -> str:
    return "[***keypair***]"


def _mask_pem(match: re.Match[str]) -> str:
    lines = match.group(0).strip().splitlines()
    return f"{lines[0]}\n...redacted...\n{lines[-1]}"


@dataclass(frozen=True)
class RedactionRule:
    name: str
    pattern: re.Pattern[str]
    mask: Callable[[re.Match[str]], str] = _mask_group

    @classmethod
    def compile(
        cls,
        name: str,
        pattern: str,
        mask: Callable[[re.Match[str]], str] = _mask_group,
    ) -> RedactionRule:
        return cls(name=name, pattern=re.compile(pattern), mask=mask)


DEFAULT_RULES: tuple[RedactionRule, ...] = (
    # Solana-style keypair files: a JSON array of 64 byte values
    RedactionRule.compile(
        "keypair_array",
        r"\[\s*(?:\d{1,3}\s*,\s*){63}\d{1,3}\s*\]",
        _mask_keypair,
    ),
    RedactionRule.compile(
        "pem_private_key",
        r"-----BEGIN [A-Z ]*PRIVATE KEY-----[\s\S]+?-----END [A-Z ]*PRIVATE KEY-----",
        _mask_pem,
    ),
    # Base58 secret keys are 64 bytes (87-88 chars); public keys are shorter
    RedactionRule.compile("base58_secret", r"\b([1-9A-HJ-NP-Za-km-z]{86,90})\b"),
    RedactionRule.compile(
        "env_assignment",
        r"\b[A-Z0-9_]+(?:KEY|TOKEN|SECRET|PASSWORD|PASSWD|DSN)\s*[=:]\s*"
        r"([^\s\"']{8,})",
    ),
    RedactionRule.compile("bearer", r"\bBearer\s+([A-Za-z0-9._\-+=]{20,})\b"),
    RedactionRule.compile("sentry_dsn_key", r"https?://([0-9a-f]{16,})@"),
)


@dataclass
class SecretRedactor:
    """Applies redaction rules in order, masking what each one matches."""

    rules: tuple[RedactionRule, ...] = field(default=DEFAULT_RULES)
    enabled: bool = True

    def redact(self, text: str) -> str:
        if not self.enabled or not text:
            return text
        for rule in self.rules:
            text = rule.pattern.sub(rule.mask, text)
        return text


_redactor = SecretRedactor()


def configure_redaction(
    enabled: bool = True, extra_patterns: list[str] | None = None
) -> None:
    """Replace the process-wide redactor.

    Each extra pattern masks its first group, or the whole match when it has
    no groups.
    """
    global _redactor
    extra = tuple(
        RedactionRule.compile(f"extra_{i}", p)
        for i, p in enumerate(extra_patterns or [])
    )
    _redactor = SecretRedactor(rules=DEFAULT_RULES + extra, enabled=enabled)


def redact(text: str) -> str:
    """Redact with the process-wide rules (used outside the log handlers too)."""
    return _redactor.redact(text)


# ---------------------------------------------------------------------------
# Handlers and formatters
# ---------------------------------------------------------------------------


def prune_old_logs(
    logs_dir: Path,
    retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    suffix: str = ".jsonl",
) -> int:
    """Delete log files not modified within ``retention_days``.

    Returns the number of files removed.
    """
    if not logs_dir.is_dir():
        return 0

    cutoff = time.time() - retention_days * 86400
    deleted = 0
    for entry in logs_dir.glob(f"*{suffix}"):
        with contextlib.suppress(OSError):
            if entry.is_file() and entry.stat().st_mtime < cutoff:
                entry.unlink()
                deleted += 1
    return deleted


def _component(name: str) -> str:
    head, _, rest = name.partition(".")
    if head == "ledgertodo" and rest:
        return rest.split(".", 1)[0]
    return head


def _record_extra(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}


class JSONLHandler(logging.Handler):
    """One redacted JSON object per line, one file per UTC day."""

    def __init__(
        self,
        logs_dir: Path,
        retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    ):
        super().__init__()
        logs_dir.mkdir(parents=True, exist_ok=True)
        self._logs_dir = logs_dir
        self._retention_days = retention_days
        self._day: str | None = None
        self._stream: TextIO | None = None

    def _stream_for(self, day: str) -> TextIO:
        if self._stream is None or day != self._day:
            if self._stream is not None:
                self._stream.close()
            self._day = day
            self._stream = (self._logs_dir / f"{day}.jsonl").open(
                "a", encoding="utf-8"
            )
            prune_old_logs(self._logs_dir, self._retention_days)
        return self._stream

    def _entry(self, record: logging.LogRecord, now: datetime) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "ts": now.isoformat(),
            "level": record.levelname,
            "component": _component(record.name),
            "logger": record.name,
            "message": _redactor.redact(record.getMessage()),
        }
        if record.exc_info:
            formatter = self.formatter or logging.Formatter()
            entry["exception"] = _redactor.redact(
                formatter.formatException(record.exc_info)
            )
        if extra := _record_extra(record):
            redacted = _redactor.redact(json.dumps(extra, default=str))
            try:
                entry["extra"] = json.loads(redacted)
            except json.JSONDecodeError:
                entry["extra"] = {"_redacted_raw": redacted}
        return entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            now = datetime.now(UTC)
            stream = self._stream_for(now.strftime("%Y-%m-%d"))
            stream.write(json.dumps(self._entry(record, now)) + "\n")
            stream.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        super().close()


class ComponentFormatter(logging.Formatter):
    """Adds ``%(component)s``: ledgertodo.rpc.server -> rpc, asyncio -> asyncio."""

    def format(self, record: logging.LogRecord) -> str:
        record.component = _component(record.name)
        return super().format(record)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def _console_handler(use_rich: bool) -> logging.Handler:
    if use_rich:
        from rich.logging import RichHandler

        handler: logging.Handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
        return handler

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    return handler


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
    log_to_file: bool = False,
    logs_dir: Path | None = None,
) -> None:
    """Install handlers on the root logger, replacing any existing ones.

    Args:
        level: DEBUG, INFO, WARNING or ERROR. Defaults to LEDGERTODO_LOG_LEVEL,
            then INFO; unknown names fall back to INFO.
        use_rich: Render console output with Rich.
        log_to_file: Also write JSONL files.
        logs_dir: JSONL directory; defaults to ``$LEDGERTODO_HOME/logs``.
    """
    name = (level or os.environ.get(LEVEL_ENV_VAR, "INFO")).upper()
    log_level = getattr(logging, name) if name in _LEVELS else logging.INFO

    handlers = [_console_handler(use_rich)]
    if log_to_file:
        from ledgertodo.config.paths import get_logs_path

        file_handler = JSONLHandler(logs_dir or get_logs_path())
        file_handler.setLevel(log_level)
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
