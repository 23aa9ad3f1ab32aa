"""Optional Sentry integration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ledgertodo import __version__
from ledgertodo.logging import redact

if TYPE_CHECKING:
    from ledgertodo.config import SentryConfig

logger = logging.getLogger(__name__)

try:
    import sentry_sdk
    from sentry_sdk.integrations.asyncio import AsyncioIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    SENTRY_AVAILABLE = True
except ImportError:
    SENTRY_AVAILABLE = False


def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        return redact(value)
    if isinstance(value, dict):
        return {k: _scrub(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_scrub(v) for v in value]
    return value


def scrub_event(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
    """``before_send`` hook: run every string in the event through redaction.

    Exception messages and log breadcrumbs can quote keypair material the
    same way a log line can.
    """
    return _scrub(event)


def init_sentry(config: SentryConfig | None) -> bool:
    """Initialize Sentry if installed and configured.

    Returns:
        True if Sentry was initialized, False otherwise.
    """
    dsn = config.dsn.get_secret_value() if config and config.dsn else ""
    if config is None or not dsn:
        logger.debug("sentry_skipped", extra={"reason": "no_dsn"})
        return False
    if not SENTRY_AVAILABLE:
        logger.debug("sentry_skipped", extra={"reason": "sdk_missing"})
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=config.environment,
        release=config.release or f"ledgertodo@{__version__}",
        traces_sample_rate=config.traces_sample_rate,
        profiles_sample_rate=config.profiles_sample_rate,
        send_default_pii=config.send_default_pii,
        debug=config.debug,
        before_send=scrub_event,
        integrations=[
            AsyncioIntegration(),
            # Breadcrumbs from INFO, events from ERROR
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
    )

    logger.info("sentry_initialized", extra={"environment": config.environment})
    return True
