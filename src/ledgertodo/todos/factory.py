"""Wiring helpers that build orchestrators from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ledgertodo.ledger.derive import AddressDeriver
from ledgertodo.ledger.rpc_client import RpcLedgerClient
from ledgertodo.todos.orchestrator import TodoOrchestrator

if TYPE_CHECKING:
    from ledgertodo.config.models import LedgerTodoConfig
    from ledgertodo.ledger.base import RemoteLedgerClient


def create_ledger_client(config: LedgerTodoConfig) -> RpcLedgerClient:
    """Create a client for the ledger served at the configured socket."""
    return RpcLedgerClient(
        config.ledger.socket_path.expanduser(),
        connect_timeout=config.ledger.connect_timeout,
    )


def create_orchestrator(
    config: LedgerTodoConfig,
    *,
    owner: str | None = None,
    client: RemoteLedgerClient | None = None,
) -> TodoOrchestrator:
    """Create an orchestrator for one owner session.

    Raises:
        ConfigError: If no owner is configured or given.
    """
    return TodoOrchestrator(
        owner=config.require_owner(owner),
        client=client or create_ledger_client(config),
        deriver=AddressDeriver(config.ledger.program_id),
    )
