"""Todo orchestration public API.

Public API:
- TodoOrchestrator: Single-owner orchestrator over a RemoteLedgerClient
- create_orchestrator: Factory wiring an orchestrator from config

Types:
- SyncState, TodoSnapshot, ProfileState
"""

from ledgertodo.todos.factory import create_ledger_client, create_orchestrator
from ledgertodo.todos.orchestrator import TodoOrchestrator
from ledgertodo.todos.state import ProfileState, SyncState, TodoSnapshot

__all__ = [
    "ProfileState",
    "SyncState",
    "TodoOrchestrator",
    "TodoSnapshot",
    "create_ledger_client",
    "create_orchestrator",
]
