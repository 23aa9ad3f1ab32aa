"""Ledger boundary: address derivation, typed accounts, and clients.

Public API:
- AddressDeriver: Derived addresses for profiles and todos
- RemoteLedgerClient: Abstract async gateway to the ledger
- InMemoryLedger: In-process ledger enforcing the program rules
- RpcLedgerClient: Client for a ledger served over JSON-RPC
"""

from ledgertodo.ledger.base import RemoteLedgerClient
from ledgertodo.ledger.derive import (
    DEFAULT_PROGRAM_ID,
    MAX_TODO_INDEX,
    AddressDeriver,
    validate_index,
)
from ledgertodo.ledger.memory import InMemoryLedger, ProgramError
from ledgertodo.ledger.rpc_client import RpcLedgerClient
from ledgertodo.ledger.types import (
    Address,
    Confirmation,
    Instruction,
    LedgerRequest,
    TodoRecord,
    UserProfile,
)

__all__ = [
    "Address",
    "AddressDeriver",
    "Confirmation",
    "DEFAULT_PROGRAM_ID",
    "InMemoryLedger",
    "Instruction",
    "LedgerRequest",
    "MAX_TODO_INDEX",
    "ProgramError",
    "RemoteLedgerClient",
    "RpcLedgerClient",
    "TodoRecord",
    "UserProfile",
    "validate_index",
]
