"""JSON-RPC transport for the ledger.

Public API:
- RPCServer: Unix socket server with JSON-RPC 2.0 protocol
- register_ledger_methods: Expose a ledger over RPC

Protocol:
- RPCRequest, RPCResponse: JSON-RPC 2.0 message types
- read_message: Length-prefixed message I/O
"""

from ledgertodo.rpc.methods import register_ledger_methods
from ledgertodo.rpc.protocol import (
    ErrorCode,
    ErrorObject,
    RPCRequest,
    RPCResponse,
    read_message,
    write_message,
)
from ledgertodo.rpc.server import RPCMethodError, RPCServer

__all__ = [
    # Server
    "RPCServer",
    "RPCMethodError",
    # Methods
    "register_ledger_methods",
    # Protocol
    "RPCRequest",
    "RPCResponse",
    "ErrorObject",
    "ErrorCode",
    "read_message",
    "write_message",
]
