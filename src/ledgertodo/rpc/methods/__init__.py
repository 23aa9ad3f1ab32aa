"""RPC method handlers."""

from ledgertodo.rpc.methods.ledger import register_ledger_methods

__all__ = ["register_ledger_methods"]
