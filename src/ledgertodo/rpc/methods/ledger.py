"""Ledger RPC method handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ledgertodo.errors import SubmissionError
from ledgertodo.ledger.types import LedgerRequest
from ledgertodo.rpc.protocol import ErrorCode
from ledgertodo.rpc.server import RPCMethodError

if TYPE_CHECKING:
    from ledgertodo.ledger.base import RemoteLedgerClient
    from ledgertodo.rpc.server import RPCServer

logger = logging.getLogger(__name__)


def register_ledger_methods(server: RPCServer, ledger: RemoteLedgerClient) -> None:
    """Register ledger account and submission methods."""

    async def get_profile(params: dict[str, Any]) -> dict[str, Any] | None:
        owner = _require_param(params, "owner")
        profile = await ledger.fetch_profile(owner)
        return profile.to_dict() if profile else None

    async def get_todo(params: dict[str, Any]) -> dict[str, Any] | None:
        address = _require_param(params, "address")
        todo = await ledger.fetch_todo(address)
        return todo.to_dict() if todo else None

    async def list_todos(params: dict[str, Any]) -> list[dict[str, Any]]:
        owner = _require_param(params, "owner")
        return [t.to_dict() for t in await ledger.fetch_all_todos(owner)]

    async def submit(params: dict[str, Any]) -> dict[str, Any]:
        request = LedgerRequest.from_dict(params)
        try:
            confirmation = await ledger.submit(request)
        except SubmissionError as e:
            logger.info(
                "ledger_request_rejected",
                extra={"instruction": request.instruction.value, "code": e.code},
            )
            raise RPCMethodError(
                ErrorCode.PROGRAM_ERROR, str(e), {"code": e.code}
            ) from e
        return confirmation.to_dict()

    async def latest_blockhash(params: dict[str, Any]) -> str:
        return await ledger.latest_blockhash()

    server.register("ledger.get_profile", get_profile)
    server.register("ledger.get_todo", get_todo)
    server.register("ledger.list_todos", list_todos)
    server.register("ledger.submit", submit)
    server.register("ledger.latest_blockhash", latest_blockhash)


def _require_param(params: dict[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{key} is required")
    return value
