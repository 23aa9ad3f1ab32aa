"""Ledger client speaking JSON-RPC over a Unix socket."""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from pathlib import Path
from typing import Any

from ledgertodo.errors import SubmissionError
from ledgertodo.ledger.base import RemoteLedgerClient
from ledgertodo.ledger.types import (
    Address,
    Confirmation,
    LedgerRequest,
    TodoRecord,
    UserProfile,
)
from ledgertodo.rpc.protocol import (
    ErrorCode,
    RPCRequest,
    RPCResponse,
    read_message,
    write_message,
)

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 5.0


class RPCError(Exception):
    """RPC call failed."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data


class RpcLedgerClient(RemoteLedgerClient):
    """RemoteLedgerClient backed by ``ledgertodo ledger serve``.

    Only connecting is bounded by ``connect_timeout``; once a request is sent
    the client waits for the server's answer.
    """

    def __init__(
        self,
        socket_path: Path,
        *,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        self._socket_path = socket_path
        self._connect_timeout = connect_timeout
        self._ids = itertools.count(1)

    @property
    def socket_path(self) -> Path:
        return self._socket_path

    async def fetch_profile(self, owner: str) -> UserProfile | None:
        result = await self.call("ledger.get_profile", {"owner": owner})
        if result is None:
            return None
        return UserProfile.from_dict(_require_dict(result))

    async def fetch_todo(self, address: Address) -> TodoRecord | None:
        result = await self.call("ledger.get_todo", {"address": address})
        if result is None:
            return None
        return TodoRecord.from_dict(_require_dict(result))

    async def fetch_all_todos(self, owner: str) -> list[TodoRecord]:
        result = await self.call("ledger.list_todos", {"owner": owner})
        if not isinstance(result, list):
            raise ValueError(f"expected a list of todos, got {type(result).__name__}")
        return [TodoRecord.from_dict(_require_dict(item)) for item in result]

    async def submit(self, request: LedgerRequest) -> Confirmation:
        try:
            result = await self.call("ledger.submit", request.to_dict())
        except RPCError as e:
            code = None
            if e.code == ErrorCode.PROGRAM_ERROR and isinstance(e.data, dict):
                code = e.data.get("code")
            raise SubmissionError(str(e), code=code) from e
        return Confirmation.from_dict(_require_dict(result))

    async def latest_blockhash(self) -> str:
        result = await self.call("ledger.latest_blockhash")
        if not isinstance(result, str):
            raise ValueError(f"expected a blockhash string, got {result!r}")
        return result

    async def call(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Send one request and return its result.

        Raises:
            ConnectionError: If the socket is missing or the server hangs up.
            RPCError: If the server answers with an error.
        """
        request = RPCRequest(method=method, params=params or {}, id=next(self._ids))
        response = await self._exchange(request)
        if response.error:
            logger.debug(
                "rpc_call_failed",
                extra={"method": method, "code": response.error.code},
            )
            raise RPCError(
                code=response.error.code,
                message=response.error.message,
                data=response.error.data,
            )
        return response.result

    async def _exchange(self, request: RPCRequest) -> RPCResponse:
        """Send one framed request over a fresh connection and read the reply."""
        if not self._socket_path.exists():
            raise ConnectionError(f"Ledger socket not found: {self._socket_path}")

        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_unix_connection(str(self._socket_path)),
                timeout=self._connect_timeout,
            )
        except (OSError, TimeoutError) as e:
            raise ConnectionError(
                f"Could not connect to ledger at {self._socket_path}: {e}"
            ) from e

        try:
            await write_message(writer, request.to_dict())
            data = await read_message(reader)
        finally:
            writer.close()
            await writer.wait_closed()

        if data is None:
            raise ConnectionError("Connection closed by server")

        return RPCResponse.from_dict(json.loads(data))


def _require_dict(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"expected an object, got {type(value).__name__}")
    return value
