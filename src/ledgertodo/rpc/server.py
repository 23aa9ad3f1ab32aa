"""JSON-RPC server on a Unix domain socket.

Connections may carry any number of requests; each request is answered in
order before the next one is read.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from ledgertodo.rpc.protocol import (
    JSONRPC_VERSION,
    ErrorCode,
    RPCRequest,
    RPCResponse,
    read_message,
    write_message,
)

logger = logging.getLogger(__name__)

RPCHandler = Callable[[dict[str, Any]], Awaitable[Any]]


class RPCMethodError(Exception):
    """Raised by a handler to answer with a specific error code."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data


class RPCServer:
    """Serves registered handlers; usable as ``async with RPCServer(path):``."""

    def __init__(self, socket_path: Path):
        self._socket_path = socket_path
        self._server: asyncio.Server | None = None
        self._handlers: dict[str, RPCHandler] = {}

    @property
    def socket_path(self) -> Path:
        return self._socket_path

    @property
    def is_running(self) -> bool:
        return self._server is not None

    @property
    def methods(self) -> list[str]:
        return sorted(self._handlers)

    def register(self, method: str, handler: RPCHandler) -> None:
        self._handlers[method] = handler

    async def start(self) -> None:
        self._socket_path.parent.mkdir(parents=True, exist_ok=True)
        # A socket left behind by a crashed server blocks bind()
        self._socket_path.unlink(missing_ok=True)
        self._server = await asyncio.start_unix_server(
            self._serve_connection, path=str(self._socket_path)
        )
        self._socket_path.chmod(0o600)
        logger.info(
            "rpc_server_started",
            extra={"socket": str(self._socket_path), "methods": self.methods},
        )

    async def stop(self) -> None:
        server, self._server = self._server, None
        if server is not None:
            server.close()
            await server.wait_closed()
        self._socket_path.unlink(missing_ok=True)
        logger.info("rpc_server_stopped", extra={"socket": str(self._socket_path)})

    async def serve_forever(self) -> None:
        async with self:
            assert self._server is not None
            await self._server.serve_forever()

    async def __aenter__(self) -> RPCServer:
        if self._server is None:
            await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def _serve_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        try:
            while self.is_running:
                data = await read_message(reader)
                if data is None:
                    break
                response = await self.process_request(data)
                await write_message(writer, response.to_dict())
        except (ConnectionError, ValueError) as e:
            logger.warning("rpc_connection_dropped", extra={"error.message": str(e)})
        finally:
            writer.close()
            await writer.wait_closed()

    async def process_request(self, data: bytes) -> RPCResponse:
        """Answer one request body. Never raises."""
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            return RPCResponse.failure(None, ErrorCode.PARSE_ERROR, f"Parse error: {e}")

        try:
            request = RPCRequest.from_dict(payload)
        except TypeError as e:
            return RPCResponse.failure(
                None, ErrorCode.INVALID_REQUEST, f"Invalid request: {e}"
            )

        if request.jsonrpc != JSONRPC_VERSION:
            return RPCResponse.failure(
                request.id, ErrorCode.INVALID_REQUEST, "Invalid JSON-RPC version"
            )
        if not request.method:
            return RPCResponse.failure(
                request.id, ErrorCode.INVALID_REQUEST, "Missing method"
            )
        return await self._dispatch(request)

    async def _dispatch(self, request: RPCRequest) -> RPCResponse:
        handler = self._handlers.get(request.method)
        if handler is None:
            return RPCResponse.failure(
                request.id,
                ErrorCode.METHOD_NOT_FOUND,
                f"Method not found: {request.method}",
            )

        try:
            result = await handler(request.params)
        except RPCMethodError as e:
            return RPCResponse.failure(request.id, e.code, str(e), e.data)
        except (TypeError, ValueError) as e:
            return RPCResponse.failure(
                request.id, ErrorCode.INVALID_PARAMS, f"Invalid params: {e}"
            )
        except Exception as e:
            logger.exception("rpc_method_failed", extra={"method": request.method})
            return RPCResponse.failure(request.id, ErrorCode.INTERNAL_ERROR, str(e))
        return RPCResponse.success(request.id, result)
