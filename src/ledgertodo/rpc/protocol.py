"""JSON-RPC 2.0 messages framed with a 4-byte big-endian length prefix.

Every message on the socket is ``!I`` length followed by a UTF-8 JSON body.
Parsing raises TypeError for payloads that are not shaped like a request or
response; the server turns that into an INVALID_REQUEST error.
"""

from __future__ import annotations

import asyncio
import json
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

MAX_MESSAGE_SIZE = 10 * 1024 * 1024
JSONRPC_VERSION = "2.0"

_HEADER = struct.Struct("!I")

RequestId = int | str | None


class ErrorCode(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    # Server-defined range: the ledger program rejected the request
    PROGRAM_ERROR = -32000


def encode_message(payload: dict[str, Any]) -> bytes:
    body = json.dumps(payload, separators=(",", ":")).encode()
    if len(body) > MAX_MESSAGE_SIZE:
        raise ValueError(f"Message too large: {len(body)}")
    return _HEADER.pack(len(body)) + body


async def read_message(reader: asyncio.StreamReader) -> bytes | None:
    """Read one framed message body. Returns None once the peer hangs up."""
    try:
        (length,) = _HEADER.unpack(await reader.readexactly(_HEADER.size))
        if length > MAX_MESSAGE_SIZE:
            raise ValueError(f"Message too large: {length}")
        return await reader.readexactly(length)
    except asyncio.IncompleteReadError:
        return None


async def write_message(
    writer: asyncio.StreamWriter, payload: dict[str, Any]
) -> None:
    writer.write(encode_message(payload))
    await writer.drain()


@dataclass
class RPCRequest:
    method: str
    params: dict[str, Any] = field(default_factory=dict)
    id: RequestId = 1
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
            "params": self.params,
            "id": self.id,
        }

    def to_bytes(self) -> bytes:
        return encode_message(self.to_dict())

    @classmethod
    def from_dict(cls, data: Any) -> RPCRequest:
        if not isinstance(data, dict):
            raise TypeError("request must be an object")
        method = data.get("method", "")
        if not isinstance(method, str):
            raise TypeError("method must be a string")
        params = data.get("params", {})
        if not isinstance(params, dict):
            raise TypeError("params must be an object")
        return cls(
            method=method,
            params=params,
            id=data.get("id"),
            jsonrpc=data.get("jsonrpc", ""),
        )


@dataclass
class ErrorObject:
    """The ``error`` member of a failed response."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"code": int(self.code), "message": self.message}
        if self.data is not None:
            d["data"] = self.data
        return d

    @classmethod
    def from_dict(cls, data: Any) -> ErrorObject:
        if not isinstance(data, dict):
            raise TypeError("error must be an object")
        return cls(
            code=data.get("code", ErrorCode.INTERNAL_ERROR),
            message=data.get("message", "Unknown error"),
            data=data.get("data"),
        )


@dataclass
class RPCResponse:
    id: RequestId
    result: Any = None
    error: ErrorObject | None = None
    jsonrpc: str = JSONRPC_VERSION

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is None:
            d["result"] = self.result
        else:
            d["error"] = self.error.to_dict()
        return d

    def to_bytes(self) -> bytes:
        return encode_message(self.to_dict())

    @classmethod
    def success(cls, id: RequestId, result: Any) -> RPCResponse:
        return cls(id=id, result=result)

    @classmethod
    def failure(
        cls, id: RequestId, code: int, message: str, data: Any = None
    ) -> RPCResponse:
        return cls(id=id, error=ErrorObject(code=code, message=message, data=data))

    @classmethod
    def from_dict(cls, data: Any) -> RPCResponse:
        if not isinstance(data, dict):
            raise TypeError("response must be an object")
        error = data.get("error")
        return cls(
            id=data.get("id"),
            result=data.get("result"),
            error=ErrorObject.from_dict(error) if error is not None else None,
            jsonrpc=data.get("jsonrpc", JSONRPC_VERSION),
        )
