"""Ledger account and request types.

Remote payloads are decoded through ``from_dict`` at the client boundary,
which raises ValueError on anything that does not match the expected shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

Address = str


class Instruction(StrEnum):
    """Mutating instructions understood by the todo program."""

    INITIALIZE_USER = "initialize_user"
    ADD_TODO = "add_todo"
    MARK_TODO = "mark_todo"
    REMOVE_TODO = "remove_todo"


@dataclass(frozen=True)
class UserProfile:
    """Per-owner enrollment account."""

    owner: str
    next_index: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"owner": self.owner, "next_index": self.next_index}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserProfile:
        next_index = _require_int(data, "next_index")
        if next_index < 0:
            raise ValueError(f"next_index must be non-negative, got {next_index}")
        return cls(owner=_require_str(data, "owner"), next_index=next_index)


@dataclass(frozen=True)
class TodoRecord:
    """A single todo account. ``(owner, index)`` is its identity."""

    owner: str
    index: int
    content: str
    marked: bool = False
    dateline: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "index": self.index,
            "content": self.content,
            "marked": self.marked,
            "dateline": self.dateline,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TodoRecord:
        index = _require_int(data, "index")
        if index < 0:
            raise ValueError(f"index must be non-negative, got {index}")
        marked = data.get("marked", False)
        if not isinstance(marked, bool):
            raise ValueError(f"marked must be a bool, got {marked!r}")
        dateline = data.get("dateline")
        if dateline is not None and not isinstance(dateline, str):
            raise ValueError(f"dateline must be a string, got {dateline!r}")
        return cls(
            owner=_require_str(data, "owner"),
            index=index,
            content=_require_str(data, "content"),
            marked=marked,
            dateline=dateline,
        )


@dataclass(frozen=True)
class LedgerRequest:
    """A signed request submitted to the ledger.

    ``signer`` is the owner; the ledger checks it against the authority
    recorded on the accounts the request touches.
    """

    instruction: Instruction
    signer: str
    profile_address: Address
    todo_address: Address | None = None
    index: int | None = None
    content: str | None = None
    dateline: str | None = None
    recent_blockhash: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "instruction": self.instruction.value,
            "signer": self.signer,
            "profile_address": self.profile_address,
            "todo_address": self.todo_address,
            "index": self.index,
            "content": self.content,
            "dateline": self.dateline,
            "recent_blockhash": self.recent_blockhash,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LedgerRequest:
        index = data.get("index")
        if index is not None and (
            isinstance(index, bool) or not isinstance(index, int)
        ):
            raise ValueError(f"index must be an integer, got {index!r}")
        return cls(
            instruction=Instruction(_require_str(data, "instruction")),
            signer=_require_str(data, "signer"),
            profile_address=_require_str(data, "profile_address"),
            todo_address=_optional_str(data, "todo_address"),
            index=index,
            content=_optional_str(data, "content"),
            dateline=_optional_str(data, "dateline"),
            recent_blockhash=_optional_str(data, "recent_blockhash"),
        )


@dataclass(frozen=True)
class Confirmation:
    """Proof that a request was applied."""

    signature: str
    slot: int

    def to_dict(self) -> dict[str, Any]:
        return {"signature": self.signature, "slot": self.slot}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Confirmation:
        return cls(
            signature=_require_str(data, "signature"),
            slot=_require_int(data, "slot"),
        )


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


def _require_int(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value
