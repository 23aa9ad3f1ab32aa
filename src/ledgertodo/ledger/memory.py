"""In-process ledger that enforces the todo program's rules.

Used as the backing store for ``ledgertodo ledger serve`` and directly in
tests. It accepts the same requests a deployed program would and rejects
invalid ones with SubmissionError carrying a program error code.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import os
import secrets
import tempfile
from collections import deque
from enum import StrEnum
from pathlib import Path
from typing import Any

from ledgertodo.errors import InvalidIndex, SubmissionError
from ledgertodo.ledger.base import RemoteLedgerClient
from ledgertodo.ledger.derive import MAX_TODO_INDEX, AddressDeriver
from ledgertodo.ledger.types import (
    Address,
    Confirmation,
    Instruction,
    LedgerRequest,
    TodoRecord,
    UserProfile,
)

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 280

# Number of issued blockhashes a submission may reference.
BLOCKHASH_WINDOW = 150


class ProgramError(StrEnum):
    """Rejection codes returned by the program."""

    UNAUTHORIZED = "unauthorized"
    ADDRESS_MISMATCH = "address_mismatch"
    ALREADY_INITIALIZED = "already_initialized"
    PROFILE_MISSING = "profile_missing"
    INDEX_MISMATCH = "index_mismatch"
    CONTENT_EMPTY = "content_empty"
    CONTENT_TOO_LONG = "content_too_long"
    CAPACITY_EXHAUSTED = "capacity_exhausted"
    TODO_MISSING = "todo_missing"
    ALREADY_MARKED = "already_marked"
    BLOCKHASH_NOT_FOUND = "blockhash_not_found"


def _reject(code: ProgramError, message: str) -> SubmissionError:
    return SubmissionError(f"{code.value}: {message}", code=code.value)


class InMemoryLedger(RemoteLedgerClient):
    """Ledger state held in memory, optionally snapshotted to a JSON file."""

    def __init__(
        self,
        deriver: AddressDeriver | None = None,
        *,
        state_path: Path | None = None,
    ) -> None:
        self._deriver = deriver or AddressDeriver()
        self._state_path = state_path
        self._profiles: dict[Address, UserProfile] = {}
        self._todos: dict[Address, TodoRecord] = {}
        self._slot = 0
        self._blockhashes: deque[str] = deque(maxlen=BLOCKHASH_WINDOW)
        self._lock = asyncio.Lock()
        self.submissions: list[LedgerRequest] = []

    @property
    def deriver(self) -> AddressDeriver:
        return self._deriver

    @property
    def slot(self) -> int:
        return self._slot

    async def fetch_profile(self, owner: str) -> UserProfile | None:
        return self._profiles.get(self._deriver.profile_address(owner))

    async def fetch_todo(self, address: Address) -> TodoRecord | None:
        return self._todos.get(address)

    async def fetch_all_todos(self, owner: str) -> list[TodoRecord]:
        owned = [t for t in self._todos.values() if t.owner == owner]
        return sorted(owned, key=lambda t: t.index)

    async def latest_blockhash(self) -> str:
        blockhash = hashlib.sha256(
            f"{self._slot}:{secrets.token_hex(8)}".encode()
        ).hexdigest()
        self._blockhashes.append(blockhash)
        return blockhash

    async def submit(self, request: LedgerRequest) -> Confirmation:
        async with self._lock:
            self._check_blockhash(request)
            self._check_profile_address(request)
            checkpoint = (dict(self._profiles), dict(self._todos), self._slot)

            match request.instruction:
                case Instruction.INITIALIZE_USER:
                    self._initialize_user(request)
                case Instruction.ADD_TODO:
                    self._add_todo(request)
                case Instruction.MARK_TODO:
                    self._mark_todo(request)
                case Instruction.REMOVE_TODO:
                    self._remove_todo(request)

            self._slot += 1
            confirmation = Confirmation(
                signature=self._signature(request),
                slot=self._slot,
            )
            if self._state_path is not None:
                try:
                    self.save(self._state_path)
                except BaseException:
                    # Unpersisted changes must not become visible
                    self._profiles, self._todos, self._slot = checkpoint
                    logger.warning(
                        "ledger_state_save_failed",
                        extra={"path": str(self._state_path)},
                    )
                    raise
            self.submissions.append(request)
            logger.debug(
                "ledger_request_applied",
                extra={
                    "instruction": request.instruction.value,
                    "slot": confirmation.slot,
                },
            )
            return confirmation

    def _check_blockhash(self, request: LedgerRequest) -> None:
        if request.recent_blockhash is None:
            return
        if request.recent_blockhash not in self._blockhashes:
            raise _reject(
                ProgramError.BLOCKHASH_NOT_FOUND,
                "blockhash was not issued recently",
            )

    def _check_profile_address(self, request: LedgerRequest) -> None:
        if request.profile_address != self._deriver.profile_address(request.signer):
            raise _reject(
                ProgramError.ADDRESS_MISMATCH,
                "profile address does not derive from signer",
            )

    def _require_profile(self, request: LedgerRequest) -> UserProfile:
        profile = self._profiles.get(request.profile_address)
        if profile is None:
            raise _reject(ProgramError.PROFILE_MISSING, "profile is not initialized")
        if profile.owner != request.signer:
            raise _reject(ProgramError.UNAUTHORIZED, "signer does not own profile")
        return profile

    def _require_todo_address(self, request: LedgerRequest) -> tuple[int, Address]:
        index = request.index
        if index is None or index < 0 or index > MAX_TODO_INDEX:
            raise _reject(ProgramError.INDEX_MISMATCH, f"invalid index {index!r}")
        expected = self._deriver.todo_address(request.signer, index)
        if request.todo_address != expected:
            raise _reject(
                ProgramError.ADDRESS_MISMATCH,
                "todo address does not derive from signer and index",
            )
        return index, expected

    def _require_todo(self, request: LedgerRequest) -> tuple[Address, TodoRecord]:
        _, address = self._require_todo_address(request)
        todo = self._todos.get(address)
        if todo is None:
            raise _reject(
                ProgramError.TODO_MISSING, f"no todo at index {request.index}"
            )
        if todo.owner != request.signer:
            raise _reject(ProgramError.UNAUTHORIZED, "signer does not own todo")
        return address, todo

    def _initialize_user(self, request: LedgerRequest) -> None:
        if request.profile_address in self._profiles:
            raise _reject(
                ProgramError.ALREADY_INITIALIZED, "profile already initialized"
            )
        self._profiles[request.profile_address] = UserProfile(owner=request.signer)

    def _add_todo(self, request: LedgerRequest) -> None:
        profile = self._require_profile(request)
        if profile.next_index > MAX_TODO_INDEX:
            raise _reject(
                ProgramError.CAPACITY_EXHAUSTED,
                f"next index {profile.next_index} exceeds {MAX_TODO_INDEX}",
            )
        content = (request.content or "").strip()
        if not content:
            raise _reject(ProgramError.CONTENT_EMPTY, "content is required")
        if len(content) > MAX_CONTENT_LENGTH:
            raise _reject(
                ProgramError.CONTENT_TOO_LONG,
                f"content exceeds {MAX_CONTENT_LENGTH} characters",
            )
        index, address = self._require_todo_address(request)
        if index != profile.next_index:
            raise _reject(
                ProgramError.INDEX_MISMATCH,
                f"expected index {profile.next_index}, got {index}",
            )

        self._todos[address] = TodoRecord(
            owner=request.signer,
            index=index,
            content=content,
            marked=False,
            dateline=request.dateline,
        )
        self._profiles[request.profile_address] = UserProfile(
            owner=profile.owner,
            next_index=profile.next_index + 1,
        )

    def _mark_todo(self, request: LedgerRequest) -> None:
        self._require_profile(request)
        address, todo = self._require_todo(request)
        if todo.marked:
            raise _reject(ProgramError.ALREADY_MARKED, f"todo {todo.index} is marked")
        self._todos[address] = TodoRecord(
            owner=todo.owner,
            index=todo.index,
            content=todo.content,
            marked=True,
            dateline=todo.dateline,
        )

    def _remove_todo(self, request: LedgerRequest) -> None:
        self._require_profile(request)
        address, _ = self._require_todo(request)
        del self._todos[address]

    def _signature(self, request: LedgerRequest) -> str:
        payload = json.dumps(request.to_dict(), sort_keys=True)
        return hashlib.sha256(f"{self._slot}:{payload}".encode()).hexdigest()

    # ------------------------------------------------------------------
    # Snapshot persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "program_id": self._deriver.program_id,
            "slot": self._slot,
            "profiles": [p.to_dict() for p in self._profiles.values()],
            "todos": [t.to_dict() for t in self._todos.values()],
        }

    def save(self, path: Path) -> None:
        """Write the ledger state atomically via tempfile + fsync + replace."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(json.dumps(self.to_dict(), indent=2))
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            Path(tmp).replace(path)
        except BaseException:
            try:
                Path(tmp).unlink()
            except OSError:
                pass
            raise

    @classmethod
    def load(cls, path: Path, deriver: AddressDeriver | None = None) -> InMemoryLedger:
        """Load ledger state from ``path``; a missing file yields an empty ledger."""
        ledger = cls(deriver, state_path=path)
        if not path.exists():
            return ledger

        data = json.loads(path.read_text(encoding="utf-8"))
        program_id = data.get("program_id")
        if program_id and program_id != ledger.deriver.program_id:
            raise ValueError(
                f"state file belongs to program {program_id}, "
                f"not {ledger.deriver.program_id}"
            )
        ledger._slot = int(data.get("slot", 0))
        for payload in data.get("profiles", []):
            profile = UserProfile.from_dict(payload)
            ledger._profiles[ledger.deriver.profile_address(profile.owner)] = profile
        for payload in data.get("todos", []):
            todo = TodoRecord.from_dict(payload)
            try:
                address = ledger.deriver.todo_address(todo.owner, todo.index)
            except InvalidIndex as e:
                raise ValueError(f"state file holds a bad todo: {e}") from e
            ledger._todos[address] = todo
        logger.info(
            "ledger_state_loaded",
            extra={
                "path": str(path),
                "profiles": len(ledger._profiles),
                "todos": len(ledger._todos),
            },
        )
        return ledger
