"""Todo orchestrator: submits ledger requests and keeps the local view in sync.

Every mutating operation runs under a single-flight guard. The ``pending``
flag is checked and set before the first await, so an overlapping call is
rejected with OperationInProgress instead of being queued.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping
from contextlib import contextmanager

from ledgertodo.errors import (
    AlreadyMarked,
    CapacityExhausted,
    EmptyContent,
    NotFound,
    OperationInProgress,
    SubmissionError,
    SyncError,
    TodoError,
)
from ledgertodo.ledger.base import RemoteLedgerClient
from ledgertodo.ledger.derive import MAX_TODO_INDEX, AddressDeriver, validate_index
from ledgertodo.ledger.types import (
    Address,
    Confirmation,
    Instruction,
    LedgerRequest,
    TodoRecord,
    UserProfile,
)
from ledgertodo.todos.state import SyncState, TodoSnapshot

logger = logging.getLogger(__name__)

Listener = Callable[[TodoSnapshot], None]


class TodoOrchestrator:
    """Manages one owner's todos on a remote ledger."""

    def __init__(
        self,
        owner: str,
        client: RemoteLedgerClient,
        deriver: AddressDeriver | None = None,
    ) -> None:
        if not owner:
            raise ValueError("owner is required")
        self._owner = owner
        self._client = client
        self._deriver = deriver or AddressDeriver()
        self._state = SyncState()
        self._listeners: list[Listener] = []
        # Overlapping refreshes; loading stays set until the last one ends
        self._refreshes = 0
        self.draft = ""

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def snapshot(self) -> TodoSnapshot:
        return self._state.snapshot()

    @property
    def pending(self) -> bool:
        return self._state.pending

    @property
    def initialized(self) -> bool:
        return self._state.initialized

    @property
    def records(self) -> Mapping[int, TodoRecord]:
        return self.snapshot.records

    @property
    def profile_address(self) -> Address:
        return self._deriver.profile_address(self._owner)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot on every state change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    async def refresh(self) -> TodoSnapshot:
        """Rebuild the local view from the ledger. Not guarded by ``pending``."""
        self._refreshes += 1
        self._state.loading = True
        self._publish()
        try:
            await self._reload()
        finally:
            self._refreshes -= 1
            self._state.loading = self._refreshes > 0
            self._publish()
        return self.snapshot

    async def fetch_todos(self) -> list[TodoRecord]:
        """Read the owner's todos without touching the local view."""
        try:
            return await self._client.fetch_all_todos(self._owner)
        except Exception as e:
            raise SyncError(f"failed to fetch todos: {e}") from e

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    async def initialize_profile(self) -> Address:
        """Create the owner's profile if it does not exist yet.

        Returns the profile address whether or not a submission was needed.
        """
        with self._single_flight("initialize_profile"):
            address, _ = await self._ensure_profile()
            return address

    async def add_todo(
        self,
        content: str | None = None,
        *,
        dateline: str | None = None,
    ) -> TodoSnapshot:
        """Create a todo, initializing the profile first when needed.

        ``content`` defaults to ``draft``; the draft is cleared once the
        ledger confirms the new todo.
        """
        text = (self.draft if content is None else content).strip()
        if not text:
            raise EmptyContent()
        if dateline is not None:
            dateline = dateline.strip() or None

        with self._single_flight("add_todo"):
            profile_address, profile = await self._ensure_profile()

            index = profile.next_index
            if index > MAX_TODO_INDEX:
                raise CapacityExhausted(index, MAX_TODO_INDEX)

            request = LedgerRequest(
                instruction=Instruction.ADD_TODO,
                signer=self._owner,
                profile_address=profile_address,
                todo_address=self._deriver.todo_address(self._owner, index),
                index=index,
                content=text,
                dateline=dateline,
                recent_blockhash=await self._blockhash(),
            )
            await self._submit(request)
            self.draft = ""
            await self._reload()
        return self.snapshot

    async def mark_todo(self, index: int) -> TodoSnapshot:
        """Mark a todo as done. Marking is one-way."""
        validate_index(index)

        with self._single_flight("mark_todo"):
            todo_address, todo = await self._require_todo(index)
            if todo.marked:
                logger.info(
                    "todo_already_marked",
                    extra={"owner": self._owner, "index": index},
                )
                raise AlreadyMarked(index)

            request = LedgerRequest(
                instruction=Instruction.MARK_TODO,
                signer=self._owner,
                profile_address=self.profile_address,
                todo_address=todo_address,
                index=index,
                recent_blockhash=await self._blockhash(),
            )
            await self._submit(request)
            await self._reload()
        return self.snapshot

    async def remove_todo(self, index: int) -> TodoSnapshot:
        """Delete a todo, marked or not. Its index is never reused."""
        validate_index(index)

        with self._single_flight("remove_todo"):
            todo_address, _ = await self._require_todo(index)

            request = LedgerRequest(
                instruction=Instruction.REMOVE_TODO,
                signer=self._owner,
                profile_address=self.profile_address,
                todo_address=todo_address,
                index=index,
                recent_blockhash=await self._blockhash(),
            )
            await self._submit(request)
            await self._reload()
        return self.snapshot

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _single_flight(self, operation: str) -> Iterator[None]:
        if self._state.pending:
            logger.info(
                "operation_rejected_in_progress",
                extra={"owner": self._owner, "operation": operation},
            )
            raise OperationInProgress()
        self._state.pending = True
        self._publish()
        try:
            yield
        finally:
            self._state.pending = False
            self._publish()

    async def _ensure_profile(self) -> tuple[Address, UserProfile]:
        address = self.profile_address
        profile = await self._read(
            "fetch profile", self._client.fetch_profile(self._owner)
        )
        if profile is not None:
            self._state.mark_initialized(profile.next_index)
            return address, profile

        logger.info("initializing_profile", extra={"owner": self._owner})
        request = LedgerRequest(
            instruction=Instruction.INITIALIZE_USER,
            signer=self._owner,
            profile_address=address,
            recent_blockhash=await self._blockhash(),
        )
        await self._submit(request)
        self._state.mark_initialized(0)
        self._publish()
        return address, UserProfile(owner=self._owner, next_index=0)

    async def _require_todo(self, index: int) -> tuple[Address, TodoRecord]:
        address = self._deriver.todo_address(self._owner, index)
        todo = await self._read("fetch todo", self._client.fetch_todo(address))
        if todo is None:
            raise NotFound(index, address)
        return address, todo

    async def _reload(self) -> None:
        try:
            profile = await self._client.fetch_profile(self._owner)
            todos = (
                await self._client.fetch_all_todos(self._owner)
                if profile is not None
                else []
            )
        except Exception as e:
            logger.warning(
                "todo_refresh_failed",
                extra={"owner": self._owner, "error.message": str(e)},
            )
            raise SyncError(f"failed to refresh todos: {e}") from e

        if profile is None:
            if self._state.initialized:
                logger.warning(
                    "profile_missing_after_init", extra={"owner": self._owner}
                )
            self._state.mark_uninitialized()
        else:
            self._state.mark_initialized(profile.next_index)
            self._state.replace_records(todos)

    async def _read[T](self, what: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except TodoError:
            raise
        except Exception as e:
            raise SubmissionError(f"failed to {what}: {e}") from e

    async def _blockhash(self) -> str:
        return await self._read("fetch blockhash", self._client.latest_blockhash())

    async def _submit(self, request: LedgerRequest) -> Confirmation:
        instruction = request.instruction.value
        try:
            confirmation = await self._client.submit(request)
        except SubmissionError as e:
            logger.warning(
                "ledger_submission_rejected",
                extra={"instruction": instruction, "code": e.code},
            )
            raise
        except Exception as e:
            logger.warning(
                "ledger_submission_failed",
                extra={"instruction": instruction, "error.message": str(e)},
            )
            raise SubmissionError(f"{instruction} failed: {e}") from e

        logger.info(
            "ledger_submission_confirmed",
            extra={
                "instruction": instruction,
                "signature": confirmation.signature,
                "slot": confirmation.slot,
            },
        )
        return confirmation

    def _publish(self) -> None:
        if not self._listeners:
            return
        snapshot = self._state.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("todo_listener_failed")
