"""Abstract gateway to the remote ledger."""

from abc import ABC, abstractmethod

from ledgertodo.ledger.types import (
    Address,
    Confirmation,
    LedgerRequest,
    TodoRecord,
    UserProfile,
)


class RemoteLedgerClient(ABC):
    """Async access to the ledger that stores profiles and todos.

    Implementations decode every response into the types in
    ``ledgertodo.ledger.types`` before returning it.
    """

    @abstractmethod
    async def fetch_profile(self, owner: str) -> UserProfile | None:
        """Fetch the owner's profile, or None if it does not exist."""
        ...

    @abstractmethod
    async def fetch_todo(self, address: Address) -> TodoRecord | None:
        """Fetch the todo stored at a derived address, or None."""
        ...

    @abstractmethod
    async def fetch_all_todos(self, owner: str) -> list[TodoRecord]:
        """Fetch every todo whose authority is ``owner``."""
        ...

    @abstractmethod
    async def submit(self, request: LedgerRequest) -> Confirmation:
        """Submit a request and wait for confirmation.

        Either the change is applied and confirmed, or nothing durable
        happened and SubmissionError is raised.
        """
        ...

    @abstractmethod
    async def latest_blockhash(self) -> str:
        """Return a recent blockhash to attach to the next submission."""
        ...

    async def close(self) -> None:
        """Release transport resources. Default is a no-op."""
        return None
