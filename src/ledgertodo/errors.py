"""Error taxonomy for todo orchestration.

Validation errors (InvalidIndex, EmptyContent) are raised before any
network interaction. NotFound and AlreadyMarked come from a best-effort
client-side read; the ledger remains the final authority and its
rejections surface as SubmissionError.
"""

from __future__ import annotations


class TodoError(Exception):
    """Base class for every error raised by the orchestrator."""


class InvalidIndex(TodoError):
    """Index is not an integer inside the addressable range."""

    def __init__(self, index: object) -> None:
        super().__init__(f"invalid todo index: {index!r}")
        self.index = index


class EmptyContent(TodoError):
    """Todo content is empty after trimming."""

    def __init__(self) -> None:
        super().__init__("content is required")


class NotFound(TodoError):
    """Derived address has no record on the ledger."""

    def __init__(self, index: int, address: str) -> None:
        super().__init__(f"todo {index} not found")
        self.index = index
        self.address = address


class AlreadyMarked(TodoError):
    """Todo is already marked; marking is one-way."""

    def __init__(self, index: int) -> None:
        super().__init__(f"todo {index} is already marked")
        self.index = index


class OperationInProgress(TodoError):
    """Another mutating operation is still in flight."""

    def __init__(self) -> None:
        super().__init__("another operation is in progress")


class CapacityExhausted(TodoError):
    """Sequence indexes for this profile are used up."""

    def __init__(self, next_index: int, max_index: int) -> None:
        super().__init__(
            f"todo capacity exhausted: next index {next_index} exceeds {max_index}"
        )
        self.next_index = next_index
        self.max_index = max_index


class SubmissionError(TodoError):
    """A remote call failed or the ledger rejected a request.

    ``code`` carries the ledger's program error code when the ledger itself
    rejected the request, and is None for transport failures.
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class SyncError(TodoError):
    """Fetching remote state failed.

    When raised after a confirmed mutation, the mutation itself succeeded and
    the local cache stays stale until the next successful refresh.
    """
