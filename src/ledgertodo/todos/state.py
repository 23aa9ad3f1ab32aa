"""Local view of one owner's ledger state."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from ledgertodo.ledger.types import TodoRecord


class ProfileState(StrEnum):
    """Orchestrator lifecycle. There is no way back to UNINITIALIZED."""

    UNKNOWN = "unknown"
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


@dataclass(frozen=True)
class TodoSnapshot:
    """Read-only copy of SyncState handed to callers and listeners."""

    profile_state: ProfileState
    next_index: int
    records: Mapping[int, TodoRecord]
    pending: bool
    loading: bool

    @property
    def initialized(self) -> bool:
        return self.profile_state == ProfileState.INITIALIZED

    @property
    def incomplete(self) -> list[TodoRecord]:
        return [r for _, r in sorted(self.records.items()) if not r.marked]

    @property
    def completed(self) -> list[TodoRecord]:
        return [r for _, r in sorted(self.records.items()) if r.marked]

    def to_dict(self) -> dict[str, Any]:
        return {
            "initialized": self.initialized,
            "profile_state": self.profile_state.value,
            "next_index": self.next_index,
            "pending": self.pending,
            "loading": self.loading,
            "records": [r.to_dict() for _, r in sorted(self.records.items())],
        }


@dataclass
class SyncState:
    """Mutable cache owned by a single TodoOrchestrator.

    It is never the source of truth: ``replace_records`` rebuilds it from the
    ledger after every confirmed mutation.
    """

    profile_state: ProfileState = ProfileState.UNKNOWN
    next_index: int = 0
    records: dict[int, TodoRecord] = field(default_factory=dict)
    pending: bool = False
    loading: bool = False

    @property
    def initialized(self) -> bool:
        return self.profile_state == ProfileState.INITIALIZED

    def mark_initialized(self, next_index: int) -> None:
        self.profile_state = ProfileState.INITIALIZED
        self.next_index = next_index

    def mark_uninitialized(self) -> None:
        if self.profile_state == ProfileState.INITIALIZED:
            # A profile is never deleted; an absent read is treated as stale.
            return
        self.profile_state = ProfileState.UNINITIALIZED
        self.next_index = 0
        self.records.clear()

    def replace_records(self, records: Iterable[TodoRecord]) -> None:
        self.records = {r.index: r for r in records}

    def snapshot(self) -> TodoSnapshot:
        return TodoSnapshot(
            profile_state=self.profile_state,
            next_index=self.next_index,
            records=MappingProxyType(dict(self.records)),
            pending=self.pending,
            loading=self.loading,
        )
