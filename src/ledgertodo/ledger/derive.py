"""Deterministic address derivation for profile and todo accounts."""

from __future__ import annotations

import hashlib

from ledgertodo.errors import InvalidIndex
from ledgertodo.ledger.types import Address

PROFILE_NAMESPACE = b"USER_STATE"
TODO_NAMESPACE = b"TODO_STATE"

# Todo indexes are encoded as a single byte seed.
MAX_TODO_INDEX = 255

_DOMAIN_MARKER = b"ProgramDerivedAddress"

DEFAULT_PROGRAM_ID = "todo11111111111111111111111111111111111111"


def validate_index(index: object) -> int:
    """Return ``index`` if it is an int in the addressable range."""
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidIndex(index)
    if index < 0 or index > MAX_TODO_INDEX:
        raise InvalidIndex(index)
    return index


class AddressDeriver:
    """Computes derived addresses for a single program.

    Seeds are length-prefixed before hashing so that no two distinct seed
    lists can produce the same preimage.
    """

    def __init__(self, program_id: str = DEFAULT_PROGRAM_ID) -> None:
        self._program_id = program_id

    @property
    def program_id(self) -> str:
        return self._program_id

    def profile_address(self, owner: str) -> Address:
        return self._derive(PROFILE_NAMESPACE, owner.encode())

    def todo_address(self, owner: str, index: int) -> Address:
        validate_index(index)
        return self._derive(TODO_NAMESPACE, owner.encode(), bytes([index]))

    def _derive(self, *seeds: bytes) -> Address:
        digest = hashlib.sha256()
        for seed in seeds:
            digest.update(len(seed).to_bytes(4, "big"))
            digest.update(seed)
        digest.update(self._program_id.encode())
        digest.update(_DOMAIN_MARKER)
        return digest.hexdigest()
