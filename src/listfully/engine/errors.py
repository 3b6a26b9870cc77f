"""Error taxonomy for the list engine.

Validation failures block a mutation before any state changes. Sync
failures degrade to "optimistic but unconfirmed" state. Stale references
are recovered through fallbacks and only surface in logs.
"""

from __future__ import annotations


class ListfullyError(Exception):
    """Base class for all engine errors."""


class ValidationFailure(ListfullyError):
    """Raised when local input is rejected before any mutation is attempted."""


class ReorderExhausted(ListfullyError):
    """Raised when no distinguishable order key fits next to its neighbors.

    A missing neighbor (list head or tail) is passed as ``None``.
    """

    def __init__(self, prev_key: float | None, next_key: float | None) -> None:
        super().__init__(
            f"Order key precision exhausted between {prev_key!r} and {next_key!r}"
        )
        self.prev_key = prev_key
        self.next_key = next_key


class SyncFailure(ListfullyError):
    """Raised when an outbound mutation fails or is rejected by the store."""

    def __init__(self, operation: str, target_id: str, reason: str) -> None:
        super().__init__(f"{operation} failed for {target_id}: {reason}")
        self.operation = operation
        self.target_id = target_id
        self.reason = reason


class StaleReference(ListfullyError):
    """An entity references an id that no longer resolves."""

    def __init__(self, kind: str, ref_id: str) -> None:
        super().__init__(f"Unknown {kind} reference: {ref_id}")
        self.kind = kind
        self.ref_id = ref_id
