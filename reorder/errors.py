"""Error taxonomy for the reorder engine.

Every error carries a stable ``code`` so observers and logs can classify
failures without string matching on messages. Only ``PersistenceError``
is ever shown to a user; the others are handled inside the core.
"""

from __future__ import annotations

from typing import Optional

TIMEOUT_MESSAGE = "The server did not respond in time. Please try again."


class ReorderError(Exception):
    code = "REORDER_ERROR"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(ReorderError):
    """Input that cannot be interpreted as an ordered list or envelope."""

    code = "REORDER_INVALID_INPUT"


class IndexOutOfRangeError(ReorderError):
    code = "REORDER_INDEX_OUT_OF_RANGE"

    def __init__(self, index: int, length: int) -> None:
        super().__init__(f"index {index} is outside [0, {length - 1}]")
        self.index = index
        self.length = length


class ConcurrentMutationRejected(ReorderError):
    """A move was requested while another one is still unsettled."""

    code = "REORDER_CONCURRENT_MUTATION"


class PersistenceError(ReorderError):
    """The backend did not accept a sequence change.

    Wraps HTTP errors, transport failures and timeouts. ``message`` is safe
    to show in a toast.
    """

    code = "REORDER_PERSISTENCE_FAILED"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StaleGenerationDiscarded(ReorderError):
    code = "REORDER_STALE_GENERATION"

    def __init__(self, generation: int, current: int) -> None:
        super().__init__(f"settlement for generation {generation} discarded (current {current})")
        self.generation = generation
        self.current = current


__all__ = [
    "TIMEOUT_MESSAGE",
    "ReorderError",
    "InvalidInputError",
    "IndexOutOfRangeError",
    "ConcurrentMutationRejected",
    "PersistenceError",
    "StaleGenerationDiscarded",
]
