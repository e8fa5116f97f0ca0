"""Drag-to-reorder engine for the restaurant back office.

Exposes the pure ordered list, the coordinator that persists and settles a
drag, and the REST persistence port. Call-site factories live in
`reorder/adapters/`; the core lives in `reorder/logic/`.
"""

from __future__ import annotations

from reorder.errors import (
    ConcurrentMutationRejected,
    IndexOutOfRangeError,
    InvalidInputError,
    PersistenceError,
    ReorderError,
    StaleGenerationDiscarded,
)
from reorder.logic.ports import OrderObserver, SequenceCommit, SequencePort
from reorder.logic.reconciliation import OrderState, PendingMutation
from reorder.logic.reorder_coordinator import ReorderCoordinator
from reorder.logic.sequence_list import MoveComputation, SequenceList
from reorder.models.ordered_item import OrderedItem

__all__ = [
    "ConcurrentMutationRejected",
    "IndexOutOfRangeError",
    "InvalidInputError",
    "MoveComputation",
    "OrderObserver",
    "OrderState",
    "OrderedItem",
    "PendingMutation",
    "PersistenceError",
    "ReorderCoordinator",
    "ReorderError",
    "SequenceCommit",
    "SequenceList",
    "SequencePort",
    "StaleGenerationDiscarded",
]
