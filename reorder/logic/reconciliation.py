"""Reconciliation policy shared by SequenceList and ReorderCoordinator.

Holds the order-state vocabulary published to observers, the record of an
unsettled move and the generation guard that lets a list reload win over
any persistence call still in flight.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from reorder.models.ordered_item import ItemId, OrderedItem


class OrderState:
    """States published with every order change.

    A constants container (not an Enum) so the values go straight to the
    rendering layer as plain strings.
    """

    OPTIMISTIC = "optimistic"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolledBack"


class CoordinatorState:
    IDLE = "idle"
    PENDING = "pending"


@dataclass(frozen=True)
class PendingMutation:
    moved_item_id: ItemId
    from_index: int
    to_index: int
    computed_sequence: int
    snapshot_before_move: Tuple[OrderedItem, ...]
    generation: int
    group_key: Optional[str] = None


class GenerationGuard:
    """Monotonic counter identifying the current contents of a list."""

    def __init__(self) -> None:
        self._value = 0

    @property
    def current(self) -> int:
        return self._value

    def bump(self) -> int:
        self._value += 1
        return self._value

    def is_current(self, generation: int) -> bool:
        return generation == self._value


__all__ = ["OrderState", "CoordinatorState", "PendingMutation", "GenerationGuard"]
