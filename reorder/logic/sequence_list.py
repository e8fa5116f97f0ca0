"""In-memory ordered list with optimistic move support.

``SequenceList`` is pure: no I/O and no side effects beyond its own state.
Sequences are 1-based unless the list is created with ``min_sequence=0``.

Renumbering policy for a move (only the moved item changes):

- moving down, the moved item takes the sequence of the item currently at
  ``to_index``, which becomes its immediate predecessor;
- moving up, it takes that item's sequence minus one, floored at
  ``min_sequence``.

The rest of the list is re-positioned by the splice alone, so gaps and ties
between untouched items are tolerated until the next ``load()``.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Generic, Iterable, Iterator, Optional, Sequence, Tuple, TypeVar
import logging

from reorder.errors import ConcurrentMutationRejected, IndexOutOfRangeError, InvalidInputError
from reorder.logic.reconciliation import GenerationGuard
from reorder.models.ordered_item import ItemId, OrderedItem, order_key

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=OrderedItem)


@dataclass(frozen=True)
class MoveComputation(Generic[T]):
    reordered: Tuple[T, ...]
    new_sequence_for_moved_item: int
    moved_item: T


class SequenceList(Generic[T]):
    def __init__(
        self,
        items: Optional[Iterable[T]] = None,
        *,
        group_key: Optional[str] = None,
        min_sequence: int = 1,
    ) -> None:
        if min_sequence not in (0, 1):
            raise InvalidInputError("min_sequence must be 0 or 1")
        self.group_key = group_key
        self.min_sequence = min_sequence
        self._items: Tuple[T, ...] = ()
        self._confirmed: Tuple[T, ...] = ()
        self._pending = False
        self._guard = GenerationGuard()
        if items is not None:
            self.load(items)

    # -- reads -------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._guard.current

    @property
    def is_pending(self) -> bool:
        return self._pending

    def is_current(self, generation: int) -> bool:
        return self._guard.is_current(generation)

    def current_order(self) -> Tuple[T, ...]:
        """Return the display order (optimistic while a move is pending)."""
        return self._items

    def confirmed_order(self) -> Tuple[T, ...]:
        return self._confirmed

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def index_of(self, item_id: ItemId) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None

    def get(self, item_id: ItemId) -> Optional[T]:
        index = self.index_of(item_id)
        return self._items[index] if index is not None else None

    # -- replacement -------------------------------------------------------

    def load(self, items: Iterable[T]) -> int:
        """Replace the contents with server data and return the new generation.

        Items are sorted by ``(sequence, id)``; records that are identical on
        both keys keep their arrival order and are logged, never rejected.
        Items of another group are dropped.
        """
        accepted: list[T] = []
        for item in items:
            if not isinstance(item, OrderedItem):
                raise InvalidInputError(f"expected OrderedItem, got {type(item).__name__}")
            if self.group_key is not None and item.group_key != self.group_key:
                logger.warning(
                    "sequence_list.load.foreign_group item_id=%s group_key=%s list_group=%s",
                    item.id,
                    item.group_key,
                    self.group_key,
                )
                continue
            accepted.append(item)

        ordered = sorted(accepted, key=order_key)
        self._warn_on_ambiguity(ordered)

        self._items = tuple(ordered)
        self._confirmed = self._items
        self._pending = False
        generation = self._guard.bump()
        logger.info(
            "sequence_list.load group_key=%s count=%s generation=%s",
            self.group_key,
            len(self._items),
            generation,
        )
        return generation

    @staticmethod
    def _warn_on_ambiguity(ordered: Sequence[OrderedItem]) -> None:
        seen: set = set()
        for prev, cur in zip(ordered, ordered[1:]):
            if prev.sequence == cur.sequence and prev.id == cur.id:
                logger.warning(
                    "sequence_list.load.ambiguous_record id=%s sequence=%s (arrival order kept)",
                    cur.id,
                    cur.sequence,
                )
        for item in ordered:
            if item.id in seen:
                logger.warning("sequence_list.load.duplicate_id id=%s", item.id)
            seen.add(item.id)

    # -- moves -------------------------------------------------------------

    def compute_move(self, from_index: int, to_index: int) -> MoveComputation[T]:
        """Compute the order and moved-item sequence for a drag; no state change."""
        length = len(self._items)
        for index in (from_index, to_index):
            if not 0 <= index < length:
                raise IndexOutOfRangeError(index, length)

        moved = self._items[from_index]
        if from_index == to_index:
            return MoveComputation(self._items, moved.sequence, moved)

        anchor = self._items[to_index]
        if to_index > from_index:
            new_sequence = anchor.sequence
        else:
            new_sequence = max(anchor.sequence - 1, self.min_sequence)

        updated = moved.model_copy(update={"sequence": new_sequence})
        working = list(self._items)
        del working[from_index]
        working.insert(to_index, updated)
        return MoveComputation(tuple(working), new_sequence, updated)

    def apply(self, reordered: Sequence[T]) -> Tuple[T, ...]:
        """Install an optimistic order and return the snapshot it replaces."""
        if self._pending:
            raise ConcurrentMutationRejected("a reorder is already pending for this list")
        if sorted(map(_id_text, reordered)) != sorted(map(_id_text, self._items)):
            raise InvalidInputError("optimistic order must contain exactly the current items")
        snapshot = self._items
        self._confirmed = snapshot
        self._items = tuple(reordered)
        self._pending = True
        return snapshot

    def commit(self) -> None:
        """Accept the current (optimistic) order as the confirmed baseline."""
        self._confirmed = self._items
        self._pending = False

    def rollback(self) -> None:
        """Restore the last confirmed order, discarding the optimistic change."""
        self._items = self._confirmed
        self._pending = False

    # -- confirmed edits ---------------------------------------------------

    def insert(self, item: T) -> int:
        """Insert a newly created item by sort key and return its index."""
        self._refuse_while_pending("insert")
        if self.group_key is not None and item.group_key != self.group_key:
            raise InvalidInputError(f"item {item.id} belongs to group {item.group_key}, not {self.group_key}")
        if self.index_of(item.id) is not None:
            raise InvalidInputError(f"item {item.id} is already in the list")
        index = bisect_right(self._items, order_key(item), key=order_key)
        self._items = self._items[:index] + (item,) + self._items[index:]
        self._confirmed = self._items
        return index

    def remove(self, item_id: ItemId) -> T:
        self._refuse_while_pending("remove")
        index = self.index_of(item_id)
        if index is None:
            raise InvalidInputError(f"item {item_id} is not in the list")
        removed = self._items[index]
        self._items = self._items[:index] + self._items[index + 1:]
        self._confirmed = self._items
        return removed

    def _refuse_while_pending(self, operation: str) -> None:
        if self._pending:
            raise ConcurrentMutationRejected(f"cannot {operation} while a reorder is pending")


def _id_text(item: OrderedItem) -> str:
    return str(item.id)


__all__ = ["SequenceList", "MoveComputation"]
