"""Ports between the reorder core and its collaborators.

``SequencePort`` is implemented by the REST layer (see
``reorder.http.persistence``) or by tests; ``OrderObserver`` by whatever
renders the list.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, ConfigDict

from reorder.models.ordered_item import ItemId, OrderedItem


class SequenceCommit(BaseModel):
    """One item's new sequence number, as sent to the backend."""

    model_config = ConfigDict(frozen=True)

    item_id: ItemId
    new_sequence: int
    group_key: Optional[str] = None


@runtime_checkable
class SequencePort(Protocol):
    async def commit_sequence(self, request: SequenceCommit) -> None:
        """Persist ``request``; raise ``PersistenceError`` on any failure."""
        ...


@runtime_checkable
class OrderObserver(Protocol):
    def on_order_changed(self, items: Sequence[OrderedItem], state: str) -> None: ...

    def on_reorder_error(self, error: Exception) -> None: ...


__all__ = ["SequenceCommit", "SequencePort", "OrderObserver"]
