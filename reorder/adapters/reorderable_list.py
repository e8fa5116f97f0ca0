"""Wiring of one reorderable back office list.

A ``ReorderableList`` bundles the item model, the REST endpoint, a
``SequenceList`` and its ``ReorderCoordinator``. ``GroupedReorderBoard``
keeps one independent list per group key (modifiers per modifier category,
products per category) so moves never cross groups.
"""

from __future__ import annotations

from typing import Dict, Generic, Iterable, List, Optional, Type
import logging

import httpx
from anyio.abc import TaskGroup

from reorder.config import AppConfig
from reorder.http.persistence import RestSequencePort, fetch_ordered_items
from reorder.logic.ports import OrderObserver
from reorder.logic.reconciliation import PendingMutation
from reorder.logic.reorder_coordinator import ReorderCoordinator
from reorder.logic.sequence_list import SequenceList, T
from reorder.models.envelope import ResponseEnvelope
from reorder.models.ordered_item import ItemId
from reorder.sequence_endpoints import SequenceEndpoint

logger = logging.getLogger(__name__)


class ReorderableList(Generic[T]):
    def __init__(
        self,
        name: str,
        model: Type[T],
        endpoint: SequenceEndpoint,
        client: httpx.AsyncClient,
        task_group: TaskGroup,
        config: AppConfig,
        *,
        group_key: Optional[str] = None,
    ) -> None:
        self.name = name
        self.model = model
        self.endpoint = endpoint
        self.group_key = group_key
        self._client = client
        self.sequence_list: SequenceList[T] = SequenceList(
            group_key=group_key, min_sequence=config.reorder.min_sequence
        )
        self.port = RestSequencePort(client, endpoint, name_lookup=self._name_of)
        self.coordinator: ReorderCoordinator[T] = ReorderCoordinator(
            self.sequence_list,
            self.port,
            task_group,
            timeout=config.reorder.persist_timeout_seconds,
            abort_on_reload=config.reorder.abort_on_reload,
            name=name if group_key is None else f"{name}[{group_key}]",
        )
        self.last_envelope: Optional[ResponseEnvelope] = None

    def _name_of(self, item_id: ItemId) -> Optional[str]:
        item = self.sequence_list.get(item_id)
        return getattr(item, "name", None) if item is not None else None

    def subscribe(self, observer: OrderObserver) -> None:
        self.coordinator.subscribe(observer)

    def load(self, items: Iterable[T]) -> int:
        return self.coordinator.load(items)

    async def reload(self, params: Optional[dict] = None) -> int:
        """Fetch the list from the server and replace local state."""
        items, envelope = await fetch_ordered_items(
            self._client, self.endpoint, self.model, group_key=self.group_key, params=params
        )
        self.last_envelope = envelope
        return self.coordinator.load(items)

    def request_move(self, from_index: int, to_index: int) -> Optional[PendingMutation]:
        return self.coordinator.request_move(from_index, to_index)

    def current_order(self):
        return self.coordinator.current_order()


class GroupedReorderBoard(Generic[T]):
    """Independent reorderable lists keyed by group."""

    def __init__(
        self,
        name: str,
        model: Type[T],
        endpoint: SequenceEndpoint,
        client: httpx.AsyncClient,
        task_group: TaskGroup,
        config: AppConfig,
    ) -> None:
        self.name = name
        self.model = model
        self.endpoint = endpoint
        self._client = client
        self._task_group = task_group
        self._config = config
        self._lists: Dict[str, ReorderableList[T]] = {}
        self._observers: List[OrderObserver] = []

    def subscribe(self, observer: OrderObserver) -> None:
        self._observers.append(observer)
        for reorderable in self._lists.values():
            reorderable.subscribe(observer)

    def list_for(self, group_key: str) -> ReorderableList[T]:
        reorderable = self._lists.get(group_key)
        if reorderable is None:
            reorderable = ReorderableList(
                self.name,
                self.model,
                self.endpoint,
                self._client,
                self._task_group,
                self._config,
                group_key=group_key,
            )
            for observer in self._observers:
                reorderable.subscribe(observer)
            self._lists[group_key] = reorderable
        return reorderable

    def groups(self) -> List[str]:
        return sorted(self._lists)

    def load(self, items: Iterable[T]) -> Dict[str, int]:
        """Partition a mixed server list by group and load each group.

        Known groups absent from ``items`` are loaded empty, which also
        supersedes any move still pending in them.
        """
        partitions: Dict[str, List[T]] = {}
        for item in items:
            if item.group_key is None:
                logger.warning("board.load.ungrouped_item board=%s item_id=%s", self.name, item.id)
                continue
            partitions.setdefault(item.group_key, []).append(item)
        for key in self._lists:
            if key not in partitions:
                logger.info("board.load.group_emptied board=%s group=%s", self.name, key)
                partitions[key] = []
        return {key: self.list_for(key).load(group_items) for key, group_items in partitions.items()}


__all__ = ["ReorderableList", "GroupedReorderBoard"]
