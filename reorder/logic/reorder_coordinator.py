"""Drag-and-drop reorder coordinator.

Turns one drag gesture into an optimistic reorder, persists the moved item's
new sequence through a ``SequencePort`` and settles the list: commit on
success, rollback plus a surfaced error on failure. Only one move may be
unsettled per list; a second request is rejected, not queued.

The persistence call runs in the caller's anyio task group so
``request_move`` never blocks. A ``load()`` while a move is pending starts a
new generation and any late settlement for the old one is discarded.
"""

from __future__ import annotations

from typing import Generic, List, Optional, Tuple
import logging

import anyio
from anyio.abc import TaskGroup

from reorder.errors import (
    ConcurrentMutationRejected,
    IndexOutOfRangeError,
    TIMEOUT_MESSAGE,
    PersistenceError,
    ReorderError,
    StaleGenerationDiscarded,
)
from reorder.logic import events
from reorder.logic.ports import OrderObserver, SequenceCommit, SequencePort
from reorder.logic.reconciliation import CoordinatorState, OrderState, PendingMutation
from reorder.logic.sequence_list import SequenceList, T

logger = logging.getLogger(__name__)

DEFAULT_PERSIST_TIMEOUT_SECONDS = 10.0


class ReorderCoordinator(Generic[T]):
    def __init__(
        self,
        sequence_list: SequenceList[T],
        port: SequencePort,
        task_group: TaskGroup,
        *,
        timeout: float = DEFAULT_PERSIST_TIMEOUT_SECONDS,
        abort_on_reload: bool = False,
        name: str = "list",
    ) -> None:
        self._list = sequence_list
        self._port = port
        self._task_group = task_group
        self._timeout = timeout
        self._abort_on_reload = abort_on_reload
        self.name = name
        self._observers: List[OrderObserver] = []
        self._pending: Optional[PendingMutation] = None
        self._settled: Optional[anyio.Event] = None
        self._cancel_scope: Optional[anyio.CancelScope] = None
        self.last_rejection: Optional[ReorderError] = None

    # -- observation -------------------------------------------------------

    @property
    def sequence_list(self) -> SequenceList[T]:
        return self._list

    @property
    def state(self) -> str:
        return CoordinatorState.PENDING if self._pending is not None else CoordinatorState.IDLE

    @property
    def pending(self) -> Optional[PendingMutation]:
        return self._pending

    def current_order(self) -> Tuple[T, ...]:
        return self._list.current_order()

    def subscribe(self, observer: OrderObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: OrderObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    async def wait_settled(self) -> None:
        """Wait until the current pending move (if any) is settled or superseded."""
        if self._settled is not None:
            await self._settled.wait()

    # -- list replacement --------------------------------------------------

    def load(self, items) -> int:
        """Replace the list with fresh server data; supersedes a pending move."""
        if self._pending is not None:
            logger.info(
                "reorder.load.supersedes_pending list=%s item_id=%s generation=%s",
                self.name,
                self._pending.moved_item_id,
                self._pending.generation,
            )
            if self._abort_on_reload and self._cancel_scope is not None:
                self._cancel_scope.cancel()
        generation = self._list.load(items)
        self._pending = None
        self._release()
        events.publish(
            events.LIST_LOADED,
            {"list": self.name, "generation": generation, "count": len(self._list)},
        )
        self._notify(OrderState.CONFIRMED)
        return generation

    # -- moves -------------------------------------------------------------

    def request_move(self, from_index: int, to_index: int) -> Optional[PendingMutation]:
        """Start a reorder; returns the pending mutation, or None when rejected.

        Rejections (out of range, already pending) change nothing, are logged
        and kept in ``last_rejection``. Settlement is reported to observers.
        """
        try:
            if self._pending is not None:
                raise ConcurrentMutationRejected(
                    f"item {self._pending.moved_item_id} is still being saved"
                )
            computation = self._list.compute_move(from_index, to_index)
        except (ConcurrentMutationRejected, IndexOutOfRangeError) as exc:
            self._reject(exc, from_index, to_index)
            return None

        if from_index == to_index:
            logger.info("reorder.request_move.noop list=%s index=%s", self.name, from_index)
            return None

        snapshot = self._list.apply(computation.reordered)
        moved = computation.moved_item
        mutation = PendingMutation(
            moved_item_id=moved.id,
            from_index=from_index,
            to_index=to_index,
            computed_sequence=computation.new_sequence_for_moved_item,
            snapshot_before_move=snapshot,
            generation=self._list.generation,
            group_key=self._list.group_key,
        )
        self._pending = mutation
        self._settled = anyio.Event()
        self.last_rejection = None

        request = SequenceCommit(
            item_id=moved.id,
            new_sequence=mutation.computed_sequence,
            group_key=mutation.group_key,
        )
        try:
            self._task_group.start_soon(self._persist, mutation, request)
        except RuntimeError:
            # Closed task group: nothing was published yet, undo the apply
            self._list.rollback()
            self._pending = None
            self._release()
            logger.error(
                "reorder.request_move.not_started list=%s item_id=%s", self.name, moved.id, exc_info=True
            )
            raise

        logger.info(
            "reorder.request_move.accepted list=%s item_id=%s from=%s to=%s new_sequence=%s generation=%s",
            self.name,
            moved.id,
            from_index,
            to_index,
            mutation.computed_sequence,
            mutation.generation,
        )
        events.publish(
            events.REORDER_REQUESTED,
            {
                "list": self.name,
                "item_id": moved.id,
                "from_index": from_index,
                "to_index": to_index,
                "new_sequence": mutation.computed_sequence,
                "generation": mutation.generation,
            },
        )
        self._notify(OrderState.OPTIMISTIC)
        return mutation

    async def _persist(self, mutation: PendingMutation, request: SequenceCommit) -> None:
        if self._abort_on_reload and not self._list.is_current(mutation.generation):
            logger.info(
                "reorder.persist.skipped list=%s item_id=%s generation=%s",
                self.name,
                request.item_id,
                mutation.generation,
            )
            return
        scope = anyio.CancelScope()
        self._cancel_scope = scope
        with scope:
            error: Optional[PersistenceError] = None
            try:
                with anyio.fail_after(self._timeout):
                    await self._port.commit_sequence(request)
            except TimeoutError:
                logger.warning(
                    "reorder.persist.timeout list=%s item_id=%s timeout=%s",
                    self.name,
                    request.item_id,
                    self._timeout,
                )
                error = PersistenceError(TIMEOUT_MESSAGE)
            except PersistenceError as exc:
                error = exc
            except Exception as exc:
                logger.error(
                    "reorder.persist.unexpected_error list=%s item_id=%s",
                    self.name,
                    request.item_id,
                    exc_info=True,
                )
                error = PersistenceError(str(exc) or "Failed to update the order")
            outcome = "success" if error is None else "failure"
            settling = self._settleable(mutation.generation, outcome, expected=mutation)
            if error is None:
                self._confirm(settling)
            else:
                self._roll_back(settling, error)
        if scope.cancelled_caught:
            logger.info(
                "reorder.persist.aborted list=%s item_id=%s generation=%s",
                self.name,
                request.item_id,
                mutation.generation,
            )
        if self._cancel_scope is scope:
            self._cancel_scope = None

    # -- settlement --------------------------------------------------------

    def on_persist_success(self, generation: Optional[int] = None) -> bool:
        """Confirm the pending move; returns False when the result was discarded."""
        return self._confirm(self._settleable(generation, "success"))

    def on_persist_failure(self, error: Exception, generation: Optional[int] = None) -> bool:
        """Roll back the pending move and surface ``error`` to observers."""
        return self._roll_back(self._settleable(generation, "failure"), error)

    def _confirm(self, mutation: Optional[PendingMutation]) -> bool:
        if mutation is None:
            return False
        self._list.commit()
        self._pending = None
        logger.info(
            "reorder.confirmed list=%s item_id=%s sequence=%s",
            self.name,
            mutation.moved_item_id,
            mutation.computed_sequence,
        )
        events.publish(
            events.REORDER_CONFIRMED,
            {"list": self.name, "item_id": mutation.moved_item_id, "generation": mutation.generation},
        )
        self._notify(OrderState.CONFIRMED)
        self._release()
        return True

    def _roll_back(self, mutation: Optional[PendingMutation], error: Exception) -> bool:
        if mutation is None:
            return False
        if not isinstance(error, ReorderError):
            error = PersistenceError(str(error) or "Failed to update the order")
        self._list.rollback()
        self._pending = None
        logger.warning(
            "reorder.rolled_back list=%s item_id=%s code=%s message=%s",
            self.name,
            mutation.moved_item_id,
            getattr(error, "code", None),
            error,
        )
        events.publish(
            events.REORDER_ROLLED_BACK,
            {
                "list": self.name,
                "item_id": mutation.moved_item_id,
                "generation": mutation.generation,
                "code": getattr(error, "code", None),
            },
        )
        self._notify(OrderState.ROLLED_BACK)
        self._notify_error(error)
        self._release()
        return True

    def _settleable(
        self,
        generation: Optional[int],
        outcome: str,
        expected: Optional[PendingMutation] = None,
    ) -> Optional[PendingMutation]:
        if generation is not None and not self._list.is_current(generation):
            stale = StaleGenerationDiscarded(generation, self._list.generation)
            logger.info("reorder.settle.stale list=%s outcome=%s %s", self.name, outcome, stale)
            events.publish(
                events.REORDER_STALE_DISCARDED,
                {"list": self.name, "generation": generation, "current": self._list.generation, "outcome": outcome},
            )
            return None
        if self._pending is None:
            logger.warning("reorder.settle.no_pending list=%s outcome=%s", self.name, outcome)
            return None
        # A result for a move that was already settled must not settle the next one
        if expected is not None and self._pending is not expected:
            logger.info(
                "reorder.settle.superseded list=%s outcome=%s item_id=%s pending_item_id=%s",
                self.name,
                outcome,
                expected.moved_item_id,
                self._pending.moved_item_id,
            )
            return None
        return self._pending

    # -- helpers -----------------------------------------------------------

    def _reject(self, exc: ReorderError, from_index: int, to_index: int) -> None:
        self.last_rejection = exc
        logger.warning(
            "reorder.request_move.rejected list=%s from=%s to=%s code=%s reason=%s",
            self.name,
            from_index,
            to_index,
            exc.code,
            exc,
        )
        events.publish(
            events.REORDER_REJECTED,
            {"list": self.name, "from_index": from_index, "to_index": to_index, "code": exc.code},
        )

    def _release(self) -> None:
        if self._settled is not None:
            self._settled.set()
            self._settled = None

    def _notify(self, state: str) -> None:
        items = self._list.current_order()
        for observer in list(self._observers):
            try:
                observer.on_order_changed(items, state)
            except Exception:
                logger.error("reorder.observer.on_order_changed_failed list=%s", self.name, exc_info=True)

    def _notify_error(self, error: Exception) -> None:
        for observer in list(self._observers):
            try:
                observer.on_reorder_error(error)
            except Exception:
                logger.error("reorder.observer.on_reorder_error_failed list=%s", self.name, exc_info=True)


__all__ = ["ReorderCoordinator", "DEFAULT_PERSIST_TIMEOUT_SECONDS"]
