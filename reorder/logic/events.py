"""Reorder event constants and publisher.

Defines event type constants and a simple publish() callable used by the
coordinator at every state transition.
"""

from __future__ import annotations

from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

LIST_LOADED = "list.loaded"
REORDER_REQUESTED = "reorder.requested"
REORDER_REJECTED = "reorder.rejected"
REORDER_CONFIRMED = "reorder.confirmed"
REORDER_ROLLED_BACK = "reorder.rolled_back"
REORDER_STALE_DISCARDED = "reorder.stale_discarded"


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    """Publish a reorder event.

    Events are logged for observability and buffered in-process so tests
    and diagnostics can inspect the sequence of transitions.
    """
    logger.info("event_publish type=%s payload=%s", event_type, payload)
    EVENT_BUFFER.append({"type": event_type, "payload": payload})


# In-memory buffer for reorder events (diagnostics and tests)
EVENT_BUFFER: List[Dict[str, Any]] = []


def get_buffered_events(clear: bool = True) -> List[Dict[str, Any]]:
    """Return buffered events; optionally clear the buffer."""
    events = list(EVENT_BUFFER)
    if clear:
        EVENT_BUFFER.clear()
    return events

__all__ = [
    "LIST_LOADED",
    "REORDER_REQUESTED",
    "REORDER_REJECTED",
    "REORDER_CONFIRMED",
    "REORDER_ROLLED_BACK",
    "REORDER_STALE_DISCARDED",
    "publish",
    "get_buffered_events",
    "EVENT_BUFFER",
]
