"""Typed response envelope for the back office API.

Historically every call site checked ``response.data``, ``response.data.data``
or a resource-named key. ``normalize_envelope`` is the single place that
accepts those shapes; everything downstream works on ``ResponseEnvelope``.
"""

from __future__ import annotations

from typing import Any, List, Optional
import logging

from pydantic import BaseModel, Field

from reorder.errors import InvalidInputError

logger = logging.getLogger(__name__)

# Resource-named collection keys seen on list endpoints
COLLECTION_KEYS = ("data", "categories", "items", "results")


class ResponseEnvelope(BaseModel):
    items: List[Any] = Field(default_factory=list)
    record: Optional[dict] = None
    total: Optional[int] = None
    page: Optional[int] = None
    per_page: Optional[int] = None
    message: Optional[str] = None
    success: bool = True


def _success_flag(body: dict) -> bool:
    if body.get("success") is False:
        return False
    status = body.get("status")
    if isinstance(status, str) and status.lower() in ("error", "fail", "failed"):
        return False
    return True


def _int_or_none(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def normalize_envelope(payload: Any) -> ResponseEnvelope:
    """Return a ``ResponseEnvelope`` for any known response shape.

    Accepted shapes:
    - ``None`` or empty body (e.g. 204) -> empty successful envelope
    - a bare JSON list
    - ``{"data": [...]}`` / ``{"categories": [...]}`` plus paging metadata
    - ``{"data": {"data": [...], "total": ...}}`` (double wrapped)
    - ``{"data": {...}}`` or a bare object -> single ``record``

    Raises ``InvalidInputError`` for anything else (scalars, non-list
    collections).
    """
    if payload is None or payload == "" or payload == b"":
        return ResponseEnvelope()
    if isinstance(payload, list):
        return ResponseEnvelope(items=payload, total=len(payload))
    if not isinstance(payload, dict):
        raise InvalidInputError(f"unexpected response body type {type(payload).__name__}")

    body = payload
    message = body.get("message") if isinstance(body.get("message"), str) else None
    success = _success_flag(body)

    inner = body.get("data")
    # Unwrap one level of {"data": {"data": [...]}}
    if isinstance(inner, dict) and isinstance(inner.get("data"), list):
        body = inner
        inner = body.get("data")

    for key in COLLECTION_KEYS:
        value = body.get(key)
        if value is None:
            continue
        if isinstance(value, list):
            return ResponseEnvelope(
                items=value,
                total=_int_or_none(body.get("total")) if body.get("total") is not None else len(value),
                page=_int_or_none(body.get("page")),
                per_page=_int_or_none(body.get("per_page")),
                message=message,
                success=success,
            )
        if isinstance(value, dict) and key == "data":
            return ResponseEnvelope(record=value, message=message, success=success)
        logger.warning("envelope.unexpected_collection key=%s type=%s", key, type(value).__name__)
        raise InvalidInputError(f"response field '{key}' is not a list")

    return ResponseEnvelope(record=body, message=message, success=success)


__all__ = ["ResponseEnvelope", "normalize_envelope", "COLLECTION_KEYS"]
