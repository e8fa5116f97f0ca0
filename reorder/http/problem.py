"""Problem+JSON and error-body interpretation for failed API calls.

Converts non-2xx responses and transport failures into ``PersistenceError``
with a message fit for a user-facing toast.
"""

from __future__ import annotations

from typing import Any, Optional
import logging

import httpx

from reorder.errors import TIMEOUT_MESSAGE, PersistenceError

PROBLEM_MEDIA_TYPE = "application/problem+json"

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."
NO_RESPONSE_MESSAGE = "No response from server. Please check your internet connection."

logger = logging.getLogger(__name__)


def _json_body(response: httpx.Response) -> Optional[Any]:
    try:
        return response.json()
    except ValueError:
        return None


def message_from_body(body: Any) -> Optional[str]:
    """Pick the most specific message from an error body.

    Order: ``message``, ``error``, then RFC 7807 ``detail`` and ``title``.
    """
    if not isinstance(body, dict):
        return None
    for key in ("message", "error", "detail", "title"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value
        if isinstance(value, dict):
            nested = value.get("message")
            if isinstance(nested, str) and nested.strip():
                return nested
    return None


def error_from_response(response: httpx.Response) -> PersistenceError:
    status = response.status_code
    if status == 401:
        message = SESSION_EXPIRED_MESSAGE
    else:
        message = message_from_body(_json_body(response)) or f"Error {status}: {response.reason_phrase}"
    content_type = response.headers.get("content-type", "")
    try:
        url = str(response.request.url)
    except RuntimeError:
        url = ""
    logger.warning(
        "api.error status=%s url=%s problem=%s message=%s",
        status,
        url,
        content_type.startswith(PROBLEM_MEDIA_TYPE),
        message,
    )
    return PersistenceError(message, status_code=status)


def error_from_transport(exc: httpx.HTTPError) -> PersistenceError:
    if isinstance(exc, httpx.TimeoutException):
        message = TIMEOUT_MESSAGE
    else:
        message = NO_RESPONSE_MESSAGE
    logger.warning("api.transport_error type=%s detail=%s", type(exc).__name__, exc)
    return PersistenceError(message)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "SESSION_EXPIRED_MESSAGE",
    "NO_RESPONSE_MESSAGE",
    "TIMEOUT_MESSAGE",
    "message_from_body",
    "error_from_response",
    "error_from_transport",
]
