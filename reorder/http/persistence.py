"""REST implementation of the sequence persistence port.

``RestSequencePort`` sends exactly one request per ``commit_sequence`` call
and never retries: the sequence endpoints have no idempotency key, so a
retry racing a delayed original could apply the shift twice.
``fetch_ordered_items`` reloads a list through the same response envelope.
"""

from __future__ import annotations

from typing import Callable, List, Mapping, Optional, Tuple, Type, TypeVar
import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from reorder.errors import InvalidInputError, PersistenceError
from reorder.http.problem import error_from_response, error_from_transport
from reorder.logic.ports import SequenceCommit
from reorder.models.envelope import ResponseEnvelope, normalize_envelope
from reorder.models.ordered_item import ItemId, OrderedItem
from reorder.sequence_endpoints import SequenceEndpoint

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=OrderedItem)

NameLookup = Callable[[ItemId], Optional[str]]


def wire_id(value: ItemId) -> ItemId:
    """Numeric ids (ASCII digits only) travel as JSON numbers."""
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    return value


def body_or_none(response: httpx.Response):
    """Decoded JSON body, or None when the body is empty or not JSON."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        logger.warning("api.non_json_body status=%s", response.status_code)
        return None


class RestSequencePort:
    """Persist one item's sequence through a back office endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoint: SequenceEndpoint,
        *,
        name_lookup: Optional[NameLookup] = None,
    ) -> None:
        self._client = client
        self.endpoint = endpoint
        self._name_lookup = name_lookup

    def build_body(self, request: SequenceCommit) -> dict:
        body: dict = {"id": wire_id(request.item_id)}
        if self.endpoint.needs_name:
            name = self._name_lookup(request.item_id) if self._name_lookup else None
            body["name"] = name or ""
        if self.endpoint.group_field and self.endpoint.group_in_body:
            if request.group_key is None:
                raise InvalidInputError(
                    f"{self.endpoint.path} requires {self.endpoint.group_field} but the list has no group key"
                )
            body[self.endpoint.group_field] = wire_id(request.group_key)
        body["new_seq_no"] = request.new_sequence
        return body

    async def commit_sequence(self, request: SequenceCommit) -> None:
        body = self.build_body(request)
        logger.info(
            "api.commit_sequence method=%s path=%s body=%s",
            self.endpoint.method,
            self.endpoint.path,
            body,
        )
        try:
            response = await self._client.request(self.endpoint.method, self.endpoint.path, json=body)
        except httpx.HTTPError as exc:
            raise error_from_transport(exc) from exc
        if not response.is_success:
            raise error_from_response(response)
        try:
            envelope = normalize_envelope(body_or_none(response))
        except InvalidInputError:
            # The status code is authoritative; an odd 2xx body is not a failure
            logger.warning("api.commit_sequence.unrecognised_body path=%s", self.endpoint.path)
            return
        if not envelope.success:
            raise PersistenceError(
                envelope.message or "Failed to update the order",
                status_code=response.status_code,
            )


async def fetch_ordered_items(
    client: httpx.AsyncClient,
    endpoint: SequenceEndpoint,
    model: Type[M],
    *,
    group_key: Optional[str] = None,
    params: Optional[Mapping[str, object]] = None,
) -> Tuple[List[M], ResponseEnvelope]:
    """GET the list behind ``endpoint`` and parse it into ``model`` items.

    Malformed records are logged and skipped so one bad row cannot take the
    whole list down. Transport and HTTP failures raise ``PersistenceError``.
    """
    query = dict(params or {})
    if group_key is not None and endpoint.group_field:
        query[endpoint.group_field] = wire_id(group_key)
    try:
        response = await client.get(endpoint.list_path, params=query)
    except httpx.HTTPError as exc:
        raise error_from_transport(exc) from exc
    if not response.is_success:
        raise error_from_response(response)

    envelope = normalize_envelope(body_or_none(response))
    items: List[M] = []
    for raw in envelope.items:
        try:
            items.append(model.model_validate(raw))
        except PydanticValidationError as exc:
            logger.warning(
                "api.fetch_ordered_items.skipped_record path=%s record=%s errors=%s",
                endpoint.list_path,
                raw,
                exc.errors(),
            )
    return items, envelope


__all__ = ["RestSequencePort", "body_or_none", "fetch_ordered_items", "wire_id"]
