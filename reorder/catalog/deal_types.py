"""Deal type reference data with an owned TTL cache."""

from __future__ import annotations

from typing import List, Optional
import logging

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError

from reorder.config import AppConfig
from reorder.errors import InvalidInputError
from reorder.http.persistence import body_or_none
from reorder.http.problem import error_from_response, error_from_transport
from reorder.logic.ttl_cache import TTLCache
from reorder.models.envelope import normalize_envelope

logger = logging.getLogger(__name__)

DEAL_TYPES_PATH = "/v2/deals/types/list"
DEFAULT_TTL_SECONDS = 300.0


class DealType(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    description: Optional[str] = None
    status: Optional[int] = None


class DealTypeCatalog:
    def __init__(self, client: httpx.AsyncClient, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        self._client = client
        self.cache: TTLCache[List[DealType]] = TTLCache(self._load, ttl_seconds, name="deal_types")

    @classmethod
    def from_config(cls, client: httpx.AsyncClient, config: AppConfig) -> "DealTypeCatalog":
        """Catalog whose freshness window is ``cache.deal_types_ttl_seconds``."""
        return cls(client, ttl_seconds=config.cache.deal_types_ttl_seconds)

    async def fetch_deal_types(self, force_refresh: bool = False) -> List[DealType]:
        return await self.cache.get(force_refresh=force_refresh)

    async def refresh(self) -> List[DealType]:
        return await self.cache.refresh()

    def invalidate(self) -> None:
        self.cache.invalidate()

    async def _load(self) -> List[DealType]:
        try:
            response = await self._client.get(DEAL_TYPES_PATH)
        except httpx.HTTPError as exc:
            raise error_from_transport(exc) from exc
        if not response.is_success:
            raise error_from_response(response)
        envelope = normalize_envelope(body_or_none(response))
        if not envelope.success:
            raise InvalidInputError(envelope.message or "Invalid response from deal types API")
        deal_types: List[DealType] = []
        for raw in envelope.items:
            try:
                deal_types.append(DealType.model_validate(raw))
            except PydanticValidationError as exc:
                logger.warning("deal_types.skipped_record record=%s errors=%s", raw, exc.errors())
        logger.info("deal_types.loaded count=%s", len(deal_types))
        return deal_types


__all__ = ["DealType", "DealTypeCatalog", "DEAL_TYPES_PATH", "DEFAULT_TTL_SECONDS"]
