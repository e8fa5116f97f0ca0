"""httpx client factory for the back office API."""

from __future__ import annotations

from typing import Optional

import httpx

from reorder.config import AppConfig


def default_headers(config: AppConfig) -> dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "X-Timezone": config.api.timezone,
    }
    if config.api.token:
        headers["Authorization"] = f"Bearer {config.api.token}"
    return headers


def create_client(
    config: AppConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Return an AsyncClient bound to the configured base URL.

    ``transport`` lets tests route requests to an in-process ASGI app.
    """
    return httpx.AsyncClient(
        base_url=config.api.base_url,
        headers=default_headers(config),
        timeout=httpx.Timeout(config.reorder.persist_timeout_seconds),
        transport=transport,
    )


__all__ = ["create_client", "default_headers"]
