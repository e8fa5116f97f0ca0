"""Configuration utilities for the reorder engine.

This module loads configuration with the following rules:
- Primary source: `reorder_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_REORDER_CONFIG = Path("reorder_config.json")
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Recoverable: log and ignore unreadable override
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class ApiConfig(BaseModel):
    base_url: str
    timezone: str = Field(default="UTC")
    token: Optional[str] = None

    @field_validator("base_url")
    @classmethod
    def base_url_must_be_http(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("api.base_url must be a non-empty string")
        if not v.startswith(("http://", "https://")):
            raise ValueError("api.base_url must start with http:// or https://")
        return v.rstrip("/")


class ReorderConfig(BaseModel):
    persist_timeout_seconds: float = Field(default=10.0, gt=0)
    min_sequence: int = Field(default=1)
    abort_on_reload: bool = Field(default=False)

    @field_validator("min_sequence")
    @classmethod
    def min_sequence_must_be_allowed(cls, v: int) -> int:
        if v not in (0, 1):
            raise ValueError("reorder.min_sequence must be 0 or 1")
        return v


class CacheConfig(BaseModel):
    deal_types_ttl_seconds: float = Field(default=300.0, ge=0)


class AppConfig(BaseModel):
    api: ApiConfig
    reorder: ReorderConfig = Field(default_factory=ReorderConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:  # pragma: no cover - defensive
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def _as_bool(text: Optional[str]) -> bool:
    return str(text).strip().lower() in ("1", "true", "yes")


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) reorder_config.json at project root (primary base)
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_REORDER_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    # API
    base_url = _env("REORDER_API_BASE_URL") or _read_config_file("api.base_url") or _base("api.base_url") or "http://localhost:8000/api"
    timezone = _env("REORDER_API_TIMEZONE") or _read_config_file("api.timezone") or _base("api.timezone", "UTC")
    token = _env("REORDER_API_TOKEN") or _read_config_file("api.token") or _base("api.token")

    # Reorder engine
    timeout_text = _env("REORDER_PERSIST_TIMEOUT_SECONDS") or _read_config_file("reorder.persist_timeout_seconds") or _base("reorder.persist_timeout_seconds", "10")
    min_sequence_text = _env("REORDER_MIN_SEQUENCE") or _read_config_file("reorder.min_sequence") or _base("reorder.min_sequence", "1")
    abort_text = _env("REORDER_ABORT_ON_RELOAD") or _read_config_file("reorder.abort_on_reload") or _base("reorder.abort_on_reload", "false")

    # Caches
    ttl_text = _env("REORDER_DEAL_TYPES_TTL_SECONDS") or _read_config_file("cache.deal_types_ttl_seconds") or _base("cache.deal_types_ttl_seconds", "300")

    try:
        cfg = AppConfig(
            api=ApiConfig(base_url=base_url, timezone=timezone, token=token),
            reorder=ReorderConfig(
                persist_timeout_seconds=str(timeout_text).strip(),
                min_sequence=str(min_sequence_text).strip(),
                abort_on_reload=_as_bool(abort_text),
            ),
            cache=CacheConfig(deal_types_ttl_seconds=str(ttl_text).strip()),
        )
        return cfg
    except PydanticValidationError as e:
        logger.error("Invalid reorder configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "ApiConfig",
    "ReorderConfig",
    "CacheConfig",
    "load_config",
]
