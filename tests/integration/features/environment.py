"""Behave environment hooks for reorder integration scenarios.

Each scenario gets a fresh in-process back office (FastAPI over in-memory
SQLite) reached through the real httpx client, so the scenarios exercise
the adapters, the REST port and the coordinator together without a
network. Set ``REORDER_PERSIST_TIMEOUT_SECONDS`` to tighten the save
timeout used by the scenarios.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

# The fake back office and test doubles live beside the functional suite
_FUNCTIONAL_DIR = Path(__file__).resolve().parents[2] / "functional"
if str(_FUNCTIONAL_DIR) not in sys.path:
    sys.path.insert(0, str(_FUNCTIONAL_DIR))

from fake_backoffice import create_fake_backoffice  # noqa: E402

from reorder.config import ApiConfig, AppConfig, ReorderConfig  # noqa: E402
from reorder.logging_setup import configure_logging  # noqa: E402
from reorder.logic import events  # noqa: E402


def before_all(context: Any) -> None:
    configure_logging()
    timeout = float(os.getenv("REORDER_PERSIST_TIMEOUT_SECONDS", "10"))
    context.app_config = AppConfig(
        api=ApiConfig(base_url="http://backoffice.test"),
        reorder=ReorderConfig(persist_timeout_seconds=timeout),
    )


def before_scenario(context: Any, scenario: Any) -> None:
    context.backoffice = create_fake_backoffice()
    context.observer = None
    context.reorderable = None
    events.get_buffered_events(clear=True)


def after_scenario(context: Any, scenario: Any) -> None:
    context.backoffice.state.engine.dispose()
