from __future__ import annotations

"""Functional test bootstrap for the reorder engine.

Runs async tests on the asyncio backend through the anyio pytest plugin,
configures logging once per session and clears the in-process event buffer
around every test so event assertions only see their own transitions.
"""

import pytest

from reorder.logging_setup import configure_logging
from reorder.logic import events


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="session", autouse=True)
def functional_logging_bootstrap() -> None:
    configure_logging()
    yield


@pytest.fixture(autouse=True)
def clear_event_buffer() -> None:
    events.get_buffered_events(clear=True)
    yield
    events.get_buffered_events(clear=True)
