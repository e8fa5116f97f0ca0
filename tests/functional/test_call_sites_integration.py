"""End-to-end tests for the call-site adapters against a fake back office.

Each test seeds the in-memory back office, reloads a list through the real
httpx client (ASGI transport), drags an item and checks both the local
order reported to observers and what the server stored.
"""

from __future__ import annotations

import anyio
import httpx
import pytest

from reorder.adapters.call_sites import attribute_value_list, category_list, modifier_board
from reorder.config import ApiConfig, AppConfig
from reorder.http.client import create_client
from reorder.http.persistence import fetch_ordered_items
from reorder.logic.reconciliation import CoordinatorState, OrderState
from reorder.models.ordered_item import Modifier
from reorder.sequence_endpoints import get_endpoint

from fake_backoffice import create_fake_backoffice, seed, stored_order
from reorder_doubles import RecordingObserver, ids

CONFIG = AppConfig(api=ApiConfig(base_url="http://backoffice.test"))


@pytest.fixture
def backoffice():
    app = create_fake_backoffice()
    seed(
        app.state.engine,
        "categories",
        [
            {"id": 1, "name": "Starters", "seq_no": 1},
            {"id": 2, "name": "Mains", "seq_no": 2},
            {"id": 3, "name": "Desserts", "seq_no": 3},
        ],
    )
    seed(
        app.state.engine,
        "modifiers",
        [
            {"id": 10, "name": "Oat milk", "group_key": "5", "seq_no": 1},
            {"id": 11, "name": "Soy milk", "group_key": "5", "seq_no": 2},
            {"id": 12, "name": "Whole milk", "group_key": "5", "seq_no": 3},
            {"id": 20, "name": "Extra shot", "group_key": "6", "seq_no": 1},
            {"id": 21, "name": "Decaf", "group_key": "6", "seq_no": 2},
        ],
    )
    seed(
        app.state.engine,
        "attribute_values",
        [
            {"id": 30, "name": "S", "group_key": "2", "seq_no": 1},
            {"id": 31, "name": "M", "group_key": "2", "seq_no": 2},
            {"id": 32, "name": "L", "group_key": "2", "seq_no": 3},
        ],
    )
    return app


def _client(app) -> httpx.AsyncClient:
    return create_client(CONFIG, transport=httpx.ASGITransport(app=app))


# -----------------------------
# Flat list
# -----------------------------

@pytest.mark.anyio
async def test_category_move_is_persisted_and_survives_reload(backoffice):
    observer = RecordingObserver()
    async with _client(backoffice) as client, anyio.create_task_group() as tg:
        categories = category_list(client, tg, CONFIG)
        categories.subscribe(observer)
        await categories.reload()
        assert ids(categories.current_order()) == [1, 2, 3]
        assert categories.last_envelope.total == 3

        categories.request_move(0, 2)
        await categories.coordinator.wait_settled()
        assert ids(categories.current_order()) == [2, 3, 1]

        await categories.reload()

    assert backoffice.state.writes[0]["body"] == {"id": 1, "name": "Starters", "new_seq_no": 3}
    assert stored_order(backoffice.state.engine, "categories") == [(2, 1), (3, 2), (1, 3)]
    assert ids(categories.current_order()) == [2, 3, 1]
    assert observer.states == [
        OrderState.CONFIRMED,
        OrderState.OPTIMISTIC,
        OrderState.CONFIRMED,
        OrderState.CONFIRMED,
    ]


@pytest.mark.anyio
async def test_move_to_front_lands_first_on_the_server(backoffice):
    async with _client(backoffice) as client, anyio.create_task_group() as tg:
        categories = category_list(client, tg, CONFIG)
        await categories.reload()
        categories.request_move(2, 0)
        await categories.coordinator.wait_settled()
        await categories.reload()

    assert ids(categories.current_order()) == [3, 1, 2]


@pytest.mark.anyio
async def test_server_error_rolls_back_and_leaves_server_untouched(backoffice):
    backoffice.state.fail_ids.add(1)
    observer = RecordingObserver()
    async with _client(backoffice) as client, anyio.create_task_group() as tg:
        categories = category_list(client, tg, CONFIG)
        categories.subscribe(observer)
        await categories.reload()
        categories.request_move(0, 2)
        await categories.coordinator.wait_settled()

    assert ids(categories.current_order()) == [1, 2, 3]
    assert observer.states[-1] == OrderState.ROLLED_BACK
    assert str(observer.errors[0]) == "sequence update failed"
    assert stored_order(backoffice.state.engine, "categories") == [(1, 1), (2, 2), (3, 3)]


@pytest.mark.anyio
async def test_unsuccessful_envelope_rolls_back(backoffice):
    backoffice.state.reject_ids.add(2)
    observer = RecordingObserver()
    async with _client(backoffice) as client, anyio.create_task_group() as tg:
        categories = category_list(client, tg, CONFIG)
        categories.subscribe(observer)
        await categories.reload()
        categories.request_move(1, 0)
        await categories.coordinator.wait_settled()

    assert ids(categories.current_order()) == [1, 2, 3]
    assert str(observer.errors[0]) == "Sequence is locked"


# -----------------------------
# Grouped lists
# -----------------------------

@pytest.mark.anyio
async def test_modifier_groups_reorder_independently(backoffice):
    async with _client(backoffice) as client, anyio.create_task_group() as tg:
        board = modifier_board(client, tg, CONFIG)
        items, _ = await fetch_ordered_items(client, get_endpoint("modifiers"), Modifier)
        generations = board.load(items)
        assert sorted(generations) == ["5", "6"]
        assert board.groups() == ["5", "6"]

        milk = board.list_for("5")
        extras = board.list_for("6")
        # A pending move in one group does not block the other
        assert milk.request_move(0, 2) is not None
        assert extras.request_move(1, 0) is not None
        await milk.coordinator.wait_settled()
        await extras.coordinator.wait_settled()

    bodies = sorted((write["body"] for write in backoffice.state.writes), key=lambda body: body["id"])
    assert bodies == [
        {"id": 10, "modifier_category_id": 5, "new_seq_no": 3},
        {"id": 21, "modifier_category_id": 6, "new_seq_no": 1},
    ]
    assert ids(milk.current_order()) == [11, 12, 10]
    assert ids(extras.current_order()) == [21, 20]
    assert stored_order(backoffice.state.engine, "modifiers", "5") == [(11, 1), (12, 2), (10, 3)]
    assert stored_order(backoffice.state.engine, "modifiers", "6") == [(21, 1), (20, 2)]


@pytest.mark.anyio
async def test_board_reload_empties_groups_missing_from_the_new_data(backoffice):
    async with _client(backoffice) as client, anyio.create_task_group() as tg:
        board = modifier_board(client, tg, CONFIG)
        items, _ = await fetch_ordered_items(client, get_endpoint("modifiers"), Modifier)
        board.load(items)
        extras = board.list_for("6")
        assert extras.request_move(1, 0) is not None

        generations = board.load([item for item in items if item.group_key == "5"])

        assert sorted(generations) == ["5", "6"]
        assert extras.current_order() == ()
        assert extras.coordinator.state == CoordinatorState.IDLE

    assert ids(board.list_for("5").current_order()) == [10, 11, 12]
    assert extras.current_order() == ()
    assert board.groups() == ["5", "6"]


@pytest.mark.anyio
async def test_group_reload_queries_only_its_group(backoffice):
    async with _client(backoffice) as client, anyio.create_task_group() as tg:
        extras = modifier_board(client, tg, CONFIG).list_for("6")
        await extras.reload()

    assert ids(extras.current_order()) == [20, 21]
    assert all(item.group_key == "6" for item in extras.current_order())


@pytest.mark.anyio
async def test_attribute_value_put_stores_sequence_and_reload_breaks_ties_by_id(backoffice):
    async with _client(backoffice) as client, anyio.create_task_group() as tg:
        sizes = attribute_value_list(2, client, tg, CONFIG)
        await sizes.reload()
        sizes.request_move(0, 2)
        await sizes.coordinator.wait_settled()
        assert ids(sizes.current_order()) == [31, 32, 30]

        await sizes.reload()

    write = backoffice.state.writes[0]
    assert write["method"] == "PUT"
    assert write["body"] == {"id": 30, "new_seq_no": 3}
    assert ids(sizes.current_order()) == [31, 30, 32]
