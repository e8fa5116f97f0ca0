"""Factories for the back office screens that support drag-to-reorder."""

from __future__ import annotations

import httpx
from anyio.abc import TaskGroup

from reorder.adapters.reorderable_list import GroupedReorderBoard, ReorderableList
from reorder.config import AppConfig
from reorder.models.ordered_item import (
    AttributeValue,
    Category,
    Modifier,
    ModifierCategory,
    Product,
    ProductAttribute,
)
from reorder.sequence_endpoints import get_endpoint


def category_list(client: httpx.AsyncClient, task_group: TaskGroup, config: AppConfig) -> ReorderableList[Category]:
    return ReorderableList("categories", Category, get_endpoint("categories"), client, task_group, config)


def modifier_category_list(
    client: httpx.AsyncClient, task_group: TaskGroup, config: AppConfig
) -> ReorderableList[ModifierCategory]:
    return ReorderableList(
        "modifier_categories", ModifierCategory, get_endpoint("modifier_categories"), client, task_group, config
    )


def product_attribute_list(
    client: httpx.AsyncClient, task_group: TaskGroup, config: AppConfig
) -> ReorderableList[ProductAttribute]:
    return ReorderableList(
        "product_attributes", ProductAttribute, get_endpoint("product_attributes"), client, task_group, config
    )


def attribute_value_list(
    attribute_id: int, client: httpx.AsyncClient, task_group: TaskGroup, config: AppConfig
) -> ReorderableList[AttributeValue]:
    # One attribute's values are shown at a time
    return ReorderableList(
        "attribute_values",
        AttributeValue,
        get_endpoint("attribute_values"),
        client,
        task_group,
        config,
        group_key=str(attribute_id),
    )


def modifier_board(
    client: httpx.AsyncClient, task_group: TaskGroup, config: AppConfig
) -> GroupedReorderBoard[Modifier]:
    return GroupedReorderBoard("modifiers", Modifier, get_endpoint("modifiers"), client, task_group, config)


def product_board(
    client: httpx.AsyncClient, task_group: TaskGroup, config: AppConfig
) -> GroupedReorderBoard[Product]:
    return GroupedReorderBoard("products", Product, get_endpoint("products"), client, task_group, config)


__all__ = [
    "category_list",
    "modifier_category_list",
    "product_attribute_list",
    "attribute_value_list",
    "modifier_board",
    "product_board",
]
