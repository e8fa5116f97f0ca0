"""Ordered item models shared by every reorderable back office list.

``OrderedItem`` is the minimal shape the engine needs. The concrete models
map the wire names used by the back office API (``seq_no`` or ``sequence``
and the parent id of the sub-collection) onto ``sequence`` and
``group_key``. All models are frozen so list snapshots can share instances.
"""

from __future__ import annotations

from typing import Any, ClassVar, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

ItemId = Union[int, str]


class OrderedItem(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: ItemId
    sequence: int = Field(validation_alias=AliasChoices("sequence", "seq_no", "seqNo"))
    group_key: Optional[str] = None

    @field_validator("sequence", mode="before")
    @classmethod
    def sequence_from_text(cls, v: Any) -> Any:
        # The API sends sequence as a string on some endpoints ("3")
        if isinstance(v, str):
            return int(v.strip() or 0)
        return v


def id_sort_key(item_id: ItemId) -> tuple:
    """Deterministic tie-break key for item ids.

    Integers and ASCII-digit strings compare numerically and sort before
    other ids, which compare as plain strings.
    """
    if isinstance(item_id, bool):
        return (1, str(item_id))
    if isinstance(item_id, int):
        return (0, item_id, "")
    text = str(item_id)
    if text.isascii() and text.isdigit():
        return (0, int(text), text)
    return (1, text)


def order_key(item: OrderedItem) -> tuple:
    return (item.sequence, id_sort_key(item.id))


class _Grouped(OrderedItem):
    """Base for items whose ``group_key`` comes from a parent id field."""

    group_field: ClassVar[str] = ""

    @model_validator(mode="before")
    @classmethod
    def group_from_parent(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("group_key") is None:
            parent = data.get(cls.group_field)
            if parent is not None:
                data = {**data, "group_key": str(parent)}
        return data


class Category(OrderedItem):
    name: str = ""


class ModifierCategory(OrderedItem):
    name: str = ""


class ProductAttribute(OrderedItem):
    name: str = ""


class Modifier(_Grouped):
    group_field: ClassVar[str] = "modifier_category_id"

    name: str = Field(default="", validation_alias=AliasChoices("name", "modifier"))
    modifier_category_id: Optional[int] = None


class AttributeValue(_Grouped):
    group_field: ClassVar[str] = "attribute_id"

    attribute_id: Optional[int] = None
    value: str = ""


class Product(_Grouped):
    group_field: ClassVar[str] = "category_id"

    name: str = ""
    category_id: Optional[int] = None


__all__ = [
    "ItemId",
    "OrderedItem",
    "Category",
    "ModifierCategory",
    "ProductAttribute",
    "Modifier",
    "AttributeValue",
    "Product",
    "id_sort_key",
    "order_key",
]
