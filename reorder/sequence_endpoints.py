"""Static registry of the back office sequence endpoints.

Each entry names the HTTP method and path that persist one item's sequence,
the list endpoint used to reload the collection, and the body fields the
resource expects. ``group_field`` is the list query parameter carrying the
group key and, when ``group_in_body`` is set, also a request body field.
``needs_name`` marks endpoints that require the item's display name.
"""

from __future__ import annotations

from typing import Dict, NamedTuple, Optional


class SequenceEndpoint(NamedTuple):
    method: str
    path: str
    list_path: str
    group_field: Optional[str] = None
    group_in_body: bool = True
    needs_name: bool = False


SEQUENCE_ENDPOINTS: Dict[str, SequenceEndpoint] = {
    "categories": SequenceEndpoint("PATCH", "/shift-category-seq", "/categories", needs_name=True),
    "modifier_categories": SequenceEndpoint(
        "PATCH", "/shift-modifier-category-seq", "/modifier-categories", needs_name=True
    ),
    "modifiers": SequenceEndpoint(
        "PATCH", "/shift-modifier-seq", "/modifiers", group_field="modifier_category_id"
    ),
    "product_attributes": SequenceEndpoint("PATCH", "/v2/products/attributes-seq", "/v2/products/attributes"),
    # The server derives the attribute from the value id
    "attribute_values": SequenceEndpoint(
        "PUT",
        "/v2/products/attribute-values/sequence",
        "/v2/products/attribute-values",
        group_field="attribute_id",
        group_in_body=False,
    ),
    "products": SequenceEndpoint(
        "PATCH", "/shift-product-seq", "/v2/products", group_field="category_id", needs_name=True
    ),
}


def get_endpoint(key: str) -> SequenceEndpoint:
    try:
        return SEQUENCE_ENDPOINTS[key]
    except KeyError:
        raise KeyError(f"unknown sequence endpoint '{key}'; known: {sorted(SEQUENCE_ENDPOINTS)}") from None


__all__ = ["SequenceEndpoint", "SEQUENCE_ENDPOINTS", "get_endpoint"]
