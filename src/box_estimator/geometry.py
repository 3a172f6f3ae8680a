"""Geometry utilities: canonical dimension order for items and boxes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .models import Box, Item


def sort_dimensions(width: float, height: float, length: float) -> tuple[float, float, float]:
    """
    Three-element sort network over (width, height, length).

    Returns the same three values so that width <= height <= length.
    The last compare-and-swap repeats the first one on purpose: moving the
    largest value into `length` can leave a larger value in `width` again.
    """
    if width > height:
        width, height = height, width
    if height > length:
        height, length = length, height
    if width > height:
        width, height = height, width
    return width, height, length


def normalize_item(item: "Item") -> "Item":
    """Reorder the item's dimensions in place. Weight is untouched."""
    item.width, item.height, item.length = sort_dimensions(item.width, item.height, item.length)
    return item


def normalize_box(box: "Box") -> "Box":
    """Boxes are immutable catalog values, so a reordered copy is returned."""
    width, height, length = sort_dimensions(box.width, box.height, box.length)
    return box.model_copy(update={"width": width, "height": height, "length": length})


def item_sort_key(item: "Item") -> tuple[float, float, float, float]:
    # weight only breaks ties between geometrically identical items
    return (item.width, item.height, item.length, item.weight)


def box_sort_key(box: "Box") -> tuple[float, float, float, float]:
    return (box.width, box.height, box.length, box.max_weight)


def normalized_items(items: Iterable["Item"]) -> list["Item"]:
    """
    Normalize every item and sort them by (width, height, length, weight).

    Only incidental ordering is removed; each item keeps its own weight.
    """
    return sorted((normalize_item(item) for item in items), key=item_sort_key)
