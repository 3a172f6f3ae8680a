"""Local estimate used while the external packer is unavailable."""

from __future__ import annotations

from typing import Sequence

from box_estimator.geometry import box_sort_key, normalize_box, normalize_item
from box_estimator.models import NO_BOX_FITS, Box, Decision, Item


def aggregate_item(items: Sequence[Item]) -> Item:
    """
    One bounding item for the whole cart.

    Widths and weights are summed, height and length take the maximum. The
    result is normalized once all items are accounted for.
    """
    total = Item(width=0, height=0, length=0, weight=0)
    for item in items:
        total.width += item.width
        total.height = max(total.height, item.height)
        total.length = max(total.length, item.length)
        total.weight += item.weight
    return normalize_item(total)


def box_fits(box: Box, total: Item) -> bool:
    return (
        total.width <= box.width
        and total.height <= box.height
        and total.length <= box.length
        and total.weight <= box.max_weight
    )


def fallback_pack(boxes: Sequence[Box], items: Sequence[Item]) -> Decision:
    """
    Id of the smallest box that holds the aggregate item, or NO_BOX_FITS.

    Not a packing algorithm: the aggregate over-approximates the cart, so this
    may answer NO_BOX_FITS where a real solver finds a box. Boxes are compared
    in (width, height, length, max_weight) order after normalization; ties keep
    catalog order.
    """
    total = aggregate_item(items)
    for box in sorted((normalize_box(box) for box in boxes), key=box_sort_key):
        if box_fits(box, total):
            return box.id
    return NO_BOX_FITS
