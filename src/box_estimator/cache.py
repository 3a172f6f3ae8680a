"""Result cache and the canonical key packing decisions are stored under."""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Iterable, Protocol, Sequence

from box_estimator.models import Decision, Item


class ResultCache(Protocol):
    def get(self, key: str) -> Decision | None:
        """Cached decision, or None when absent. False is a cached decision."""
        ...

    def set(self, key: str, decision: Decision) -> None: ...


class MemoryCache:
    """In-process cache. No TTL, last write wins."""

    def __init__(self) -> None:
        self._store: dict[str, Decision] = {}

    def get(self, key: str) -> Decision | None:
        return self._store.get(key)

    def set(self, key: str, decision: Decision) -> None:
        self._store[key] = decision

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)


def serialize_items(items: Iterable[Item]) -> str:
    """Compact JSON with sorted keys; every number is rendered as a float."""
    return json.dumps(
        [
            {
                "width": float(item.width),
                "height": float(item.height),
                "length": float(item.length),
                "weight": float(item.weight),
            }
            for item in items
        ],
        sort_keys=True,
        separators=(",", ":"),
    )


def compute_key(sorted_box_ids: Sequence[int], sorted_items: Sequence[Item]) -> str:
    """
    Cache key for a catalog and a cart.

    Expects box ids in ascending order and items already normalized and sorted,
    so carts that differ only in item order, item rotation or JSON formatting
    share a key. The key assumes box dimensions never change once an id is
    assigned.

    SHA-384 gives 48 bytes, so the base64 form has no padding. `+` and `/` are
    replaced with `.` and `_`.
    """
    payload = "X-Box-Ids: " + ",".join(str(box_id) for box_id in sorted_box_ids) + "\n\n" + serialize_items(sorted_items)
    digest = hashlib.sha384(payload.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii").replace("+", ".").replace("/", "_")
