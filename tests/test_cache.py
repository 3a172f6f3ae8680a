"""Tests for the cache key and the in-memory result cache."""

from __future__ import annotations

import itertools
import re

from box_estimator.cache import MemoryCache, compute_key
from box_estimator.geometry import normalized_items
from box_estimator.models import NO_BOX_FITS, Item
from box_estimator.service import parse_pack_request


def key_for(box_ids, items) -> str:
    return compute_key(box_ids, normalized_items(items))


def test_key_independent_of_item_order() -> None:
    """Two items given in either order share a key."""
    a = [Item(width=1, height=1, length=1, weight=1), Item(width=2, height=2, length=2, weight=2)]
    b = [Item(width=2, height=2, length=2, weight=2), Item(width=1, height=1, length=1, weight=1)]

    assert key_for([1], a) == key_for([1], b)


def test_key_same_for_every_permutation() -> None:
    dims = [(3, 1, 2, 4), (1, 1, 1, 0.5), (5, 4, 6, 2), (1, 1, 1, 0.25)]
    keys = {
        key_for([1, 2, 3], [Item(width=w, height=h, length=l, weight=g) for w, h, l, g in perm])
        for perm in itertools.permutations(dims)
    }

    assert len(keys) == 1


def test_key_independent_of_item_rotation() -> None:
    assert key_for([1], [Item(width=3, height=1, length=2, weight=1)]) == key_for(
        [1], [Item(width=1, height=2, length=3, weight=1)]
    )


def test_key_independent_of_json_formatting() -> None:
    compact = parse_pack_request(b'{"products":[{"width":1,"height":2,"length":3,"weight":5}]}')
    spaced = parse_pack_request(
        b'{\n  "products": [\n    {"weight": 5.0, "length": 3.0, "height": 2, "width": 1}\n  ]\n}'
    )

    assert key_for([1], compact.products) == key_for([1], spaced.products)


def test_key_depends_on_catalog_and_weight() -> None:
    items = [Item(width=1, height=2, length=3, weight=5)]

    assert key_for([1], items) != key_for([1, 2], items)
    assert key_for([1], items) != key_for([1], [Item(width=1, height=2, length=3, weight=6)])


def test_key_format() -> None:
    key = key_for([1, 2], [Item(width=1, height=2, length=3, weight=5)])

    # 48 byte digest -> 64 base64 characters, no padding, no + or /
    assert len(key) == 64
    assert re.fullmatch(r"[A-Za-z0-9._]+", key)


def test_memory_cache_stores_negative_decision() -> None:
    cache = MemoryCache()

    assert cache.get("k") is None
    cache.set("k", NO_BOX_FITS)

    assert "k" in cache
    assert cache.get("k") is False
    cache.set("k", "3")
    assert cache.get("k") == "3"
    assert len(cache) == 1
