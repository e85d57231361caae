from __future__ import annotations

from typing import Any, Optional, Sequence, Union

from ..domain.models import Product


VARIANT_PATH: Sequence[Union[str, int]] = ("data", "products", "edges", 0, "node", "variants", "edges", 0, "node", "id")


def _dig(value: Any, path: Sequence[Union[str, int]]) -> Any:
    cur = value
    for key in path:
        if isinstance(key, int):
            if not isinstance(cur, list) or not -len(cur) <= key < len(cur):
                return None
        elif not isinstance(cur, dict):
            return None
        cur = cur[key] if isinstance(key, int) else cur.get(key)
        if cur is None:
            return None
    return cur


def from_hash(payload: Optional[Any]) -> Optional[Product]:
    """Build a Product from a products query response, or None when no variant is present.

    Variant ids arrive as global ids (gid://shopify/ProductVariant/123); only the
    trailing segment is kept.
    """
    if payload is None:
        return None
    variant = _dig(payload, VARIANT_PATH)
    if variant is None:
        return None
    return Product(variant_id=str(variant).split("/")[-1])
