# scrapmarket/normalization/response_normalizer.py

"""Flatten arbitrarily-shaped backend JSON into raw product records.

The search backend has answered in several shapes over time: bare
arrays of grouped products, ``{status, data}`` envelopes, n8n item
wrappers (``{json: {...}}``), quick-search blocks
(``{items: [{meta, query, products: [...]}]}``) and legacy flat offer
lists. :func:`normalize` walks any of them and yields
``(record, context)`` pairs, where a *record* is a dict carrying a
``supermarkets`` array (or a single flat offer) and the context holds
the query and the nearest ``meta`` block.

Unknown shapes yield nothing. This layer never raises on bad input.
"""

import logging
from typing import Any

from scrapmarket.models.search_context import SearchContext
from scrapmarket.normalization.field_tables import (
    PRICE_FIELDS,
    STORE_FIELDS,
)

logger = logging.getLogger("scrapmarket.normalizer")

RawRecord = dict[str, Any]

_MAX_DEPTH = 32

# Wrapper keys whose list is descended with the context unchanged
_PASSTHROUGH_KEYS: tuple[str, ...] = ("data", "results", "popular_products")


# A bare ``name`` is the product name on flat records, not a store
_FLAT_STORE_FIELDS: tuple[str, ...] = tuple(
    f for f in STORE_FIELDS if f != "name"
)


def _is_flat_offer(node: dict[str, Any]) -> bool:
    """Legacy records: one offer per dict, no ``supermarkets`` array."""
    has_price = any(node.get(k) not in (None, "") for k in PRICE_FIELDS)
    has_store = any(node.get(k) for k in _FLAT_STORE_FIELDS)
    return has_price and has_store


def _walk_list(
    node: list[Any],
    context: SearchContext,
    out: list[tuple[RawRecord, SearchContext]],
    depth: int,
) -> None:
    """Arrays: pre-grouped rows are terminal, anything else recurses."""
    if not node:
        return
    first = node[0]
    if isinstance(first, dict) and isinstance(first.get("supermarkets"), list):
        for element in node:
            if isinstance(element, dict):
                out.append((element, context))
        return
    for element in node:
        _walk(element, context, out, depth + 1)


def _walk_dict(
    node: dict[str, Any],
    context: SearchContext,
    out: list[tuple[RawRecord, SearchContext]],
    depth: int,
) -> None:
    """Objects: try each known wrapper in precedence order."""
    envelope = node.get("json")
    if isinstance(envelope, dict):
        _walk(envelope, context, out, depth + 1)
        return

    items = node.get("items")
    if isinstance(items, list):
        for item in items:
            if not isinstance(item, dict):
                continue
            item_context = context.inherit(item.get("meta"), item.get("query"))
            products = item.get("products")
            if isinstance(products, list):
                for product in products:
                    _walk(product, item_context, out, depth + 1)
            else:
                _walk(item, item_context, out, depth + 1)
        return

    for key in _PASSTHROUGH_KEYS:
        wrapped = node.get(key)
        if isinstance(wrapped, list):
            _walk(wrapped, context, out, depth + 1)
            return

    supermarkets = node.get("supermarkets")
    products = node.get("products")
    if isinstance(products, list) and not isinstance(supermarkets, list):
        _walk(
            products,
            context.inherit(node.get("meta"), node.get("query")),
            out,
            depth + 1,
        )
        return

    if isinstance(supermarkets, list):
        out.append((node, context))
        return

    if _is_flat_offer(node):
        out.append((node, context))
        return

    logger.debug(
        "Dead-end payload node with keys %s", sorted(node)[:10]
    )


def _walk(
    node: Any,
    context: SearchContext,
    out: list[tuple[RawRecord, SearchContext]],
    depth: int,
) -> None:
    if depth > _MAX_DEPTH:
        logger.warning(
            "Payload nesting deeper than %d levels, branch skipped",
            _MAX_DEPTH,
        )
        return
    if isinstance(node, list):
        _walk_list(node, context, out, depth)
    elif isinstance(node, dict):
        _walk_dict(node, context, out, depth)


def normalize(
    payload: Any,
    context: SearchContext | None = None,
) -> list[tuple[RawRecord, SearchContext]]:
    """Extract ``(record, context)`` pairs from a backend payload.

    Precedence for objects: n8n ``json`` envelope, ``items`` blocks,
    ``data``/``results``/``popular_products`` wrappers, ``products``
    lists (only when the node has no ``supermarkets``), grouped records
    with ``supermarkets``, then legacy flat offers. Arrays whose first
    element is a grouped record are taken whole; other arrays recurse.
    """
    out: list[tuple[RawRecord, SearchContext]] = []
    _walk(payload, context or SearchContext(), out, 0)
    logger.debug("Normalizer extracted %d raw records", len(out))
    return out
