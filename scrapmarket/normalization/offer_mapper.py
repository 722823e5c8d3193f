# scrapmarket/normalization/offer_mapper.py

"""Map raw supermarket entries onto the canonical :class:`Offer`."""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any

from scrapmarket.models.offer import Offer
from scrapmarket.models.search_context import SearchContext
from scrapmarket.normalization.cart_links import synthesize_cart_url
from scrapmarket.normalization.field_tables import (
    CART_LINK_FIELDS,
    IMAGE_FIELDS,
    PRICE_FIELDS,
    SKU_FIELDS,
    SKU_REF_FIELDS,
    STOCK_FIELDS,
    STORE_FIELDS,
    URL_FIELDS,
)
from scrapmarket.normalization.response_normalizer import normalize

logger = logging.getLogger("scrapmarket.mapper")

_FALSE_STRINGS = frozenset({"false", "0", "no", "n", "off", ""})
_DOT_THOUSANDS_RE = re.compile(r"^\d{1,3}(?:\.\d{3})+$")


@dataclass(frozen=True)
class OfferFallback:
    """Record-level values used when a supermarket entry omits them."""

    product_id: str
    name: str
    ean: str = "UNKNOWN"
    exact_weight: str = "UNKNOWN"
    brand: str | None = None
    image_url: str | None = None


@dataclass
class FlattenResult:
    """Offers extracted from one payload plus bookkeeping counts."""

    offers: list[Offer] = field(default_factory=lambda: list[Offer]())
    record_count: int = 0
    invalid_count: int = 0


def first_value(raw: dict[str, Any], fields: tuple[str, ...]) -> Any:
    """Return the first non-empty value among *fields*, else ``None``."""
    for name in fields:
        value = raw.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def parse_price(value: Any) -> float | None:
    """Coerce a price to a positive finite float.

    Strings may carry a currency sign, spaces and either ``.`` or ``,``
    as decimal separator (``"$ 1.234,50"`` -> ``1234.5``). When both
    appear the rightmost one is the decimal separator. A lone ``,`` is
    always decimal; dots alone are thousands grouping only when every
    group after the first has exactly three digits (``"1.234"`` ->
    ``1234``, ``"1.5"`` -> ``1.5``). Returns ``None`` for anything
    unusable, including zero and negatives.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.replace("$", "").replace(" ", "").strip()
        if "," in cleaned and "." in cleaned:
            if cleaned.rfind(",") > cleaned.rfind("."):
                cleaned = cleaned.replace(".", "").replace(",", ".")
            else:
                cleaned = cleaned.replace(",", "")
        elif "," in cleaned:
            cleaned = cleaned.replace(",", ".")
        elif _DOT_THOUSANDS_RE.match(cleaned):
            cleaned = cleaned.replace(".", "")
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def resolve_cart_link(raw: dict[str, Any]) -> str | None:
    """Find a ready-made cart link at the top level or in ``sellers[]``."""
    link = first_value(raw, CART_LINK_FIELDS)
    if link:
        return str(link)
    sellers = raw.get("sellers")
    if isinstance(sellers, list):
        for seller in sellers:
            if not isinstance(seller, dict):
                continue
            link = first_value(seller, CART_LINK_FIELDS)
            if link:
                return str(link)
    return None


def map_offer(raw: Any, fallback: OfferFallback) -> Offer | None:
    """Convert one supermarket entry into an :class:`Offer`.

    Returns ``None`` when the entry has no usable price or no store
    name; the caller counts and drops it.
    """
    if not isinstance(raw, dict):
        return None

    price = parse_price(first_value(raw, PRICE_FIELDS))
    if price is None:
        logger.debug("Dropped entry without a valid price: %s", raw)
        return None

    store = _text(first_value(raw, STORE_FIELDS))
    if not store:
        logger.debug("Dropped entry without a store name: %s", raw)
        return None

    image = _text(first_value(raw, IMAGE_FIELDS)) or fallback.image_url
    url = _text(first_value(raw, URL_FIELDS)) or ""
    sku = _text(first_value(raw, SKU_FIELDS))
    stock = first_value(raw, STOCK_FIELDS)

    cart_link = resolve_cart_link(raw) or synthesize_cart_url(url, sku)

    return Offer(
        product_id=_text(raw.get("canonid")) or fallback.product_id,
        name=_text(raw.get("canonname")) or fallback.name,
        price=price,
        store=store,
        ean=_text(raw.get("ean")) or fallback.ean,
        exact_weight=_text(raw.get("exact_weight")) or fallback.exact_weight,
        in_stock=True if stock is None else _coerce_bool(stock),
        url=url,
        image_url=image,
        brand=_text(raw.get("brand")) or fallback.brand,
        add_to_cart_url=cart_link,
        sku=sku,
        sku_ref=_text(first_value(raw, SKU_REF_FIELDS)),
    )


def build_fallback(
    record: dict[str, Any],
    context: SearchContext,
) -> OfferFallback | None:
    """Derive per-record defaults from the record, its meta and the query.

    Returns ``None`` when no display name can be resolved at all.
    """
    record_meta = record.get("meta")
    meta: dict[str, Any] = {
        **context.meta,
        **(record_meta if isinstance(record_meta, dict) else {}),
    }

    name = (
        _text(record.get("canonname"))
        or _text(meta.get("canonname"))
        or _text(record.get("name"))
        or _text(meta.get("product_name"))
        or _text(context.query)
    )
    if not name:
        return None

    product_id = (
        _text(record.get("canonid")) or _text(meta.get("canonid")) or name
    )
    ean = _text(record.get("ean")) or _text(meta.get("ean")) or product_id
    exact_weight = (
        _text(record.get("exact_weight"))
        or _text(meta.get("exact_weight"))
        or "UNKNOWN"
    )
    image = _text(first_value(record, IMAGE_FIELDS)) or _text(
        first_value(meta, IMAGE_FIELDS)
    )

    return OfferFallback(
        product_id=product_id,
        name=name,
        ean=ean,
        exact_weight=exact_weight,
        brand=_text(record.get("brand")) or _text(meta.get("brand")),
        image_url=image,
    )


def map_record(
    record: dict[str, Any],
    context: SearchContext,
) -> tuple[list[Offer], int]:
    """Map every supermarket entry of one raw record.

    Legacy flat records (no ``supermarkets`` array) are mapped as their
    own single entry. Returns the offers and the number of rejected
    entries.
    """
    fallback = build_fallback(record, context)
    supermarkets = record.get("supermarkets")
    entries = supermarkets if isinstance(supermarkets, list) else [record]

    if fallback is None:
        logger.debug("Skipped record without a resolvable name")
        return [], len(entries)

    offers: list[Offer] = []
    invalid = 0
    for entry in entries:
        offer = map_offer(entry, fallback)
        if offer is None:
            invalid += 1
        else:
            offers.append(offer)
    return offers, invalid


def flatten_offers(
    payload: Any,
    context: SearchContext | None = None,
) -> FlattenResult:
    """Normalize *payload* and map every record into canonical offers."""
    result = FlattenResult()
    for record, record_context in normalize(payload, context):
        offers, invalid = map_record(record, record_context)
        result.record_count += 1
        result.offers.extend(offers)
        result.invalid_count += invalid

    if result.invalid_count:
        logger.info(
            "Dropped %d invalid offers from %d records",
            result.invalid_count,
            result.record_count,
        )
    return result
