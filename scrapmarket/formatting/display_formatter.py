# scrapmarket/formatting/display_formatter.py

"""Presentation strings derived from offers and groups.

Everything here is a pure function of its arguments.
"""

import math
import re
from dataclasses import dataclass

from scrapmarket.config.vocabulary import (
    DISPLAY_BRANDS,
    DISPLAY_CATEGORIES,
    DISPLAY_FLAVORS,
    DISPLAY_TYPES,
)
from scrapmarket.models.offer import Offer
from scrapmarket.models.product_group import ProductGroup

UNNAMED_PRODUCT = "Producto sin nombre"

_INVALID_BRANDS = frozenset({"sin marca", "sinmarca"})
_NUMBER_RE = re.compile(r"([\d.,]+)")
_QUANTITY_RE = re.compile(
    r"(\d+(?:[.,]\d+)?)\s*"
    r"(gramos|kilos|unidades|piezas|pcs|lts|lt|ml|kg|gr|g|u)\b"
)
_UNIT_PACK_RE = re.compile(r"\sx[2-6]\b")


@dataclass(frozen=True)
class ParsedWeight:
    """A weight normalised to grams, millilitres or a unit count (``un``)."""

    value: float
    unit: str


def has_valid_brand(brand: str | None) -> bool:
    """False for missing, blank and "sin marca" brands."""
    if not brand:
        return False
    normalized = brand.strip().lower()
    return bool(normalized) and normalized not in _INVALID_BRANDS


def capitalize_brand(brand: str) -> str:
    """Uppercase the first letter of the first word, lowercase the rest."""
    words = brand.lower().strip().split(" ")
    if not words or not words[0]:
        return ""
    first = words[0][0].upper() + words[0][1:]
    return " ".join([first, *words[1:]])


def format_name_with_brand(name: str | None, brand: str | None) -> str:
    """``"{Brand} - {name}"`` when the brand is usable, else the name."""
    product_name = name or UNNAMED_PRODUCT
    if not has_valid_brand(brand):
        return product_name
    return f"{capitalize_brand(brand or '')} - {product_name}"


def display_name(item: Offer | ProductGroup) -> str:
    """Brand-prefixed name of an offer or group."""
    if isinstance(item, ProductGroup):
        return format_name_with_brand(item.display_name, item.brand)
    return format_name_with_brand(item.name, item.brand)


def normalize_weight(raw_weight: str | None) -> ParsedWeight | None:
    """Parse a weight string into grams/millilitres.

    ``kg`` converts to grams and ``lt``/``l`` to millilitres; ``g``,
    ``gr`` and ``ml`` pass through. A number with any other unit is a
    unit count. Returns ``None`` when no positive number is present.
    """
    if not raw_weight:
        return None
    normalized = raw_weight.strip().lower()
    match = _NUMBER_RE.search(normalized)
    if not match:
        return None
    try:
        value = float(match.group(1).replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None

    if "kg" in normalized:
        return ParsedWeight(value * 1000, "g")
    if "g" in normalized:
        return ParsedWeight(value, "g")
    if "ml" in normalized:
        return ParsedWeight(value, "ml")
    if "lt" in normalized or " l" in normalized or normalized.endswith("l"):
        return ParsedWeight(value * 1000, "ml")
    return ParsedWeight(value, "un")


def format_price(price: float | str | None) -> str:
    """``$1234.50`` style; unusable input renders as ``$0.00``."""
    if price is None or price == "":
        return "$0.00"
    try:
        number = float(price)
    except (TypeError, ValueError):
        return "$0.00"
    if math.isnan(number):
        return "$0.00"
    return f"${number:.2f}"


def price_per_unit(price: float, raw_weight: str | None) -> str | None:
    """``"$0.24 / ml"`` style unit price, or ``None`` for unit counts."""
    weight = normalize_weight(raw_weight)
    if weight is None or weight.unit == "un":
        return None
    per_unit = price / weight.value
    if not math.isfinite(per_unit) or per_unit <= 0:
        return None
    return f"{format_price(per_unit)} / {weight.unit}"


def group_price_per_unit(group: ProductGroup) -> str | None:
    """Unit price of a group's cheapest offer."""
    return price_per_unit(group.min_price, group.exact_weight)


def price_range(group: ProductGroup) -> str:
    """Single price, or ``"$min - $max"`` when the offers differ."""
    if group.min_price == group.max_price:
        return format_price(group.min_price)
    return f"{format_price(group.min_price)} - {format_price(group.max_price)}"


def _first_hit(text: str, vocabulary: tuple[str, ...]) -> str | None:
    for entry in vocabulary:
        if entry in text:
            return entry
    return None


def _detect_category(text: str) -> str:
    for keywords, label in DISPLAY_CATEGORIES:
        if any(keyword in text for keyword in keywords):
            return label
    return ""


def _structure_product(name: str) -> str:
    """Rebuild a name as "Brand Category Type Flavor Quantity"."""
    lowered = name.lower()

    brand = _first_hit(lowered, DISPLAY_BRANDS) or ""
    if brand:
        brand = brand[0].upper() + brand[1:]

    category = _detect_category(lowered)

    product_type = _first_hit(lowered, DISPLAY_TYPES) or ""
    if product_type.startswith("x") and len(product_type) <= 3:
        product_type = product_type.upper()
    elif product_type:
        product_type = product_type[0].upper() + product_type[1:]

    flavor = _first_hit(lowered, DISPLAY_FLAVORS) or ""
    if flavor:
        flavor = flavor[0].upper() + flavor[1:]

    quantity = ""
    match = _QUANTITY_RE.search(lowered)
    if match:
        quantity = f"{match.group(1).replace(',', '.')}{match.group(2).upper()}"

    parts = [
        part
        for part in (brand, category, product_type, flavor, quantity)
        if part.strip() and part != "Original"
    ]
    return " ".join(parts) if len(parts) > 1 else name


def clean_product_name(name: str | None) -> str:
    """Structured display name; packs joined with ``+`` are split and
    each part structured on its own."""
    if not name:
        return ""
    if "+" in name and not _UNIT_PACK_RE.search(name.lower()):
        pieces = [piece.strip() for piece in name.split("+") if piece.strip()]
        if len(pieces) > 1:
            return " + ".join(_structure_product(p) for p in pieces)
    return _structure_product(name)
