# scrapmarket/models/offer.py

"""Canonical offer model for inter-module data flow."""

from dataclasses import dataclass

# Placeholders meaning "intentionally missing", distinct from empty
SENTINELS: frozenset[str] = frozenset({"UNKNOWN", "NO_EAN"})


def is_sentinel(value: str | None) -> bool:
    """Return True for the ``UNKNOWN`` / ``NO_EAN`` placeholders."""
    return value in SENTINELS


@dataclass
class Offer:
    """One supermarket's priced listing for a product."""

    product_id: str
    name: str
    price: float
    store: str
    ean: str = "UNKNOWN"
    exact_weight: str = "UNKNOWN"
    in_stock: bool = True
    url: str = ""
    image_url: str | None = None
    brand: str | None = None
    add_to_cart_url: str | None = None
    sku: str | None = None
    sku_ref: str | None = None

    @property
    def store_key(self) -> str:
        """Case-insensitive store identity used for one-offer-per-store."""
        return self.store.strip().lower()
