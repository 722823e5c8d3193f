# scrapmarket/models/product_group.py

"""Cluster of offers believed to be the same physical product."""

import logging
from dataclasses import dataclass, field

from scrapmarket.filters.text_utils import normalize_brand
from scrapmarket.models.offer import Offer

logger = logging.getLogger("scrapmarket.models")


@dataclass
class ProductGroup:
    """Offers for one product across supermarkets (one offer per store).

    Built with :meth:`from_offer` and grown only through
    :meth:`add_offer`, which keeps the price range, best offer,
    stock flag and display name consistent with the members.
    """

    ean: str
    exact_weight: str
    offers: list[Offer]
    min_price: float
    max_price: float
    best_offer: Offer
    display_name: str
    brand: str | None = None
    alternative_names: list[str] = field(
        default_factory=lambda: list[str]()
    )
    has_stock: bool = False
    image_url: str | None = None
    key: str = ""

    @classmethod
    def from_offer(cls, offer: Offer, key: str = "") -> "ProductGroup":
        """Start a new singleton group from its first offer."""
        return cls(
            ean=offer.ean,
            exact_weight=offer.exact_weight,
            offers=[offer],
            min_price=offer.price,
            max_price=offer.price,
            best_offer=offer,
            display_name=offer.name,
            brand=normalize_brand(offer.brand),
            alternative_names=[offer.name],
            has_stock=offer.in_stock,
            image_url=offer.image_url or None,
            key=key,
        )

    @property
    def store_count(self) -> int:
        """Number of distinct supermarkets in the group."""
        return len(self.offers)

    @property
    def stores(self) -> list[str]:
        """Store names in insertion order."""
        return [o.store for o in self.offers]

    def has_store(self, store: str) -> bool:
        """Return True when *store* already has an offer here."""
        wanted = store.strip().lower()
        return any(o.store_key == wanted for o in self.offers)

    def add_offer(self, offer: Offer) -> bool:
        """Merge *offer* into the group.

        First-seen wins per store: a second offer from a store that is
        already represented is ignored. Returns whether it was added.
        """
        if self.has_store(offer.store):
            logger.debug(
                "Ignored duplicate store '%s' for group '%s'",
                offer.store,
                self.display_name,
            )
            return False

        self.offers.append(offer)

        had_brand = bool(self.brand)
        incoming_brand = normalize_brand(offer.brand)
        if incoming_brand and (
            not self.brand or len(incoming_brand) > len(self.brand)
        ):
            self.brand = incoming_brand

        if offer.price > 0:
            self.min_price = min(self.min_price, offer.price)
            self.max_price = max(self.max_price, offer.price)
            if offer.price < self.best_offer.price:
                self.best_offer = offer

        if offer.in_stock:
            self.has_stock = True

        if not self.image_url and offer.image_url:
            self.image_url = offer.image_url

        if offer.name not in self.alternative_names:
            self.alternative_names.append(offer.name)

        # Branded names win over unbranded ones, then the longest name
        if incoming_brand and not had_brand:
            self.display_name = offer.name
        elif len(offer.name) > len(self.display_name):
            self.display_name = offer.name

        return True
