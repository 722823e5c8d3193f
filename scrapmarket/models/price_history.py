# scrapmarket/models/price_history.py

"""Price history models returned by the history webhook."""

from dataclasses import dataclass, field


@dataclass
class PriceHistoryEntry:
    """A single price observation for a product at one supermarket."""

    date: str
    price: float
    supermarket: str
    stock: bool = True
    url: str = ""


@dataclass
class ProductHistory:
    """All known observations for one canonical product."""

    canonid: str
    canonname: str
    history: list[PriceHistoryEntry] = field(
        default_factory=lambda: list[PriceHistoryEntry]()
    )
    average_price: float = 0.0
    min_price: float = 0.0
    max_price: float = 0.0
    last_updated: str = ""
    brand: str | None = None
