# scrapmarket/services/history_service.py

"""Price history lookups on top of the history webhook."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from scrapmarket.models.price_history import PriceHistoryEntry, ProductHistory
from scrapmarket.normalization.offer_mapper import parse_price
from scrapmarket.services.backend_client import BackendClient

logger = logging.getLogger("scrapmarket.history")


def _parse_date(raw: str) -> datetime | None:
    """Parse an ISO-8601 date; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_entry(raw: Any) -> PriceHistoryEntry | None:
    if not isinstance(raw, dict):
        return None
    price = parse_price(raw.get("price", raw.get("precio")))
    if price is None:
        return None
    return PriceHistoryEntry(
        date=str(raw.get("date", "")),
        price=price,
        supermarket=str(
            raw.get("supermarket") or raw.get("supermercado") or ""
        ),
        stock=bool(raw.get("stock", True)),
        url=str(raw.get("url") or ""),
    )


class HistoryService:
    """Summaries over a product's recorded prices."""

    def __init__(self, client: BackendClient | None = None) -> None:
        self.client = client or BackendClient()

    def get_product_history(self, canonid: str) -> ProductHistory:
        """Fetch and summarise the history of *canonid*.

        Raises :class:`BackendError` when the backend call fails.
        """
        data = self.client.price_history(canonid)
        if isinstance(data, list):
            data = data[0] if data and isinstance(data[0], dict) else {}
        if not isinstance(data, dict):
            data = {}

        entries = [
            entry
            for entry in (_parse_entry(e) for e in data.get("history") or [])
            if entry is not None
        ]
        prices = [e.price for e in entries]

        history = ProductHistory(
            canonid=str(data.get("canonid") or canonid),
            canonname=str(data.get("canonname") or ""),
            history=entries,
            average_price=(
                round(sum(prices) / len(prices), 2) if prices else 0.0
            ),
            min_price=min(prices) if prices else 0.0,
            max_price=max(prices) if prices else 0.0,
            last_updated=str(
                data.get("lastUpdated")
                or datetime.now(timezone.utc).isoformat()
            ),
            brand=data.get("brand"),
        )
        logger.info(
            "History for %s: %d entries, avg %.2f",
            canonid,
            len(entries),
            history.average_price,
        )
        return history

    def get_price_trend(
        self,
        canonid: str,
        days: int = 30,
        now: datetime | None = None,
    ) -> list[PriceHistoryEntry]:
        """Entries from the last *days* days; undated entries are dropped."""
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        trend: list[PriceHistoryEntry] = []
        for entry in self.get_product_history(canonid).history:
            when = _parse_date(entry.date)
            if when is not None and when >= cutoff:
                trend.append(entry)
        return trend

    def get_lowest_price(self, canonid: str) -> PriceHistoryEntry | None:
        """Cheapest recorded observation, or ``None`` without history."""
        history = self.get_product_history(canonid).history
        if not history:
            return None
        return min(history, key=lambda e: e.price)
