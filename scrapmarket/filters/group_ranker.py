# scrapmarket/filters/group_ranker.py

"""Ordering of product groups for display."""

import logging
from functools import cmp_to_key

from scrapmarket.config.settings import Settings
from scrapmarket.filters.relevance_scorer import RelevanceScorer
from scrapmarket.models.product_group import ProductGroup

logger = logging.getLogger("scrapmarket.filters")

SORT_MODES: tuple[str, ...] = ("relevance", "price_asc", "price_desc", "name")


class GroupRanker:
    """Sort groups by relevance with stock/breadth/price tie-breaks."""

    def __init__(
        self,
        scorer: RelevanceScorer | None = None,
        tie_band: float = Settings.RELEVANCE_TIE_BAND,
    ) -> None:
        self.scorer = scorer or RelevanceScorer()
        self.tie_band = tie_band

    @staticmethod
    def _has_usable_query(query: str | None) -> bool:
        return bool(query) and len(query.strip()) >= Settings.MIN_QUERY_LENGTH

    def rank(
        self,
        groups: list[ProductGroup],
        query: str | None = None,
    ) -> list[ProductGroup]:
        """Return a new, stably sorted list of *groups*.

        Without a usable query (missing or under two characters) groups
        are ordered by ``min_price`` only. With one, higher relevance
        comes first unless the two scores are within the tie band, in
        which case in-stock groups, then groups with more stores, then
        cheaper groups come first.
        """
        if not self._has_usable_query(query):
            return sorted(groups, key=lambda g: g.min_price)

        relevance = {
            id(group): self.scorer.group_score(group, query or "")
            for group in groups
        }

        def compare(a: ProductGroup, b: ProductGroup) -> int:
            rel_a = relevance[id(a)]
            rel_b = relevance[id(b)]
            if abs(rel_a - rel_b) > self.tie_band:
                return -1 if rel_a > rel_b else 1
            if a.has_stock != b.has_stock:
                return -1 if a.has_stock else 1
            if a.store_count != b.store_count:
                return b.store_count - a.store_count
            if a.min_price != b.min_price:
                return -1 if a.min_price < b.min_price else 1
            return 0

        ranked = sorted(groups, key=cmp_to_key(compare))
        logger.debug(
            "Ranked %d groups for '%s'", len(ranked), query
        )
        return ranked

    def sort(
        self,
        groups: list[ProductGroup],
        query: str | None = None,
        mode: str = "relevance",
    ) -> list[ProductGroup]:
        """Sort with one of :data:`SORT_MODES`.

        ``relevance`` is :meth:`rank`; the other modes ignore the query.
        """
        if mode == "relevance":
            return self.rank(groups, query)
        if mode == "price_asc":
            return sorted(groups, key=lambda g: g.min_price)
        if mode == "price_desc":
            return sorted(groups, key=lambda g: g.min_price, reverse=True)
        if mode == "name":
            return sorted(groups, key=lambda g: g.display_name.lower())
        raise ValueError(
            f"Unknown sort mode '{mode}' (expected one of {SORT_MODES})"
        )
