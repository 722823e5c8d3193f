# scrapmarket/filters/group_filter.py

"""User-driven filtering of ranked product groups."""

import logging
from dataclasses import dataclass, field

from scrapmarket.models.product_group import ProductGroup

logger = logging.getLogger("scrapmarket.filters")


@dataclass
class FilterCriteria:
    """Filter options; unset fields do not filter."""

    min_price: float | None = None
    max_price: float | None = None
    supermarkets: list[str] = field(default_factory=lambda: list[str]())
    in_stock_only: bool = False

    @property
    def is_empty(self) -> bool:
        return (
            self.min_price is None
            and self.max_price is None
            and not self.supermarkets
            and not self.in_stock_only
        )


class GroupFilter:
    """Filter groups by price range, supermarket and stock."""

    @staticmethod
    def _matches(group: ProductGroup, criteria: FilterCriteria) -> bool:
        if criteria.min_price is not None and group.min_price < criteria.min_price:
            return False
        if criteria.max_price is not None and group.min_price > criteria.max_price:
            return False
        if criteria.in_stock_only and not group.has_stock:
            return False
        if criteria.supermarkets:
            wanted = {s.strip().lower() for s in criteria.supermarkets}
            if not any(o.store_key in wanted for o in group.offers):
                return False
        return True

    @staticmethod
    def apply(
        groups: list[ProductGroup],
        criteria: FilterCriteria,
    ) -> tuple[list[ProductGroup], int]:
        """Keep the groups matching every criterion.

        Price bounds apply to the group's cheapest offer. Returns the
        kept groups (order preserved) and the count excluded.
        """
        if criteria.is_empty:
            return groups, 0

        kept = [g for g in groups if GroupFilter._matches(g, criteria)]
        excluded = len(groups) - len(kept)

        if excluded:
            logger.info(
                "Group filter excluded %d of %d groups",
                excluded,
                len(groups),
            )
        return kept, excluded
