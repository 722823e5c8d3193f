# scrapmarket/services/search_orchestrator.py

"""Runs backend fetches through the normalize/group/rank pipeline."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from scrapmarket.filters.group_filter import FilterCriteria, GroupFilter
from scrapmarket.filters.group_ranker import GroupRanker
from scrapmarket.filters.product_grouper import ProductGrouper
from scrapmarket.filters.relevance_scorer import RelevanceScorer
from scrapmarket.models.product_group import ProductGroup
from scrapmarket.models.search_context import SearchContext
from scrapmarket.normalization.offer_mapper import flatten_offers, map_record
from scrapmarket.normalization.response_normalizer import normalize
from scrapmarket.services.backend_client import BackendClient, BackendError

logger = logging.getLogger("scrapmarket.orchestrator")


@dataclass
class SearchResult:
    """Container for one completed search."""

    query: str | None
    groups: list[ProductGroup] = field(
        default_factory=lambda: list[ProductGroup]()
    )
    record_count: int = 0
    offer_count: int = 0
    invalid_count: int = 0
    filtered_count: int = 0
    errors: list[str] = field(
        default_factory=lambda: list[str]()
    )


class SearchOrchestrator:
    """Coordinates fetching, grouping, filtering and ranking."""

    def __init__(
        self,
        client: BackendClient | None = None,
        scorer: RelevanceScorer | None = None,
    ) -> None:
        self.client = client or BackendClient()
        self.scorer = scorer or RelevanceScorer()
        self.grouper = ProductGrouper(scorer=self.scorer)
        self.ranker = GroupRanker(scorer=self.scorer)

    # ── Pure pipeline ────────────────────────────────────

    def process_payload(
        self,
        payload: Any,
        query: str | None = None,
        criteria: FilterCriteria | None = None,
        sort: str = "relevance",
    ) -> SearchResult:
        """Normalize, group, filter and rank one backend payload.

        Raises ``TypeError`` for a ``None`` payload; any other shape,
        however malformed, produces a (possibly empty) result.
        """
        if payload is None:
            raise TypeError("payload must not be None")

        result = SearchResult(query=query)
        flattened = flatten_offers(payload, SearchContext(query=query))
        result.record_count = flattened.record_count
        result.offer_count = len(flattened.offers)
        result.invalid_count = flattened.invalid_count

        groups = self.grouper.group(flattened.offers, query)
        if criteria is not None:
            groups, result.filtered_count = GroupFilter.apply(groups, criteria)
        result.groups = self.ranker.sort(groups, query, sort)

        logger.info(
            "Query '%s': %d records, %d offers (%d invalid) -> %d groups",
            query,
            result.record_count,
            result.offer_count,
            result.invalid_count,
            len(result.groups),
        )
        return result

    # ── Backend-backed searches ──────────────────────────

    def search(
        self,
        query: str,
        db_only: bool = False,
        data_saver: bool = False,
        criteria: FilterCriteria | None = None,
        sort: str = "relevance",
    ) -> SearchResult:
        """Fetch results for *query* and run them through the pipeline.

        Backend failures are logged and reported in ``result.errors``.
        """
        try:
            if db_only:
                payload = self.client.search_in_database(query)
            else:
                payload = self.client.search_products(query, data_saver)
        except BackendError as exc:
            logger.error("Search for '%s' failed: %s", query, exc)
            return SearchResult(query=query, errors=[str(exc)])
        return self.process_payload(payload, query, criteria, sort)

    def popular(self) -> SearchResult:
        """Popular products keep the backend's grouping: one group per record."""
        try:
            payload = self.client.popular_products()
        except BackendError as exc:
            logger.error("Popular products fetch failed: %s", exc)
            return SearchResult(query=None, errors=[str(exc)])

        result = SearchResult(query=None)
        for record, context in normalize(payload):
            offers, invalid = map_record(record, context)
            result.record_count += 1
            result.invalid_count += invalid
            result.offer_count += len(offers)
            if not offers:
                continue
            group = ProductGroup.from_offer(offers[0], offers[0].product_id)
            for offer in offers[1:]:
                group.add_offer(offer)
            result.groups.append(group)

        logger.info("Loaded %d popular product groups", len(result.groups))
        return result

    async def search_many(
        self,
        queries: list[str],
        db_only: bool = False,
    ) -> list[SearchResult]:
        """Run several searches concurrently; each result is independent."""

        async def run_one(query: str) -> SearchResult:
            return await asyncio.to_thread(self.search, query, db_only)

        outcomes = await asyncio.gather(
            *(run_one(q) for q in queries), return_exceptions=True
        )

        results: list[SearchResult] = []
        for query, outcome in zip(queries, outcomes):
            if isinstance(outcome, SearchResult):
                results.append(outcome)
            elif isinstance(outcome, Exception):
                logger.error(
                    "Search for '%s' crashed: %s",
                    query,
                    outcome,
                    exc_info=outcome,
                )
                results.append(
                    SearchResult(query=query, errors=[str(outcome)])
                )
            else:
                raise outcome
        return results
