# scrapmarket/filters/relevance_scorer.py

"""Query relevance scoring (0-100) for offers and product groups."""

import logging
import re

from scrapmarket.config.settings import Settings
from scrapmarket.config.vocabulary import DEFAULT_VOCABULARY, Vocabulary
from scrapmarket.models.offer import Offer
from scrapmarket.models.product_group import ProductGroup

logger = logging.getLogger("scrapmarket.filters")

_NAME_SPLIT_RE = re.compile(r"[\s\-_]+")

_NAME_SUBSTRING_SCORE = 100.0
_BRAND_SUBSTRING_SCORE = 90.0
_EXACT_WORD_WEIGHT = 85.0
_PARTIAL_WORD_WEIGHT = 35.0
_CLUSTER_BONUS = 15.0
_NOISE_PENALTY = 20.0
_NOISE_WORD_LIMIT = 3


class RelevanceScorer:
    """Score how well a product name answers a search query.

    Scoring, in order:

    1. Hard veto (score 0) when the name hits the irrelevant-category
       list, or when a food query meets a non-food product.
    2. Substring base: 100 for the query inside the name, 90 inside
       the brand.
    3. Word matching: exact token hits weigh 85, substring hits of
       query words longer than 3 characters weigh 35, both averaged
       over the query words. Kept if higher than the base.
    4. +15 for every semantic cluster both sides touch.
    5. -20 when more than 3 name tokens are unrelated to the query.
    6. Clamp to ``[0, 100]``.
    """

    def __init__(self, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> None:
        self.vocabulary = vocabulary

    def _is_vetoed(self, name: str, query: str) -> bool:
        vocab = self.vocabulary
        if any(keyword in name for keyword in vocab.irrelevant_keywords):
            return True
        food_query = any(term in query for term in vocab.food_query_terms)
        return food_query and any(
            keyword in name for keyword in vocab.non_food_keywords
        )

    def _word_score(self, name_words: list[str], query: str) -> float:
        query_words = [w for w in query.split(" ") if len(w) > 1]
        if not query_words:
            return 0.0
        exact = 0
        partial = 0
        for word in query_words:
            if word in name_words:
                exact += 1
            elif len(word) > 3 and any(word in n for n in name_words):
                partial += 1
        total = len(query_words)
        return (
            exact / total * _EXACT_WORD_WEIGHT
            + partial / total * _PARTIAL_WORD_WEIGHT
        )

    def _cluster_bonus(self, name: str, query: str) -> float:
        bonus = 0.0
        for terms in self.vocabulary.semantic_clusters.values():
            if any(t in query for t in terms) and any(t in name for t in terms):
                bonus += _CLUSTER_BONUS
        return bonus

    @staticmethod
    def _noise_penalty(name_words: list[str], query: str) -> float:
        query_words = [w for w in query.split(" ") if len(w) > 2]
        unrelated = [
            n for n in name_words
            if not any(w in n for w in query_words)
        ]
        return _NOISE_PENALTY if len(unrelated) > _NOISE_WORD_LIMIT else 0.0

    def score(
        self,
        name: str,
        query: str,
        brand: str | None = None,
    ) -> float:
        """Relevance of a product *name* (and optional *brand*) to *query*."""
        query_lower = (query or "").lower().strip()
        name_lower = (name or "").lower()
        brand_lower = (brand or "").lower()

        if self._is_vetoed(name_lower, query_lower):
            return 0.0

        relevance = 0.0
        if query_lower in name_lower:
            relevance = _NAME_SUBSTRING_SCORE
        elif brand_lower and query_lower in brand_lower:
            relevance = _BRAND_SUBSTRING_SCORE

        name_words = _NAME_SPLIT_RE.split(name_lower)
        relevance = max(relevance, self._word_score(name_words, query_lower))
        relevance += self._cluster_bonus(name_lower, query_lower)
        relevance -= self._noise_penalty(name_words, query_lower)

        return max(0.0, min(relevance, 100.0))

    def score_offer(self, offer: Offer, query: str) -> float:
        """Relevance of a single offer."""
        return self.score(offer.name, query, offer.brand)

    def group_score(self, group: ProductGroup, query: str) -> float:
        """Best relevance over the members and the group's own name."""
        best = self.score(group.display_name, query, group.brand)
        for offer in group.offers:
            best = max(best, self.score_offer(offer, query))
        return best

    def filter_offers(
        self,
        offers: list[Offer],
        query: str | None,
        min_relevance: float = Settings.MIN_RELEVANCE,
    ) -> tuple[list[Offer], int]:
        """Drop offers scoring below *min_relevance* for *query*.

        Skipped entirely when the query is missing or shorter than
        ``Settings.MIN_QUERY_LENGTH``. Returns the kept offers and the
        count removed.
        """
        if not query or len(query.strip()) < Settings.MIN_QUERY_LENGTH:
            return offers, 0

        kept: list[Offer] = []
        removed = 0
        for offer in offers:
            relevance = self.score_offer(offer, query)
            if relevance >= min_relevance:
                kept.append(offer)
            else:
                removed += 1
                logger.debug(
                    "Filtered out '%s' (relevance %.1f)",
                    offer.name,
                    relevance,
                )

        if removed:
            logger.info(
                "Relevance filter removed %d of %d offers for '%s'",
                removed,
                len(offers),
                query,
            )
        return kept, removed
