# scrapmarket/filters/product_grouper.py

"""Group offers from different supermarkets into product groups."""

import logging
from dataclasses import dataclass

from scrapmarket.config.settings import Settings
from scrapmarket.config.vocabulary import DEFAULT_VOCABULARY, Vocabulary
from scrapmarket.filters.relevance_scorer import RelevanceScorer
from scrapmarket.filters.text_utils import (
    brand_key,
    extract_keywords,
    extract_weight_token,
    pack_signature,
    slugify,
)
from scrapmarket.models.offer import Offer, is_sentinel
from scrapmarket.models.product_group import ProductGroup

logger = logging.getLogger("scrapmarket.filters")


def _fold_phrases(name: str, vocabulary: Vocabulary) -> str:
    lowered = name.lower()
    for phrase, replacement in vocabulary.phrase_synonyms.items():
        lowered = lowered.replace(phrase, replacement)
    return lowered


def name_similarity(
    name1: str,
    name2: str,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> float:
    """Keyword-overlap similarity of two product names in ``[0, 1]``.

    Two packs (both names contain ``+``) sharing all the brands of the
    smaller one score 0.9 outright. Otherwise type variants are folded
    (``sin azucar`` -> ``zero``, ``clasica`` -> ``original``), keywords
    match when either contains the other, and the overlap is divided by
    the longer keyword list. A shared pack-vocabulary brand adds 0.3.
    """
    keywords1 = extract_keywords(_fold_phrases(name1, vocabulary), vocabulary)
    keywords2 = extract_keywords(_fold_phrases(name2, vocabulary), vocabulary)
    if not keywords1 or not keywords2:
        return 0.0

    brands1 = [k for k in keywords1 if k in vocabulary.pack_brands]
    brands2 = [k for k in keywords2 if k in vocabulary.pack_brands]

    if "+" in name1 and "+" in name2 and brands1 and brands2:
        common = [b for b in brands1 if b in brands2]
        if len(common) >= min(len(brands1), len(brands2)):
            return 0.9

    synonyms = vocabulary.type_synonyms
    folded1 = [synonyms.get(k, k) for k in keywords1]
    folded2 = [synonyms.get(k, k) for k in keywords2]

    intersection = [
        k1 for k1 in folded1
        if any(k1 in k2 or k2 in k1 for k2 in folded2)
    ]
    similarity = len(intersection) / max(len(folded1), len(folded2))

    if set(brands1) & set(brands2):
        return min(similarity + 0.3, 1.0)
    return similarity


@dataclass(frozen=True)
class OfferKeys:
    """Candidate group keys for one offer, in lookup order."""

    strict: str | None
    pack: str | None
    relaxed: str | None
    name: str | None

    def lookup_order(self) -> list[tuple[str, str]]:
        """``(strategy, key)`` pairs to try, skipping absent keys."""
        pairs = [
            ("strict", self.strict),
            ("pack", self.pack),
            ("relaxed", self.relaxed),
            ("name", self.name),
        ]
        return [(label, key) for label, key in pairs if key]

    def creation_key(self) -> str:
        """Key a brand-new group is registered under."""
        return self.pack or self.name or self.strict or ""


class ProductGrouper:
    """Partition offers into :class:`ProductGroup` objects.

    Key strategies are tried per offer in order: strict
    ``{ean}_{weight}_{brand}``, multi-brand pack signature, relaxed
    ``{ean}_{weight}``, ``name_{slug}_{brand}`` for offers without a
    real EAN, then fuzzy name similarity against existing groups.
    An offer matching nothing starts a new group.

    Every group is indexed under each key its members produce (first
    writer wins), so a later offer can match through any strategy.
    The index lives for one :meth:`group` call only.
    """

    def __init__(
        self,
        scorer: RelevanceScorer | None = None,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
        similarity_threshold: float = Settings.SIMILARITY_THRESHOLD,
        min_relevance: float = Settings.MIN_RELEVANCE,
    ) -> None:
        self.vocabulary = vocabulary
        self.scorer = scorer or RelevanceScorer(vocabulary)
        self.similarity_threshold = similarity_threshold
        self.min_relevance = min_relevance

    @staticmethod
    def weight_key(offer: Offer, index: int = 0) -> str:
        """Weight component of the keys.

        Real weights are used verbatim. Sentinel or empty weights fall
        back to a weight token found in the name, then to the slugified
        name.
        """
        weight = (offer.exact_weight or "").strip()
        if weight and not is_sentinel(weight):
            return weight
        token = extract_weight_token(offer.name)
        if token:
            return token
        return slugify(offer.name) or f"unknown_{index}"

    def offer_keys(self, offer: Offer, index: int = 0) -> OfferKeys:
        """Derive every candidate key for *offer*."""
        weight = self.weight_key(offer, index)
        brand = brand_key(offer.brand)
        pack = pack_signature(offer.name, self.vocabulary)

        if is_sentinel(offer.ean) or not offer.ean:
            slug = slugify(offer.name) or f"unknown_{index}"
            return OfferKeys(
                strict=None,
                pack=pack,
                relaxed=None,
                name=f"name_{slug}_{brand}",
            )
        return OfferKeys(
            strict=f"{offer.ean}_{weight}_{brand}",
            pack=pack,
            relaxed=f"{offer.ean}_{weight}",
            name=None,
        )

    def _find_similar(
        self,
        offer: Offer,
        groups: list[ProductGroup],
    ) -> ProductGroup | None:
        best: ProductGroup | None = None
        best_similarity = self.similarity_threshold
        for group in groups:
            similarity = name_similarity(
                offer.name, group.display_name, self.vocabulary
            )
            if similarity > best_similarity:
                best_similarity = similarity
                best = group
        return best

    @staticmethod
    def _register(
        index: dict[str, ProductGroup],
        keys: OfferKeys,
        group: ProductGroup,
    ) -> None:
        for _, key in keys.lookup_order():
            index.setdefault(key, group)

    def group(
        self,
        offers: list[Offer],
        query: str | None = None,
    ) -> list[ProductGroup]:
        """Group *offers*, optionally pre-filtered by relevance to *query*.

        Returns groups in creation order. Raises ``TypeError`` when
        *offers* is ``None``.
        """
        if offers is None:
            raise TypeError("offers must be a list, not None")

        candidates, _ = self.scorer.filter_offers(
            offers, query, self.min_relevance
        )

        index: dict[str, ProductGroup] = {}
        groups: list[ProductGroup] = []

        for position, offer in enumerate(candidates):
            keys = self.offer_keys(offer, position)

            target: ProductGroup | None = None
            strategy = ""
            for label, key in keys.lookup_order():
                if key in index:
                    target = index[key]
                    strategy = label
                    break

            if target is None:
                target = self._find_similar(offer, groups)
                strategy = "fuzzy"

            if target is not None:
                logger.debug(
                    "Offer '%s' (%s) joined '%s' via %s key",
                    offer.name,
                    offer.store,
                    target.display_name,
                    strategy,
                )
                if target.add_offer(offer):
                    self._register(index, keys, target)
                continue

            created = ProductGroup.from_offer(offer, keys.creation_key())
            groups.append(created)
            self._register(index, keys, created)
            logger.debug(
                "Offer '%s' (%s) started group '%s'",
                offer.name,
                offer.store,
                created.key,
            )

        logger.info(
            "Grouped %d offers into %d groups",
            len(candidates),
            len(groups),
        )
        return groups
