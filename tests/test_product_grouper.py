# tests/test_product_grouper.py

"""Tests for cross-supermarket product grouping."""

import unittest

from scrapmarket.filters.product_grouper import ProductGrouper, name_similarity
from scrapmarket.models.offer import Offer


def _offer(
    name: str,
    store: str,
    price: float = 1000.0,
    ean: str = "NO_EAN",
    weight: str = "UNKNOWN",
    brand: str | None = None,
) -> Offer:
    """Create an Offer for grouping tests."""
    return Offer(
        product_id=f"{store}-{name}",
        name=name,
        price=price,
        store=store,
        ean=ean,
        exact_weight=weight,
        brand=brand,
    )


class TestNameSimilarity(unittest.TestCase):
    """name_similarity."""

    def test_identical_names(self) -> None:
        """Identical names are fully similar."""
        self.assertEqual(name_similarity("Leche Entera", "Leche Entera"), 1.0)

    def test_unrelated_names(self) -> None:
        """No shared keyword means zero."""
        self.assertEqual(name_similarity("Leche Entera", "Yerba Mate"), 0.0)

    def test_empty_names(self) -> None:
        """Empty keyword lists yield zero."""
        self.assertEqual(name_similarity("", "Leche"), 0.0)
        self.assertEqual(name_similarity("de la", "Leche"), 0.0)

    def test_sugar_free_folds_to_zero(self) -> None:
        """'sin azucar' is the same variant as 'zero'."""
        self.assertEqual(
            name_similarity("Coca Cola Sin Azucar 500ml", "Coca Cola Zero 500ml"),
            1.0,
        )

    def test_type_synonyms(self) -> None:
        """'clasica' and 'original' are the same variant."""
        self.assertEqual(
            name_similarity("Pepsi Clasica 2L", "Pepsi Original 2L"), 1.0
        )

    def test_substring_keywords_match(self) -> None:
        """Keywords contained in one another count as shared."""
        self.assertEqual(
            name_similarity("Galletitas Oreo", "Galletitas Oreos"), 1.0
        )

    def test_half_overlap_is_half(self) -> None:
        """Overlap is divided by the longer keyword list."""
        self.assertEqual(name_similarity("Aceite 500ml", "Vinagre 500ml"), 0.5)

    def test_packs_sharing_brands(self) -> None:
        """Two packs sharing the smaller brand set score 0.9."""
        self.assertEqual(
            name_similarity("Coca + Sprite", "Sprite + Coca + Fanta"), 0.9
        )

    def test_shared_brand_bonus(self) -> None:
        """A shared pack-vocabulary brand adds 0.3."""
        self.assertAlmostEqual(
            name_similarity("Fanta Naranja", "Fanta Limon"), 0.8
        )


class TestOfferKeys(unittest.TestCase):
    """ProductGrouper.offer_keys / weight_key."""

    def setUp(self) -> None:
        self.grouper = ProductGrouper()

    def test_real_ean_keys(self) -> None:
        """Real EANs yield strict and relaxed keys."""
        keys = self.grouper.offer_keys(
            _offer("Leche 1L", "jumbo", ean="779", weight="1l", brand="Sancor")
        )
        self.assertEqual(keys.strict, "779_1l_sancor")
        self.assertEqual(keys.relaxed, "779_1l")
        self.assertIsNone(keys.name)
        self.assertIsNone(keys.pack)
        self.assertEqual(keys.creation_key(), "779_1l_sancor")

    def test_sentinel_ean_keys(self) -> None:
        """Sentinel EANs only yield a name key."""
        keys = self.grouper.offer_keys(_offer("Leche 1L", "jumbo"))
        self.assertIsNone(keys.strict)
        self.assertIsNone(keys.relaxed)
        self.assertEqual(keys.name, "name_leche_1l_no_brand")
        self.assertEqual(keys.lookup_order(), [("name", keys.name)])

    def test_pack_key_creates_group(self) -> None:
        """Packs register new groups under their signature."""
        keys = self.grouper.offer_keys(_offer("Sprite + Coca", "jumbo"))
        self.assertEqual(keys.pack, "coca_sprite_pack")
        self.assertEqual(keys.creation_key(), "coca_sprite_pack")

    def test_weight_key_fallbacks(self) -> None:
        """Sentinel weights fall back to a name token, then the slug."""
        self.assertEqual(
            ProductGrouper.weight_key(_offer("Gaseosa 500 ml", "a")), "500ml"
        )
        self.assertEqual(
            ProductGrouper.weight_key(_offer("Alfajor Triple", "a")),
            "alfajor_triple",
        )
        self.assertEqual(
            ProductGrouper.weight_key(_offer("x", "a", weight="2kg")), "2kg"
        )


class TestGrouping(unittest.TestCase):
    """ProductGrouper.group end to end."""

    def setUp(self) -> None:
        self.grouper = ProductGrouper()

    def test_strict_merge(self) -> None:
        """Same EAN, weight and brand merge; the cheapest wins."""
        groups = self.grouper.group([
            _offer("Leche Entera 1L", "jumbo", 1200, "779", "1l", "Sancor"),
            _offer("Leche Sancor Entera", "disco", 1100, "779", "1l", "Sancor"),
        ])
        self.assertEqual(len(groups), 1)
        group = groups[0]
        self.assertEqual(group.min_price, 1100)
        self.assertEqual(group.max_price, 1200)
        self.assertEqual(group.best_offer.store, "disco")

    def test_relaxed_merge_on_brand_spelling(self) -> None:
        """Brand spelling differences fall back to EAN and weight."""
        groups = self.grouper.group([
            _offer("Coca Cola 500ml", "jumbo", ean="779", weight="500ml",
                   brand="Coca Cola"),
            _offer("Gaseosa Cola 500", "vea", ean="779", weight="500ml",
                   brand="Coca-Cola"),
        ])
        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].store_count, 2)

    def test_pack_merge(self) -> None:
        """Packs listing the same brands in any order merge."""
        groups = self.grouper.group([
            _offer("Sprite 1.5L + Coca Cola 1.5L", "jumbo"),
            _offer("Coca Cola 1.5L + Sprite 1.5L", "disco"),
        ])
        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].key, "coca_sprite_pack")

    def test_name_merge_without_ean(self) -> None:
        """Offers without EAN merge on identical name and brand."""
        groups = self.grouper.group([
            _offer("Pan Lactal Blanco", "jumbo", brand="Fargo"),
            _offer("Pan Lactal Blanco", "carrefour", brand="Fargo"),
        ])
        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].key, "name_pan_lactal_blanco_fargo")

    def test_fuzzy_merge(self) -> None:
        """Differently spelled names merge through similarity."""
        groups = self.grouper.group([
            _offer("coca-cola zero 500 ml", "jumbo"),
            _offer("Coca Cola Zero 500ml", "disco"),
        ])
        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].stores, ["jumbo", "disco"])

    def test_similarity_must_exceed_threshold(self) -> None:
        """A similarity of exactly 0.5 does not merge."""
        groups = self.grouper.group([
            _offer("Aceite 500ml", "jumbo"),
            _offer("Vinagre 500ml", "disco"),
        ])
        self.assertEqual(len(groups), 2)

    def test_distinct_products_stay_apart(self) -> None:
        """Unrelated EANs create separate groups in input order."""
        groups = self.grouper.group([
            _offer("Leche Entera 1L", "jumbo", ean="1", weight="1l"),
            _offer("Yerba Mate 1kg", "jumbo", ean="2", weight="1kg"),
        ])
        self.assertEqual(
            [g.display_name for g in groups],
            ["Leche Entera 1L", "Yerba Mate 1kg"],
        )

    def test_one_offer_per_store(self) -> None:
        """A second offer from the same store does not join."""
        groups = self.grouper.group([
            _offer("Leche", "jumbo", 1200, "779", "1l"),
            _offer("Leche", "Jumbo", 900, "779", "1l"),
        ])
        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].store_count, 1)
        self.assertEqual(groups[0].min_price, 1200)

    def test_every_offer_lands_in_one_group(self) -> None:
        """Offers from distinct stores are all accounted for once."""
        offers = [
            _offer("Leche Entera 1L", "jumbo", 1200, "779", "1l"),
            _offer("Leche Entera 1L", "disco", 1100, "779", "1l"),
            _offer("Yerba Mate 1kg", "vea", 3000, "555", "1kg"),
            _offer("Arroz Largo Fino", "dia", 900),
        ]
        groups = self.grouper.group(offers)
        members = [o for g in groups for o in g.offers]
        self.assertEqual(len(members), len(offers))
        for offer in offers:
            self.assertIn(offer, members)
        for group in groups:
            self.assertEqual(group.best_offer.price, group.min_price)

    def test_deterministic(self) -> None:
        """Grouping the same input twice gives the same groups."""
        offers = [
            _offer("coca-cola zero 500 ml", "jumbo"),
            _offer("Coca Cola Zero 500ml", "disco", 900),
            _offer("Sprite + Coca", "vea"),
        ]
        first = self.grouper.group(list(offers))
        second = self.grouper.group(list(offers))
        self.assertEqual(
            [(g.key, g.stores) for g in first],
            [(g.key, g.stores) for g in second],
        )

    def test_query_prefilter(self) -> None:
        """Irrelevant offers are dropped before grouping."""
        groups = self.grouper.group(
            [
                _offer("Pollo Entero", "jumbo"),
                _offer("Alimento para perro sabor pollo", "disco"),
            ],
            query="pollo",
        )
        self.assertEqual([g.display_name for g in groups], ["Pollo Entero"])

    def test_empty_and_none(self) -> None:
        """Empty input gives no groups and None is rejected."""
        self.assertEqual(self.grouper.group([]), [])
        with self.assertRaises(TypeError):
            self.grouper.group(None)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
