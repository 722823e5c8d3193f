# tests/test_search_orchestrator.py

"""Tests for SearchOrchestrator integration logic."""

import unittest
from typing import Any
from unittest.mock import MagicMock

from scrapmarket.filters.group_filter import FilterCriteria
from scrapmarket.services.backend_client import BackendClient, BackendError
from scrapmarket.services.search_orchestrator import (
    SearchOrchestrator,
    SearchResult,
)


def _record(name: str, entries: list[tuple[str, Any]], **extra: Any) -> dict:
    """Build a grouped backend record from (store, price) pairs."""
    return {
        "canonname": name,
        "supermarkets": [
            {"supermercado": store, "precio": price} for store, price in entries
        ],
        **extra,
    }


_PAYLOAD = {
    "status": "success",
    "data": [
        _record(
            "Leche Entera 1L",
            [("jumbo", 1200), ("disco", 1100), ("vea", None)],
            ean="779001", exact_weight="1l", brand="Sancor",
        ),
        _record("Leche Descremada 1L", [("carrefour", 900)], brand="Sancor"),
        _record("Alimento para perro sabor leche", [("jumbo", 500)]),
    ],
}


def _orchestrator(client: MagicMock | None = None) -> SearchOrchestrator:
    """Orchestrator over a mocked backend client."""
    return SearchOrchestrator(client=client or MagicMock())


class TestProcessPayload(unittest.TestCase):
    """The pure normalize/group/filter/rank pipeline."""

    def test_counts_and_groups(self) -> None:
        """Counts are reported and offers grouped per product."""
        result = _orchestrator().process_payload(_PAYLOAD, "leche")
        self.assertIsInstance(result, SearchResult)
        self.assertEqual(result.record_count, 3)
        self.assertEqual(result.offer_count, 4)
        self.assertEqual(result.invalid_count, 1)
        names = [g.display_name for g in result.groups]
        self.assertEqual(
            sorted(names), ["Leche Descremada 1L", "Leche Entera 1L"]
        )

    def test_merged_group_prices(self) -> None:
        """The shared EAN merges stores and tracks the cheapest."""
        result = _orchestrator().process_payload(_PAYLOAD, "leche")
        entera = next(
            g for g in result.groups if g.display_name == "Leche Entera 1L"
        )
        self.assertEqual(entera.stores, ["jumbo", "disco"])
        self.assertEqual(entera.min_price, 1100)
        self.assertEqual(entera.best_offer.store, "disco")

    def test_ranked_by_breadth_within_tie(self) -> None:
        """Equally relevant groups rank by number of stores."""
        result = _orchestrator().process_payload(_PAYLOAD, "leche")
        self.assertEqual(result.groups[0].display_name, "Leche Entera 1L")

    def test_criteria_applied(self) -> None:
        """Filter criteria exclude groups and are counted."""
        result = _orchestrator().process_payload(
            _PAYLOAD, "leche", FilterCriteria(max_price=1000)
        )
        self.assertEqual(
            [g.display_name for g in result.groups], ["Leche Descremada 1L"]
        )
        self.assertEqual(result.filtered_count, 1)

    def test_sort_mode(self) -> None:
        """Explicit sort modes are honoured."""
        result = _orchestrator().process_payload(
            _PAYLOAD, "leche", sort="price_desc"
        )
        self.assertEqual(
            [g.min_price for g in result.groups], [1100, 900]
        )

    def test_malformed_payload_is_empty(self) -> None:
        """Unknown shapes produce an empty result."""
        result = _orchestrator().process_payload({"foo": "bar"}, "leche")
        self.assertEqual(result.groups, [])
        self.assertEqual(result.record_count, 0)

    def test_none_payload_rejected(self) -> None:
        """A None payload is a caller error."""
        with self.assertRaises(TypeError):
            _orchestrator().process_payload(None, "leche")


class TestSearch(unittest.TestCase):
    """Backend-backed search entry points."""

    def test_full_search(self) -> None:
        """The full endpoint is used by default."""
        client = MagicMock()
        client.search_products.return_value = _PAYLOAD
        result = _orchestrator(client).search("leche", data_saver=True)
        client.search_products.assert_called_once_with("leche", True)
        client.search_in_database.assert_not_called()
        self.assertEqual(len(result.groups), 2)
        self.assertEqual(result.errors, [])

    def test_db_only_search(self) -> None:
        """db_only uses the database endpoint."""
        client = MagicMock()
        client.search_in_database.return_value = []
        result = _orchestrator(client).search("leche", db_only=True)
        client.search_in_database.assert_called_once_with("leche")
        self.assertEqual(result.groups, [])

    def test_backend_error_reported(self) -> None:
        """Backend failures become result errors."""
        client = MagicMock()
        client.search_products.side_effect = BackendError("HTTP 500")
        result = _orchestrator(client).search("leche")
        self.assertEqual(result.groups, [])
        self.assertEqual(result.errors, ["HTTP 500"])

    def test_null_backend_body_is_empty_result(self) -> None:
        """A backend answering JSON null yields an empty, error-free result."""
        session = MagicMock()
        response = MagicMock()
        response.status_code = 200
        response.text = "null"
        session.request.return_value = response
        client = BackendClient(base_url="https://api.test", session=session,
                               retries=0)
        result = SearchOrchestrator(client=client).search("leche")
        self.assertEqual(result.groups, [])
        self.assertEqual(result.errors, [])


class TestPopular(unittest.TestCase):
    """SearchOrchestrator.popular."""

    def test_one_group_per_record(self) -> None:
        """Backend grouping is kept as-is."""
        client = MagicMock()
        client.popular_products.return_value = {
            "popular_products": [
                _record("Yerba 1kg", [("jumbo", 3000), ("dia", 2800)],
                        canonid="y1"),
                _record("Yerba 1kg", [("vea", 2900)], canonid="y2"),
                _record("Sin precio", [("vea", None)]),
            ]
        }
        result = _orchestrator(client).popular()
        self.assertEqual(len(result.groups), 2)
        self.assertEqual(result.groups[0].key, "y1")
        self.assertEqual(result.groups[0].min_price, 2800)
        self.assertEqual(result.record_count, 3)
        self.assertEqual(result.invalid_count, 1)

    def test_error(self) -> None:
        """Failures are reported, not raised."""
        client = MagicMock()
        client.popular_products.side_effect = BackendError("down")
        self.assertEqual(_orchestrator(client).popular().errors, ["down"])


class TestSearchMany(unittest.IsolatedAsyncioTestCase):
    """Concurrent multi-query searches."""

    async def test_results_in_query_order(self) -> None:
        """One independent result per query, in order."""
        client = MagicMock()

        def fake_search(query: str, data_saver: bool = False) -> Any:
            if query == "roto":
                raise BackendError("boom")
            return _PAYLOAD

        client.search_products.side_effect = fake_search
        results = await _orchestrator(client).search_many(["leche", "roto"])
        self.assertEqual([r.query for r in results], ["leche", "roto"])
        self.assertEqual(len(results[0].groups), 2)
        self.assertEqual(results[1].errors, ["boom"])

    async def test_crashing_search_does_not_abort_siblings(self) -> None:
        """An unexpected exception in one query is reported on that result."""
        orchestrator = _orchestrator()

        def fake_search(query: str, db_only: bool = False) -> SearchResult:
            if query == "roto":
                raise TypeError("payload must not be None")
            return SearchResult(query=query)

        orchestrator.search = fake_search  # type: ignore[method-assign]
        results = await orchestrator.search_many(["leche", "roto", "yerba"])
        self.assertEqual([r.query for r in results], ["leche", "roto", "yerba"])
        self.assertEqual(results[0].errors, [])
        self.assertEqual(results[1].errors, ["payload must not be None"])
        self.assertEqual(results[2].errors, [])


if __name__ == "__main__":
    unittest.main()
