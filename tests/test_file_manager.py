# tests/test_file_manager.py

"""Tests for saving and exporting product groups."""

import csv
import json
import shutil
import tempfile
import unittest
from pathlib import Path

from scrapmarket.models.offer import Offer
from scrapmarket.models.product_group import ProductGroup
from scrapmarket.storage.file_manager import FileManager, group_to_dict


def _group() -> ProductGroup:
    """A two-store group for Leche Entera."""
    group = ProductGroup.from_offer(
        Offer(product_id="p1", name="Leche Entera", price=1200.0,
              store="jumbo", exact_weight="1l", brand="Sancor",
              url="https://jumbo/p1")
    )
    group.add_offer(
        Offer(product_id="p1", name="Leche Entera", price=1100.0,
              store="disco", exact_weight="1l", in_stock=False)
    )
    return group


class TestGroupToDict(unittest.TestCase):
    """group_to_dict serialisation."""

    def test_fields(self) -> None:
        """Summary fields and offers are included."""
        data = group_to_dict(_group())
        self.assertEqual(data["display_name"], "Sancor - Leche Entera")
        self.assertEqual(data["min_price"], 1100.0)
        self.assertEqual(data["price_range"], "$1100.00 - $1200.00")
        self.assertEqual(data["price_per_unit"], "$1.10 / ml")
        self.assertEqual(data["best_store"], "disco")
        self.assertEqual(data["store_count"], 2)
        self.assertEqual(len(data["offers"]), 2)
        self.assertEqual(data["offers"][0]["store"], "jumbo")

    def test_json_serialisable(self) -> None:
        """The result dumps to JSON without custom encoders."""
        json.dumps(group_to_dict(_group()))


class TestFileManager(unittest.TestCase):
    """FileManager on a temporary directory."""

    def setUp(self) -> None:
        self.tmp = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.tmp, ignore_errors=True)
        self.manager = FileManager(self.tmp / "results")

    def test_creates_results_dir(self) -> None:
        """The results directory is created on init."""
        self.assertTrue((self.tmp / "results").is_dir())

    def test_save_results(self) -> None:
        """Groups are written to a timestamped JSON file."""
        path = self.manager.save_results("leche entera", [_group()])
        self.assertRegex(path.name, r"^groups_leche_entera_\d{8}_\d{6}\.json$")
        data = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(data["query"], "leche entera")
        self.assertEqual(len(data["groups"]), 1)
        self.assertIn("saved_at", data)

    def test_save_without_query(self) -> None:
        """Popular results use a fixed slug."""
        path = self.manager.save_results(None, [])
        self.assertTrue(path.name.startswith("groups_popular_"))

    def test_export_csv_rows(self) -> None:
        """One row per offer, cheapest first within a group."""
        path = self.manager.export_csv("leche", [_group()])
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        self.assertEqual(
            rows[0], ["Product", "Brand", "Store", "Price", "In Stock", "URL"]
        )
        self.assertEqual(
            rows[1],
            ["Sancor - Leche Entera", "sancor", "disco", "1100.00", "no", ""],
        )
        self.assertEqual(rows[2][2], "jumbo")
        self.assertEqual(rows[2][5], "https://jumbo/p1")
        self.assertEqual(len(rows), 3)


if __name__ == "__main__":
    unittest.main()
