# scrapmarket/storage/file_manager.py

"""Handles saving ranked product groups to disk."""

import csv
import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

from scrapmarket.config.settings import Settings
from scrapmarket.formatting.display_formatter import (
    display_name,
    group_price_per_unit,
    price_range,
)
from scrapmarket.models.product_group import ProductGroup

logger = logging.getLogger("scrapmarket.storage")


def group_to_dict(group: ProductGroup) -> dict[str, Any]:
    """Serialise a group (and its offers) to plain JSON-able data."""
    return {
        "display_name": display_name(group),
        "name": group.display_name,
        "brand": group.brand,
        "ean": group.ean,
        "exact_weight": group.exact_weight,
        "min_price": group.min_price,
        "max_price": group.max_price,
        "price_range": price_range(group),
        "price_per_unit": group_price_per_unit(group),
        "store_count": group.store_count,
        "has_stock": group.has_stock,
        "image_url": group.image_url,
        "best_store": group.best_offer.store,
        "alternative_names": list(group.alternative_names),
        "offers": [asdict(offer) for offer in group.offers],
    }


def _slug(query: str | None) -> str:
    return (query or "popular").strip().replace(" ", "_") or "popular"


class FileManager:
    """Handles saving search results to disk."""

    def __init__(self, results_dir: Path | None = None) -> None:
        self.results_dir: Path = results_dir or Settings.RESULTS_DIR
        self.results_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("FileManager initialised, results_dir=%s", self.results_dir)

    def save_results(
        self, query: str | None, groups: list[ProductGroup]
    ) -> Path:
        """Save ranked groups to a timestamped JSON file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.results_dir / f"groups_{_slug(query)}_{timestamp}.json"

        data = {
            "query": query,
            "saved_at": datetime.now().isoformat(timespec="seconds"),
            "groups": [group_to_dict(g) for g in groups],
        }
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        logger.info(
            "Saved %d groups for query '%s' to %s",
            len(groups),
            query,
            filepath,
        )
        return filepath

    def export_csv(
        self, query: str | None, groups: list[ProductGroup]
    ) -> Path:
        """Export one row per offer, cheapest groups first."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.results_dir / f"export_{_slug(query)}_{timestamp}.csv"

        sorted_groups = sorted(groups, key=lambda g: g.min_price)

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(
                ["Product", "Brand", "Store", "Price", "In Stock", "URL"]
            )
            for group in sorted_groups:
                for offer in sorted(group.offers, key=lambda o: o.price):
                    writer.writerow([
                        display_name(group),
                        group.brand or "",
                        offer.store,
                        f"{offer.price:.2f}",
                        "yes" if offer.in_stock else "no",
                        offer.url,
                    ])

        logger.info(
            "Exported %d groups for query '%s' to %s",
            len(groups),
            query,
            filepath,
        )
        return filepath
