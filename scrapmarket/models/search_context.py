# scrapmarket/models/search_context.py

"""Context plumbed through nested backend payloads."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SearchContext:
    """Active query plus the nearest ``meta`` block seen while descending."""

    query: str | None = None
    meta: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )

    def inherit(
        self,
        meta: Any = None,
        query: Any = None,
    ) -> "SearchContext":
        """Return a child context; missing values fall back to ours."""
        return SearchContext(
            query=query if isinstance(query, str) and query else self.query,
            meta=meta if isinstance(meta, dict) else self.meta,
        )
