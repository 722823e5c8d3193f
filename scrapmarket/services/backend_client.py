# scrapmarket/services/backend_client.py

"""HTTP client for the n8n search/scraping backend."""

import json
import logging
import re
import time
from typing import Any
from urllib.parse import quote

from curl_cffi import requests as curl_requests

from scrapmarket.config.settings import Settings

logger = logging.getLogger("scrapmarket.backend")

_WEBHOOK_SUFFIX_RE = re.compile(r"/webhook(/.*)?$")
_RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


class BackendError(Exception):
    """Network, HTTP or payload failure talking to the backend."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


def normalize_base_url(raw_url: str) -> str:
    """Strip any ``/webhook...`` suffix and trailing slashes."""
    cleaned = raw_url.strip()
    cleaned = _WEBHOOK_SUFFIX_RE.sub("", cleaned)
    return cleaned.rstrip("/")


class BackendClient:
    """Thin wrapper over the backend webhooks with retries.

    Each request is retried ``retries`` extra times on network errors
    and retryable HTTP statuses, sleeping ``RETRY_BACKOFF * attempt``
    seconds in between. Exhausted retries raise :class:`BackendError`.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session: Any = None,
        timeout: int | None = None,
        retries: int | None = None,
    ) -> None:
        self.base_url = normalize_base_url(base_url or Settings.API_BASE_URL)
        self.session = session or curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )
        self.timeout = timeout if timeout is not None else Settings.API_TIMEOUT
        self.retries = retries if retries is not None else Settings.API_RETRIES

    def _endpoint(self, name: str, suffix: str = "") -> str:
        return f"{self.base_url}{Settings.ENDPOINTS[name]}{suffix}"

    def _request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request with retries and return the parsed JSON body."""
        last_error = ""
        for attempt in range(self.retries + 1):
            try:
                resp = self.session.request(
                    method,
                    url,
                    params=params,
                    json=payload,
                    headers=Settings.DEFAULT_HEADERS,
                    timeout=self.timeout,
                )
            except Exception as exc:
                last_error = str(exc)
                logger.warning(
                    "Request error on attempt %d for %s: %s",
                    attempt + 1,
                    url,
                    exc,
                )
            else:
                if 200 <= resp.status_code < 300:
                    return self._parse_body(resp.text, url)
                last_error = f"HTTP {resp.status_code}"
                logger.warning(
                    "HTTP %d on attempt %d for %s",
                    resp.status_code,
                    attempt + 1,
                    url,
                )
                if resp.status_code not in _RETRYABLE_STATUSES:
                    raise BackendError(
                        f"Backend returned HTTP {resp.status_code}",
                        status_code=resp.status_code,
                        url=url,
                    )

            if attempt < self.retries:
                time.sleep(Settings.RETRY_BACKOFF * (attempt + 1))

        logger.error(
            "Request to %s failed after %d attempts: %s",
            url,
            self.retries + 1,
            last_error,
        )
        raise BackendError(
            f"Request failed after {self.retries + 1} attempts: {last_error}",
            url=url,
        )

    @staticmethod
    def _parse_body(text: str, url: str) -> Any:
        """Empty bodies and JSON ``null`` mean "no results"; anything
        else must be JSON."""
        if not text or not text.strip():
            logger.warning("Backend returned an empty body for %s", url)
            return []
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise BackendError(
                f"Invalid JSON response: {text[:100]}", url=url
            ) from exc
        if data is None:
            logger.warning("Backend returned null for %s", url)
            return []
        return data

    # ── Search endpoints ─────────────────────────────────

    def search_products(self, query: str, data_saver: bool = False) -> Any:
        """Full search (may trigger live scraping on the backend)."""
        params = {"q": query}
        if data_saver:
            params["dataSaverMode"] = "true"
        return self._request("GET", self._endpoint("search"), params=params)

    def search_in_database(self, query: str) -> Any:
        """Search already-scraped products only."""
        return self._request(
            "GET", self._endpoint("search_db"), params={"q": query}
        )

    def search_popular(self, query: str) -> Any:
        """Search restricted to the popular-products catalogue."""
        return self._request(
            "GET", self._endpoint("search_popular"), params={"q": query}
        )

    def popular_products(self) -> Any:
        """Backend-curated popular products, already grouped."""
        return self._request("GET", self._endpoint("popular"))

    def prices_per_market(self, canonname: str) -> Any:
        """Per-supermarket prices for one canonical product name."""
        return self._request(
            "GET", self._endpoint("prices"), params={"canonname": canonname}
        )

    # ── Alerts & history ─────────────────────────────────

    def create_user_alert(self, alert_data: dict[str, Any]) -> Any:
        """POST to the user-alert webhook (create, update and list)."""
        return self._request(
            "POST", self._endpoint("alerts"), payload=alert_data
        )

    def price_history(self, canonid: str) -> Any:
        """Raw price history for a canonical product id."""
        url = self._endpoint("history", f"/{quote(canonid, safe='')}")
        return self._request("GET", url)

    def test_connection(self) -> bool:
        """Return True when the backend base URL answers 2xx."""
        try:
            resp = self.session.get(
                f"{self.base_url}/",
                headers=Settings.DEFAULT_HEADERS,
                timeout=Settings.HEALTH_TIMEOUT,
            )
        except Exception as exc:
            logger.warning("Connection test failed: %s", exc)
            return False
        return 200 <= resp.status_code < 300
