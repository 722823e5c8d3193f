# scrapmarket/services/health_checker.py

"""Backend connectivity health checker."""

import logging
import time
from dataclasses import dataclass

from scrapmarket.config.settings import Settings
from scrapmarket.services.backend_client import BackendClient

logger = logging.getLogger("scrapmarket.health")


@dataclass
class HealthResult:
    """Result of a backend health probe."""

    target: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


class HealthChecker:
    """Probes the backend base URL and classifies the answer."""

    def __init__(self, client: BackendClient | None = None) -> None:
        self.client = client or BackendClient()

    def check(self) -> HealthResult:
        """GET the base URL once and report ok/slow/down with latency."""
        target = self.client.base_url
        start = time.monotonic()
        try:
            resp = self.client.session.get(
                f"{target}/",
                headers=Settings.DEFAULT_HEADERS,
                timeout=Settings.HEALTH_TIMEOUT,
            )
            elapsed_ms = (time.monotonic() - start) * 1000
        except Exception as exc:
            elapsed_ms = (time.monotonic() - start) * 1000
            result = HealthResult(
                target=target,
                status="down",
                latency_ms=elapsed_ms,
                message=str(exc)[:80],
            )
        else:
            if not 200 <= resp.status_code < 300:
                result = HealthResult(
                    target=target,
                    status="down",
                    latency_ms=elapsed_ms,
                    message=f"HTTP {resp.status_code}",
                )
            elif elapsed_ms > Settings.HEALTH_SLOW_MS:
                result = HealthResult(
                    target=target,
                    status="slow",
                    latency_ms=elapsed_ms,
                    message="High latency",
                )
            else:
                result = HealthResult(
                    target=target,
                    status="ok",
                    latency_ms=elapsed_ms,
                    message="",
                )

        logger.info(
            "Health check %s: %s (%.0fms) %s",
            result.target,
            result.status,
            result.latency_ms,
            result.message,
        )
        return result
