# scrapmarket/config/settings.py

"""Central configuration for the scrapmarket engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_flag(key: str, default: bool) -> bool:
    """Read a boolean flag from the environment ('true'/'false')."""
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() == "true"


# Per-environment defaults: base URL, timeout (secs), retries
_ENVIRONMENTS: dict[str, dict[str, str | int]] = {
    "development": {
        "base_url": "http://localhost:5678",
        "timeout": 120,
        "retries": 2,
    },
    "staging": {
        "base_url": "https://staging.scrapmarket.example",
        "timeout": 60,
        "retries": 3,
    },
    "production": {
        "base_url": "https://api.scrapmarket.example",
        "timeout": 30,
        "retries": 3,
    },
}

_ENV_NAME: str = os.getenv("SCRAPMARKET_ENV", "development").lower()
if _ENV_NAME not in _ENVIRONMENTS:
    _ENV_NAME = "development"
_PROFILE = _ENVIRONMENTS[_ENV_NAME]


class Settings:
    """Central configuration for the scrapmarket engine."""

    # --- Environment ---
    ENVIRONMENT: str = _ENV_NAME
    DEBUG_LOGGING: bool = _env_flag(
        "SCRAPMARKET_DEBUG", _ENV_NAME == "development"
    )

    # --- Backend (n8n webhooks) ---
    API_BASE_URL: str = os.getenv(
        "SCRAPMARKET_API_BASE_URL", str(_PROFILE["base_url"])
    )
    API_TIMEOUT: int = int(_PROFILE["timeout"])   # Seconds per request
    API_RETRIES: int = int(_PROFILE["retries"])   # Extra attempts after the first
    RETRY_BACKOFF: float = 2.0                    # Linear backoff step (secs)
    HEALTH_TIMEOUT: int = 10
    HEALTH_SLOW_MS: float = 5000.0

    # --- HTTP client ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "Accept-Language": "es-AR,es;q=0.9,en;q=0.8",
    }

    ENDPOINTS: dict[str, str] = {
        "search": "/webhook/search-products-complete",
        "search_db": "/webhook/search-in-db",
        "search_popular": "/webhook/search-popular-products",
        "popular": "/webhook/popular_products",
        "prices": "/webhook/products-per-market",
        "alerts": "/webhook/user-alert",
        "history": "/webhook/historial",
    }

    # --- Grouping & ranking (empirically tuned, keep as-is) ---
    MIN_RELEVANCE: float = 25.0         # Offer pre-filter threshold
    SIMILARITY_THRESHOLD: float = 0.5   # Fuzzy merge must exceed this
    RELEVANCE_TIE_BAND: float = 5.0     # |diff| <= band counts as a tie
    MIN_QUERY_LENGTH: int = 2

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    RESULTS_DIR: Path = BASE_DIR / "results"
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Supermarkets known to the cart-link builder ---
    # hostname substring -> VTEX sales channel
    VTEX_SUPERMARKETS: dict[str, str] = {
        "jumbo": "1",
        "disco": "1",
        "vea": "1",
        "carrefour": "1",
        "dia": "1",
    }
