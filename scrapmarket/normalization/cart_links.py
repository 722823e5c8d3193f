# scrapmarket/normalization/cart_links.py

"""Add-to-cart deep links: synthesis, quantity rewrite and combination.

Supermarkets running on VTEX accept
``/checkout/cart/add?sku=..&qty=..&seller=..&sc=..`` on their storefront
host. When the backend omits a ready-made link, :func:`synthesize_cart_url`
rebuilds one from the product page URL through a host-keyed strategy
table. Every helper here is best-effort and returns ``None`` instead of
raising.
"""

import logging
import re
from collections.abc import Callable, Sequence
from urllib.parse import SplitResult, parse_qs, parse_qsl, urlencode, urlsplit

from scrapmarket.config.settings import Settings
from scrapmarket.models.offer import Offer

logger = logging.getLogger("scrapmarket.cart_links")

CartUrlBuilder = Callable[[SplitResult, str], str]

_SKU_IN_PATH_RE = re.compile(r"\d{3,}")
_QTY_RE = re.compile(r"([?&])qty=\d+")


def _vtex_builder(sales_channel: str) -> CartUrlBuilder:
    """Return a builder for a VTEX storefront on the given sales channel."""

    def build(parts: SplitResult, sku: str) -> str:
        query = urlencode({
            "sku": sku,
            "qty": "1",
            "seller": "1",
            "sc": sales_channel,
        })
        return f"{parts.scheme}://{parts.netloc}/checkout/cart/add?{query}"

    return build


# hostname substring -> URL builder, checked in insertion order
CART_STRATEGIES: dict[str, CartUrlBuilder] = {
    host: _vtex_builder(channel)
    for host, channel in Settings.VTEX_SUPERMARKETS.items()
}


def _extract_sku(parts: SplitResult, sku: str | None) -> str | None:
    """Explicit SKU first, then ``skuId``/``sku`` query params, then the path."""
    if sku:
        return str(sku)
    params = parse_qs(parts.query)
    for name in ("skuId", "sku"):
        values = params.get(name)
        if values and values[0]:
            return values[0]
    digit_runs = _SKU_IN_PATH_RE.findall(parts.path)
    return digit_runs[-1] if digit_runs else None


def synthesize_cart_url(
    product_url: str | None,
    sku: str | None = None,
) -> str | None:
    """Build a cart-add URL from a product page URL, or return ``None``."""
    if not product_url:
        return None
    try:
        parts = urlsplit(product_url.strip())
    except ValueError:
        return None
    host = (parts.hostname or "").lower()
    if not parts.scheme or not host:
        return None

    for fragment, builder in CART_STRATEGIES.items():
        if fragment not in host:
            continue
        resolved = _extract_sku(parts, sku)
        if not resolved:
            logger.debug("No SKU found in %s", product_url)
            return None
        return builder(parts, resolved)
    return None


def with_quantity(link: str, quantity: int) -> str:
    """Return *link* with its ``qty`` parameter set to *quantity*."""
    if not link:
        return link
    try:
        parts = urlsplit(link)
    except ValueError:
        return _QTY_RE.sub(rf"\g<1>qty={quantity}", link)
    params = parse_qsl(parts.query, keep_blank_values=True)
    replaced = False
    updated: list[tuple[str, str]] = []
    for key, value in params:
        if key == "qty":
            if replaced:
                continue
            value = str(quantity)
            replaced = True
        updated.append((key, value))
    if not replaced:
        updated.append(("qty", str(quantity)))
    return parts._replace(query=urlencode(updated)).geturl()


def combine_links(items: Sequence[tuple[Offer, int]]) -> str | None:
    """Merge several single-item cart links into one multi-SKU link.

    All offers must carry a cart link on the same origin and path.
    Each item contributes ``sku``, ``qty``, ``seller``, ``sc``,
    ``price`` (cents) and ``cv``. Returns ``None`` when the links
    cannot be combined.
    """
    if not items:
        return None
    links = [offer.add_to_cart_url for offer, _ in items]
    if not all(links):
        return None

    try:
        parsed = [urlsplit(link) for link in links if link]
    except ValueError:
        return None
    first = parsed[0]
    if any(
        (p.scheme, p.netloc, p.path) != (first.scheme, first.netloc, first.path)
        for p in parsed
    ):
        return None

    combined: list[tuple[str, str]] = []
    for (offer, quantity), parts in zip(items, parsed):
        params = {k: v[0] for k, v in parse_qs(parts.query).items() if v}
        sku = (
            params.get("sku")
            or offer.sku
            or offer.sku_ref
            or offer.product_id
            or offer.ean
        )
        if not sku:
            continue
        price = params.get("price") or str(round(offer.price * 100))
        combined.extend([
            ("sku", sku),
            ("qty", str(quantity)),
            ("seller", params.get("seller", "1")),
            ("sc", params.get("sc") or params.get("salesChannel") or "1"),
            ("price", price),
            ("cv", params.get("cv", "_")),
        ])

    if not combined:
        return None
    return f"{first.scheme}://{first.netloc}{first.path}?{urlencode(combined)}"
