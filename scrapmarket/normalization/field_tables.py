# scrapmarket/normalization/field_tables.py

"""Ordered key-name candidates for backend records.

Each table is tried left to right; the first key holding a usable value
wins. Extending a table is the only change needed to accept a new
backend spelling.
"""

PRICE_FIELDS: tuple[str, ...] = (
    "precio", "price", "min_price", "max_price", "best_price",
)

STORE_FIELDS: tuple[str, ...] = (
    "supermercado", "super", "store", "market", "name",
)

IMAGE_FIELDS: tuple[str, ...] = (
    "imageUrl", "imageurl", "imgUrl", "image_url", "image",
)

CART_LINK_FIELDS: tuple[str, ...] = (
    "addToCartLink", "add_to_cart_link",
    "addToCartUrl", "add_to_cart_url",
    "addToCart", "add_to_cart",
    "cartLink", "cart_link",
    "cartUrl", "cart_url",
)

URL_FIELDS: tuple[str, ...] = ("url", "link", "product_url", "productUrl")

SKU_FIELDS: tuple[str, ...] = ("sku", "skuId", "sku_id")

SKU_REF_FIELDS: tuple[str, ...] = ("skuRef", "sku_ref")

STOCK_FIELDS: tuple[str, ...] = ("stock", "in_stock", "inStock")
