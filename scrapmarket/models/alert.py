# scrapmarket/models/alert.py

"""Price alert model for the user-alert webhook."""

from dataclasses import dataclass


@dataclass
class UserAlert:
    """A user's target-price alert for one product."""

    user_id: str
    product_name: str
    canonname: str
    target_price: float
    is_active: bool = True
    id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
