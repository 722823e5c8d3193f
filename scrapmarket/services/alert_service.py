# scrapmarket/services/alert_service.py

"""Price alert management through the user-alert webhook.

The backend exposes a single POST endpoint; the operation is implied by
the body (an ``id`` updates, ``isActive: false`` deactivates,
``action: get_alerts`` lists).
"""

import logging
from typing import Any

from scrapmarket.models.alert import UserAlert
from scrapmarket.normalization.offer_mapper import parse_price
from scrapmarket.services.backend_client import BackendClient

logger = logging.getLogger("scrapmarket.alerts")


def alert_to_payload(alert: UserAlert) -> dict[str, Any]:
    """Serialise an alert using the backend's camelCase keys."""
    payload: dict[str, Any] = {
        "userId": alert.user_id,
        "productName": alert.product_name,
        "canonname": alert.canonname,
        "targetPrice": alert.target_price,
        "isActive": alert.is_active,
    }
    if alert.id is not None:
        payload["id"] = alert.id
    return payload


def alert_from_payload(data: dict[str, Any]) -> UserAlert:
    """Build an alert from a backend record (camel or snake case).

    A missing target price becomes ``0.0``; one that is present but not
    a usable price raises ``ValueError``.
    """
    raw_id = data.get("id")
    raw_target = data.get("targetPrice") or data.get("target_price")
    target_price = 0.0
    if raw_target:
        parsed = parse_price(raw_target)
        if parsed is None:
            raise ValueError(f"invalid target price: {raw_target!r}")
        target_price = parsed
    return UserAlert(
        user_id=str(data.get("userId") or data.get("user_id") or ""),
        product_name=str(
            data.get("productName") or data.get("product_name") or ""
        ),
        canonname=str(data.get("canonname") or ""),
        target_price=target_price,
        is_active=bool(data.get("isActive", data.get("is_active", True))),
        id=str(raw_id) if raw_id is not None else None,
        created_at=data.get("createdAt") or data.get("created_at"),
        updated_at=data.get("updatedAt") or data.get("updated_at"),
    )


class AlertService:
    """Create, update, deactivate and list user price alerts."""

    def __init__(self, client: BackendClient | None = None) -> None:
        self.client = client or BackendClient()

    def create_alert(self, alert: UserAlert) -> Any:
        """Register a new alert; returns the backend's answer."""
        logger.info(
            "Creating alert for '%s' at %.2f", alert.canonname, alert.target_price
        )
        return self.client.create_user_alert(alert_to_payload(alert))

    def update_alert(self, alert_id: str, changes: dict[str, Any]) -> Any:
        """Send partial *changes* for an existing alert."""
        return self.client.create_user_alert({**changes, "id": alert_id})

    def delete_alert(self, alert_id: str) -> Any:
        """Soft-delete: the alert is deactivated, not removed."""
        logger.info("Deactivating alert %s", alert_id)
        return self.client.create_user_alert(
            {"id": alert_id, "isActive": False}
        )

    def get_user_alerts(self, user_id: str) -> list[UserAlert]:
        """All alerts of *user_id*; non-list answers mean none."""
        data = self.client.create_user_alert(
            {"userId": user_id, "action": "get_alerts"}
        )
        if not isinstance(data, list):
            return []

        alerts: list[UserAlert] = []
        for record in data:
            if not isinstance(record, dict):
                continue
            try:
                alerts.append(alert_from_payload(record))
            except ValueError as exc:
                logger.debug(
                    "Skipping alert record %s: %s", record.get("id"), exc
                )
        return alerts
