"""Best-effort push notifications to the staff devices."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests  # type: ignore

from ..common.services.logging import log_event


class StaffNotifier:
    """Posts a "new order" message to the push webhook for the store topic.

    Failures are logged and reported as ``False``; the order has already been
    committed when this runs, so nothing here may raise.
    """

    def __init__(
        self,
        webhook_url: Optional[str],
        *,
        topic: str = "store_orders",
        timeout: float = 5.0,
        currency_symbol: str = "₹",
        http: Any = None,
    ) -> None:
        self.webhook_url = webhook_url
        self.topic = topic
        self.timeout = timeout
        self.currency_symbol = currency_symbol
        self._http = http or requests
        self.logger = logging.getLogger(__name__)

    def build_message(self, *, order_id: str, order_number: str, name: str, total: float) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "notification": {
                "title": "New Order Received!",
                "body": f"Order #{order_number} - {name} ({self.currency_symbol}{total:g})",
            },
            "data": {"orderId": order_id, "orderNumber": order_number},
        }

    def notify_new_order(self, *, order_id: str, order_number: str, name: str, total: float) -> bool:
        if not self.webhook_url:
            log_event("debug", "notify.skipped", order_number=order_number, reason="no webhook configured")
            return False
        message = self.build_message(order_id=order_id, order_number=order_number, name=name, total=total)
        try:
            response = self._http.post(self.webhook_url, json=message, timeout=self.timeout)
        except requests.exceptions.Timeout:
            log_event("warning", "notify.failed", order_number=order_number, error="timeout")
            return False
        except Exception as exc:
            self.logger.warning("Failed to send order notification: %s", exc)
            log_event("warning", "notify.failed", order_number=order_number, error=repr(exc))
            return False
        if response.status_code >= 400:
            log_event("warning", "notify.failed", order_number=order_number, status=response.status_code)
            return False
        log_event("info", "notify.sent", order_number=order_number)
        return True
