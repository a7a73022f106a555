# tm_core/billing/gateway.py
"""
Payment gateway (Razorpay) client.

Two concerns only:
  - create an order over the Orders REST API (basic auth, bounded timeout)
  - check the checkout signature: hex HMAC-SHA256(key_secret, "<order_id>|<payment_id>")

Signature checks never call the gateway.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from django.conf import settings

from tm_core.common.api.exceptions import GatewayUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayOrder:
    order_id: str
    amount: int
    currency: str
    receipt: str


class PaymentGatewayClient:
    def __init__(self, *, base_url: str, key_id: str, key_secret: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.key_id = key_id
        self.key_secret = key_secret
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "PaymentGatewayClient":
        cfg = settings.PAYMENT_GATEWAY
        return cls(
            base_url=cfg["BASE_URL"],
            key_id=cfg["KEY_ID"],
            key_secret=cfg["KEY_SECRET"],
            timeout=float(cfg.get("TIMEOUT_SECONDS", 10)),
        )

    def create_order(
        self,
        *,
        amount: int,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
    ) -> GatewayOrder:
        """
        amount is in minor units. Raises GatewayUnavailable on transport errors,
        timeouts, non-2xx answers or a body without an order id.
        """
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }

        try:
            with httpx.Client(timeout=self.timeout, auth=(self.key_id, self.key_secret)) as client:
                response = client.post(f"{self.base_url}/orders", json=payload)
        except httpx.HTTPError as exc:
            logger.error("Payment gateway unreachable receipt=%s error=%s", receipt, exc)
            raise GatewayUnavailable()

        if response.status_code not in (200, 201):
            logger.error(
                "Payment gateway rejected order receipt=%s status=%s body=%s",
                receipt,
                response.status_code,
                response.text[:500],
            )
            raise GatewayUnavailable()

        try:
            data = response.json()
        except ValueError:
            data = {}

        order_id = data.get("id") if isinstance(data, dict) else None
        if not order_id:
            logger.error("Payment gateway answered without order id receipt=%s", receipt)
            raise GatewayUnavailable()

        logger.info("Payment gateway order created order_id=%s receipt=%s amount=%s", order_id, receipt, amount)
        return GatewayOrder(order_id=order_id, amount=amount, currency=currency, receipt=receipt)


def get_gateway_client() -> PaymentGatewayClient:
    return PaymentGatewayClient.from_settings()


def compute_signature(*, secret: str, order_id: str, payment_id: str) -> str:
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_signature(*, secret: str, order_id: str, payment_id: str, signature: str) -> bool:
    if not secret or not signature:
        return False
    expected = compute_signature(secret=secret, order_id=order_id, payment_id=payment_id)
    return hmac.compare_digest(expected, signature)
