"""
app/services/razorpay_service.py

Purpose: Razorpay payment capture

- Creates orders (amount given in rupees, sent in paise)
- Verifies checkout signatures (HMAC-SHA256 of "order_id|payment_id")
- Fetches payment details
"""

import hashlib
import hmac
import time
from typing import Any, Dict

import httpx

from app.core.config import settings
from app.core.exceptions import ExternalServiceError
from app.core.logging import get_logger

logger = get_logger(__name__)

STATUS_MAP = {"captured": "success", "failed": "failed"}


class RazorpayService:
    """Service for the Razorpay REST API (basic auth with key id / secret)"""

    def __init__(self):
        self.key_id = settings.RAZORPAY_KEY_ID
        self.key_secret = settings.RAZORPAY_KEY_SECRET
        self.base_url = settings.RAZORPAY_BASE_URL.rstrip("/")

    def is_configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    def _require_config(self) -> None:
        if not self.is_configured():
            raise ExternalServiceError("Razorpay is not configured")

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        self._require_config()
        try:
            async with httpx.AsyncClient() as client:
                response = await client.request(
                    method,
                    f"{self.base_url}{path}",
                    auth=(self.key_id, self.key_secret),
                    timeout=15.0,
                    **kwargs,
                )
        except httpx.HTTPError as e:
            logger.error(f"Razorpay transport error on {path}: {e}")
            raise ExternalServiceError("Razorpay request failed")

        if response.status_code not in (200, 201):
            logger.error(f"❌ Razorpay API error: {response.status_code} - {response.text}")
            raise ExternalServiceError(
                "Razorpay request failed", details={"status": response.status_code}
            )
        return response.json()

    async def create_order(self, amount: float, currency: str = "INR") -> Dict[str, Any]:
        """
        Creates an order. `amount` is in the major unit (rupees).
        """
        payload = {
            "amount": int(round(float(amount) * 100)),
            "currency": currency,
            "receipt": f"receipt_{int(time.time() * 1000)}",
        }
        order = await self._request("POST", "/orders", json=payload)
        logger.info(f"Razorpay order created: {order.get('id')}")
        return order

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        self._require_config()
        body = f"{order_id}|{payment_id}".encode()
        return hmac.new(self.key_secret.encode(), body, hashlib.sha256).hexdigest()

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        return hmac.compare_digest(self.expected_signature(order_id, payment_id), signature or "")

    async def fetch_payment(self, payment_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/payments/{payment_id}")


def payment_status(razorpay_status: str) -> str:
    """
    Maps a Razorpay payment status onto Payment.status.
    """
    return STATUS_MAP.get(razorpay_status, "pending")


# Singleton instance
razorpay_service = RazorpayService()
