"""
Razorpay Gateway

Server-side gateway adapter. Creates orders through the Razorpay REST API
and verifies callback signatures with the key secret.
"""

import logging
from typing import Optional

import httpx

from ..exceptions import PaymentInitiationError
from ..models.payment import RemotePaymentOrder
from .gateway import PaymentGateway
from .signature import verify_payment_signature

logger = logging.getLogger(__name__)


def to_minor_units(amount: float) -> int:
    """Rupees to paise"""
    return int(round(amount * 100))


def from_minor_units(amount: int) -> float:
    return round(amount / 100, 2)


class RazorpayGateway(PaymentGateway):
    """
    Razorpay-compatible payment gateway.

    Usage:
        gateway = RazorpayGateway(key_id="rzp_test_...", key_secret="...")
        order = await gateway.create_remote_payment_order(118.0, "INR", receipt="order-1")
        ok = await gateway.verify_signature(order.gateway_order_id, payment_id, signature)
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the gateway.

        Args:
            key_id: Public key id, also handed to the collection UI
            key_secret: Secret used for API auth and signature checks
            base_url: Gateway API base URL
            http_client: Optional pre-configured client (tests inject a mock transport)
        """
        self.key_id = key_id
        self._key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self._http_client = http_client or httpx.AsyncClient(timeout=30.0)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def create_remote_payment_order(
        self,
        amount: float,
        currency: str = "INR",
        receipt: Optional[str] = None,
    ) -> RemotePaymentOrder:
        body = {"amount": to_minor_units(amount), "currency": currency}
        if receipt:
            body["receipt"] = receipt

        try:
            response = await self._http_client.post(
                f"{self.base_url}/orders",
                json=body,
                auth=(self.key_id, self._key_secret),
            )
        except httpx.HTTPError as e:
            logger.error(f"Payment gateway unreachable: {e}")
            raise PaymentInitiationError() from e

        if response.status_code >= 400:
            logger.error(f"Payment order creation failed: {response.status_code} - {response.text}")
            raise PaymentInitiationError()

        data = response.json()
        logger.info(f"Created payment order {data['id']} for {currency} {amount}")
        return RemotePaymentOrder(
            gateway_order_id=data["id"],
            amount=from_minor_units(data["amount"]),
            currency=data.get("currency", currency),
            receipt=data.get("receipt"),
        )

    async def verify_signature(self, gateway_order_id: str, payment_id: str, signature: str) -> bool:
        verified = verify_payment_signature(
            gateway_order_id, payment_id, signature, self._key_secret
        )
        if not verified:
            logger.warning(
                f"Signature mismatch for gateway order {gateway_order_id}, payment {payment_id}"
            )
        return verified
