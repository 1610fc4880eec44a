"""Payment gateway adapter backed by the storefront API"""

import logging
from typing import Optional

import httpx

from ..exceptions import PaymentInitiationError
from ..models.payment import RemotePaymentOrder
from ..payments.gateway import PaymentGateway
from .api import StorefrontClient

logger = logging.getLogger(__name__)


class HttpPaymentGateway(PaymentGateway):
    """
    Gateway for client-side checkout.

    Order creation and signature checks go through the backend, which
    holds the gateway key secret.
    """

    def __init__(self, client: StorefrontClient):
        self.client = client

    async def create_remote_payment_order(
        self,
        amount: float,
        currency: str = "INR",
        receipt: Optional[str] = None,
    ) -> RemotePaymentOrder:
        try:
            data = await self.client.create_payment_order(amount, currency, receipt=receipt)
        except httpx.HTTPError as e:
            raise PaymentInitiationError() from e

        return RemotePaymentOrder(
            gateway_order_id=data["id"],
            amount=data["amount"],
            currency=data.get("currency", currency),
            receipt=data.get("receipt"),
        )

    async def verify_signature(self, gateway_order_id: str, payment_id: str, signature: str) -> bool:
        try:
            data = await self.client.verify_payment(gateway_order_id, payment_id, signature)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 400:
                return False
            raise
        return bool(data.get("verified"))

    async def close(self) -> None:
        await self.client.close()
