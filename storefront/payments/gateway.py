"""Payment gateway and collection interfaces"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models.payment import PaymentCallback, RemotePaymentOrder


class PaymentGateway(ABC):
    """Creates remote payment orders and verifies payment callbacks"""

    @abstractmethod
    async def create_remote_payment_order(
        self,
        amount: float,
        currency: str = "INR",
        receipt: Optional[str] = None,
    ) -> RemotePaymentOrder:
        """Create a payment order for ``amount`` in major currency units"""

    @abstractmethod
    async def verify_signature(self, gateway_order_id: str, payment_id: str, signature: str) -> bool:
        """Check a payment callback signature"""

    async def close(self) -> None:
        """Release any held resources"""


class PaymentCollector(ABC):
    """
    The payment collection UI.

    ``collect`` opens the UI for a remote order and resolves with the
    gateway's callback values, or None if the shopper dismissed it.
    """

    @abstractmethod
    async def collect(
        self,
        order: RemotePaymentOrder,
        prefill: Optional[dict] = None,
    ) -> Optional[PaymentCallback]:
        ...
