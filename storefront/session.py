"""Shopper session wiring"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union

from .cart.storage import FileStorage, LocalStorage
from .cart.store import CartStore
from .checkout.coordinator import CheckoutCoordinator, CheckoutOutcome
from .core.config import Settings, settings as default_settings
from .database.documents import DocumentStore
from .exceptions import AuthenticationRequired
from .models.checkout import ShippingAddress
from .models.user import Identity
from .notifications import Notifier
from .orders.query import OrderQuery, OrderView
from .payments.gateway import PaymentCollector, PaymentGateway
from .pricing import PricingPolicy


@dataclass
class ShopperSession:
    """
    Everything one shopper's UI talks to: the cart, the checkout
    coordinator, order history and the notification channel.
    """
    cart: CartStore
    coordinator: CheckoutCoordinator
    orders: OrderQuery
    notifier: Notifier
    identity: Optional[Identity] = None
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        store: DocumentStore,
        gateway: PaymentGateway,
        collector: PaymentCollector,
        identity: Optional[Identity] = None,
        storage: Optional[LocalStorage] = None,
        settings: Optional[Settings] = None,
    ) -> "ShopperSession":
        """Wire a session; the cart persists to the configured file unless ``storage`` is given"""
        settings = settings or default_settings
        notifier = Notifier()
        cart = CartStore(storage or FileStorage(settings.cart_storage_path), notifier=notifier)
        coordinator = CheckoutCoordinator(
            cart=cart,
            store=store,
            gateway=gateway,
            collector=collector,
            pricing=PricingPolicy.from_settings(settings),
            notifier=notifier,
            currency=settings.currency,
        )
        return cls(
            cart=cart,
            coordinator=coordinator,
            orders=OrderQuery(store),
            notifier=notifier,
            identity=identity,
        )

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    def sign_in(self, identity: Identity) -> None:
        self.identity = identity

    def sign_out(self) -> None:
        self.identity = None

    async def checkout(self, address: Union[ShippingAddress, dict]) -> CheckoutOutcome:
        """Submit the current cart for the signed-in shopper"""
        return await self.coordinator.submit(address, self.identity)

    async def order_history(self) -> list[OrderView]:
        """The signed-in shopper's orders, newest first"""
        if self.identity is None:
            raise AuthenticationRequired(next_path="/orders")
        return await self.orders.list_for_user(self.identity.user_id)
