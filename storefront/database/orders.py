"""Order storage for the storefront"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from ..exceptions import InvalidStatusTransition, PaymentAmountMismatch
from ..models.checkout import Order, OrderItem, OrderStatus, OrderTotals, ShippingAddress
from ..pricing import amounts_match
from .documents import DocumentStore, document_store

COLLECTION = "orders"


def new_order_id() -> str:
    return uuid.uuid4().hex


class OrderDatabase:
    """Order documents backed by the document store"""

    def __init__(self, store: DocumentStore):
        self.store = store

    def build_order(
        self,
        user_id: str,
        items: list[OrderItem],
        totals: OrderTotals,
        shipping_address: ShippingAddress,
        user_email: str = "",
        currency: str = "INR",
        order_id: Optional[str] = None,
    ) -> Order:
        """Build a pending order snapshot without persisting it"""
        now = datetime.now(timezone.utc)
        return Order(
            id=order_id or new_order_id(),
            user_id=user_id,
            user_email=user_email,
            items=items,
            subtotal=totals.subtotal,
            shipping=totals.shipping,
            tax=totals.tax,
            total=totals.total,
            currency=currency,
            shipping_address=shipping_address,
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    async def save_order(self, order: Order) -> Order:
        await self.store.set(COLLECTION, order.id, order.model_dump())
        return order

    async def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID"""
        doc = await self.store.get(COLLECTION, order_id)
        return Order.model_validate(doc) if doc else None

    async def list_for_user(self, user_id: str) -> list[Order]:
        """Orders owned by a user, newest first"""
        docs = await self.store.query(
            COLLECTION,
            [("user_id", "==", user_id)],
            order_by="created_at",
            descending=True,
        )
        return [Order.model_validate(d) for d in docs]

    async def list_orders(self, limit: Optional[int] = None) -> list[Order]:
        """List recent orders"""
        docs = await self.store.query(COLLECTION, order_by="created_at", descending=True, limit=limit)
        return [Order.model_validate(d) for d in docs]

    async def find_by_gateway_order(self, gateway_order_id: str) -> Optional[Order]:
        docs = await self.store.query(
            COLLECTION, [("gateway_order_id", "==", gateway_order_id)], limit=1
        )
        return Order.model_validate(docs[0]) if docs else None

    async def attach_gateway_order(
        self, order_id: str, gateway_order_id: str, amount: Optional[float] = None
    ) -> None:
        """Link the gateway order created for this order and the amount it charges"""
        changes: dict = {"gateway_order_id": gateway_order_id, "updated_at": datetime.now(timezone.utc)}
        if amount is not None:
            changes["gateway_amount"] = amount
        await self.store.set(COLLECTION, order_id, changes, merge=True)

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        payment_id: Optional[str] = None,
    ) -> Optional[Order]:
        """Advance order status; regressions raise InvalidStatusTransition"""
        order = await self.get_order(order_id)
        if not order:
            return None

        if not order.status.can_advance_to(status):
            raise InvalidStatusTransition(order.status.value, status.value)

        changes: dict = {"status": status, "updated_at": datetime.now(timezone.utc)}
        if payment_id:
            changes["payment_id"] = payment_id
        await self.store.set(COLLECTION, order_id, changes, merge=True)
        return await self.get_order(order_id)

    async def mark_paid(self, order_id: str, payment_id: str) -> Optional[Order]:
        """Mark an order paid; refused when its gateway order charges a different amount"""
        order = await self.get_order(order_id)
        if order and order.gateway_amount is not None and not amounts_match(order.gateway_amount, order.total):
            raise PaymentAmountMismatch(order.gateway_amount, order.total)
        return await self.update_status(order_id, OrderStatus.PAID, payment_id=payment_id)


# Singleton instance
order_db = OrderDatabase(document_store)
