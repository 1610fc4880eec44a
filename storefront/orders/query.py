"""Order history read path"""

import logging
from dataclasses import dataclass
from typing import Union

from ..database.documents import DocumentStore
from ..database.orders import OrderDatabase
from ..exceptions import PersistenceError
from ..models.checkout import Order, OrderStatus
from ..pricing import format_currency

logger = logging.getLogger(__name__)

# Milestones shown on the order timeline and the statuses that reach each one
MILESTONES: tuple[tuple[str, frozenset], ...] = (
    ("Order Confirmed", frozenset({OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.DELIVERED})),
    ("Order Shipped", frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})),
    ("Order Delivered", frozenset({OrderStatus.DELIVERED})),
)


@dataclass(frozen=True)
class StatusStep:
    label: str
    reached: bool


def status_progression(status: Union[OrderStatus, str]) -> list[StatusStep]:
    """Timeline steps derived purely from the current status"""
    status = OrderStatus(status)
    return [StatusStep(label=label, reached=status in reached_by) for label, reached_by in MILESTONES]


def status_label(status: Union[OrderStatus, str]) -> str:
    return OrderStatus(status).label


@dataclass(frozen=True)
class OrderView:
    """Display-ready order"""
    order: Order

    @property
    def number(self) -> str:
        return self.order.id[:8].upper()

    @property
    def status_label(self) -> str:
        return self.order.status.label

    @property
    def formatted_total(self) -> str:
        return format_currency(self.order.total)

    @property
    def item_count(self) -> int:
        return self.order.item_count

    @property
    def progression(self) -> list[StatusStep]:
        return status_progression(self.order.status)


class OrderQuery:
    """Fetches a user's orders for read-only display"""

    def __init__(self, store: DocumentStore):
        self.orders = OrderDatabase(store)

    async def list_for_user(self, user_id: str) -> list[OrderView]:
        """All orders owned by ``user_id``, newest first"""
        try:
            orders = await self.orders.list_for_user(user_id)
        except Exception as e:
            logger.error(f"Failed to fetch orders for {user_id}: {e}")
            raise PersistenceError("Failed to load orders") from e
        return [OrderView(order=order) for order in orders]
