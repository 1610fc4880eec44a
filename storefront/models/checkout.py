"""Checkout and order models for the storefront"""

from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import ClassVar, Optional
from datetime import datetime
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def _missing_(cls, value):
        # Older documents carry "confirmed" and mixed case values
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "confirmed":
                return cls.PAID
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    def can_advance_to(self, requested: "OrderStatus") -> bool:
        """Whether moving from this status to ``requested`` keeps status monotonic"""
        if requested == self:
            return True
        if self.is_terminal:
            return False
        if requested == OrderStatus.CANCELLED:
            return self in (OrderStatus.PENDING, OrderStatus.PAID)
        return STATUS_SEQUENCE.index(requested) > STATUS_SEQUENCE.index(self)


STATUS_SEQUENCE = (
    OrderStatus.PENDING,
    OrderStatus.PAID,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)


class ShippingAddress(BaseModel):
    """Shipping address for an order.

    Fields default to empty strings so that missing values can be reported
    together by the checkout validator instead of one at a time.
    """
    line1: str = ""
    line2: Optional[str] = None
    city: str = ""
    state: str = ""
    postal_code: str = Field(default="", validation_alias=AliasChoices("postal_code", "postalCode"))
    country: str = "India"

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("line1", "city", "state", "postal_code", "country")

    def trimmed(self) -> "ShippingAddress":
        line2 = (self.line2 or "").strip()
        return ShippingAddress(
            line1=self.line1.strip(),
            line2=line2 or None,
            city=self.city.strip(),
            state=self.state.strip(),
            postal_code=self.postal_code.strip(),
            country=self.country.strip(),
        )

    def missing_fields(self) -> list[str]:
        return [
            name for name in self.REQUIRED_FIELDS
            if not getattr(self, name).strip()
        ]


class OrderItem(BaseModel):
    """Denormalized line of a placed order"""
    product_id: str
    name: str
    price: float
    quantity: int = Field(ge=1)
    image: str = ""

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)


class OrderTotals(BaseModel):
    """Snapshot totals computed once at submission"""
    subtotal: float
    shipping: float
    tax: float
    total: float


class Order(BaseModel):
    """Order document; status "pending" until payment is verified"""
    id: str
    user_id: str
    user_email: str = ""
    items: list[OrderItem]
    subtotal: float
    shipping: float = 0.0
    tax: float = 0.0
    total: float
    currency: str = "INR"
    shipping_address: ShippingAddress
    status: OrderStatus = OrderStatus.PENDING
    payment_id: Optional[str] = None
    gateway_order_id: Optional[str] = None
    gateway_amount: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value):
        return OrderStatus(value)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


class OrderCreate(BaseModel):
    """Request to create an order"""
    user_id: Optional[str] = None
    items: list[OrderItem] = Field(min_length=1)
    shipping_address: ShippingAddress
    currency: str = "INR"


class OrderStatusUpdate(BaseModel):
    """Request to advance order status"""
    status: OrderStatus

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value):
        return OrderStatus(value)
