"""
Pricing helpers

Currency display, lenient price coercion and the order total computation
shared by the cart display and the amount charged at checkout.
"""

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable

from .models.cart import CartLine
from .models.checkout import OrderTotals

CURRENCY_SYMBOL = "₹"
CURRENCY_CODE = "INR"


def coerce_price(value: Any) -> float:
    """Return the numeric value of a stored price, or 0.0 if it is not a number"""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _group_digits(digits: str) -> str:
    # en-IN grouping: last three digits, then pairs (12,34,567)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount: Any) -> str:
    """Format an amount as Indian rupees, e.g. ``₹12,34,567.50``"""
    value = Decimal(repr(coerce_price(amount))).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )
    sign = "-" if value < 0 else ""
    integer_part, fraction = f"{abs(value):.2f}".split(".")
    return f"{sign}{CURRENCY_SYMBOL}{_group_digits(integer_part)}.{fraction}"


# Alias kept for catalog code that formats raw product prices
format_price = format_currency


def amounts_match(charged: Any, expected: Any) -> bool:
    """Whether two amounts are equal to the paisa"""
    return round(coerce_price(charged) * 100) == round(coerce_price(expected) * 100)


def cart_subtotal(lines: Iterable[CartLine]) -> float:
    """Sum of unit price x quantity over cart lines"""
    return sum(coerce_price(line.product.price) * line.quantity for line in lines)


@dataclass(frozen=True)
class PricingPolicy:
    """Shipping and tax rules applied on top of a cart subtotal"""

    free_shipping_threshold: float = 500.0
    shipping_fee: float = 0.0
    tax_rate: float = 0.18

    @classmethod
    def from_settings(cls, settings) -> "PricingPolicy":
        return cls(
            free_shipping_threshold=settings.free_shipping_threshold,
            shipping_fee=settings.shipping_fee,
            tax_rate=settings.tax_rate,
        )

    def shipping_for(self, subtotal: float) -> float:
        if subtotal > self.free_shipping_threshold:
            return 0.0
        return round(self.shipping_fee, 2)

    def tax_for(self, subtotal: float) -> float:
        return round(subtotal * self.tax_rate, 2)

    def totals(self, subtotal: float) -> OrderTotals:
        """Compute the snapshot totals for a subtotal"""
        subtotal = round(subtotal, 2)
        shipping = self.shipping_for(subtotal)
        tax = self.tax_for(subtotal)
        return OrderTotals(
            subtotal=subtotal,
            shipping=shipping,
            tax=tax,
            total=round(subtotal + shipping + tax, 2),
        )
