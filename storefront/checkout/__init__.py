# Checkout coordination

from .coordinator import (
    CheckoutCoordinator,
    CheckoutOutcome,
    CheckoutResult,
    CheckoutState,
)
from .validation import validate_address, build_order_items

__all__ = [
    "CheckoutCoordinator",
    "CheckoutOutcome",
    "CheckoutResult",
    "CheckoutState",
    "validate_address",
    "build_order_items",
]
