"""Checkout input validation and order line snapshots"""

from typing import Any, Iterable, Union

from pydantic import ValidationError

from ..exceptions import AddressValidationError
from ..models.cart import CartLine
from ..models.checkout import OrderItem, ShippingAddress
from ..pricing import coerce_price


def _form_value(key: str, value: Any) -> Any:
    if value is None:
        return None if key == "line2" else ""
    # Numeric form input, e.g. a postal code typed into a number field
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def validate_address(address: Union[ShippingAddress, dict]) -> ShippingAddress:
    """Return the trimmed address, or raise listing every missing or malformed field"""
    if isinstance(address, dict):
        try:
            address = ShippingAddress.model_validate(
                {k: _form_value(k, v) for k, v in address.items()}
            )
        except ValidationError as e:
            invalid = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise AddressValidationError([], invalid_fields=invalid) from e

    missing = address.missing_fields()
    if missing:
        raise AddressValidationError(missing)
    return address.trimmed()


def build_order_items(lines: Iterable[CartLine]) -> list[OrderItem]:
    """Snapshot cart lines into order items with coerced prices"""
    return [
        OrderItem(
            product_id=line.product.id,
            name=line.product.name,
            price=coerce_price(line.product.price),
            quantity=line.quantity,
            image=line.product.image or "",
        )
        for line in lines
    ]


def items_subtotal(items: Iterable[OrderItem]) -> float:
    return sum(item.price * item.quantity for item in items)
