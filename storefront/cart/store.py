"""
Cart Store

Owns the shopper's in-session cart. State is an immutable tuple of
``CartLine``; every mutation computes the next tuple from the current one and
publishes it wholesale, then mirrors it to local durable storage.
"""

import json
import logging
import math
from typing import Callable, Optional, Union

from pydantic import ValidationError

from ..exceptions import StorageError
from ..models.cart import CartLine, ProductRef
from ..models.product import Product
from ..notifications import Notifier
from ..pricing import cart_subtotal
from .storage import LocalStorage

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "cart"

CartListener = Callable[[tuple[CartLine, ...]], None]


def serialize_lines(lines: tuple[CartLine, ...]) -> str:
    """Serialize cart lines to the stored JSON array"""
    return json.dumps([line.model_dump(mode="json") for line in lines])


def deserialize_lines(raw: str) -> tuple[CartLine, ...]:
    """Parse the stored JSON array back into cart lines.

    Raises ValueError if the payload is not a list of valid lines.
    """
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("Stored cart is not a list")

    lines: list[CartLine] = []
    seen: dict[str, int] = {}
    for entry in data:
        try:
            line = CartLine.model_validate(entry)
        except ValidationError as e:
            raise ValueError(f"Invalid cart line: {e}") from e
        # Older writers may have stored duplicates; fold them into one line
        if line.product_id in seen:
            index = seen[line.product_id]
            lines[index] = lines[index].model_copy(
                update={"quantity": lines[index].quantity + line.quantity}
            )
        else:
            seen[line.product_id] = len(lines)
            lines.append(line)
    return tuple(lines)


class CartStore:
    """
    Single source of truth for the session's cart.

    Usage:
        store = CartStore(storage=FileStorage("local_storage.json"))
        store.add_item(product, quantity=2)
        store.total       # recomputed on every read
        store.item_count
    """

    def __init__(
        self,
        storage: LocalStorage,
        notifier: Optional[Notifier] = None,
        storage_key: str = CART_STORAGE_KEY,
    ):
        self.storage = storage
        self.notifier = notifier or Notifier()
        self.storage_key = storage_key
        self._lines: tuple[CartLine, ...] = ()
        self._is_open = False
        self._listeners: list[CartListener] = []
        self._lines = self._load()

    # ==================== Reads ====================

    @property
    def items(self) -> tuple[CartLine, ...]:
        return self._lines

    @property
    def total(self) -> float:
        return round(cart_subtotal(self._lines), 2)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def is_open(self) -> bool:
        return self._is_open

    def get_line(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self._lines if line.product_id == product_id), None)

    def snapshot(self) -> tuple[CartLine, ...]:
        """Current lines; safe to hold across awaits since lines are immutable"""
        return self._lines

    # ==================== Mutations ====================

    def add_item(self, product: Union[Product, ProductRef], quantity: int = 1) -> None:
        """Add a product, or increase its quantity if already in the cart"""
        if quantity < 1:
            logger.warning(f"add_item rejected non-positive quantity {quantity} for {product.id}")
            self.notifier.error("Cart Error", "Quantity must be at least 1.")
            return

        ref = ProductRef.from_product(product)
        current = self._lines
        existing = next((line for line in current if line.product_id == ref.id), None)

        if existing:
            next_lines = tuple(
                CartLine(product=ref, quantity=line.quantity + quantity)
                if line.product_id == ref.id else line
                for line in current
            )
        else:
            next_lines = current + (CartLine(product=ref, quantity=quantity),)

        self._publish(next_lines)
        self.notifier.notify("Item Added", f"{ref.name} added to cart.")

    def remove_item(self, product_id: str) -> None:
        """Remove a product's line; absent ids are ignored"""
        current = self._lines
        next_lines = tuple(line for line in current if line.product_id != product_id)
        if len(next_lines) == len(current):
            return

        self._publish(next_lines)
        self.notifier.notify("Item Removed", "Item removed from cart.")

    def update_quantity(self, product_id: str, quantity: Union[int, float]) -> None:
        """Set a line's quantity; zero or less removes the line"""
        if isinstance(quantity, bool) or not isinstance(quantity, (int, float)) or not math.isfinite(quantity):
            logger.warning(f"update_quantity rejected {quantity!r} for {product_id}")
            self.notifier.error("Cart Error", "Quantity must be a number.")
            return

        if quantity <= 0:
            self.remove_item(product_id)
            return

        new_quantity = max(1, int(quantity))
        current = self._lines
        if not any(line.product_id == product_id for line in current):
            return

        next_lines = tuple(
            line.model_copy(update={"quantity": new_quantity})
            if line.product_id == product_id else line
            for line in current
        )
        self._publish(next_lines)

    def clear_cart(self) -> None:
        """Empty the cart; calling it on an empty cart is harmless"""
        was_empty = not self._lines
        self._lines = ()
        try:
            self.storage.remove_item(self.storage_key)
        except (StorageError, OSError) as e:
            self._report_storage_error("clear", e)
        self._emit()
        if not was_empty:
            self.notifier.notify("Cart Cleared", "Your cart has been cleared.")

    def set_visibility(self, open: bool) -> None:
        self._is_open = bool(open)

    # ==================== Subscriptions ====================

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call ``listener`` with the new lines after every change"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ==================== Persistence ====================

    def _load(self) -> tuple[CartLine, ...]:
        try:
            raw = self.storage.get_item(self.storage_key)
        except (StorageError, OSError) as e:
            self._report_storage_error("load", e)
            return ()

        if not raw:
            return ()

        try:
            lines = deserialize_lines(raw)
        except ValueError as e:
            logger.error(f"Discarding unreadable stored cart: {e}")
            self.notifier.error("Cart Error", "Failed to load cart from local storage.")
            return ()

        logger.debug(f"Rehydrated cart with {len(lines)} line(s)")
        return lines

    def _publish(self, next_lines: tuple[CartLine, ...]) -> None:
        self._lines = next_lines
        try:
            self.storage.set_item(self.storage_key, serialize_lines(next_lines))
        except (StorageError, OSError) as e:
            # In-memory state stays authoritative
            self._report_storage_error("save", e)
        self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._lines)
            except Exception:
                logger.exception("Cart listener failed")

    def _report_storage_error(self, operation: str, error: Exception) -> None:
        logger.error(f"Cart storage {operation} failed: {error}")
        self.notifier.error("Cart Error", f"Failed to {operation} cart in local storage.")
