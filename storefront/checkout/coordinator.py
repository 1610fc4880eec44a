"""
Checkout Coordinator

Drives one checkout attempt from the cart to a payment-confirmed order:

    idle -> validating -> persisting_pending -> awaiting_payment
         -> verifying_payment -> finalizing -> completed

Every failure returns to idle. The pending order written before payment is
never deleted, and the cart is only cleared once the payment signature has
been verified and the order marked paid.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from ..cart.store import CartStore
from ..database.documents import DocumentStore
from ..database.orders import OrderDatabase
from ..database.users import UserDatabase
from ..exceptions import (
    AuthenticationRequired,
    CheckoutValidationError,
    EmptyCartError,
    PaymentError,
    PaymentInitiationError,
    PaymentVerificationError,
    PersistenceError,
    StorefrontError,
)
from ..models.cart import CartLine
from ..models.checkout import OrderTotals, ShippingAddress
from ..models.user import Identity
from ..notifications import Notifier
from ..payments.gateway import PaymentCollector, PaymentGateway
from ..pricing import PricingPolicy, amounts_match, cart_subtotal
from .validation import build_order_items, items_subtotal, validate_address

logger = logging.getLogger(__name__)

ORDERS_PATH = "/orders"
CHECKOUT_PATH = "/checkout"


class CheckoutState(str, Enum):
    """Current state of a checkout attempt"""
    IDLE = "idle"
    VALIDATING = "validating"
    PERSISTING_PENDING = "persisting_pending"
    AWAITING_PAYMENT = "awaiting_payment"
    VERIFYING_PAYMENT = "verifying_payment"
    FINALIZING = "finalizing"
    COMPLETED = "completed"


class CheckoutResult(str, Enum):
    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"
    FAILED = "failed"
    LOGIN_REQUIRED = "login_required"


@dataclass
class CheckoutOutcome:
    """What happened to one submission"""
    result: CheckoutResult
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    totals: Optional[OrderTotals] = None
    error: Optional[StorefrontError] = None
    redirect_to: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.result == CheckoutResult.SUCCEEDED

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None


class CheckoutCoordinator:
    """
    Orchestrates checkout for one shopper session.

    Usage:
        coordinator = CheckoutCoordinator(cart, store, gateway, collector)
        outcome = await coordinator.submit(address, identity)
        if outcome.succeeded:
            navigate(outcome.redirect_to)
    """

    def __init__(
        self,
        cart: CartStore,
        store: DocumentStore,
        gateway: PaymentGateway,
        collector: PaymentCollector,
        pricing: Optional[PricingPolicy] = None,
        notifier: Optional[Notifier] = None,
        currency: str = "INR",
    ):
        self.cart = cart
        self.gateway = gateway
        self.collector = collector
        self.pricing = pricing or PricingPolicy()
        self.notifier = notifier or cart.notifier
        self.currency = currency
        self.orders = OrderDatabase(store)
        self.users = UserDatabase(store)
        self.state = CheckoutState.IDLE
        self._listeners: list[Callable[[CheckoutState], None]] = []

    # ==================== Reads ====================

    @property
    def in_progress(self) -> bool:
        return self.state not in (CheckoutState.IDLE, CheckoutState.COMPLETED)

    def quote(self, lines: Optional[tuple[CartLine, ...]] = None) -> OrderTotals:
        """Totals for display; the same computation is charged at submission"""
        lines = self.cart.items if lines is None else lines
        return self.pricing.totals(cart_subtotal(lines))

    async def load_saved_address(self, identity: Optional[Identity]) -> Optional[ShippingAddress]:
        """Address last used by this user, for pre-filling the form"""
        if identity is None:
            return None
        try:
            return await self.users.get_shipping_address(identity.user_id)
        except Exception as e:
            logger.error(f"Failed to load saved address for {identity.user_id}: {e}")
            return None

    def subscribe(self, listener: Callable[[CheckoutState], None]) -> Callable[[], None]:
        """Call ``listener`` on every state change"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ==================== Checkout ====================

    async def submit(
        self,
        address: Union[ShippingAddress, dict],
        identity: Optional[Identity],
    ) -> CheckoutOutcome:
        """Run one checkout attempt; never raises for expected failures"""
        if self.in_progress:
            # Leave the running attempt's state alone
            error = StorefrontError("Checkout is already in progress")
            logger.warning(f"Checkout submit ignored while {self.state.value}")
            self.notifier.error(error.title, error.message)
            return CheckoutOutcome(result=CheckoutResult.FAILED, error=error)

        if identity is None:
            error = AuthenticationRequired(next_path=CHECKOUT_PATH)
            outcome = self._fail("submit", error, result=CheckoutResult.LOGIN_REQUIRED)
            outcome.redirect_to = error.redirect_to
            return outcome

        try:
            return await self._attempt(address, identity)
        except asyncio.CancelledError:
            logger.info(f"Checkout cancelled while {self.state.value}")
            self._enter(CheckoutState.IDLE)
            raise
        except Exception as e:
            return self._fail(
                "submit",
                StorefrontError("Something went wrong during checkout. Please try again."),
                cause=e,
            )

    async def _attempt(self, address: Union[ShippingAddress, dict], identity: Identity) -> CheckoutOutcome:
        # Validating: no network calls on this path
        self._enter(CheckoutState.VALIDATING)
        try:
            clean_address = validate_address(address)
            lines = self.cart.snapshot()
            if not lines:
                raise EmptyCartError()
        except CheckoutValidationError as e:
            return self._fail("validate", e)

        # Persisting the pending order from the submission-time snapshot
        self._enter(CheckoutState.PERSISTING_PENDING)
        items = build_order_items(lines)
        totals = self.pricing.totals(items_subtotal(items))
        order = self.orders.build_order(
            user_id=identity.user_id,
            user_email=identity.email,
            items=items,
            totals=totals,
            shipping_address=clean_address,
            currency=self.currency,
        )
        try:
            await self.users.save_shipping_address(identity.user_id, clean_address)
            await self.orders.save_order(order)
        except Exception as e:
            return self._fail(
                "persist_pending_order",
                PersistenceError("There was an error placing your order. Please try again."),
                cause=e,
                totals=totals,
            )
        logger.info(f"Pending order {order.id} saved for {identity.user_id}: {totals.total}")

        # Awaiting payment
        self._enter(CheckoutState.AWAITING_PAYMENT)
        try:
            remote = await self.gateway.create_remote_payment_order(
                totals.total, self.currency, receipt=order.id
            )
        except Exception as e:
            error = e if isinstance(e, PaymentInitiationError) else PaymentInitiationError()
            return self._fail("create_payment_order", error, cause=e, order_id=order.id, totals=totals)

        if not amounts_match(remote.amount, totals.total):
            logger.error(f"Gateway order {remote.gateway_order_id} is for {remote.amount}, expected {totals.total}")
            return self._fail(
                "create_payment_order", PaymentInitiationError(), order_id=order.id, totals=totals
            )

        try:
            await self.orders.attach_gateway_order(order.id, remote.gateway_order_id, amount=remote.amount)
        except Exception as e:
            return self._fail(
                "attach_payment_order",
                PersistenceError("There was an error placing your order. Please try again."),
                cause=e,
                order_id=order.id,
                totals=totals,
            )

        try:
            callback = await self.collector.collect(
                remote,
                prefill={"email": identity.email, "order_id": order.id},
            )
        except Exception as e:
            return self._fail(
                "collect_payment",
                PaymentError("The payment window could not be opened. Please try again."),
                cause=e,
                order_id=order.id,
                totals=totals,
            )

        if callback is None:
            # Dismissed: the pending order stays, payment may still settle
            logger.info(f"Payment dismissed for order {order.id}; leaving it pending")
            self._enter(CheckoutState.IDLE)
            self.notifier.notify("Payment Cancelled", "You can complete your payment at any time.")
            return CheckoutOutcome(
                result=CheckoutResult.CANCELLED,
                order_id=order.id,
                totals=totals,
            )

        # Verifying payment
        self._enter(CheckoutState.VERIFYING_PAYMENT)
        try:
            verified = (
                callback.gateway_order_id == remote.gateway_order_id
                and await self.gateway.verify_signature(
                    callback.gateway_order_id, callback.payment_id, callback.signature
                )
            )
        except Exception as e:
            return self._fail(
                "verify_payment",
                PaymentVerificationError(),
                cause=e,
                order_id=order.id,
                totals=totals,
            )

        if not verified:
            # Funds may be captured; keep the cart until support reconciles
            return self._fail(
                "verify_payment",
                PaymentVerificationError(),
                order_id=order.id,
                totals=totals,
            )

        # Finalizing
        self._enter(CheckoutState.FINALIZING)
        try:
            await self.orders.mark_paid(order.id, callback.payment_id)
        except Exception as e:
            return self._fail(
                "finalize_order",
                PersistenceError(
                    "Payment received but the order could not be confirmed. Please contact support."
                ),
                cause=e,
                order_id=order.id,
                totals=totals,
            )

        self.cart.clear_cart()
        self._enter(CheckoutState.COMPLETED)
        self.notifier.notify("Payment Successful!", "Your order has been placed successfully.")
        logger.info(f"Order {order.id} paid with {callback.payment_id}")

        return CheckoutOutcome(
            result=CheckoutResult.SUCCEEDED,
            order_id=order.id,
            payment_id=callback.payment_id,
            totals=totals,
            redirect_to=ORDERS_PATH,
        )

    # ==================== Internals ====================

    def _enter(self, state: CheckoutState) -> None:
        self.state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception(f"Checkout listener failed on {state.value}")

    def _fail(
        self,
        operation: str,
        error: StorefrontError,
        cause: Optional[Exception] = None,
        result: CheckoutResult = CheckoutResult.FAILED,
        order_id: Optional[str] = None,
        totals: Optional[OrderTotals] = None,
    ) -> CheckoutOutcome:
        if cause is not None and cause is not error:
            logger.error(f"Checkout {operation} failed: {error.message} ({cause!r})")
        else:
            logger.error(f"Checkout {operation} failed: {error.message}")

        self.notifier.error(error.title, error.message)
        self._enter(CheckoutState.IDLE)
        return CheckoutOutcome(result=result, order_id=order_id, totals=totals, error=error)
