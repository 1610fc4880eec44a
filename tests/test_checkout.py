"""Tests for the checkout coordinator."""

import pytest

from storefront.checkout.coordinator import CheckoutCoordinator, CheckoutResult, CheckoutState
from storefront.checkout.validation import build_order_items, validate_address
from storefront.database.documents import MemoryDocumentStore
from storefront.database.orders import OrderDatabase
from storefront.database.users import UserDatabase
from storefront.exceptions import AddressValidationError, PaymentVerificationError
from storefront.models.cart import CartLine
from storefront.models.checkout import OrderStatus
from storefront.pricing import PricingPolicy

from .conftest import FakeCollector, FakeGateway, product_ref, valid_address


class FailingDocumentStore(MemoryDocumentStore):
    """Fails writes to one collection"""

    def __init__(self, collection: str):
        super().__init__()
        self.failing = collection

    async def set(self, collection, doc_id, data, merge=False):
        if collection == self.failing:
            raise ConnectionError("document store unavailable")
        await super().set(collection, doc_id, data, merge=merge)


class FailOnMarkPaid(MemoryDocumentStore):
    async def set(self, collection, doc_id, data, merge=False):
        if collection == "orders" and data.get("status") == OrderStatus.PAID:
            raise ConnectionError("write rejected")
        await super().set(collection, doc_id, data, merge=merge)


def coordinator_for(cart, store, gateway, collector, notifier=None):
    return CheckoutCoordinator(
        cart=cart,
        store=store,
        gateway=gateway,
        collector=collector,
        pricing=PricingPolicy(),
        notifier=notifier,
    )


class TestValidateAddress:
    def test_trims_fields(self):
        address = validate_address(valid_address(city="  Pune  ", line1=" 1 Main St "))
        assert address.city == "Pune"
        assert address.line1 == "1 Main St"

    def test_missing_fields_reported_together(self):
        with pytest.raises(AddressValidationError) as exc_info:
            validate_address(valid_address(city="", postal_code="   "))

        assert exc_info.value.missing_fields == ["city", "postal_code"]
        assert "city" in exc_info.value.message
        assert "postal_code" in exc_info.value.message

    def test_line2_is_optional(self):
        assert validate_address(valid_address(line2=None)).line2 in (None, "")

    def test_country_defaults_to_india(self):
        address = valid_address()
        del address["country"]
        assert validate_address(address).country == "India"

    def test_numeric_postal_code_is_accepted(self):
        assert validate_address(valid_address(postal_code=560001)).postal_code == "560001"

    def test_camel_case_postal_code(self):
        address = valid_address()
        address["postalCode"] = address.pop("postal_code")
        assert validate_address(address).postal_code == "560001"

    def test_malformed_fields_are_named(self):
        with pytest.raises(AddressValidationError) as exc_info:
            validate_address(valid_address(city=["Pune"], state={"name": "MH"}))

        assert exc_info.value.invalid_fields == ["city", "state"]
        assert "city" in exc_info.value.message


class TestBuildOrderItems:
    def test_coerces_prices(self):
        items = build_order_items([
            CartLine(product=product_ref(id="a", price="49.50"), quantity=2),
            CartLine(product=product_ref(id="b", price="oops"), quantity=1),
        ])
        assert items[0].price == 49.5
        assert items[1].price == 0.0
        assert items[0].image == "/uploads/a.jpg"


class TestSubmitValidation:
    async def test_requires_identity(self, coordinator, cart, gateway):
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(), None)

        assert outcome.result == CheckoutResult.LOGIN_REQUIRED
        assert outcome.redirect_to == "/login?next=/checkout"
        assert gateway.calls == []
        assert coordinator.state == CheckoutState.IDLE

    async def test_missing_fields_fail_before_any_network_call(
        self, coordinator, cart, gateway, store, identity, notifier
    ):
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(city="", postal_code=""), identity)

        assert outcome.result == CheckoutResult.FAILED
        assert isinstance(outcome.error, AddressValidationError)
        assert outcome.error.missing_fields == ["city", "postal_code"]
        assert gateway.calls == []
        assert await store.query("orders") == []

        errors = [n for n in notifier.history if n.is_error]
        assert len(errors) == 1
        assert "city" in errors[0].description and "postal_code" in errors[0].description
        assert coordinator.state == CheckoutState.IDLE

    async def test_malformed_address_returns_to_idle(self, coordinator, cart, gateway, identity):
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(city={"name": "Pune"}), identity)

        assert outcome.result == CheckoutResult.FAILED
        assert outcome.error.invalid_fields == ["city"]
        assert gateway.calls == []
        assert coordinator.state == CheckoutState.IDLE

        retry = await coordinator.submit(valid_address(postal_code=560001), identity)
        assert retry.succeeded

    async def test_empty_cart(self, coordinator, gateway, store, identity):
        outcome = await coordinator.submit(valid_address(), identity)

        assert outcome.result == CheckoutResult.FAILED
        assert outcome.message == "Your cart is empty"
        assert gateway.calls == []
        assert await store.query("orders") == []


class TestSubmitHappyPath:
    async def test_amount_sent_to_gateway(self, coordinator, cart, gateway, identity):
        cart.add_item(product_ref(price=100.0))
        outcome = await coordinator.submit(valid_address(), identity)

        create = [c for c in gateway.calls if c["method"] == "create"]
        assert len(create) == 1
        assert create[0]["amount"] == 118.0
        assert create[0]["currency"] == "INR"
        assert create[0]["receipt"] == outcome.order_id

    async def test_order_paid_and_cart_cleared(self, coordinator, cart, store, identity, notifier):
        cart.add_item(product_ref(price=100.0))
        outcome = await coordinator.submit(valid_address(), identity)

        assert outcome.succeeded
        assert outcome.redirect_to == "/orders"
        assert outcome.payment_id == "pay_123"
        assert cart.is_empty
        assert coordinator.state == CheckoutState.COMPLETED
        assert notifier.last.title == "Payment Successful!"

        order = await OrderDatabase(store).get_order(outcome.order_id)
        assert order.status == OrderStatus.PAID
        assert order.payment_id == "pay_123"
        assert order.total == 118.0
        assert order.user_id == identity.user_id
        assert order.gateway_order_id is not None

    async def test_order_snapshot_matches_cart(self, coordinator, cart, store, identity):
        cart.add_item(product_ref(id="a", price=100.0), 2)
        cart.add_item(product_ref(id="b", price="50"), 1)
        outcome = await coordinator.submit(valid_address(), identity)

        order = await OrderDatabase(store).get_order(outcome.order_id)
        assert [(i.product_id, i.quantity, i.price) for i in order.items] == [
            ("a", 2, 100.0),
            ("b", 1, 50.0),
        ]
        assert order.subtotal == 250.0
        assert order.tax == 45.0
        assert order.total == 295.0

    async def test_address_saved_to_profile(self, coordinator, cart, store, identity):
        cart.add_item(product_ref())
        await coordinator.submit(valid_address(city=" Mumbai "), identity)

        saved = await UserDatabase(store).get_shipping_address(identity.user_id)
        assert saved.city == "Mumbai"
        assert (await coordinator.load_saved_address(identity)).city == "Mumbai"

    async def test_prefill_sent_to_collector(self, coordinator, cart, collector, identity):
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(), identity)

        assert collector.calls[0]["prefill"] == {"email": identity.email, "order_id": outcome.order_id}

    async def test_state_sequence(self, coordinator, cart, identity):
        states = []
        coordinator.subscribe(states.append)
        cart.add_item(product_ref())
        await coordinator.submit(valid_address(), identity)

        assert states == [
            CheckoutState.VALIDATING,
            CheckoutState.PERSISTING_PENDING,
            CheckoutState.AWAITING_PAYMENT,
            CheckoutState.VERIFYING_PAYMENT,
            CheckoutState.FINALIZING,
            CheckoutState.COMPLETED,
        ]

    async def test_quote_matches_charged_amount(self, coordinator, cart, gateway, identity):
        cart.add_item(product_ref(price=300.0), 2)
        quoted = coordinator.quote()
        await coordinator.submit(valid_address(), identity)

        assert quoted.shipping == 0.0
        assert gateway.calls[0]["amount"] == quoted.total


class TestSubmitFailures:
    async def test_signature_mismatch_keeps_order_pending_and_cart(
        self, cart, store, gateway, identity, notifier
    ):
        coordinator = coordinator_for(cart, store, gateway, FakeCollector(mode="forge"), notifier)
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(), identity)

        assert outcome.result == CheckoutResult.FAILED
        assert isinstance(outcome.error, PaymentVerificationError)
        assert not cart.is_empty
        assert coordinator.state == CheckoutState.IDLE
        assert notifier.last.title == "Payment Verification Failed"

        order = await OrderDatabase(store).get_order(outcome.order_id)
        assert order.status == OrderStatus.PENDING
        assert order.payment_id is None

    async def test_callback_for_other_gateway_order_is_rejected(self, cart, store, gateway, identity):
        class SwappedCollector(FakeCollector):
            async def collect(self, order, prefill=None):
                callback = await super().collect(order, prefill)
                other = order.model_copy(update={"gateway_order_id": "order_other"})
                signed = await super().collect(other, prefill)
                return callback.model_copy(
                    update={"gateway_order_id": "order_other", "signature": signed.signature}
                )

        coordinator = coordinator_for(cart, store, gateway, SwappedCollector())
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(), identity)

        assert outcome.result == CheckoutResult.FAILED
        assert not cart.is_empty
        order = await OrderDatabase(store).get_order(outcome.order_id)
        assert order.status == OrderStatus.PENDING

    async def test_dismissed_payment_keeps_pending_order(self, cart, store, gateway, identity, notifier):
        coordinator = coordinator_for(cart, store, gateway, FakeCollector(mode="dismiss"), notifier)
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(), identity)

        assert outcome.result == CheckoutResult.CANCELLED
        assert not cart.is_empty
        assert coordinator.state == CheckoutState.IDLE
        assert notifier.last.title == "Payment Cancelled"

        order = await OrderDatabase(store).get_order(outcome.order_id)
        assert order.status == OrderStatus.PENDING

    async def test_gateway_failure(self, coordinator, cart, gateway, store, identity):
        gateway.should_fail = True
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(), identity)

        assert outcome.result == CheckoutResult.FAILED
        assert outcome.message == "Unable to initiate payment. Please try again."
        assert not cart.is_empty
        order = await OrderDatabase(store).get_order(outcome.order_id)
        assert order.status == OrderStatus.PENDING

    async def test_pending_order_write_failure_skips_gateway(self, cart, gateway, collector, identity):
        coordinator = coordinator_for(cart, FailingDocumentStore("orders"), gateway, collector)
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(), identity)

        assert outcome.result == CheckoutResult.FAILED
        assert outcome.error.title == "Order Error"
        assert gateway.calls == []
        assert collector.calls == []
        assert coordinator.state == CheckoutState.IDLE

    async def test_finalize_failure_keeps_cart(self, cart, gateway, collector, identity):
        coordinator = coordinator_for(cart, FailOnMarkPaid(), gateway, collector)
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(), identity)

        assert outcome.result == CheckoutResult.FAILED
        assert not cart.is_empty

    async def test_retry_after_failure_creates_new_order(self, cart, store, gateway, identity):
        collector = FakeCollector(mode="dismiss")
        coordinator = coordinator_for(cart, store, gateway, collector)
        cart.add_item(product_ref())

        first = await coordinator.submit(valid_address(), identity)
        collector.mode = "pay"
        second = await coordinator.submit(valid_address(), identity)

        assert first.order_id != second.order_id
        assert second.succeeded
        orders = await OrderDatabase(store).list_for_user(identity.user_id)
        assert {o.status for o in orders} == {OrderStatus.PENDING, OrderStatus.PAID}

    async def test_submit_while_in_progress_is_rejected(self, coordinator, cart, identity):
        coordinator.state = CheckoutState.AWAITING_PAYMENT
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(), identity)

        assert outcome.result == CheckoutResult.FAILED
        assert coordinator.state == CheckoutState.AWAITING_PAYMENT

    async def test_unexpected_error_returns_to_idle(self, cart, store, gateway, collector, identity, notifier):
        class BrokenPricing(PricingPolicy):
            def totals(self, subtotal):
                raise ArithmeticError("bad rate")

        coordinator = CheckoutCoordinator(
            cart=cart, store=store, gateway=gateway, collector=collector,
            pricing=BrokenPricing(), notifier=notifier,
        )
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(), identity)

        assert outcome.result == CheckoutResult.FAILED
        assert coordinator.state == CheckoutState.IDLE
        assert notifier.last.is_error
        assert not cart.is_empty

    async def test_raising_listener_does_not_block_checkout(self, coordinator, cart, identity):
        def listener(state):
            raise RuntimeError("render failed")

        coordinator.subscribe(listener)
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(), identity)

        assert outcome.succeeded
        assert coordinator.state == CheckoutState.COMPLETED

    async def test_gateway_amount_mismatch_is_not_collected(self, cart, store, collector, identity):
        class UnderchargingGateway(FakeGateway):
            async def create_remote_payment_order(self, amount, currency="INR", receipt=None):
                return await super().create_remote_payment_order(1.0, currency, receipt)

        gateway = UnderchargingGateway()
        coordinator = coordinator_for(cart, store, gateway, collector)
        cart.add_item(product_ref())
        outcome = await coordinator.submit(valid_address(), identity)

        assert outcome.result == CheckoutResult.FAILED
        assert collector.calls == []
        assert not cart.is_empty
        order = await OrderDatabase(store).get_order(outcome.order_id)
        assert order.status == OrderStatus.PENDING
