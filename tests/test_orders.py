"""Tests for order storage, status transitions and the order history read path."""

from datetime import datetime, timedelta, timezone

import pytest

from storefront.database.documents import MemoryDocumentStore
from storefront.database.orders import OrderDatabase
from storefront.exceptions import InvalidStatusTransition, PaymentAmountMismatch, PersistenceError
from storefront.models.checkout import OrderItem, OrderStatus, OrderTotals, ShippingAddress
from storefront.orders.query import OrderQuery, OrderView, status_label, status_progression


def make_order(orders: OrderDatabase, user_id="user-1", total=118.0, **overrides):
    order = orders.build_order(
        user_id=user_id,
        items=[OrderItem(product_id="a", name="A", price=100.0, quantity=1)],
        totals=OrderTotals(subtotal=100.0, shipping=0.0, tax=18.0, total=total),
        shipping_address=ShippingAddress(line1="1 Main", city="Pune", state="MH", postal_code="411001"),
    )
    return order.model_copy(update=overrides) if overrides else order


class BrokenQueryStore(MemoryDocumentStore):
    async def query(self, *args, **kwargs):
        raise ConnectionError("offline")


class TestOrderStatus:
    def test_confirmed_parses_as_paid(self):
        assert OrderStatus("confirmed") == OrderStatus.PAID

    def test_case_insensitive(self):
        assert OrderStatus("Shipped") == OrderStatus.SHIPPED

    def test_unknown_value_rejected(self):
        with pytest.raises(ValueError):
            OrderStatus("lost")

    @pytest.mark.parametrize(
        "current,requested",
        [
            (OrderStatus.PENDING, OrderStatus.PAID),
            (OrderStatus.PENDING, OrderStatus.SHIPPED),
            (OrderStatus.PAID, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.PAID, OrderStatus.CANCELLED),
            (OrderStatus.PAID, OrderStatus.PAID),
        ],
    )
    def test_allowed_transitions(self, current, requested):
        assert current.can_advance_to(requested)

    @pytest.mark.parametrize(
        "current,requested",
        [
            (OrderStatus.PAID, OrderStatus.PENDING),
            (OrderStatus.DELIVERED, OrderStatus.SHIPPED),
            (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
            (OrderStatus.CANCELLED, OrderStatus.PAID),
            (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
        ],
    )
    def test_rejected_transitions(self, current, requested):
        assert not current.can_advance_to(requested)


class TestStatusProgression:
    def test_pending_reaches_nothing(self):
        assert [s.reached for s in status_progression(OrderStatus.PENDING)] == [False, False, False]

    def test_paid(self):
        steps = status_progression(OrderStatus.PAID)
        assert [s.label for s in steps] == ["Order Confirmed", "Order Shipped", "Order Delivered"]
        assert [s.reached for s in steps] == [True, False, False]

    def test_shipped(self):
        assert [s.reached for s in status_progression("shipped")] == [True, True, False]

    def test_delivered(self):
        assert [s.reached for s in status_progression(OrderStatus.DELIVERED)] == [True, True, True]

    def test_cancelled_reaches_nothing(self):
        assert not any(s.reached for s in status_progression(OrderStatus.CANCELLED))

    def test_legacy_confirmed(self):
        assert [s.reached for s in status_progression("confirmed")] == [True, False, False]

    def test_label(self):
        assert status_label("pending") == "Pending"


class TestOrderDatabase:
    async def test_build_does_not_persist(self, store):
        orders = OrderDatabase(store)
        order = make_order(orders)

        assert order.status == OrderStatus.PENDING
        assert await orders.get_order(order.id) is None

    async def test_save_and_get(self, store):
        orders = OrderDatabase(store)
        order = await orders.save_order(make_order(orders))

        fetched = await orders.get_order(order.id)
        assert fetched == order

    async def test_mark_paid(self, store):
        orders = OrderDatabase(store)
        order = await orders.save_order(make_order(orders))

        paid = await orders.mark_paid(order.id, "pay_1")
        assert paid.status == OrderStatus.PAID
        assert paid.payment_id == "pay_1"
        assert paid.items == order.items

    async def test_mark_paid_refuses_other_gateway_amount(self, store):
        orders = OrderDatabase(store)
        order = await orders.save_order(make_order(orders, total=1180.0))
        await orders.attach_gateway_order(order.id, "order_abc", amount=1.0)

        with pytest.raises(PaymentAmountMismatch):
            await orders.mark_paid(order.id, "pay_1")
        assert (await orders.get_order(order.id)).status == OrderStatus.PENDING

    async def test_mark_paid_with_matching_gateway_amount(self, store):
        orders = OrderDatabase(store)
        order = await orders.save_order(make_order(orders))
        await orders.attach_gateway_order(order.id, "order_abc", amount=118.0)

        paid = await orders.mark_paid(order.id, "pay_1")
        assert paid.status == OrderStatus.PAID
        assert paid.gateway_amount == 118.0

    async def test_regression_raises(self, store):
        orders = OrderDatabase(store)
        order = await orders.save_order(make_order(orders))
        await orders.update_status(order.id, OrderStatus.SHIPPED)

        with pytest.raises(InvalidStatusTransition):
            await orders.update_status(order.id, OrderStatus.PAID)
        assert (await orders.get_order(order.id)).status == OrderStatus.SHIPPED

    async def test_update_missing_order(self, store):
        assert await OrderDatabase(store).update_status("missing", OrderStatus.PAID) is None

    async def test_find_by_gateway_order(self, store):
        orders = OrderDatabase(store)
        order = await orders.save_order(make_order(orders))
        await orders.attach_gateway_order(order.id, "order_abc")

        found = await orders.find_by_gateway_order("order_abc")
        assert found.id == order.id
        assert await orders.find_by_gateway_order("order_other") is None

    async def test_legacy_confirmed_document(self, store):
        orders = OrderDatabase(store)
        order = await orders.save_order(make_order(orders))
        await store.set("orders", order.id, {"status": "confirmed"}, merge=True)

        assert (await orders.get_order(order.id)).status == OrderStatus.PAID


class TestOrderQuery:
    async def test_newest_first_and_scoped_to_user(self, store):
        orders = OrderDatabase(store)
        now = datetime.now(timezone.utc)
        older = await orders.save_order(make_order(orders, created_at=now - timedelta(days=2)))
        newer = await orders.save_order(make_order(orders, created_at=now))
        await orders.save_order(make_order(orders, user_id="someone-else"))

        views = await OrderQuery(store).list_for_user("user-1")
        assert [v.order.id for v in views] == [newer.id, older.id]

    async def test_no_orders(self, store):
        assert await OrderQuery(store).list_for_user("user-1") == []

    async def test_failure_raises_persistence_error(self):
        with pytest.raises(PersistenceError):
            await OrderQuery(BrokenQueryStore()).list_for_user("user-1")


class TestOrderView:
    def test_display_fields(self, store):
        order = make_order(OrderDatabase(store), total=1234.5, status=OrderStatus.SHIPPED)
        view = OrderView(order=order)

        assert view.number == order.id[:8].upper()
        assert view.status_label == "Shipped"
        assert view.formatted_total == "₹1,234.50"
        assert view.item_count == 1
        assert [s.reached for s in view.progression] == [True, True, False]
