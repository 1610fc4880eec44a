import uuid
from typing import Optional

import pytest

from storefront.cart.storage import MemoryStorage
from storefront.cart.store import CartStore
from storefront.checkout.coordinator import CheckoutCoordinator
from storefront.database.documents import MemoryDocumentStore, document_store
from storefront.exceptions import PaymentInitiationError
from storefront.models.cart import ProductRef
from storefront.models.payment import PaymentCallback, RemotePaymentOrder
from storefront.models.user import Identity, UserRole
from storefront.notifications import Notifier
from storefront.payments.gateway import PaymentCollector, PaymentGateway
from storefront.payments.signature import compute_signature, verify_payment_signature
from storefront.pricing import PricingPolicy
from storefront.security.auth import get_token_verifier

GATEWAY_SECRET = "test_gateway_secret"


class FakeGateway(PaymentGateway):
    """Records calls; signs and verifies with GATEWAY_SECRET"""

    def __init__(self):
        self.calls: list[dict] = []
        self.should_fail = False

    async def create_remote_payment_order(self, amount, currency="INR", receipt=None):
        self.calls.append({"method": "create", "amount": amount, "currency": currency, "receipt": receipt})
        if self.should_fail:
            raise PaymentInitiationError()
        return RemotePaymentOrder(
            gateway_order_id=f"order_{uuid.uuid4().hex[:10]}",
            amount=amount,
            currency=currency,
            receipt=receipt,
        )

    async def verify_signature(self, gateway_order_id, payment_id, signature):
        self.calls.append({"method": "verify", "gateway_order_id": gateway_order_id})
        return verify_payment_signature(gateway_order_id, payment_id, signature, GATEWAY_SECRET)


class FakeCollector(PaymentCollector):
    """Stands in for the payment window: pays, dismisses or returns a forged signature"""

    def __init__(self, mode: str = "pay"):
        self.mode = mode
        self.calls: list[dict] = []

    async def collect(self, order, prefill: Optional[dict] = None):
        self.calls.append({"order": order, "prefill": prefill})
        if self.mode == "dismiss":
            return None

        payment_id = "pay_123"
        signature = compute_signature(order.gateway_order_id, payment_id, GATEWAY_SECRET)
        if self.mode == "forge":
            signature = "0" * 64
        return PaymentCallback(
            gateway_order_id=order.gateway_order_id,
            payment_id=payment_id,
            signature=signature,
        )


def product_ref(id="prod-a", name="Product A", price=100.0, image="/uploads/a.jpg") -> ProductRef:
    return ProductRef(id=id, name=name, price=price, image=image)


def valid_address(**overrides) -> dict:
    address = {
        "line1": "12 MG Road",
        "line2": "",
        "city": "Bengaluru",
        "state": "Karnataka",
        "postal_code": "560001",
        "country": "India",
    }
    address.update(overrides)
    return address


def bearer(user_id="user-1", email="user@example.com", role=UserRole.USER) -> dict:
    token = get_token_verifier().issue(user_id, email=email, role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def clear_document_store():
    document_store.clear()
    yield
    document_store.clear()


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cart(storage, notifier):
    return CartStore(storage, notifier=notifier)


@pytest.fixture
def identity():
    return Identity(user_id="user-1", email="user@example.com")


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def collector():
    return FakeCollector()


@pytest.fixture
def coordinator(cart, store, gateway, collector, notifier):
    return CheckoutCoordinator(
        cart=cart,
        store=store,
        gateway=gateway,
        collector=collector,
        pricing=PricingPolicy(free_shipping_threshold=500.0, shipping_fee=0.0, tax_rate=0.18),
        notifier=notifier,
    )


@pytest.fixture
def api_gateway():
    return FakeGateway()


@pytest.fixture
def client(tmp_path, monkeypatch, api_gateway):
    from fastapi.testclient import TestClient

    from storefront.core.config import settings
    from storefront.main import app
    from storefront.routes.payment import get_payment_gateway

    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "uploads"))
    app.dependency_overrides[get_payment_gateway] = lambda: api_gateway
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
