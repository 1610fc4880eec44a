"""
Storefront API Client

HTTP client for the storefront backend. Sends the shopper's identity token
as a bearer header on every request.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class StorefrontClient:
    """
    Async client for the storefront API.

    Usage:
        client = StorefrontClient("http://localhost:5000", token=identity.token)
        products = await client.list_products(sort_by="price_asc")
        await client.close()
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the storefront API
            token: Identity token sent as a bearer header
            http_client: Optional pre-configured client (tests inject an ASGI transport)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._http_client = http_client or httpx.AsyncClient(timeout=30.0)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Make an HTTP request; raises httpx.HTTPStatusError on 4xx/5xx"""
        url = f"{self.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        response = await self._http_client.request(
            method=method,
            url=url,
            headers=self._headers(),
            json=body,
            params=params or None,
        )

        if response.status_code >= 400:
            logger.error(f"Request failed: {method} {path} {response.status_code} - {response.text}")
            response.raise_for_status()

        return response.json()

    # ==================== Product APIs ====================

    async def list_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: Optional[str] = None,
    ) -> list[dict]:
        """List catalog products"""
        return await self._request(
            "GET",
            "/api/products",
            params={"search": search, "category": category, "sort_by": sort_by},
        )

    async def featured_products(self) -> list[dict]:
        return await self._request("GET", "/api/products/featured")

    async def search_products(self, query: str) -> list[dict]:
        return await self._request("GET", "/api/products/search", params={"query": query})

    async def get_product(self, product_id: str) -> dict:
        """Get product details"""
        return await self._request("GET", f"/api/products/{product_id}")

    # ==================== Order APIs ====================

    async def create_order(self, items: list[dict], shipping_address: dict, currency: str = "INR") -> dict:
        """Create a pending order; totals are computed by the server"""
        return await self._request(
            "POST",
            "/api/orders",
            body={"items": items, "shipping_address": shipping_address, "currency": currency},
        )

    async def list_user_orders(self, user_id: str) -> list[dict]:
        """Orders for a user, newest first"""
        return await self._request("GET", f"/api/orders/user/{user_id}")

    async def get_order(self, order_id: str) -> dict:
        return await self._request("GET", f"/api/orders/{order_id}")

    async def update_order_status(self, order_id: str, status: str) -> dict:
        return await self._request("PUT", f"/api/orders/{order_id}/status", body={"status": status})

    # ==================== Cart APIs ====================

    async def add_to_cart(self, product_id: str, quantity: int = 1) -> dict:
        """Add item to the signed-in user's server-side cart"""
        return await self._request(
            "POST",
            "/api/cart",
            body={"product_id": product_id, "quantity": quantity},
        )

    async def get_cart(self, user_id: str) -> list[dict]:
        return await self._request("GET", f"/api/cart/{user_id}")

    async def update_cart_item(self, item_id: str, quantity: int) -> dict:
        """Update item quantity in cart"""
        return await self._request("PUT", f"/api/cart/{item_id}", body={"quantity": quantity})

    async def remove_from_cart(self, item_id: str) -> dict:
        return await self._request("DELETE", f"/api/cart/{item_id}")

    async def clear_cart(self, user_id: str) -> dict:
        return await self._request("DELETE", f"/api/cart/user/{user_id}")

    # ==================== Payment APIs ====================

    async def create_payment_order(
        self,
        amount: float,
        currency: str = "INR",
        receipt: Optional[str] = None,
        order_id: Optional[str] = None,
    ) -> dict:
        """Create a remote payment order through the backend"""
        body = {"amount": amount, "currency": currency}
        if receipt:
            body["receipt"] = receipt
        if order_id:
            body["order_id"] = order_id
        return await self._request("POST", "/api/payment/create-order", body=body)

    async def verify_payment(
        self,
        gateway_order_id: str,
        payment_id: str,
        signature: str,
        order_id: Optional[str] = None,
    ) -> dict:
        """Ask the backend to verify a payment callback signature"""
        body = {
            "razorpay_order_id": gateway_order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature,
        }
        if order_id:
            body["order_id"] = order_id
        return await self._request("POST", "/api/payment/verify", body=body)
