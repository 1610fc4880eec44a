# Storefront Models

from .product import Product, ProductCreate, ProductUpdate, ProductSort
from .cart import (
    ProductRef,
    CartLine,
    CartItemRecord,
    AddToCartRequest,
    UpdateCartItemRequest,
)
from .checkout import (
    Order,
    OrderItem,
    OrderTotals,
    OrderStatus,
    OrderCreate,
    OrderStatusUpdate,
    ShippingAddress,
    STATUS_SEQUENCE,
)
from .payment import (
    RemotePaymentOrder,
    PaymentCallback,
    CreatePaymentOrderRequest,
    CreatePaymentOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from .user import Identity, User, UserCreate, UserRole, AdminStats

__all__ = [
    "Product",
    "ProductCreate",
    "ProductUpdate",
    "ProductSort",
    "ProductRef",
    "CartLine",
    "CartItemRecord",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "Order",
    "OrderItem",
    "OrderTotals",
    "OrderStatus",
    "OrderCreate",
    "OrderStatusUpdate",
    "ShippingAddress",
    "STATUS_SEQUENCE",
    "RemotePaymentOrder",
    "PaymentCallback",
    "CreatePaymentOrderRequest",
    "CreatePaymentOrderResponse",
    "VerifyPaymentRequest",
    "VerifyPaymentResponse",
    "Identity",
    "User",
    "UserCreate",
    "UserRole",
    "AdminStats",
]
