# API Routes

from .products import router as products_router
from .orders import router as orders_router
from .cart import router as cart_router
from .payment import router as payment_router
from .upload import router as upload_router
from .users import router as users_router
from .admin import router as admin_router

__all__ = [
    "products_router",
    "orders_router",
    "cart_router",
    "payment_router",
    "upload_router",
    "users_router",
    "admin_router",
]
