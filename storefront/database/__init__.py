# Database modules

from .documents import DocumentStore, MemoryDocumentStore, document_store
from .products import product_db, ProductDatabase
from .carts import cart_db, CartDatabase
from .orders import order_db, OrderDatabase
from .users import user_db, UserDatabase

__all__ = [
    "DocumentStore",
    "MemoryDocumentStore",
    "document_store",
    "product_db",
    "ProductDatabase",
    "cart_db",
    "CartDatabase",
    "order_db",
    "OrderDatabase",
    "user_db",
    "UserDatabase",
]
