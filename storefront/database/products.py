"""Product catalog storage"""

import logging
from datetime import datetime, timezone
from typing import Optional

from ..models.product import Product, ProductCreate, ProductUpdate, ProductSort
from .documents import DocumentStore, document_store

logger = logging.getLogger(__name__)

COLLECTION = "products"

# Sample catalog loaded into an empty store on startup
SAMPLE_PRODUCTS: list[dict] = [
    {
        "name": "Premium Cotton T-Shirt",
        "description": "Soft, comfortable cotton t-shirt perfect for everyday wear",
        "price": 599.0,
        "category": "Clothing",
        "brand": "Loom & Co",
        "images": ["/uploads/samples/cotton-tshirt.jpg"],
        "tags": ["cotton", "casual"],
        "stock": 50,
        "featured": True,
    },
    {
        "name": "Wireless Bluetooth Headphones",
        "description": "High-quality wireless headphones with noise cancellation",
        "price": 2499.0,
        "category": "Electronics",
        "brand": "SoundCraft",
        "images": ["/uploads/samples/headphones.jpg"],
        "tags": ["audio", "wireless"],
        "stock": 25,
        "featured": True,
    },
    {
        "name": "Eco-Friendly Water Bottle",
        "description": "Sustainable stainless steel water bottle",
        "price": 349.0,
        "category": "Home",
        "brand": "GreenSip",
        "images": ["/uploads/samples/water-bottle.jpg"],
        "tags": ["eco", "kitchen"],
        "stock": 100,
    },
    {
        "name": "Leather Crossbody Bag",
        "description": "Handcrafted leather bag with adjustable strap",
        "price": 1899.0,
        "category": "Accessories",
        "brand": "Hide & Stitch",
        "images": ["/uploads/samples/crossbody-bag.jpg"],
        "tags": ["leather"],
        "stock": 15,
        "featured": True,
    },
]


class ProductDatabase:
    """Catalog backed by the document store"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def seed(self) -> int:
        """Load the sample catalog if the store holds no products"""
        if await self.store.query(COLLECTION, limit=1):
            return 0
        for data in SAMPLE_PRODUCTS:
            await self.create_product(ProductCreate(**data))
        logger.info(f"Seeded {len(SAMPLE_PRODUCTS)} sample products")
        return len(SAMPLE_PRODUCTS)

    async def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        doc = await self.store.get(COLLECTION, product_id)
        return Product.model_validate(doc) if doc else None

    async def list_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: Optional[ProductSort] = None,
        active_only: bool = True,
    ) -> list[Product]:
        """List catalog products with optional filters"""
        filters = [("active", "==", True)] if active_only else []
        if category:
            filters.append(("category", "==", category))

        products = [Product.model_validate(d) for d in await self.store.query(COLLECTION, filters)]

        if search:
            needle = search.lower()
            products = [
                p for p in products
                if needle in p.name.lower() or needle in p.description.lower()
            ]

        if sort_by == ProductSort.PRICE_ASC:
            products.sort(key=lambda p: p.price)
        elif sort_by == ProductSort.PRICE_DESC:
            products.sort(key=lambda p: p.price, reverse=True)
        elif sort_by == ProductSort.NAME:
            products.sort(key=lambda p: p.name.lower())
        elif sort_by == ProductSort.NEWEST:
            products.sort(key=lambda p: p.created_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)

        return products

    async def featured_products(self) -> list[Product]:
        docs = await self.store.query(
            COLLECTION, [("featured", "==", True), ("active", "==", True)]
        )
        return [Product.model_validate(d) for d in docs]

    async def search_products(self, query: str) -> list[Product]:
        return await self.list_products(search=query)

    async def all_products(self) -> list[Product]:
        """All products including inactive ones"""
        return await self.list_products(active_only=False)

    async def create_product(self, data: ProductCreate) -> Product:
        now = datetime.now(timezone.utc)
        doc = {**data.model_dump(), "created_at": now, "updated_at": now}
        product_id = await self.store.add(COLLECTION, doc)
        return Product(id=product_id, **doc)

    async def update_product(self, product_id: str, data: ProductUpdate) -> Optional[Product]:
        if await self.store.get(COLLECTION, product_id) is None:
            return None
        changes = data.model_dump(exclude_unset=True)
        changes["updated_at"] = datetime.now(timezone.utc)
        await self.store.set(COLLECTION, product_id, changes, merge=True)
        return await self.get_product(product_id)

    async def delete_product(self, product_id: str) -> bool:
        return await self.store.delete(COLLECTION, product_id)


# Singleton instance
product_db = ProductDatabase(document_store)
