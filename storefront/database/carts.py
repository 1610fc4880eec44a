"""Server-side cart item storage"""

from datetime import datetime, timezone
from typing import Optional

from ..models.cart import CartItemRecord
from .documents import DocumentStore, document_store

COLLECTION = "cart_items"


class CartDatabase:
    """Per-user cart items kept by the backend"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def add_item(self, user_id: str, product_id: str, quantity: int = 1) -> CartItemRecord:
        """Add an item, or increase its quantity if the user already has it"""
        now = datetime.now(timezone.utc)
        existing = await self.store.query(
            COLLECTION,
            [("user_id", "==", user_id), ("product_id", "==", product_id)],
            limit=1,
        )

        if existing:
            item = existing[0]
            await self.store.set(
                COLLECTION,
                item["id"],
                {"quantity": item["quantity"] + quantity, "updated_at": now},
                merge=True,
            )
            return await self.get_item(item["id"])

        item_id = await self.store.add(
            COLLECTION,
            {
                "user_id": user_id,
                "product_id": product_id,
                "quantity": quantity,
                "created_at": now,
                "updated_at": now,
            },
        )
        return await self.get_item(item_id)

    async def get_item(self, item_id: str) -> Optional[CartItemRecord]:
        doc = await self.store.get(COLLECTION, item_id)
        return CartItemRecord.model_validate(doc) if doc else None

    async def list_items(self, user_id: str) -> list[CartItemRecord]:
        docs = await self.store.query(
            COLLECTION, [("user_id", "==", user_id)], order_by="created_at"
        )
        return [CartItemRecord.model_validate(d) for d in docs]

    async def update_quantity(self, item_id: str, quantity: int) -> Optional[CartItemRecord]:
        if await self.store.get(COLLECTION, item_id) is None:
            return None
        await self.store.set(
            COLLECTION,
            item_id,
            {"quantity": quantity, "updated_at": datetime.now(timezone.utc)},
            merge=True,
        )
        return await self.get_item(item_id)

    async def remove_item(self, item_id: str) -> bool:
        return await self.store.delete(COLLECTION, item_id)

    async def clear(self, user_id: str) -> int:
        """Remove every item a user has; returns how many were removed"""
        items = await self.store.query(COLLECTION, [("user_id", "==", user_id)])
        for item in items:
            await self.store.delete(COLLECTION, item["id"])
        return len(items)


# Singleton instance
cart_db = CartDatabase(document_store)
