"""User profile storage"""

from datetime import datetime, timezone
from typing import Optional

from ..models.checkout import ShippingAddress
from ..models.user import User, UserCreate, UserRole
from .documents import DocumentStore, document_store

COLLECTION = "users"


class UserDatabase:
    """User documents keyed by identity uid"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_user(self, user_id: str) -> Optional[User]:
        doc = await self.store.get(COLLECTION, user_id)
        if not doc or "email" not in doc:
            return None
        return User.model_validate(doc)

    async def create_user(self, user_id: str, data: UserCreate, role: UserRole = UserRole.USER) -> User:
        now = datetime.now(timezone.utc)
        doc = {
            "email": data.email,
            "name": data.name,
            "avatar": data.avatar,
            "role": role,
            "created_at": now,
            "updated_at": now,
        }
        await self.store.set(COLLECTION, user_id, doc, merge=True)
        return await self.get_user(user_id)

    async def list_users(self) -> list[User]:
        docs = await self.store.query(COLLECTION, order_by="created_at", descending=True)
        return [User.model_validate(d) for d in docs if "email" in d]

    async def get_shipping_address(self, user_id: str) -> Optional[ShippingAddress]:
        doc = await self.store.get(COLLECTION, user_id)
        if not doc or not doc.get("shipping_address"):
            return None
        return ShippingAddress.model_validate(doc["shipping_address"])

    async def save_shipping_address(self, user_id: str, address: ShippingAddress) -> None:
        """Remember the last address used at checkout on the profile"""
        now = datetime.now(timezone.utc)
        await self.store.set(
            COLLECTION,
            user_id,
            {"shipping_address": address.model_dump(), "updated_at": now},
            merge=True,
        )


# Singleton instance
user_db = UserDatabase(document_store)
