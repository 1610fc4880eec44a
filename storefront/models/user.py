"""User and identity models for the storefront"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum

from .checkout import ShippingAddress


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class Identity(BaseModel):
    """Signed-in user as supplied by the identity provider"""
    user_id: str
    email: str = ""
    role: UserRole = UserRole.USER
    token: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.SUPER_ADMIN)


class User(BaseModel):
    """User profile document"""
    id: str
    email: str
    name: str = ""
    role: UserRole = UserRole.USER
    avatar: Optional[str] = None
    shipping_address: Optional[ShippingAddress] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserCreate(BaseModel):
    """Request to create a user profile"""
    id: Optional[str] = None
    email: str = Field(min_length=3)
    name: str = Field(min_length=1)
    avatar: Optional[str] = None


class AdminStats(BaseModel):
    total_sales: float
    total_orders: int
    total_products: int
    total_users: int
