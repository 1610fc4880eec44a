"""Product models for the storefront catalog"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class ProductSort(str, Enum):
    NEWEST = "newest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NAME = "name"


class Product(BaseModel):
    """Product in the catalog"""
    id: str
    name: str
    description: str = ""
    price: float = Field(ge=0)
    category: str
    brand: str = ""
    images: list[str] = []
    tags: list[str] = []
    stock: int = Field(ge=0, default=0)
    featured: bool = False
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def primary_image(self) -> str:
        return self.images[0] if self.images else ""


class ProductCreate(BaseModel):
    """Request to create a product"""
    name: str = Field(min_length=1)
    description: str = ""
    price: float = Field(ge=0)
    category: str = Field(min_length=1)
    brand: str = ""
    images: list[str] = []
    tags: list[str] = []
    stock: int = Field(ge=0, default=0)
    featured: bool = False
    active: bool = True


class ProductUpdate(BaseModel):
    """Partial product update"""
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = None
    brand: Optional[str] = None
    images: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    stock: Optional[int] = Field(default=None, ge=0)
    featured: Optional[bool] = None
    active: Optional[bool] = None
