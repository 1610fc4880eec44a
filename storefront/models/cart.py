"""Cart models for the storefront"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Union
from datetime import datetime

from .product import Product


class ProductRef(BaseModel):
    """Product snapshot held by a cart line.

    ``price`` keeps whatever the catalog handed over (number or numeric
    string); totals coerce it leniently.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: Union[float, str, None] = None
    image: str = ""
    stock: Optional[int] = None

    @classmethod
    def from_product(cls, product: Union[Product, "ProductRef"]) -> "ProductRef":
        if isinstance(product, ProductRef):
            return product
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            image=product.primary_image,
            stock=product.stock,
        )


class CartLine(BaseModel):
    """One (product, quantity) pairing in the local cart"""
    model_config = ConfigDict(frozen=True)

    product: ProductRef
    quantity: int = Field(ge=1)

    @property
    def product_id(self) -> str:
        return self.product.id


class CartItemRecord(BaseModel):
    """Server-side cart item owned by a user"""
    id: str
    user_id: str
    product_id: str
    quantity: int = Field(ge=1)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AddToCartRequest(BaseModel):
    """Request to add item to the server-side cart"""
    user_id: Optional[str] = None
    product_id: str
    quantity: int = Field(default=1, gt=0)


class UpdateCartItemRequest(BaseModel):
    """Request to update cart item quantity"""
    quantity: int = Field(gt=0)
