"""Server-side cart API routes"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..database.carts import cart_db
from ..database.products import product_db
from ..models.cart import AddToCartRequest, CartItemRecord, UpdateCartItemRequest
from ..models.user import Identity
from ..security.auth import ensure_owner_or_admin, require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["Cart"])


async def _owned_item(item_id: str, identity: Identity) -> CartItemRecord:
    item = await cart_db.get_item(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Cart item not found")
    ensure_owner_or_admin(identity, item.user_id)
    return item


@router.post("", response_model=CartItemRecord, status_code=201)
async def add_to_cart(
    request: AddToCartRequest,
    identity: Identity = Depends(require_user),
):
    """Add a product to the user's cart, incrementing an existing item"""
    user_id = request.user_id or identity.user_id
    ensure_owner_or_admin(identity, user_id)

    product = await product_db.get_product(request.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    item = await cart_db.add_item(user_id, request.product_id, request.quantity)
    logger.info(f"Added {request.quantity}x {product.name} to cart of {user_id}")
    return item


@router.get("/{user_id}", response_model=list[CartItemRecord])
async def get_cart(
    user_id: str,
    identity: Identity = Depends(require_user),
):
    """List a user's cart items"""
    ensure_owner_or_admin(identity, user_id)
    return await cart_db.list_items(user_id)


@router.put("/{item_id}", response_model=CartItemRecord)
async def update_cart_item(
    item_id: str,
    request: UpdateCartItemRequest,
    identity: Identity = Depends(require_user),
):
    """Update item quantity"""
    await _owned_item(item_id, identity)
    return await cart_db.update_quantity(item_id, request.quantity)


@router.delete("/user/{user_id}")
async def clear_cart(
    user_id: str,
    identity: Identity = Depends(require_user),
):
    """Remove every item in a user's cart"""
    ensure_owner_or_admin(identity, user_id)
    removed = await cart_db.clear(user_id)
    return {"message": "Cart cleared", "removed": removed}


@router.delete("/{item_id}")
async def remove_cart_item(
    item_id: str,
    identity: Identity = Depends(require_user),
):
    """Remove an item from the cart"""
    await _owned_item(item_id, identity)
    await cart_db.remove_item(item_id)
    return {"message": "Item removed from cart"}
