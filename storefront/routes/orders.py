"""Order API routes"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..checkout.validation import items_subtotal, validate_address
from ..core.config import settings
from ..database.orders import order_db
from ..database.users import user_db
from ..exceptions import AddressValidationError
from ..models.checkout import Order, OrderCreate, OrderStatusUpdate
from ..models.user import Identity
from ..pricing import PricingPolicy
from ..security.auth import ensure_owner_or_admin, require_admin, require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.post("", response_model=Order, status_code=201)
async def create_order(
    request: OrderCreate,
    identity: Identity = Depends(require_user),
):
    """
    Create a pending order.

    Totals are computed here from the submitted items, never taken
    from the client.
    """
    user_id = request.user_id or identity.user_id
    ensure_owner_or_admin(identity, user_id)

    try:
        address = validate_address(request.shipping_address)
    except AddressValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    totals = PricingPolicy.from_settings(settings).totals(items_subtotal(request.items))
    order = order_db.build_order(
        user_id=user_id,
        user_email=identity.email if user_id == identity.user_id else "",
        items=request.items,
        totals=totals,
        shipping_address=address,
        currency=request.currency,
    )
    await user_db.save_shipping_address(user_id, address)
    await order_db.save_order(order)

    logger.info(f"Order {order.id} created for {user_id}: {order.currency} {order.total}")
    return order


@router.get("/user/{user_id}", response_model=list[Order])
async def list_user_orders(
    user_id: str,
    identity: Identity = Depends(require_user),
):
    """Orders owned by a user, newest first"""
    ensure_owner_or_admin(identity, user_id)
    return await order_db.list_for_user(user_id)


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: str,
    identity: Identity = Depends(require_user),
):
    """Get order details"""
    order = await order_db.get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    ensure_owner_or_admin(identity, order.user_id)
    return order


@router.put("/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: str,
    request: OrderStatusUpdate,
    identity: Identity = Depends(require_admin),
):
    """
    Advance an order's status (admin).

    Regressions and moves out of delivered/cancelled are rejected with 409.
    """
    order = await order_db.update_status(order_id, request.status)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    logger.info(f"Order {order_id} moved to {order.status.value} by {identity.user_id}")
    return order
