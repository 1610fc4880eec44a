"""Payment API routes"""

import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import settings
from ..database.orders import order_db
from ..exceptions import PaymentAmountMismatch, PaymentInitiationError
from ..models.checkout import OrderStatus
from ..models.payment import (
    CreatePaymentOrderRequest,
    CreatePaymentOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from ..models.user import Identity
from ..payments.gateway import PaymentGateway
from ..payments.razorpay import RazorpayGateway
from ..pricing import amounts_match
from ..security.auth import ensure_owner_or_admin, require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payment", tags=["Payment"])


async def get_payment_gateway() -> AsyncIterator[PaymentGateway]:
    """Gateway built from settings; the key secret never leaves the server"""
    if not settings.payment_gateway_configured:
        raise HTTPException(status_code=503, detail="Payment gateway is not configured")

    gateway = RazorpayGateway(
        key_id=settings.razorpay_key_id,
        key_secret=settings.razorpay_key_secret,
        base_url=settings.razorpay_base_url,
    )
    try:
        yield gateway
    finally:
        await gateway.close()


@router.post("/create-order", response_model=CreatePaymentOrderResponse)
async def create_payment_order(
    request: CreatePaymentOrderRequest,
    identity: Identity = Depends(require_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Create a remote payment order.

    When ``order_id`` names a pending order, the order total is charged and
    the gateway order is recorded on it so the verify callback can find it.
    """
    order = None
    amount, currency = request.amount, request.currency
    if request.order_id:
        order = await order_db.get_order(request.order_id)
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")
        ensure_owner_or_admin(identity, order.user_id)
        if order.status != OrderStatus.PENDING:
            raise HTTPException(status_code=409, detail="Order is not awaiting payment")
        if amount is not None and not amounts_match(amount, order.total):
            raise HTTPException(status_code=400, detail="Amount does not match order total")
        amount, currency = order.total, order.currency
    elif amount is None:
        raise HTTPException(status_code=400, detail="Amount is required")

    try:
        remote = await gateway.create_remote_payment_order(
            amount,
            currency,
            receipt=request.receipt or request.order_id,
        )
    except PaymentInitiationError as e:
        raise HTTPException(status_code=502, detail=e.message)

    if order:
        await order_db.attach_gateway_order(order.id, remote.gateway_order_id, amount=remote.amount)

    return CreatePaymentOrderResponse(
        id=remote.gateway_order_id,
        amount=remote.amount,
        currency=remote.currency,
        receipt=remote.receipt,
    )


@router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    request: VerifyPaymentRequest,
    identity: Identity = Depends(require_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Verify a payment callback signature.

    On success the linked order (by ``order_id``, else by gateway order id)
    is marked paid. A payment for another gateway order, or for an amount
    other than the order total, leaves every order untouched.
    """
    verified = await gateway.verify_signature(
        request.razorpay_order_id,
        request.razorpay_payment_id,
        request.razorpay_signature,
    )
    if not verified:
        raise HTTPException(status_code=400, detail="Payment verification failed")

    if request.order_id:
        order = await order_db.get_order(request.order_id)
    else:
        order = await order_db.find_by_gateway_order(request.razorpay_order_id)

    if order:
        ensure_owner_or_admin(identity, order.user_id)
        if order.gateway_order_id != request.razorpay_order_id:
            logger.warning(
                f"Verified payment for {request.razorpay_order_id} does not belong to order {order.id}"
            )
            raise HTTPException(status_code=400, detail="Payment does not match order")

        if order.status == OrderStatus.PENDING:
            try:
                await order_db.mark_paid(order.id, request.razorpay_payment_id)
            except PaymentAmountMismatch as e:
                logger.warning(f"Refusing to settle order {order.id}: {e.message}")
                raise HTTPException(status_code=400, detail="Payment amount does not match order")
            logger.info(f"Order {order.id} paid with {request.razorpay_payment_id}")

    return VerifyPaymentResponse(
        verified=True,
        order_id=order.id if order else None,
        payment_id=request.razorpay_payment_id,
    )
