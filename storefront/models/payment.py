"""Payment models for the storefront"""

from pydantic import BaseModel, Field
from typing import Optional


class RemotePaymentOrder(BaseModel):
    """Payment order created on the gateway"""
    gateway_order_id: str
    amount: float
    currency: str = "INR"
    receipt: Optional[str] = None


class PaymentCallback(BaseModel):
    """Values delivered by the payment collection UI on completion"""
    gateway_order_id: str
    payment_id: str
    signature: str


class CreatePaymentOrderRequest(BaseModel):
    """Request to create a gateway payment order"""
    amount: Optional[float] = Field(default=None, gt=0)
    currency: str = "INR"
    receipt: Optional[str] = None
    order_id: Optional[str] = None


class CreatePaymentOrderResponse(BaseModel):
    id: str
    amount: float
    currency: str
    receipt: Optional[str] = None


class VerifyPaymentRequest(BaseModel):
    """Payment callback forwarded for server-side verification"""
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    order_id: Optional[str] = None


class VerifyPaymentResponse(BaseModel):
    verified: bool
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
