# Payment gateway integration

from .gateway import PaymentGateway, PaymentCollector
from .razorpay import RazorpayGateway
from .signature import compute_signature, verify_payment_signature

__all__ = [
    "PaymentGateway",
    "PaymentCollector",
    "RazorpayGateway",
    "compute_signature",
    "verify_payment_signature",
]
