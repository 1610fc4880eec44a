"""
Payment signature verification

The gateway signs a completed payment with HMAC-SHA256 over
``"<gateway_order_id>|<payment_id>"`` using the merchant's key secret and
returns the hex digest to the collection UI. Only the server holds the
secret, so only the server can recompute it.
"""

from cryptography.hazmat.primitives import constant_time, hashes, hmac


def signature_payload(gateway_order_id: str, payment_id: str) -> bytes:
    return f"{gateway_order_id}|{payment_id}".encode()


def compute_signature(gateway_order_id: str, payment_id: str, secret: str) -> str:
    """Expected hex signature for a payment"""
    mac = hmac.HMAC(secret.encode(), hashes.SHA256())
    mac.update(signature_payload(gateway_order_id, payment_id))
    return mac.finalize().hex()


def verify_payment_signature(
    gateway_order_id: str,
    payment_id: str,
    signature: str,
    secret: str,
) -> bool:
    """True only if ``signature`` equals the expected digest exactly"""
    if not signature:
        return False
    expected = compute_signature(gateway_order_id, payment_id, secret)
    return constant_time.bytes_eq(expected.encode(), signature.encode())
