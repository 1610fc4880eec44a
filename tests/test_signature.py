"""Tests for payment signature verification."""

import hashlib
import hmac

from storefront.payments.signature import compute_signature, verify_payment_signature

SECRET = "key_secret"


def expected(payload: str) -> str:
    return hmac.new(SECRET.encode(), payload.encode(), hashlib.sha256).hexdigest()


class TestComputeSignature:
    def test_hmac_sha256_over_order_and_payment(self):
        assert compute_signature("order_abc", "pay_123", SECRET) == expected("order_abc|pay_123")

    def test_hex_encoded(self):
        signature = compute_signature("order_abc", "pay_123", SECRET)
        assert len(signature) == 64
        int(signature, 16)


class TestVerifyPaymentSignature:
    def test_matching_signature(self):
        signature = expected("order_abc|pay_123")
        assert verify_payment_signature("order_abc", "pay_123", signature, SECRET) is True

    def test_any_other_string_fails(self):
        assert verify_payment_signature("order_abc", "pay_123", "deadbeef", SECRET) is False
        assert verify_payment_signature("order_abc", "pay_123", expected("order_abc|pay_124"), SECRET) is False

    def test_uppercase_hex_fails(self):
        signature = expected("order_abc|pay_123").upper()
        assert verify_payment_signature("order_abc", "pay_123", signature, SECRET) is False

    def test_empty_signature_fails(self):
        assert verify_payment_signature("order_abc", "pay_123", "", SECRET) is False

    def test_wrong_secret_fails(self):
        signature = compute_signature("order_abc", "pay_123", "other_secret")
        assert verify_payment_signature("order_abc", "pay_123", signature, SECRET) is False
