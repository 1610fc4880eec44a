"""Storefront error taxonomy"""

from typing import Optional


class StorefrontError(Exception):
    """Base class for all storefront errors"""

    title = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CheckoutValidationError(StorefrontError):
    """Checkout input rejected before any network call"""

    title = "Checkout Error"


class AddressValidationError(CheckoutValidationError):
    """One or more address fields are missing or malformed"""

    def __init__(self, missing_fields: list[str], invalid_fields: Optional[list[str]] = None):
        self.missing_fields = list(missing_fields)
        self.invalid_fields = list(invalid_fields or [])
        if self.missing_fields:
            message = "Please fill in all required address fields: " + ", ".join(self.missing_fields)
        else:
            message = "Please check these address fields: " + ", ".join(self.invalid_fields)
        super().__init__(message)


class EmptyCartError(CheckoutValidationError):
    def __init__(self, message: str = "Your cart is empty"):
        super().__init__(message)


class StorageError(StorefrontError):
    """Local durable storage could not be read or written"""

    title = "Cart Error"


class PersistenceError(StorefrontError):
    """Document store write or read failed"""

    title = "Order Error"


class PaymentError(StorefrontError):
    title = "Payment Failed"


class PaymentInitiationError(PaymentError):
    """Remote payment order could not be created"""

    def __init__(self, message: str = "Unable to initiate payment. Please try again."):
        super().__init__(message)


class PaymentVerificationError(PaymentError):
    """Payment callback signature did not verify"""

    title = "Payment Verification Failed"

    def __init__(
        self,
        message: str = "Payment verification failed. Please contact support if amount was deducted.",
    ):
        super().__init__(message)


class PaymentAmountMismatch(PaymentVerificationError):
    """Gateway order amount differs from the order total"""

    def __init__(self, charged: float, expected: float):
        self.charged = charged
        self.expected = expected
        super().__init__(f"Payment amount {charged} does not match order total {expected}")


class AuthenticationRequired(StorefrontError):
    """No identity available for an operation that needs one"""

    title = "Sign In Required"

    def __init__(self, next_path: str = "/", message: str = "Please sign in to continue"):
        super().__init__(message)
        self.next_path = next_path

    @property
    def redirect_to(self) -> str:
        return f"/login?next={self.next_path}"


class InvalidStatusTransition(StorefrontError):
    """Order status change would regress or leave a terminal state"""

    def __init__(self, current: str, requested: str, message: Optional[str] = None):
        self.current = current
        self.requested = requested
        super().__init__(message or f"Cannot change order status from '{current}' to '{requested}'")
