# Storefront API client

from .api import StorefrontClient
from .gateway import HttpPaymentGateway

__all__ = ["StorefrontClient", "HttpPaymentGateway"]
