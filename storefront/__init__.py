"""
Storefront

Cart, checkout and order history for a single-currency online store,
with the FastAPI backend that serves the catalog, orders and payments.
"""

__version__ = "1.0.0"
