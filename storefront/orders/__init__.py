# Order history

from .query import OrderQuery, OrderView, StatusStep, status_progression, status_label

__all__ = ["OrderQuery", "OrderView", "StatusStep", "status_progression", "status_label"]
