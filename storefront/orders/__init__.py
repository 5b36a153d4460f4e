"""
Orders — what checkout leaves behind.
"""

from storefront.orders._history import OrderHistory

__all__ = ("OrderHistory",)
