"""
Cart — remote cart resource and the local, optimistically updated view of it.

    from storefront import cart

    reconciler = cart.QuantityReconciler(cart.CartRepository(api), notifier)
"""

from storefront.cart._repository import CartRepository
from storefront.cart._reconciler import (
    CartTotals,
    QuantityReconciler,
    STOCK_LIMIT,
    REMOVED,
)

__all__ = (
    "CartRepository",
    "CartTotals",
    "QuantityReconciler",
    "STOCK_LIMIT",
    "REMOVED",
)
