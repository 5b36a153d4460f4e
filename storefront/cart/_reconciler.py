"""
Quantity reconciler — local cart state kept in step with the remote cart.

Quantity changes are applied locally first, then sent. A failed update puts
the line back to the last quantity the server acknowledged.

    reconciler = QuantityReconciler(CartRepository(api), notifier)
    await reconciler.refresh()
    await reconciler.increase(line.id, line.variation_id, line.quantity, line.stock)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from kungfu import Error, Ok, Result

from storefront._errors import Errors, StorefrontError
from storefront._models import CartLine
from storefront._notify import Level, LoggingNotifier, Notice, Notifier
from storefront._types import LineId, VariationId
from storefront.cart._repository import CartRepository

logger = logging.getLogger(__name__)

STOCK_LIMIT = Notice("Stock Limit", "Cannot exceed available stock.", Level.WARNING)
REMOVED = Notice("Removed", "Item has been removed from cart.")


# ═══════════════════════════════════════════════════════════════════════════════
# Totals
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartTotals:
    """
    Price summary of the cart.

    subtotal: at original prices.
    discount: amount saved against the original prices.
    total: what the customer pays.
    """

    subtotal: float
    discount: float
    total: float

    @classmethod
    def of(cls, lines: Iterable[CartLine]) -> CartTotals:
        subtotal = 0.0
        discount = 0.0
        for line in lines:
            subtotal += line.product.original_price * line.quantity
            discount += (
                line.product.original_price - line.product.discount_price
            ) * line.quantity
        return cls(subtotal=subtotal, discount=discount, total=subtotal - discount)


# ═══════════════════════════════════════════════════════════════════════════════
# Reconciler
# ═══════════════════════════════════════════════════════════════════════════════


class QuantityReconciler:
    """
    Owns the in-memory cart lines.

    Every operation reports failures through the notifier and also returns
    them, so callers may branch on the Result or ignore it.
    """

    def __init__(self, cart: CartRepository, notifier: Notifier | None = None) -> None:
        self._cart = cart
        self._notifier = notifier or LoggingNotifier()
        self._lines: list[CartLine] = []
        # Last quantity the server acknowledged, per line.
        self._confirmed: dict[LineId, int] = {}

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    def line(self, line_id: LineId) -> CartLine | None:
        return next((line for line in self._lines if line.id == line_id), None)

    def totals(self) -> CartTotals:
        return CartTotals.of(self._lines)

    # ───────────────────────────────────────────────────────────────────────────
    # Operations
    # ───────────────────────────────────────────────────────────────────────────

    async def refresh(self) -> Result[list[CartLine], StorefrontError]:
        """Replace local state with the remote cart."""
        result = await self._cart.fetch_cart()
        match result:
            case Ok(lines):
                self._replace(lines)
                logger.debug("cart refreshed: %d lines", len(lines))
            case Error(err):
                self._report(err)
        return result

    async def increase(
        self,
        line_id: LineId,
        variation_id: VariationId,
        current_qty: int,
        stock: int,
    ) -> Result[None, StorefrontError]:
        if current_qty >= stock:
            self._notifier.notify(STOCK_LIMIT)
            return Error(Errors.validation("Cannot exceed available stock"))
        if not await self._cart.has_credential():
            return self._unauthenticated()
        return await self._apply(line_id, variation_id, current_qty + 1)

    async def decrease(
        self,
        line_id: LineId,
        variation_id: VariationId,
        current_qty: int,
    ) -> Result[None, StorefrontError]:
        """
        Step a line down by one.

        At quantity 1 the line goes to 0 on the server, which drops it;
        the cart is then refetched instead of patched locally.
        """
        if not await self._cart.has_credential():
            return self._unauthenticated()
        if current_qty > 1:
            return await self._apply(line_id, variation_id, current_qty - 1)

        result = await self._cart.update_quantity(variation_id, 0)
        await self.refresh()
        match result:
            case Ok(_):
                self._notifier.notify(REMOVED)
            case Error(err):
                self._report(err)
        return result

    async def remove(self, variation_id: VariationId) -> Result[None, StorefrontError]:
        """Delete a line, then refetch whatever the delete did."""
        if not await self._cart.has_credential():
            return self._unauthenticated()

        result = await self._cart.delete_line(variation_id)
        await self.refresh()
        if isinstance(result, Error):
            self._report(result.error)
        self._notifier.notify(REMOVED)
        return result

    # ───────────────────────────────────────────────────────────────────────────
    # Internals
    # ───────────────────────────────────────────────────────────────────────────

    async def _apply(
        self, line_id: LineId, variation_id: VariationId, quantity: int
    ) -> Result[None, StorefrontError]:
        self._set_local(line_id, quantity)
        result = await self._cart.update_quantity(variation_id, quantity)

        match result:
            case Ok(_):
                self._confirmed[line_id] = quantity
            case Error(err):
                known = self._confirmed.get(line_id)
                if known is not None:
                    logger.info("line %s rolled back to %s", line_id, known)
                    self._set_local(line_id, known)
                self._report(err)
        return result

    def _set_local(self, line_id: LineId, quantity: int) -> None:
        self._lines = [
            line.with_quantity(quantity) if line.id == line_id else line
            for line in self._lines
        ]

    def _replace(self, lines: Iterable[CartLine]) -> None:
        self._lines = list(lines)
        self._confirmed = {line.id: line.quantity for line in self._lines}

    def _unauthenticated(self) -> Result[None, StorefrontError]:
        err = Errors.unauthenticated()
        self._report(err)
        return Error(err)

    def _report(self, err: StorefrontError) -> None:
        logger.warning("cart operation failed: %s (%s)", err.message, err.kind.name)
        self._notifier.notify(Notice("Error", err.message, Level.ERROR))


__all__ = ("CartTotals", "QuantityReconciler", "STOCK_LIMIT", "REMOVED")
