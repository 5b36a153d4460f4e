"""
Cart repository — the remote cart resource, one HTTP call per method.

Stateless: nothing is cached between calls. Lines are addressed by their
product variation id, the way the backend keys them.
"""

from __future__ import annotations

import logging

from combinators import lift as L
from kungfu import LazyCoroResult
from pydantic import TypeAdapter

from storefront._errors import Errors, StorefrontError
from storefront._models import CartLine, CartUpdate, ProductVariation
from storefront._types import VariationId
from storefront.api import (
    ADD_TO_CART,
    CART,
    DELETE_CART,
    UPDATE_CART,
    ApiClient,
    decode_as,
)

logger = logging.getLogger(__name__)

_LINES = TypeAdapter(list[CartLine])


class CartRepository:
    """
    Remote cart operations.

    Example:
        cart = CartRepository(api)
        match await cart.fetch_cart():
            case Ok(lines): ...
            case Error(e) if e.is_auth: ...
    """

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def has_credential(self) -> bool:
        return bool(await self._api.token())

    def fetch_cart(self) -> LazyCoroResult[list[CartLine], StorefrontError]:
        return self._api.call(
            CART, default_message="Failed to fetch cart items"
        ).then(decode_as(_LINES))

    def update_quantity(
        self, variation_id: VariationId, quantity: int
    ) -> LazyCoroResult[None, StorefrontError]:
        """Set the quantity of a line. Quantity 0 asks the server to drop it."""
        body = CartUpdate(product_variation_id=variation_id, quantity=quantity)
        return self._api.call(
            UPDATE_CART,
            json=body.model_dump(),
            default_message="Failed to update cart.",
        ).map(lambda _: None)

    def delete_line(self, variation_id: VariationId) -> LazyCoroResult[None, StorefrontError]:
        return self._api.call(
            DELETE_CART,
            default_message="Failed to remove item.",
            variation_id=variation_id,
        ).map(lambda _: None)

    def add_to_cart(
        self, variation: ProductVariation, quantity: int = 1
    ) -> LazyCoroResult[None, StorefrontError]:
        """
        Put a variation in the cart.

        Refused locally, without a request, when quantity is below 1 or
        above the variation's stock.
        """
        if quantity < 1 or quantity > variation.stock:
            message = (
                "Quantity must be at least 1"
                if quantity < 1
                else "Cannot exceed available stock."
            )
            logger.info(
                "add_to_cart refused: variation=%s quantity=%s stock=%s",
                variation.id,
                quantity,
                variation.stock,
            )
            return L.fail(Errors.validation(message))

        body = CartUpdate(product_variation_id=variation.id, quantity=quantity)
        return self._api.call(
            ADD_TO_CART,
            json=body.model_dump(),
            default_message="Failed to add to cart.",
        ).map(lambda _: None)


__all__ = ("CartRepository",)
