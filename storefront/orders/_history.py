"""
Order history — read-only listing of placed orders.

Both endpoints wrap their payload as {"data": ...}.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from kungfu import LazyCoroResult
from pydantic import BaseModel, TypeAdapter

from storefront._errors import StorefrontError
from storefront._models import OrderDetail, OrderSummary
from storefront.api import LIST_ORDERS, ORDER_DETAIL, ApiClient, decode_as

T = TypeVar("T")


class _Envelope(BaseModel, Generic[T]):
    data: T


_LISTING = TypeAdapter(_Envelope[list[OrderSummary]])
_DETAIL = TypeAdapter(_Envelope[OrderDetail])


class OrderHistory:
    """
    Example:
        history = OrderHistory(api)
        match await history.fetch_orders():
            case Ok(orders): ...
    """

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def fetch_orders(self) -> LazyCoroResult[list[OrderSummary], StorefrontError]:
        return (
            self._api.call(LIST_ORDERS, default_message="Failed to fetch orders")
            .then(decode_as(_LISTING))
            .map(lambda envelope: envelope.data)
        )

    def fetch_order(self, order_id: int) -> LazyCoroResult[OrderDetail, StorefrontError]:
        return (
            self._api.call(
                ORDER_DETAIL,
                default_message="Unable to fetch order details",
                order_id=order_id,
            )
            .then(decode_as(_DETAIL))
            .map(lambda envelope: envelope.data)
        )


__all__ = ("OrderHistory",)
