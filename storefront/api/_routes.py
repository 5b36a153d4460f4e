"""
Routes — the storefront backend surface consumed by the client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

type Method = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]


@dataclass(frozen=True, slots=True)
class Route:
    """
    One remote endpoint.

    path may hold `{name}` placeholders filled by `format()`.
    """

    method: Method
    path: str
    authenticated: bool = True

    def format(self, **params: object) -> str:
        return self.path.format(**params)


# Cart
CART = Route("GET", "/cart/")
ADD_TO_CART = Route("POST", "/add-to-cart/")
UPDATE_CART = Route("POST", "/update-cart/")
DELETE_CART = Route("DELETE", "/delete-cart/{variation_id}/")

# Addresses
LIST_ADDRESSES = Route("GET", "/shipment-address/")
CREATE_ADDRESS = Route("POST", "/shipment-address/")
DELETE_ADDRESS = Route("DELETE", "/delete-shipment/{address_id}/")

# Payment / orders
CONFIRM_PAYMENT = Route("POST", "/payment/")
CREATE_ORDER = Route("POST", "/order/")
LIST_ORDERS = Route("GET", "/order/")
ORDER_DETAIL = Route("GET", "/order/{order_id}/")

# Auth
VERIFY_TOKEN = Route("GET", "/verify-token/")


__all__ = (
    "Method",
    "Route",
    "CART",
    "ADD_TO_CART",
    "UPDATE_CART",
    "DELETE_CART",
    "LIST_ADDRESSES",
    "CREATE_ADDRESS",
    "DELETE_ADDRESS",
    "CONFIRM_PAYMENT",
    "CREATE_ORDER",
    "LIST_ORDERS",
    "ORDER_DETAIL",
    "VERIFY_TOKEN",
)
