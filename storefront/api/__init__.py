"""
API — transport to the storefront backend.

    from storefront import api

    credentials = api.MemoryCredentials({"userToken": token})
    async with api.ApiClient(config, credentials) as client:
        result = await client.call(api.CART)
"""

from storefront.api._routes import (
    Method,
    Route,
    CART,
    ADD_TO_CART,
    UPDATE_CART,
    DELETE_CART,
    LIST_ADDRESSES,
    CREATE_ADDRESS,
    DELETE_ADDRESS,
    CONFIRM_PAYMENT,
    CREATE_ORDER,
    LIST_ORDERS,
    ORDER_DETAIL,
    VERIFY_TOKEN,
)
from storefront.api._credentials import (
    CredentialStore,
    FunctionalCredentials,
    credentials_from,
    MemoryCredentials,
)
from storefront.api._client import ApiClient, TokenStatus, DEFAULT_MESSAGE, decode_as

__all__ = (
    # Routes
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
    # Credentials
    "CredentialStore",
    "FunctionalCredentials",
    "credentials_from",
    "MemoryCredentials",
    # Client
    "ApiClient",
    "TokenStatus",
    "DEFAULT_MESSAGE",
    "decode_as",
)
