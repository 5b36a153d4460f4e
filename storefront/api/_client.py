"""
API client — one authenticated HTTP round trip per call, as a Result.

No retries, no caching: every call hits the network.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import httpx
from combinators import lift as L
from kungfu import Error, LazyCoroResult, Ok, Result
from pydantic import TypeAdapter, ValidationError

from storefront._config import ClientConfig
from storefront._errors import Errors, StorefrontError
from storefront.api._credentials import CredentialStore
from storefront.api._routes import VERIFY_TOKEN, Route

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Something went wrong."


class TokenStatus(Enum):
    VALID = "valid"
    INVALID = "invalid"


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def decode_as[T](
    adapter: TypeAdapter[T],
) -> Callable[[Any], Awaitable[Result[T, StorefrontError]]]:
    """
    Validate a response body, for use with LazyCoroResult.then().

        api.call(CART).then(decode_as(TypeAdapter(list[CartLine])))
    """

    async def decode(body: Any) -> Result[T, StorefrontError]:
        try:
            return Ok(adapter.validate_python(body))
        except ValidationError as exc:
            logger.error("malformed response: %s", exc)
            return Error(Errors.malformed(exc))

    return decode


def _server_message(body: Any, default: str) -> str:
    if isinstance(body, dict):
        message = body.get("message") or body.get("detail")
        if isinstance(message, str) and message:
            return message
    return default


class ApiClient:
    """
    Async client for the storefront backend.

    Example:
        async with ApiClient(config, credentials) as api:
            result = await api.call(CART)
            match result:
                case Ok(lines): ...
                case Error(e): ...
    """

    def __init__(
        self,
        config: ClientConfig,
        credentials: CredentialStore,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._credentials = credentials
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def token(self) -> str | None:
        return await self._credentials.get(self._config.token_key)

    def call(
        self,
        route: Route,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
        default_message: str = DEFAULT_MESSAGE,
        **params: object,
    ) -> LazyCoroResult[Any, StorefrontError]:
        """
        Issue one request against a route.

        Missing credential on an authenticated route → AUTH error, nothing sent.
        Non-2xx → SERVER (or AUTH for 401/403) with the server's message.
        """
        url = route.format(**params)

        async def impl() -> Result[Any, StorefrontError]:
            request_headers = dict(headers or {})
            if route.authenticated:
                token = await self.token()
                if not token:
                    logger.warning("%s %s refused: no credential", route.method, url)
                    return Error(Errors.unauthenticated())
                request_headers["Authorization"] = f"Token {token}"

            sent = await L.catching_async(
                lambda: self._http.request(
                    route.method, url, json=json, headers=request_headers
                ),
                on_error=Errors.network,
            )

            match sent:
                case Error(err):
                    logger.error("%s %s failed: %r", route.method, url, err.cause)
                    return Error(err)
                case Ok(response):
                    body = _decode(response)
                    if response.is_success:
                        logger.debug("%s %s -> %s", route.method, url, response.status_code)
                        return Ok(body)
                    logger.warning(
                        "%s %s -> %s %s", route.method, url, response.status_code, body
                    )
                    return Error(
                        Errors.server(
                            response.status_code, _server_message(body, default_message)
                        )
                    )

        return LazyCoroResult(impl)

    async def verify_token(self) -> TokenStatus:
        """
        Check the stored token with the backend.

        Any answer other than 200 drops the token from the credential store.
        """
        if not await self.token():
            return TokenStatus.INVALID

        result = await self.call(VERIFY_TOKEN)
        match result:
            case Ok(_):
                return TokenStatus.VALID
            case Error(err):
                logger.info("token rejected: %s", err.message)
                await self._credentials.remove(self._config.token_key)
                return TokenStatus.INVALID

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


__all__ = ("ApiClient", "TokenStatus", "DEFAULT_MESSAGE", "decode_as")
