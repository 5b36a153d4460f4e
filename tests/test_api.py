"""
API client: credentials, status mapping and server messages.
"""

from kungfu import Error, Ok
from pydantic import TypeAdapter

from storefront import ClientConfig, ErrorKind
from storefront.api import (
    CART,
    DELETE_CART,
    ApiClient,
    MemoryCredentials,
    TokenStatus,
    credentials_from,
    decode_as,
)
from storefront.testing import FakeStorefront


# ============================================================================
# Credentials
# ============================================================================


class TestCredentials:
    async def test_missing_token_sends_nothing(
        self, fake: FakeStorefront, anonymous: ApiClient
    ):
        result = await anonymous.call(CART)

        assert isinstance(result, Error)
        assert result.error.kind == ErrorKind.AUTH
        assert fake.calls == []

    async def test_stored_token_authorizes_call(self, fake: FakeStorefront, api: ApiClient):
        result = await api.call(CART)

        assert isinstance(result, Ok)
        assert len(fake.calls) == 1

    async def test_rejected_token_is_auth_error(self, fake: FakeStorefront):
        async with fake.client(token="stale") as api:
            result = await api.call(CART)

        assert isinstance(result, Error)
        assert result.error.kind == ErrorKind.AUTH
        assert result.error.status == 401
        assert result.error.message == "Invalid token."


class TestVerifyToken:
    async def test_valid(self, api: ApiClient):
        assert await api.verify_token() == TokenStatus.VALID
        assert await api.token() == "test-token"

    async def test_invalid_token_is_removed(self, fake: FakeStorefront):
        async with fake.client(token="stale") as api:
            assert await api.verify_token() == TokenStatus.INVALID
            assert await api.token() is None

    async def test_no_token_is_invalid_without_a_call(
        self, fake: FakeStorefront, anonymous: ApiClient
    ):
        assert await anonymous.verify_token() == TokenStatus.INVALID
        assert fake.calls == []


# ============================================================================
# Responses
# ============================================================================


class TestResponses:
    async def test_server_message_is_surfaced(self, fake: FakeStorefront, api: ApiClient):
        fake.fail("GET", "/cart/", status=503, message="Maintenance")

        result = await api.call(CART, default_message="Failed to fetch cart items")

        assert isinstance(result, Error)
        assert result.error.kind == ErrorKind.SERVER
        assert result.error.status == 503
        assert result.error.message == "Maintenance"

    async def test_path_parameters(self, fake: FakeStorefront, api: ApiClient):
        await api.call(DELETE_CART, variation_id=42)

        assert fake.calls[0].method == "DELETE"
        assert fake.calls[0].path == "/delete-cart/42/"

    async def test_dropped_connection_is_network_error(
        self, fake: FakeStorefront, api: ApiClient
    ):
        fake.fail("GET", "/cart/", status=None)

        result = await api.call(CART)

        assert isinstance(result, Error)
        assert result.error.kind == ErrorKind.NETWORK
        assert result.error.cause is not None

    async def test_every_await_is_a_new_round_trip(self, fake: FakeStorefront, api: ApiClient):
        call = api.call(CART)
        await call
        await call

        assert len(fake.calls) == 2


class TestDecode:
    async def test_malformed_body(self):
        decode = decode_as(TypeAdapter(list[int]))

        result = await decode({"not": "a list"})

        assert isinstance(result, Error)
        assert result.error.kind == ErrorKind.SERVER
        assert result.error.message == "Unexpected response from server"

    async def test_valid_body(self):
        decode = decode_as(TypeAdapter(list[int]))

        result = await decode(["1", 2])

        assert isinstance(result, Ok)
        assert result.value == [1, 2]


class TestCredentialStores:
    async def test_functional_store(self, fake: FakeStorefront):
        saved: dict[str, str] = {"userToken": "test-token"}

        async def get(key: str) -> str | None:
            return saved.get(key)

        async def put(key: str, value: str) -> None:
            saved[key] = value

        async def remove(key: str) -> None:
            saved.pop(key, None)

        store = credentials_from(get=get, set=put, remove=remove)
        async with ApiClient(
            ClientConfig().with_base_url("http://storefront.test"),
            store,
            transport=fake.transport(),
        ) as api:
            assert isinstance(await api.call(CART), Ok)

            fake.tokens.clear()
            assert await api.verify_token() == TokenStatus.INVALID

        assert saved == {}

    async def test_memory_store(self):
        store = MemoryCredentials()

        await store.set("userToken", "abc")
        assert await store.get("userToken") == "abc"

        await store.remove("userToken")
        assert await store.get("userToken") is None
