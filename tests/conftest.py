"""
Shared fixtures: an in-process storefront, a client wired to it, and a
notifier that keeps every notice.
"""

from collections.abc import AsyncIterator

import pytest

from storefront import RecordingNotifier
from storefront.api import ApiClient
from storefront.testing import FakeStorefront


@pytest.fixture
def fake() -> FakeStorefront:
    return FakeStorefront()


@pytest.fixture
async def api(fake: FakeStorefront) -> AsyncIterator[ApiClient]:
    async with fake.client() as client:
        yield client


@pytest.fixture
async def anonymous(fake: FakeStorefront) -> AsyncIterator[ApiClient]:
    async with fake.client(token=None) as client:
        yield client


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def two_line_cart(fake: FakeStorefront) -> FakeStorefront:
    """Variation 10 (qty 2 at 100) and variation 20 (qty 1 at 50), address 5."""
    fake.add_product(10, price=100.0, original_price=120.0, stock=5)
    fake.add_product(20, price=50.0, stock=3)
    fake.put_in_cart(10, 2)
    fake.put_in_cart(20, 1)
    fake.add_address(id=5)
    return fake
