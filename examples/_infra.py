"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine

from storefront.testing import FakeStorefront


def seeded_store() -> FakeStorefront:
    """Two products in the cart and one saved address."""
    fake = FakeStorefront()
    fake.add_product(10, price=100.0, original_price=120.0, stock=5, name="Linen Shirt")
    fake.add_product(20, price=50.0, stock=3, name="Canvas Tote")
    fake.put_in_cart(10, 2)
    fake.put_in_cart(20, 1)
    fake.add_address(id=5)
    return fake


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    logging.basicConfig(level=logging.WARNING, format="  [%(name)s] %(message)s")
    asyncio.run(main())
