"""
Testing — in-process backend and payment gateway doubles.

    from storefront.testing import FakeStorefront, ScriptedGateway

    fake = FakeStorefront()
    async with fake.client() as api:
        checkout = CheckoutOrchestrator(
            api, PaymentAdapter(ScriptedGateway.succeeding(), api.config)
        )

Requires the 'testing' extra (fastapi).
"""

from storefront.testing._backend import FakeStorefront, Call, Failure, DEFAULT_TOKEN
from storefront.testing._gateway import ScriptedGateway

__all__ = (
    "FakeStorefront",
    "Call",
    "Failure",
    "DEFAULT_TOKEN",
    "ScriptedGateway",
)
