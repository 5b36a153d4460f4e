"""
Payment — provider checkout sheet as a Result-returning adapter.

    from storefront import payment

    adapter = payment.PaymentAdapter(gateway, config)
    result = await adapter.pay(amount_minor)
"""

from storefront.payment._gateway import (
    PaymentOptions,
    PaymentGateway,
    PaymentFailure,
    PaymentAdapter,
    FAILED_MESSAGE,
)

__all__ = (
    "PaymentOptions",
    "PaymentGateway",
    "PaymentFailure",
    "PaymentAdapter",
    "FAILED_MESSAGE",
)
