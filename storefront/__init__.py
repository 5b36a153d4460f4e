"""
storefront — async client for a storefront backend, cart to paid orders.

    from storefront import api            # HTTP transport + credentials
    from storefront import cart           # Cart repository + quantity reconciler
    from storefront import address        # Address book
    from storefront import payment        # Payment gateway adapter
    from storefront import checkout       # Checkout state machine + ledger
    from storefront import orders         # Order history
"""

from storefront import api
from storefront import cart
from storefront import address
from storefront import payment
from storefront import checkout
from storefront import orders
from storefront._types import (
    LineId,
    VariationId,
    AddressId,
    PaymentId,
    AttemptId,
)
from storefront._errors import ErrorKind, StorefrontError, Errors
from storefront._config import ClientConfig, Prefill
from storefront._notify import Level, Notice, Notifier, LoggingNotifier, RecordingNotifier
from storefront._models import (
    Color,
    Size,
    ProductVariation,
    CartLine,
    Address,
    AddressFields,
    OrderSummary,
    OrderDetail,
)

__version__ = "0.1.0"

__all__ = (
    # Subpackages
    "api",
    "cart",
    "address",
    "payment",
    "checkout",
    "orders",
    # Types
    "LineId",
    "VariationId",
    "AddressId",
    "PaymentId",
    "AttemptId",
    # Errors
    "ErrorKind",
    "StorefrontError",
    "Errors",
    # Config
    "ClientConfig",
    "Prefill",
    # Notices
    "Level",
    "Notice",
    "Notifier",
    "LoggingNotifier",
    "RecordingNotifier",
    # Models
    "Color",
    "Size",
    "ProductVariation",
    "CartLine",
    "Address",
    "AddressFields",
    "OrderSummary",
    "OrderDetail",
)
