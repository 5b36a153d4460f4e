"""
Checkout — cart-to-order saga with persisted progress.

    from storefront import checkout

    orchestrator = checkout.CheckoutOrchestrator(
        api,
        payment.PaymentAdapter(gateway, config),
        ledger=await checkout.SQLAlchemyLedger.connect(config.ledger_url),
    )
    result = await orchestrator.proceed_to_pay(book.selected_id, reconciler.lines)
"""

from storefront.checkout._snapshot import CheckoutSnapshot
from storefront.checkout._state import (
    CheckoutState,
    ProceedToPay,
    PaymentSucceeded,
    PaymentFailed,
    OrdersPlaced,
    OrderCreationFailed,
    ResumeOrders,
    Event,
    CheckoutSession,
    transition,
    NO_ADDRESS,
    EMPTY_CART,
    ORDER_PLACED,
)
from storefront.checkout._ledger import (
    line_key,
    LineStage,
    LedgerLine,
    LedgerEntry,
    LedgerError,
    Ledger,
    MemoryLedger,
)
from storefront.checkout._sqlalchemy import (
    LedgerBase,
    AttemptTable,
    AttemptLineTable,
    SQLAlchemyLedger,
)
from storefront.checkout._lines import (
    LineJob,
    LineAction,
    LineSettled,
    LineFailed,
    settle_line,
)
from storefront.checkout._orchestrator import CheckoutOrchestrator, IDEMPOTENCY_HEADER

__all__ = (
    # Snapshot
    "CheckoutSnapshot",
    # State machine
    "CheckoutState",
    "ProceedToPay",
    "PaymentSucceeded",
    "PaymentFailed",
    "OrdersPlaced",
    "OrderCreationFailed",
    "ResumeOrders",
    "Event",
    "CheckoutSession",
    "transition",
    "NO_ADDRESS",
    "EMPTY_CART",
    "ORDER_PLACED",
    # Ledger
    "line_key",
    "LineStage",
    "LedgerLine",
    "LedgerEntry",
    "LedgerError",
    "Ledger",
    "MemoryLedger",
    "LedgerBase",
    "AttemptTable",
    "AttemptLineTable",
    "SQLAlchemyLedger",
    # Line graph
    "LineJob",
    "LineAction",
    "LineSettled",
    "LineFailed",
    "settle_line",
    # Orchestrator
    "CheckoutOrchestrator",
    "IDEMPOTENCY_HEADER",
)
