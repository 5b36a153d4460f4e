"""
Checkout state machine — sessions, events and the pure transition function.

    ADDRESS_SELECTION ──ProceedToPay──▶ PAYMENT_IN_PROGRESS
            │                               │            │
            │                   PaymentSucceeded    PaymentFailed
            │                               ▼            ▼
            └──ResumeOrders──────▶ ORDER_CREATION     FAILED
                                     │          │
                               OrdersPlaced  OrderCreationFailed
                                     ▼          ▼
                                   DONE       FAILED

DONE and FAILED are terminal. Any (state, event) pair missing from the
table is refused with a VALIDATION error and the session is left as is.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Any

from kungfu import Error, Ok, Result

from storefront._errors import Errors, StorefrontError
from storefront._types import AddressId, AttemptId, PaymentId
from storefront.checkout._snapshot import CheckoutSnapshot


class CheckoutState(Enum):
    ADDRESS_SELECTION = auto()
    PAYMENT_IN_PROGRESS = auto()
    ORDER_CREATION = auto()
    DONE = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (CheckoutState.DONE, CheckoutState.FAILED)


# ═══════════════════════════════════════════════════════════════════════════════
# Events
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProceedToPay:
    address_id: AddressId | None
    snapshot: CheckoutSnapshot


@dataclass(frozen=True, slots=True)
class PaymentSucceeded:
    payment_id: PaymentId


@dataclass(frozen=True, slots=True)
class PaymentFailed:
    error: StorefrontError


@dataclass(frozen=True, slots=True)
class OrdersPlaced:
    count: int


@dataclass(frozen=True, slots=True)
class OrderCreationFailed:
    error: StorefrontError


@dataclass(frozen=True, slots=True)
class ResumeOrders:
    """Re-enter order creation for an attempt whose payment was already collected."""

    payment_id: PaymentId
    address_id: AddressId
    snapshot: CheckoutSnapshot


type Event = (
    ProceedToPay
    | PaymentSucceeded
    | PaymentFailed
    | OrdersPlaced
    | OrderCreationFailed
    | ResumeOrders
)


# ═══════════════════════════════════════════════════════════════════════════════
# Session
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    """
    One checkout attempt. Immutable: transition() returns a new session.

    message: last user-facing text for this session.
    ordered: lines ordered server-side when the session ended.
    """

    attempt_id: AttemptId
    state: CheckoutState = CheckoutState.ADDRESS_SELECTION
    address_id: AddressId | None = None
    snapshot: CheckoutSnapshot | None = None
    payment_id: PaymentId | None = None
    message: str | None = None
    error: StorefrontError | None = None
    ordered: int = 0

    @classmethod
    def begin(cls, attempt_id: AttemptId | None = None) -> CheckoutSession:
        return cls(attempt_id=attempt_id or uuid.uuid4().hex)

    @property
    def total(self) -> float:
        return self.snapshot.discount_total if self.snapshot else 0.0

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal


# ═══════════════════════════════════════════════════════════════════════════════
# Transition Table
# ═══════════════════════════════════════════════════════════════════════════════

type Step = Callable[[CheckoutSession, Any], Result[CheckoutSession, StorefrontError]]

NO_ADDRESS = "Please select a delivery address"
EMPTY_CART = "Your cart is empty"
ORDER_PLACED = "Order Placed Successfully!"


def _proceed(
    session: CheckoutSession, event: ProceedToPay
) -> Result[CheckoutSession, StorefrontError]:
    if event.address_id is None:
        return Error(Errors.validation(NO_ADDRESS))
    if event.snapshot.is_empty:
        return Error(Errors.validation(EMPTY_CART))
    return Ok(
        replace(
            session,
            state=CheckoutState.PAYMENT_IN_PROGRESS,
            address_id=event.address_id,
            snapshot=event.snapshot,
            message=None,
        )
    )


def _paid(
    session: CheckoutSession, event: PaymentSucceeded
) -> Result[CheckoutSession, StorefrontError]:
    if not event.payment_id:
        return Error(Errors.validation("Payment id is required"))
    return Ok(
        replace(session, state=CheckoutState.ORDER_CREATION, payment_id=event.payment_id)
    )


def _payment_failed(
    session: CheckoutSession, event: PaymentFailed
) -> Result[CheckoutSession, StorefrontError]:
    return Ok(
        replace(
            session,
            state=CheckoutState.FAILED,
            message=event.error.message,
            error=event.error,
        )
    )


def _placed(
    session: CheckoutSession, event: OrdersPlaced
) -> Result[CheckoutSession, StorefrontError]:
    return Ok(
        replace(session, state=CheckoutState.DONE, message=ORDER_PLACED, ordered=event.count)
    )


def _orders_failed(
    session: CheckoutSession, event: OrderCreationFailed
) -> Result[CheckoutSession, StorefrontError]:
    return Ok(
        replace(
            session,
            state=CheckoutState.FAILED,
            message=event.error.message,
            error=event.error,
            ordered=event.error.ordered,
        )
    )


def _resume(
    session: CheckoutSession, event: ResumeOrders
) -> Result[CheckoutSession, StorefrontError]:
    if not event.payment_id:
        return Error(Errors.validation("Payment id is required"))
    if event.snapshot.is_empty:
        return Error(Errors.validation(EMPTY_CART))
    return Ok(
        replace(
            session,
            state=CheckoutState.ORDER_CREATION,
            address_id=event.address_id,
            snapshot=event.snapshot,
            payment_id=event.payment_id,
            message=None,
        )
    )


_TABLE: dict[tuple[CheckoutState, type], Step] = {
    (CheckoutState.ADDRESS_SELECTION, ProceedToPay): _proceed,
    (CheckoutState.ADDRESS_SELECTION, ResumeOrders): _resume,
    (CheckoutState.PAYMENT_IN_PROGRESS, PaymentSucceeded): _paid,
    (CheckoutState.PAYMENT_IN_PROGRESS, PaymentFailed): _payment_failed,
    (CheckoutState.ORDER_CREATION, OrdersPlaced): _placed,
    (CheckoutState.ORDER_CREATION, OrderCreationFailed): _orders_failed,
}


def transition(
    session: CheckoutSession, event: Event
) -> Result[CheckoutSession, StorefrontError]:
    """Apply one event. Pure: no I/O, the input session is never changed."""
    step = _TABLE.get((session.state, type(event)))
    if step is None:
        return Error(
            Errors.validation(
                f"{type(event).__name__} is not allowed in {session.state.name}"
            )
        )
    return step(session, event)


__all__ = (
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
)
