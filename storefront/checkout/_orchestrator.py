"""
Checkout orchestrator — drives one session through the state machine.

    select address → pay → confirm payment → per line: order, delete cart line

Remote steps run strictly one after another; line N's order and delete both
finish before line N+1 starts. Nothing is rolled back: an order that exists
stays, the ledger records how far the attempt got, and resume() picks up the
remaining lines without charging again.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from kungfu import Error, LazyCoroResult, Ok, Result

from storefront._config import Prefill
from storefront._errors import Errors, StorefrontError
from storefront._models import CartLine, OrderRequest, PaymentConfirmation
from storefront._notify import Level, LoggingNotifier, Notice, Notifier
from storefront._types import AddressId, AttemptId, PaymentId
from storefront.api import CONFIRM_PAYMENT, CREATE_ORDER, ApiClient
from storefront.cart import CartRepository
from storefront.checkout._ledger import (
    Ledger,
    LedgerEntry,
    LedgerError,
    MemoryLedger,
    guarded,
)
from storefront.checkout._lines import LineFailed, LineJob, LineSettled, settle_line
from storefront.checkout._snapshot import CheckoutSnapshot
from storefront.checkout._state import (
    NO_ADDRESS,
    CheckoutSession,
    CheckoutState,
    Event,
    OrderCreationFailed,
    OrdersPlaced,
    PaymentFailed,
    PaymentSucceeded,
    ProceedToPay,
    ResumeOrders,
    transition,
)
from storefront.orders import OrderHistory
from storefront.payment import FAILED_MESSAGE, PaymentAdapter

logger = logging.getLogger(__name__)

IDEMPOTENCY_HEADER = "Idempotency-Key"


class CheckoutOrchestrator:
    """
    Owns the single active checkout session.

    Example:
        checkout = CheckoutOrchestrator(api, PaymentAdapter(gateway, config))
        match await checkout.proceed_to_pay(book.selected_id, reconciler.lines):
            case Ok(session): ...            # DONE
            case Error(e) if e.kind == ErrorKind.PARTIAL_COMPLETION:
                await reconciler.refresh()
                await checkout.resume(checkout.session.attempt_id)
    """

    def __init__(
        self,
        api: ApiClient,
        payment: PaymentAdapter,
        *,
        ledger: Ledger | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._api = api
        self._payment = payment
        self._cart = CartRepository(api)
        self._ledger: Ledger = ledger or MemoryLedger()
        self._notifier = notifier or LoggingNotifier()
        self._session = CheckoutSession.begin()
        self.history = OrderHistory(api)

    @property
    def session(self) -> CheckoutSession:
        return self._session

    def start(self, attempt_id: AttemptId | None = None) -> CheckoutSession:
        """Drop the current session and begin a fresh one at ADDRESS_SELECTION."""
        self._session = CheckoutSession.begin(attempt_id)
        return self._session

    # ───────────────────────────────────────────────────────────────────────────
    # Checkout
    # ───────────────────────────────────────────────────────────────────────────

    async def proceed_to_pay(
        self,
        address_id: AddressId | None,
        lines: Iterable[CartLine],
        prefill: Prefill | None = None,
    ) -> Result[CheckoutSession, StorefrontError]:
        """
        Run the whole checkout for the current session.

        The lines are snapshotted here; the amount charged and the orders
        created come from the snapshot only.
        """
        snapshot = CheckoutSnapshot.of(lines)
        moved = self._advance(ProceedToPay(address_id, snapshot))
        if isinstance(moved, Error):
            self._notifier.notify(Notice("Error", moved.error.message, Level.WARNING))
            return moved
        if address_id is None:
            return self._payment_failed(Errors.validation(NO_ADDRESS))

        session = self._session
        logger.info(
            "checkout %s: paying %s for %d lines",
            session.attempt_id,
            snapshot.display(),
            len(snapshot),
        )

        paid = await self._payment.pay(snapshot.amount_minor, prefill)
        match paid:
            case Error(err):
                return self._payment_failed(Errors.payment(FAILED_MESSAGE, err.cause))
            case Ok(payment_id):
                pass

        entry = LedgerEntry.open(session.attempt_id, payment_id, address_id, snapshot)
        opened = await guarded(self._ledger.open(entry), f"open attempt {entry.attempt_id}")
        if isinstance(opened, Error):
            # Payment is collected but cannot be tracked: stop before any order.
            logger.error(
                "checkout %s: ledger unavailable: %s",
                session.attempt_id,
                opened.error.message,
            )
            self._advance(PaymentSucceeded(payment_id))
            return self._orders_failed(_ledger_failure(opened.error))

        confirmed = await self._confirm(entry)
        if isinstance(confirmed, Error):
            return self._payment_failed(confirmed.error)

        self._advance(PaymentSucceeded(payment_id))
        return await self._create_orders(payment_id, address_id, snapshot)

    async def resume(self, attempt_id: AttemptId) -> Result[CheckoutSession, StorefrontError]:
        """
        Finish a paid attempt from its ledger entry in a new session.

        The payment is confirmed first if that never happened. Lines already
        ordered only get their cart delete; dequeued lines are skipped.
        The payment gateway is never opened again.
        """
        fetched = await guarded(self._ledger.get(attempt_id), f"read attempt {attempt_id}")
        match fetched:
            case Error(err):
                return Error(_ledger_failure(err))
            case Ok(None):
                return Error(Errors.validation(f"Unknown checkout attempt: {attempt_id}"))
            case Ok(found):
                entry: LedgerEntry = found

        self._session = CheckoutSession.begin(entry.attempt_id)
        logger.info(
            "checkout %s: resuming, %d of %d lines ordered",
            attempt_id,
            entry.ordered,
            len(entry.lines),
        )

        if not entry.confirmed:
            confirmed = await self._confirm(entry)
            if isinstance(confirmed, Error):
                self._notifier.notify(
                    Notice("Payment Failed", confirmed.error.message, Level.ERROR)
                )
                return confirmed

        snapshot = entry.snapshot()
        moved = self._advance(ResumeOrders(entry.payment_id, entry.address_id, snapshot))
        if isinstance(moved, Error):
            return moved
        return await self._create_orders(entry.payment_id, entry.address_id, snapshot)

    # ───────────────────────────────────────────────────────────────────────────
    # Steps
    # ───────────────────────────────────────────────────────────────────────────

    async def _confirm(self, entry: LedgerEntry) -> Result[None, StorefrontError]:
        body = PaymentConfirmation(amount=entry.amount, razorpay_payment_id=entry.payment_id)
        confirmed = await self._api.call(
            CONFIRM_PAYMENT,
            json=body.model_dump(),
            default_message="Failed to confirm payment",
        )
        if isinstance(confirmed, Error):
            logger.warning(
                "checkout %s: confirmation failed: %s", entry.attempt_id, confirmed.error
            )
            return Error(confirmed.error)

        marked = await guarded(
            self._ledger.mark_confirmed(entry.attempt_id), "mark payment confirmed"
        )
        if isinstance(marked, Error):
            logger.error("checkout %s: %s", entry.attempt_id, marked.error.message)
        return Ok(None)

    async def _create_orders(
        self,
        payment_id: PaymentId,
        address_id: AddressId,
        snapshot: CheckoutSnapshot,
    ) -> Result[CheckoutSession, StorefrontError]:
        session = self._session

        settled: list[LineSettled] = []
        for line in snapshot:
            job = LineJob(
                attempt_id=session.attempt_id,
                payment_id=payment_id,
                address_id=address_id,
                line=line,
                ledger=self._ledger,
                place=self._place_order,
                dequeue=self._cart.delete_line,
            )
            try:
                outcome = await settle_line(job)
            except Exception as e:
                logger.exception(
                    "checkout %s: line %s raised", session.attempt_id, job.variation_id
                )
                ordered = len(settled)
                return self._orders_failed(
                    Errors.partial(_partial_message(ordered, len(snapshot)), ordered, e)
                )

            match outcome:
                case Ok(done):
                    logger.debug(
                        "checkout %s: line %s %s",
                        session.attempt_id,
                        done.key,
                        done.action.value,
                    )
                    settled.append(done)
                case Error(failed):
                    ordered = len(settled) + (1 if failed.ordered else 0)
                    logger.error(
                        "checkout %s: line %s failed: %s",
                        session.attempt_id,
                        failed.variation_id,
                        failed.message,
                    )
                    return self._orders_failed(
                        _line_failure(failed, ordered, len(snapshot))
                    )

        self._advance(OrdersPlaced(len(settled)))
        logger.info("checkout %s: done, %d orders", session.attempt_id, len(settled))
        self._notifier.notify(Notice("Success", self._session.message or ""))
        return Ok(self._session)

    def _place_order(
        self, request: OrderRequest, key: str
    ) -> LazyCoroResult[Any, StorefrontError]:
        return self._api.call(
            CREATE_ORDER,
            json=request.model_dump(),
            headers={IDEMPOTENCY_HEADER: key},
            default_message="Failed to create order",
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Transitions
    # ───────────────────────────────────────────────────────────────────────────

    def _advance(self, event: Event) -> Result[CheckoutSession, StorefrontError]:
        moved = transition(self._session, event)
        match moved:
            case Ok(session):
                logger.debug(
                    "checkout %s: %s -> %s",
                    session.attempt_id,
                    self._session.state.name,
                    session.state.name,
                )
                self._session = session
            case Error(err):
                logger.info(
                    "checkout %s: %s refused: %s",
                    self._session.attempt_id,
                    type(event).__name__,
                    err,
                )
        return moved

    def _payment_failed(
        self, err: StorefrontError
    ) -> Result[CheckoutSession, StorefrontError]:
        self._advance(PaymentFailed(err))
        self._notifier.notify(Notice("Payment Failed", err.message, Level.ERROR))
        return Error(err)

    def _orders_failed(
        self, err: StorefrontError
    ) -> Result[CheckoutSession, StorefrontError]:
        self._advance(OrderCreationFailed(err))
        self._notifier.notify(Notice("Order Incomplete", err.message, Level.ERROR))
        return Error(err)

    @property
    def state(self) -> CheckoutState:
        return self._session.state


def _partial_message(ordered: int, total: int) -> str:
    return f"{ordered} of {total} items were ordered. Please check your cart."


def _line_failure(failed: LineFailed, ordered: int, total: int) -> StorefrontError:
    message = _partial_message(ordered, total)
    match failed.cause:
        case StorefrontError() as cause:
            return Errors.partial(message, ordered, cause)
        case LedgerError(cause=Exception() as exc):
            return replace(Errors.partial(message, ordered, exc), detail=failed.message)
        case _:
            return replace(Errors.partial(message, ordered), detail=failed.message)


def _ledger_failure(err: LedgerError) -> StorefrontError:
    """Payment is collected but its progress cannot be read or written."""
    failure = Errors.partial(f"Checkout progress unavailable: {err.message}", 0, err.cause)
    return replace(failure, detail=err.message)


__all__ = ("CheckoutOrchestrator", "IDEMPOTENCY_HEADER")
