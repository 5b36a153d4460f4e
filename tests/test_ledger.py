"""
Checkout ledger storage and resuming a broken checkout from it.
"""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from kungfu import Error, Ok
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from storefront import CartLine, ErrorKind, ProductVariation
from storefront.api import ApiClient
from storefront.cart import CartRepository
from storefront.checkout import (
    CheckoutOrchestrator,
    CheckoutSnapshot,
    CheckoutState,
    Ledger,
    LedgerEntry,
    LineAction,
    LineJob,
    LineStage,
    MemoryLedger,
    SQLAlchemyLedger,
    settle_line,
)
from storefront.payment import PaymentAdapter
from storefront.testing import FakeStorefront, ScriptedGateway


def _line(variation_id: int, quantity: int = 1) -> CartLine:
    product = ProductVariation(
        id=variation_id, original_price=10.0, discount_price=10.0, stock=5
    )
    return CartLine(id=variation_id + 1000, product=product, quantity=quantity)


def _entry(attempt_id: str = "a1") -> LedgerEntry:
    return LedgerEntry.open(
        attempt_id, "pay_abc", 5, CheckoutSnapshot.of([_line(10, 2), _line(20)])
    )


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await SQLAlchemyLedger.create_tables(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(params=["memory", "sqlalchemy"])
def any_ledger(request: pytest.FixtureRequest, engine: AsyncEngine) -> Ledger:
    if request.param == "memory":
        return MemoryLedger()
    return SQLAlchemyLedger(async_sessionmaker(engine, expire_on_commit=False))


# ============================================================================
# Storage
# ============================================================================


class TestEntry:
    def test_open(self):
        entry = _entry()

        assert entry.amount == 30.0
        assert [ln.key for ln in entry.lines] == ["a1:10", "a1:20"]
        assert entry.ordered == 0
        assert not entry.is_complete

    def test_progress(self):
        entry = _entry().with_stage(10, LineStage.DEQUEUED).with_stage(20, LineStage.ORDERED)

        assert entry.ordered == 2
        assert entry.stage(20) == LineStage.ORDERED
        assert entry.stage(99) is None


class TestLedgerStorage:
    async def test_round_trip_keeps_lines_in_order(self, any_ledger: Ledger):
        await any_ledger.open(_entry())

        result = await any_ledger.get("a1")

        assert isinstance(result, Ok)
        entry = result.value
        assert entry is not None
        assert entry.payment_id == "pay_abc"
        assert entry.address_id == 5
        assert [ln.variation_id for ln in entry.lines] == [10, 20]
        assert entry.lines[0].line.quantity == 2
        assert entry.snapshot().amount_minor == 3000

    async def test_unknown_attempt(self, any_ledger: Ledger):
        result = await any_ledger.get("nope")

        assert isinstance(result, Ok)
        assert result.value is None

    async def test_duplicate_open_refused(self, any_ledger: Ledger):
        await any_ledger.open(_entry())

        assert isinstance(await any_ledger.open(_entry()), Error)

    async def test_marks(self, any_ledger: Ledger):
        await any_ledger.open(_entry())

        assert isinstance(await any_ledger.mark_confirmed("a1"), Ok)
        assert isinstance(await any_ledger.mark_line("a1", 10, LineStage.DEQUEUED), Ok)
        assert isinstance(await any_ledger.mark_line("a1", 20, LineStage.DEQUEUED), Ok)

        result = await any_ledger.get("a1")
        assert isinstance(result, Ok)
        assert result.value is not None
        assert result.value.is_complete

    async def test_mark_unknown(self, any_ledger: Ledger):
        assert isinstance(await any_ledger.mark_confirmed("nope"), Error)
        assert isinstance(await any_ledger.mark_line("nope", 10, LineStage.ORDERED), Error)


# ============================================================================
# Line graph
# ============================================================================


class TestSettleLine:
    def _job(self, ledger: Ledger, calls: list[str], variation_id: int = 10) -> LineJob:
        async def place(request, key):
            calls.append(f"order:{request.product_variation_id}:{key}")
            return Ok({"order_id": 1})

        async def dequeue(variation_id):
            calls.append(f"delete:{variation_id}")
            return Ok(None)

        return LineJob(
            attempt_id="a1",
            payment_id="pay_abc",
            address_id=5,
            line=_line(variation_id, 2),
            ledger=ledger,
            place=place,
            dequeue=dequeue,
        )

    async def test_fresh_line(self):
        ledger = MemoryLedger()
        await ledger.open(_entry())
        calls: list[str] = []

        result = await settle_line(self._job(ledger, calls))

        assert isinstance(result, Ok)
        assert result.value.action == LineAction.PLACED
        assert calls == ["order:10:a1:10", "delete:10"]
        stored = await ledger.get("a1")
        assert isinstance(stored, Ok)
        assert stored.value is not None
        assert stored.value.stage(10) == LineStage.DEQUEUED

    async def test_ordered_line_only_deletes(self):
        ledger = MemoryLedger()
        await ledger.open(_entry().with_stage(10, LineStage.ORDERED))
        calls: list[str] = []

        result = await settle_line(self._job(ledger, calls))

        assert isinstance(result, Ok)
        assert result.value.action == LineAction.DEQUEUED
        assert calls == ["delete:10"]

    async def test_dequeued_line_is_skipped(self):
        ledger = MemoryLedger()
        await ledger.open(_entry().with_stage(10, LineStage.DEQUEUED))
        calls: list[str] = []

        result = await settle_line(self._job(ledger, calls))

        assert isinstance(result, Ok)
        assert result.value.action == LineAction.SKIPPED
        assert calls == []

    async def test_line_missing_from_ledger(self):
        ledger = MemoryLedger()
        await ledger.open(_entry())
        calls: list[str] = []

        result = await settle_line(self._job(ledger, calls, variation_id=99))

        assert isinstance(result, Error)
        assert not result.error.ordered
        assert calls == []


# ============================================================================
# Resume
# ============================================================================


async def _cart(fake: FakeStorefront, api: ApiClient) -> list[CartLine]:
    result = await CartRepository(api).fetch_cart()
    assert isinstance(result, Ok)
    fake.calls.clear()
    return result.value


def _orchestrator(api: ApiClient, gateway: ScriptedGateway, ledger: Ledger) -> CheckoutOrchestrator:
    return CheckoutOrchestrator(api, PaymentAdapter(gateway, api.config), ledger=ledger)


def _trail(fake: FakeStorefront) -> list[tuple[str, str]]:
    return [(c.method, c.path) for c in fake.mutations]


class TestResume:
    async def test_resume_orders_only_remaining_lines(
        self, two_line_cart: FakeStorefront, api: ApiClient, any_ledger: Ledger
    ):
        gateway = ScriptedGateway.succeeding("pay_abc")
        checkout = _orchestrator(api, gateway, any_ledger)
        two_line_cart.fail("POST", "/order/", skip=1)
        await checkout.proceed_to_pay(5, await _cart(two_line_cart, api))
        attempt = checkout.session.attempt_id
        two_line_cart.calls.clear()

        result = await checkout.resume(attempt)

        assert isinstance(result, Ok)
        assert result.value.state == CheckoutState.DONE
        assert result.value.attempt_id == attempt
        assert gateway.calls == 1
        assert _trail(two_line_cart) == [("POST", "/order/"), ("DELETE", "/delete-cart/20/")]
        assert two_line_cart.calls[0].idempotency_key == f"{attempt}:20"
        assert [o["product_variation"]["id"] for o in two_line_cart.orders] == [10, 20]
        assert two_line_cart.cart == {}

    async def test_resume_retries_the_missing_delete(
        self, two_line_cart: FakeStorefront, api: ApiClient, any_ledger: Ledger
    ):
        checkout = _orchestrator(api, ScriptedGateway.succeeding(), any_ledger)
        two_line_cart.fail("DELETE", "/delete-cart/")
        await checkout.proceed_to_pay(5, await _cart(two_line_cart, api))
        two_line_cart.calls.clear()

        result = await checkout.resume(checkout.session.attempt_id)

        assert isinstance(result, Ok)
        assert _trail(two_line_cart) == [
            ("DELETE", "/delete-cart/10/"),
            ("POST", "/order/"),
            ("DELETE", "/delete-cart/20/"),
        ]
        assert len(two_line_cart.orders) == 2

    async def test_resume_confirms_unconfirmed_payment_first(
        self, two_line_cart: FakeStorefront, api: ApiClient, any_ledger: Ledger
    ):
        gateway = ScriptedGateway.succeeding("pay_abc")
        checkout = _orchestrator(api, gateway, any_ledger)
        two_line_cart.fail("POST", "/payment/")
        await checkout.proceed_to_pay(5, await _cart(two_line_cart, api))
        two_line_cart.calls.clear()

        result = await checkout.resume(checkout.session.attempt_id)

        assert isinstance(result, Ok)
        assert _trail(two_line_cart)[0] == ("POST", "/payment/")
        assert two_line_cart.payments[0].razorpay_payment_id == "pay_abc"
        assert len(two_line_cart.orders) == 2
        assert gateway.calls == 1

    async def test_resume_after_restart(
        self, two_line_cart: FakeStorefront, api: ApiClient, engine: AsyncEngine
    ):
        before = _orchestrator(
            api,
            ScriptedGateway.succeeding("pay_abc"),
            SQLAlchemyLedger(async_sessionmaker(engine, expire_on_commit=False)),
        )
        two_line_cart.fail("POST", "/order/", skip=1)
        await before.proceed_to_pay(5, await _cart(two_line_cart, api))
        two_line_cart.calls.clear()

        gateway = ScriptedGateway.succeeding("pay_other")
        after = _orchestrator(
            api,
            gateway,
            SQLAlchemyLedger(async_sessionmaker(engine, expire_on_commit=False)),
        )
        result = await after.resume(before.session.attempt_id)

        assert isinstance(result, Ok)
        assert gateway.calls == 0
        assert two_line_cart.calls_to("POST", "/order/")[0].json["payment_id"] == "pay_abc"
        assert len(two_line_cart.orders) == 2

    async def test_resume_completed_attempt_does_nothing(
        self, two_line_cart: FakeStorefront, api: ApiClient, any_ledger: Ledger
    ):
        checkout = _orchestrator(api, ScriptedGateway.succeeding(), any_ledger)
        await checkout.proceed_to_pay(5, await _cart(two_line_cart, api))
        two_line_cart.calls.clear()

        result = await checkout.resume(checkout.session.attempt_id)

        assert isinstance(result, Ok)
        assert two_line_cart.calls == []
        assert len(two_line_cart.orders) == 2

    async def test_unknown_attempt(self, api: ApiClient, any_ledger: Ledger):
        checkout = _orchestrator(api, ScriptedGateway.succeeding(), any_ledger)

        result = await checkout.resume("missing")

        assert isinstance(result, Error)
        assert result.error.kind == ErrorKind.VALIDATION
