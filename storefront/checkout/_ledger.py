"""
Checkout ledger — local record of how far each paid attempt got.

An entry is opened once payment is collected. Each snapshot line then moves
pending → ordered → dequeued as its order is created and its cart line
deleted. A crashed or failed attempt can be resumed from the entry without
paying again.

All methods return Result for explicit error handling.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Protocol

from kungfu import Error, Ok, Result

from storefront._models import CartLine
from storefront._types import AddressId, AttemptId, PaymentId, VariationId
from storefront.checkout._snapshot import CheckoutSnapshot


def line_key(attempt_id: AttemptId, variation_id: VariationId) -> str:
    """Idempotency key for one line of one attempt."""
    return f"{attempt_id}:{variation_id}"


# ═══════════════════════════════════════════════════════════════════════════════
# Entry
# ═══════════════════════════════════════════════════════════════════════════════


class LineStage(Enum):
    PENDING = "pending"
    ORDERED = "ordered"
    DEQUEUED = "dequeued"


@dataclass(frozen=True, slots=True)
class LedgerLine:
    line: CartLine
    key: str
    stage: LineStage = LineStage.PENDING

    @property
    def variation_id(self) -> VariationId:
        return self.line.variation_id


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """
    Progress of one paid attempt.

    amount is in major units, as confirmed to the backend.
    """

    attempt_id: AttemptId
    payment_id: PaymentId
    amount: float
    address_id: AddressId
    lines: tuple[LedgerLine, ...]
    confirmed: bool = False
    created_at: datetime | None = None

    @classmethod
    def open(
        cls,
        attempt_id: AttemptId,
        payment_id: PaymentId,
        address_id: AddressId,
        snapshot: CheckoutSnapshot,
    ) -> LedgerEntry:
        return cls(
            attempt_id=attempt_id,
            payment_id=payment_id,
            amount=snapshot.discount_total,
            address_id=address_id,
            lines=tuple(
                LedgerLine(line=line, key=line_key(attempt_id, line.variation_id))
                for line in snapshot
            ),
            created_at=datetime.now(),
        )

    def line(self, variation_id: VariationId) -> LedgerLine | None:
        return next((ln for ln in self.lines if ln.variation_id == variation_id), None)

    def stage(self, variation_id: VariationId) -> LineStage | None:
        found = self.line(variation_id)
        return found.stage if found else None

    @property
    def ordered(self) -> int:
        """Lines whose order exists server-side."""
        return sum(1 for ln in self.lines if ln.stage != LineStage.PENDING)

    @property
    def is_complete(self) -> bool:
        return self.confirmed and all(ln.stage == LineStage.DEQUEUED for ln in self.lines)

    def snapshot(self) -> CheckoutSnapshot:
        return CheckoutSnapshot.of(ln.line for ln in self.lines)

    def with_stage(self, variation_id: VariationId, stage: LineStage) -> LedgerEntry:
        return replace(
            self,
            lines=tuple(
                replace(ln, stage=stage) if ln.variation_id == variation_id else ln
                for ln in self.lines
            ),
        )


@dataclass(frozen=True)
class LedgerError:
    """Ledger storage error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Ledger Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Ledger(Protocol):
    """
    Storage for checkout progress.

    Example — custom implementation:

        class RedisLedger(Ledger):
            async def get(self, attempt_id: str) -> Result[LedgerEntry | None, LedgerError]:
                raw = await redis.get(f"ledger:{attempt_id}")
                ...
    """

    async def open(self, entry: LedgerEntry) -> Result[None, LedgerError]:
        """Record a new attempt. Refused if the attempt id is taken."""
        ...

    async def get(self, attempt_id: AttemptId) -> Result[LedgerEntry | None, LedgerError]:
        """Returns Ok(None) if the attempt is unknown."""
        ...

    async def mark_confirmed(self, attempt_id: AttemptId) -> Result[None, LedgerError]: ...

    async def mark_line(
        self,
        attempt_id: AttemptId,
        variation_id: VariationId,
        stage: LineStage,
    ) -> Result[None, LedgerError]: ...


async def guarded[T](
    step: Awaitable[Result[T, LedgerError]], what: str
) -> Result[T, LedgerError]:
    """Await a ledger call; an exception from the backend becomes a LedgerError."""
    try:
        return await step
    except Exception as e:
        return Error(LedgerError(f"Failed to {what}: {e}", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Ledger
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryLedger:
    """In-memory ledger. Progress is lost with the process."""

    def __init__(self) -> None:
        self._entries: dict[AttemptId, LedgerEntry] = {}
        self._lock = asyncio.Lock()

    async def open(self, entry: LedgerEntry) -> Result[None, LedgerError]:
        async with self._lock:
            if entry.attempt_id in self._entries:
                return Error(LedgerError(f"Attempt already recorded: {entry.attempt_id}"))
            self._entries[entry.attempt_id] = entry
            return Ok(None)

    async def get(self, attempt_id: AttemptId) -> Result[LedgerEntry | None, LedgerError]:
        async with self._lock:
            return Ok(self._entries.get(attempt_id))

    async def mark_confirmed(self, attempt_id: AttemptId) -> Result[None, LedgerError]:
        async with self._lock:
            entry = self._entries.get(attempt_id)
            if entry is None:
                return Error(LedgerError(f"Unknown attempt: {attempt_id}"))
            self._entries[attempt_id] = replace(entry, confirmed=True)
            return Ok(None)

    async def mark_line(
        self,
        attempt_id: AttemptId,
        variation_id: VariationId,
        stage: LineStage,
    ) -> Result[None, LedgerError]:
        async with self._lock:
            entry = self._entries.get(attempt_id)
            if entry is None or entry.line(variation_id) is None:
                key = line_key(attempt_id, variation_id)
                return Error(LedgerError(f"Unknown line: {key}"))
            self._entries[attempt_id] = entry.with_stage(variation_id, stage)
            return Ok(None)


__all__ = (
    "line_key",
    "LineStage",
    "LedgerLine",
    "LedgerEntry",
    "LedgerError",
    "Ledger",
    "guarded",
    "MemoryLedger",
)
