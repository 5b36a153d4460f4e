"""
Line graph — one snapshot line through order creation, as nodnod nodes.

Architecture:
    LineJob (injected)
         │
         ▼
    JobNode
         │
         ▼
    FetchStageNode (reads the ledger)
         │
         ├── LedgerFailedNode ──┐
         ├── FreshLineNode ─────┤
         ├── OrderedLineNode ───┼── LineOutcome (@polymorphic)
         └── DequeuedLineNode ──┘          │
                                           ▼
                                     LineResultNode

Fresh lines get an order then a cart delete. Lines ordered by an earlier
run only get the delete. Dequeued lines are skipped.

Note: no 'from __future__ import annotations' here, nodnod resolves
dependencies from the runtime type hints.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from kungfu import Error, Ok, Result
from nodnod import NodeError, case, polymorphic

from storefront import _graph as G
from storefront._errors import StorefrontError
from storefront._models import CartLine, OrderRequest
from storefront._types import AddressId, AttemptId, PaymentId, VariationId
from storefront.checkout._ledger import Ledger, LedgerError, LineStage, guarded, line_key

type PlaceFn = Callable[[OrderRequest, str], Awaitable[Result[Any, StorefrontError]]]
type DequeueFn = Callable[[VariationId], Awaitable[Result[None, StorefrontError]]]


# ═══════════════════════════════════════════════════════════════════════════════
# Input — Job (injected)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class LineJob:
    """
    Everything needed to settle one line.

    place: creates the order, sending the idempotency key along.
    dequeue: deletes the cart line by variation id.
    """

    attempt_id: AttemptId
    payment_id: PaymentId
    address_id: AddressId
    line: CartLine
    ledger: Ledger
    place: PlaceFn
    dequeue: DequeueFn

    @property
    def variation_id(self) -> VariationId:
        return self.line.variation_id

    @property
    def key(self) -> str:
        return line_key(self.attempt_id, self.variation_id)

    def request(self) -> OrderRequest:
        return OrderRequest(
            payment_id=self.payment_id,
            product_variation_id=self.variation_id,
            quantity=self.line.quantity,
            shipment_address_id=self.address_id,
        )


@G.node
class JobNode:
    def __init__(self, job: LineJob) -> None:
        self.job = job

    @classmethod
    def __compose__(cls, job: LineJob) -> "JobNode":
        return cls(job)


# ═══════════════════════════════════════════════════════════════════════════════
# Fetch Stage
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class FetchStageNode:
    """Looks the line up in the ledger."""

    def __init__(
        self,
        job: LineJob,
        stage: LineStage | None,
        ledger_error: LedgerError | None = None,
    ) -> None:
        self.job = job
        self.stage = stage
        self.ledger_error = ledger_error

    @classmethod
    async def __compose__(cls, job_node: JobNode) -> "FetchStageNode":
        job = job_node.job
        result = await guarded(
            job.ledger.get(job.attempt_id), f"read attempt {job.attempt_id}"
        )

        match result:
            case Ok(None):
                return cls(job, None, LedgerError(f"Unknown attempt: {job.attempt_id}"))
            case Ok(entry):
                stage = entry.stage(job.variation_id)
                if stage is None:
                    return cls(job, None, LedgerError(f"Unknown line: {job.key}"))
                return cls(job, stage)
            case Error(err):
                return cls(job, None, err)


# ═══════════════════════════════════════════════════════════════════════════════
# Stage Nodes — each validates one ledger stage
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class LedgerFailedNode:
    def __init__(self, job: LineJob, error: LedgerError) -> None:
        self.job = job
        self.error = error

    @classmethod
    def __compose__(cls, fetch: FetchStageNode) -> "LedgerFailedNode":
        if fetch.ledger_error is None:
            raise NodeError("Ledger ok")
        return cls(fetch.job, fetch.ledger_error)


@G.node
class FreshLineNode:
    def __init__(self, job: LineJob) -> None:
        self.job = job

    @classmethod
    def __compose__(cls, fetch: FetchStageNode) -> "FreshLineNode":
        if fetch.stage != LineStage.PENDING:
            raise NodeError("Not pending")
        return cls(fetch.job)


@G.node
class OrderedLineNode:
    """Order exists server-side, cart line still there."""

    def __init__(self, job: LineJob) -> None:
        self.job = job

    @classmethod
    def __compose__(cls, fetch: FetchStageNode) -> "OrderedLineNode":
        if fetch.stage != LineStage.ORDERED:
            raise NodeError("Not ordered")
        return cls(fetch.job)


@G.node
class DequeuedLineNode:
    def __init__(self, job: LineJob) -> None:
        self.job = job

    @classmethod
    def __compose__(cls, fetch: FetchStageNode) -> "DequeuedLineNode":
        if fetch.stage != LineStage.DEQUEUED:
            raise NodeError("Not dequeued")
        return cls(fetch.job)


# ═══════════════════════════════════════════════════════════════════════════════
# Outcome Types
# ═══════════════════════════════════════════════════════════════════════════════


class LineAction(Enum):
    PLACED = "placed"
    DEQUEUED = "dequeued"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class LineSettled:
    """The line is ordered and gone from the cart."""

    variation_id: VariationId
    key: str
    action: LineAction


@dataclass(frozen=True)
class LineFailed:
    """
    The line broke off.

    ordered: True when the order was created before the failure.
    """

    variation_id: VariationId
    message: str
    ordered: bool
    cause: StorefrontError | LedgerError | None = None


type Outcome = LineSettled | LineFailed


async def _mark(job: LineJob, stage: LineStage) -> Result[None, LedgerError]:
    return await guarded(
        job.ledger.mark_line(job.attempt_id, job.variation_id, stage),
        f"mark line {job.key} {stage.value}",
    )


async def _dequeue(job: LineJob, action: LineAction) -> Outcome:
    deleted = await job.dequeue(job.variation_id)
    if isinstance(deleted, Error):
        return LineFailed(
            job.variation_id, deleted.error.message, ordered=True, cause=deleted.error
        )

    marked = await _mark(job, LineStage.DEQUEUED)
    if isinstance(marked, Error):
        return LineFailed(
            job.variation_id, marked.error.message, ordered=True, cause=marked.error
        )

    return LineSettled(job.variation_id, job.key, action)


# ═══════════════════════════════════════════════════════════════════════════════
# Polymorphic Outcome
# ═══════════════════════════════════════════════════════════════════════════════


@polymorphic[Outcome]
class LineOutcome:
    """Router: each @case depends on one validated stage node."""

    @case
    def ledger_failed(cls, node: LedgerFailedNode) -> Outcome:
        return LineFailed(
            node.job.variation_id, node.error.message, ordered=False, cause=node.error
        )

    @case
    async def place_and_dequeue(cls, node: FreshLineNode) -> Outcome:
        job = node.job
        placed = await job.place(job.request(), job.key)
        if isinstance(placed, Error):
            return LineFailed(
                job.variation_id, placed.error.message, ordered=False, cause=placed.error
            )

        marked = await _mark(job, LineStage.ORDERED)
        if isinstance(marked, Error):
            return LineFailed(
                job.variation_id, marked.error.message, ordered=True, cause=marked.error
            )

        return await _dequeue(job, LineAction.PLACED)

    @case
    async def dequeue_only(cls, node: OrderedLineNode) -> Outcome:
        return await _dequeue(node.job, LineAction.DEQUEUED)

    @case
    def skip(cls, node: DequeuedLineNode) -> Outcome:
        job = node.job
        return LineSettled(job.variation_id, job.key, LineAction.SKIPPED)


# ═══════════════════════════════════════════════════════════════════════════════
# Final Node
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class LineResultNode:
    def __init__(self, outcome: Outcome) -> None:
        self.outcome = outcome

    @classmethod
    def __compose__(cls, outcome: LineOutcome) -> "LineResultNode":
        return cls(outcome.value)

    def to_result(self) -> Result[LineSettled, LineFailed]:
        match self.outcome:
            case LineSettled() as settled:
                return Ok(settled)
            case LineFailed() as failed:
                return Error(failed)


# ═══════════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════════

_pipeline = G.graph(LineResultNode)


async def settle_line(job: LineJob) -> Result[LineSettled, LineFailed]:
    """Run one line through the graph."""
    node = await _pipeline(job)
    return node.to_result()


__all__ = (
    "LineJob",
    "LineAction",
    "LineSettled",
    "LineFailed",
    "Outcome",
    "JobNode",
    "FetchStageNode",
    "LedgerFailedNode",
    "FreshLineNode",
    "OrderedLineNode",
    "DequeuedLineNode",
    "LineOutcome",
    "LineResultNode",
    "settle_line",
)
