"""
SQLAlchemy ledger — checkout progress that survives a restart.

Usage:
    ledger = await SQLAlchemyLedger.connect("sqlite+aiosqlite:///checkout.db")
    orchestrator = CheckoutOrchestrator(..., ledger=ledger)

    # after a crash
    await orchestrator.resume(attempt_id)
"""

from datetime import datetime

from kungfu import Error, Ok, Result
from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from storefront._models import CartLine
from storefront._types import AttemptId, VariationId
from storefront.checkout._ledger import (
    LedgerEntry,
    LedgerError,
    LedgerLine,
    LineStage,
    line_key,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Tables
# ═══════════════════════════════════════════════════════════════════════════════


class LedgerBase(DeclarativeBase):
    pass


class AttemptTable(LedgerBase):
    __tablename__ = "checkout_attempts"

    attempt_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    payment_id: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    address_id: Mapped[int] = mapped_column(Integer, nullable=False)
    confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class AttemptLineTable(LedgerBase):
    """
    One snapshot line of an attempt.

    line holds the CartLine as JSON so a resumed attempt sees the same
    prices and quantities the customer paid for.
    """

    __tablename__ = "checkout_attempt_lines"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    attempt_id: Mapped[str] = mapped_column(
        ForeignKey("checkout_attempts.attempt_id"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    variation_id: Mapped[int] = mapped_column(Integer, nullable=False)
    line: Mapped[str] = mapped_column(Text, nullable=False)
    stage: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")


# ═══════════════════════════════════════════════════════════════════════════════
# Ledger
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyLedger:
    """
    Ledger over any async SQLAlchemy engine.

    Example:
        engine = create_async_engine(url)
        ledger = SQLAlchemyLedger(async_sessionmaker(engine, expire_on_commit=False))
        await ledger.create_tables(engine)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @classmethod
    async def connect(cls, url: str = "sqlite+aiosqlite:///:memory:") -> "SQLAlchemyLedger":
        """Create engine and tables, return a ready ledger."""
        engine = create_async_engine(url, echo=False)
        await cls.create_tables(engine)
        return cls(async_sessionmaker(engine, expire_on_commit=False))

    @staticmethod
    async def create_tables(engine: AsyncEngine) -> None:
        async with engine.begin() as conn:
            await conn.run_sync(LedgerBase.metadata.create_all)

    async def open(self, entry: LedgerEntry) -> Result[None, LedgerError]:
        try:
            async with self._session_factory() as session:
                if await session.get(AttemptTable, entry.attempt_id) is not None:
                    return Error(LedgerError(f"Attempt already recorded: {entry.attempt_id}"))

                session.add(
                    AttemptTable(
                        attempt_id=entry.attempt_id,
                        payment_id=entry.payment_id,
                        amount=entry.amount,
                        address_id=entry.address_id,
                        confirmed=entry.confirmed,
                        created_at=entry.created_at or datetime.now(),
                    )
                )
                session.add_all(
                    AttemptLineTable(
                        key=ln.key,
                        attempt_id=entry.attempt_id,
                        position=position,
                        variation_id=ln.variation_id,
                        line=ln.line.model_dump_json(),
                        stage=ln.stage.value,
                    )
                    for position, ln in enumerate(entry.lines)
                )
                await session.commit()
                return Ok(None)

        except Exception as e:
            return Error(LedgerError(f"Failed to open: {e}", e))

    async def get(self, attempt_id: AttemptId) -> Result[LedgerEntry | None, LedgerError]:
        try:
            async with self._session_factory() as session:
                attempt = await session.get(AttemptTable, attempt_id)
                if attempt is None:
                    return Ok(None)

                rows = (
                    await session.execute(
                        select(AttemptLineTable)
                        .where(AttemptLineTable.attempt_id == attempt_id)
                        .order_by(AttemptLineTable.position)
                    )
                ).scalars()

                return Ok(
                    LedgerEntry(
                        attempt_id=attempt.attempt_id,
                        payment_id=attempt.payment_id,
                        amount=attempt.amount,
                        address_id=attempt.address_id,
                        confirmed=attempt.confirmed,
                        created_at=attempt.created_at,
                        lines=tuple(
                            LedgerLine(
                                line=CartLine.model_validate_json(row.line),
                                key=row.key,
                                stage=LineStage(row.stage),
                            )
                            for row in rows
                        ),
                    )
                )

        except Exception as e:
            return Error(LedgerError(f"Failed to get: {e}", e))

    async def mark_confirmed(self, attempt_id: AttemptId) -> Result[None, LedgerError]:
        try:
            async with self._session_factory() as session:
                attempt = await session.get(AttemptTable, attempt_id)
                if attempt is None:
                    return Error(LedgerError(f"Unknown attempt: {attempt_id}"))

                attempt.confirmed = True
                await session.commit()
                return Ok(None)

        except Exception as e:
            return Error(LedgerError(f"Failed to confirm: {e}", e))

    async def mark_line(
        self,
        attempt_id: AttemptId,
        variation_id: VariationId,
        stage: LineStage,
    ) -> Result[None, LedgerError]:
        key = line_key(attempt_id, variation_id)
        try:
            async with self._session_factory() as session:
                row = await session.get(AttemptLineTable, key)
                if row is None:
                    return Error(LedgerError(f"Unknown line: {key}"))

                row.stage = stage.value
                await session.commit()
                return Ok(None)

        except Exception as e:
            return Error(LedgerError(f"Failed to mark line: {e}", e))


__all__ = (
    "LedgerBase",
    "AttemptTable",
    "AttemptLineTable",
    "SQLAlchemyLedger",
)
