"""
Scripted payment gateway — plays back a fixed list of outcomes.

    gateway = ScriptedGateway.succeeding("pay_abc")
    gateway = ScriptedGateway.failing("Payment cancelled by user")
    gateway = ScriptedGateway(["pay_1", PaymentFailure(code=2)])

    gateway.opened          # every PaymentOptions it was handed
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping
from typing import Any

from storefront.payment import FAILED_MESSAGE, PaymentFailure, PaymentOptions

type Outcome = str | Mapping[str, Any] | Exception


class ScriptedGateway:
    """
    Each open() consumes the next outcome.

    str: resolves with that payment id.
    Mapping: resolves with the mapping as is.
    Exception: raised.

    The last outcome repeats once the script runs out.
    """

    def __init__(self, outcomes: Iterable[Outcome]) -> None:
        self._outcomes: deque[Outcome] = deque(outcomes)
        if not self._outcomes:
            raise ValueError("ScriptedGateway needs at least one outcome")
        self.opened: list[PaymentOptions] = []

    @classmethod
    def succeeding(cls, payment_id: str = "pay_test") -> ScriptedGateway:
        return cls([payment_id])

    @classmethod
    def failing(cls, description: str = FAILED_MESSAGE) -> ScriptedGateway:
        return cls([PaymentFailure(description, code=2, reason="payment_cancelled")])

    @property
    def calls(self) -> int:
        return len(self.opened)

    async def open(self, options: PaymentOptions) -> Mapping[str, Any]:
        self.opened.append(options)
        outcome = self._outcomes.popleft() if len(self._outcomes) > 1 else self._outcomes[0]
        match outcome:
            case Exception() as exc:
                raise exc
            case str() as payment_id:
                return {"razorpay_payment_id": payment_id}
            case _:
                return outcome


__all__ = ("ScriptedGateway",)
