"""
Payment gateway adapter — the provider's checkout sheet behind a Result.

The gateway itself is opaque: it is handed the options, shows its UI and
either resolves with the provider's payment id or raises.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from combinators import lift as L
from kungfu import Error, Ok, Result
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from storefront._config import ClientConfig, Prefill
from storefront._errors import Errors, StorefrontError
from storefront._types import PaymentId

logger = logging.getLogger(__name__)

FAILED_MESSAGE = "Transaction was cancelled or failed"


# ═══════════════════════════════════════════════════════════════════════════════
# Gateway Protocol
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentOptions:
    """Options handed to the provider. amount is in minor units (paise)."""

    amount: int
    currency: str
    key: str
    name: str
    description: str
    prefill: Prefill = field(default_factory=Prefill)
    image: str | None = None
    theme_color: str | None = None

    def as_dict(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "amount": self.amount,
            "currency": self.currency,
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "prefill": self.prefill.as_dict(),
        }
        if self.image:
            options["image"] = self.image
        if self.theme_color:
            options["theme"] = {"color": self.theme_color}
        return options


class PaymentGateway(Protocol):
    """
    Provider checkout UI.

    open() resolves with at least {"razorpay_payment_id": ...} or raises
    on cancel/failure.
    """

    async def open(self, options: PaymentOptions) -> Mapping[str, Any]: ...


class PaymentFailure(Exception):
    """Raised by gateways on cancel/failure. Mirrors the provider failure payload."""

    def __init__(
        self,
        description: str = FAILED_MESSAGE,
        *,
        code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(description)
        self.description = description
        self.code = code
        self.reason = reason


class _Success(BaseModel):
    model_config = ConfigDict(extra="ignore")

    razorpay_payment_id: str = Field(min_length=1)


# ═══════════════════════════════════════════════════════════════════════════════
# Adapter
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentAdapter:
    """
    Collects one payment.

    Example:
        adapter = PaymentAdapter(gateway, config)
        match await adapter.pay(25000):
            case Ok(payment_id): ...
            case Error(e): ...     # e.kind == PAYMENT
    """

    def __init__(self, gateway: PaymentGateway, config: ClientConfig) -> None:
        self._gateway = gateway
        self._config = config

    def options(self, amount_minor: int, prefill: Prefill | None = None) -> PaymentOptions:
        return PaymentOptions(
            amount=amount_minor,
            currency=self._config.currency,
            key=self._config.payment_key,
            name=self._config.merchant_name,
            description=self._config.payment_description,
            prefill=prefill or self._config.prefill,
            theme_color=self._config.theme_color,
        )

    async def pay(
        self, amount_minor: int, prefill: Prefill | None = None
    ) -> Result[PaymentId, StorefrontError]:
        if amount_minor <= 0:
            logger.warning("payment refused: amount=%s", amount_minor)
            return Error(Errors.validation("Amount must be positive"))

        options = self.options(amount_minor, prefill)
        logger.info("opening payment gateway: %s %s", options.amount, options.currency)

        opened = await L.catching_async(
            lambda: self._gateway.open(options),
            on_error=lambda exc: Errors.payment(FAILED_MESSAGE, exc),
        )

        match opened:
            case Error(err):
                logger.warning("payment failed: %r", err.cause)
                return Error(err)
            case Ok(payload):
                try:
                    payment_id = _Success.model_validate(payload).razorpay_payment_id
                except ValidationError as exc:
                    logger.error("payment gateway answered without an id: %s", exc)
                    return Error(Errors.payment(FAILED_MESSAGE, exc))
                logger.info("payment collected: %s", payment_id)
                return Ok(payment_id)


__all__ = (
    "PaymentOptions",
    "PaymentGateway",
    "PaymentFailure",
    "PaymentAdapter",
    "FAILED_MESSAGE",
)
