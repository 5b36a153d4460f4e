"""
Client configuration — behavior knobs for the storefront client.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import timedelta


# ═══════════════════════════════════════════════════════════════════════════════
# Prefill — payment form defaults
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Prefill:
    email: str = "test@example.com"
    contact: str = "9876543210"
    name: str = "AshMart"

    def as_dict(self) -> dict[str, str]:
        return {"email": self.email, "contact": self.contact, "name": self.name}


# ═══════════════════════════════════════════════════════════════════════════════
# ClientConfig
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """
    Storefront client configuration.

    Fluent builder pattern — chain methods to configure.

    Example:
        config = (
            ClientConfig()
            .with_base_url("https://shop.example.com")
            .with_payment_key("rzp_live_xxx")
            .with_timeout(seconds=15)
        )

    Note: Immutable — each method returns new ClientConfig.
    timeout=None means no client-side timeout: a hung call blocks its step.
    """

    base_url: str = "http://localhost:8000"
    token_key: str = "userToken"
    payment_key: str = "rzp_test_key"
    currency: str = "INR"
    merchant_name: str = "AshMart"
    payment_description: str = "Order Payment"
    theme_color: str | None = "#6366F1"
    prefill: Prefill = field(default_factory=Prefill)
    timeout: timedelta | None = None
    ledger_url: str = "sqlite+aiosqlite:///:memory:"

    def with_base_url(self, url: str) -> ClientConfig:
        return replace(self, base_url=url.rstrip("/"))

    def with_token_key(self, key: str) -> ClientConfig:
        return replace(self, token_key=key)

    def with_payment_key(self, key: str) -> ClientConfig:
        return replace(self, payment_key=key)

    def with_currency(self, currency: str) -> ClientConfig:
        return replace(self, currency=currency.upper())

    def with_merchant(self, name: str, description: str | None = None) -> ClientConfig:
        return replace(
            self,
            merchant_name=name,
            payment_description=description or self.payment_description,
        )

    def with_theme(self, color: str | None) -> ClientConfig:
        return replace(self, theme_color=color)

    def with_prefill(self, prefill: Prefill) -> ClientConfig:
        return replace(self, prefill=prefill)

    def with_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> ClientConfig:
        """
        Set transport timeout.

            .with_timeout(seconds=10)
            .with_timeout()            # back to no timeout
        """
        if delta is not None:
            return replace(self, timeout=delta)
        return replace(self, timeout=timedelta(seconds=seconds) if seconds else None)

    def with_ledger_url(self, url: str) -> ClientConfig:
        return replace(self, ledger_url=url)

    @property
    def timeout_seconds(self) -> float | None:
        return self.timeout.total_seconds() if self.timeout is not None else None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build from STOREFRONT_* variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        config = cls()

        if url := env.get("STOREFRONT_BASE_URL"):
            config = config.with_base_url(url)
        if key := env.get("STOREFRONT_TOKEN_KEY"):
            config = config.with_token_key(key)
        if key := env.get("STOREFRONT_PAYMENT_KEY"):
            config = config.with_payment_key(key)
        if currency := env.get("STOREFRONT_CURRENCY"):
            config = config.with_currency(currency)
        if name := env.get("STOREFRONT_MERCHANT_NAME"):
            config = config.with_merchant(name)
        if timeout := env.get("STOREFRONT_TIMEOUT"):
            config = config.with_timeout(seconds=float(timeout))
        if ledger := env.get("STOREFRONT_LEDGER_URL"):
            config = config.with_ledger_url(ledger)

        return config


__all__ = ("Prefill", "ClientConfig")
