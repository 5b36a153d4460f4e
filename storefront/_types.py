"""
Core types for storefront — identifier aliases shared by every component.
"""

from __future__ import annotations

# ═══════════════════════════════════════════════════════════════════════════════
# Identifiers
# ═══════════════════════════════════════════════════════════════════════════════

type LineId = int
"""Cart line primary key (server assigned)."""

type VariationId = int
"""Product variation primary key. Cart API addresses lines by this id."""

type AddressId = int

type PaymentId = str
"""Identifier returned by the payment provider (razorpay_payment_id)."""

type AttemptId = str
"""Client-generated id of one checkout attempt."""

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "LineId",
    "VariationId",
    "AddressId",
    "PaymentId",
    "AttemptId",
)
