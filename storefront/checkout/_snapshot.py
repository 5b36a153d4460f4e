"""
Checkout snapshot — the cart as it was when payment started.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from storefront._models import CartLine


@dataclass(frozen=True, slots=True)
class CheckoutSnapshot:
    """
    Frozen cart lines and the amount owed for them.

    discount_total is accumulated in float, unrounded. Only display()
    rounds; amount_minor scales the unrounded value.
    """

    lines: tuple[CartLine, ...]
    discount_total: float

    @classmethod
    def of(cls, lines: Iterable[CartLine]) -> CheckoutSnapshot:
        frozen = tuple(lines)
        total = 0.0
        for line in frozen:
            total += line.product.discount_price * line.quantity
        return cls(lines=frozen, discount_total=total)

    @property
    def amount_minor(self) -> int:
        return round(self.discount_total * 100)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def display(self) -> str:
        return f"{self.discount_total:.2f}"

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)


__all__ = ("CheckoutSnapshot",)
