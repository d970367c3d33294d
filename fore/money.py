"""
Exact monetary amounts.

All currency in the engine is held as integer cents so that rent, salary and
trade arithmetic never picks up floating-point rounding error.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENTS_PER_DOLLAR = 100


@dataclass(frozen=True, order=True)
class Money:
    """An immutable amount of currency stored as integer cents."""

    cents: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.cents, bool) or not isinstance(self.cents, int):
            raise TypeError(f"Money must be built from integer cents, got {self.cents!r}")

    @classmethod
    def of_cents(cls, cents: int) -> "Money":
        return cls(cents)

    @classmethod
    def of_dollars(cls, dollars: Union[int, float, str, Decimal]) -> "Money":
        """Build an amount from dollars, rounding fractional cents half-up."""
        if isinstance(dollars, int):
            return cls(dollars * CENTS_PER_DOLLAR)
        cents = (Decimal(str(dollars)) * CENTS_PER_DOLLAR).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        return cls(int(cents))

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    def to_dollars(self) -> Decimal:
        return (Decimal(self.cents) / CENTS_PER_DOLLAR).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def add(self, other: "Money") -> "Money":
        return Money(self.cents + other.cents)

    def subtract(self, other: "Money") -> "Money":
        return Money(self.cents - other.cents)

    def multiply(self, factor: Union[int, float, Decimal]) -> "Money":
        """
        Scale the amount.

        Integer factors are exact. Fractional factors are applied with
        Decimal arithmetic and rounded half-up to the nearest cent.
        """
        if isinstance(factor, int) and not isinstance(factor, bool):
            return Money(self.cents * factor)
        scaled = (Decimal(self.cents) * Decimal(str(factor))).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        return Money(int(scaled))

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return self.subtract(other)

    def __mul__(self, factor: Union[int, float, Decimal]) -> "Money":
        if isinstance(factor, Money):
            return NotImplemented
        return self.multiply(factor)

    __rmul__ = __mul__

    def __neg__(self) -> "Money":
        return Money(-self.cents)

    def is_zero(self) -> bool:
        return self.cents == 0

    def is_negative(self) -> bool:
        return self.cents < 0

    def is_positive(self) -> bool:
        return self.cents > 0

    def __str__(self) -> str:
        dollars = self.to_dollars()
        sign = "-" if dollars < 0 else ""
        return f"{sign}${abs(dollars):,.2f}"
