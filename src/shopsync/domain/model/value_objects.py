"""Money and sold quantities.

Both are frozen and validated on construction.  Invoice totals are
computed at the counter and recomputed nowhere else, but a queued sale
carries its amount as a string, so ``Money`` must survive a trip through
``str(amount)`` and back without drift.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from shopsync.domain.exceptions import ValidationError

PAISE = Decimal("0.01")
CURRENCY_SYMBOLS = {"INR": "₹"}


@dataclass(frozen=True)
class Money:
    """A non-negative amount in one currency (rupees unless stated)."""

    amount: Decimal
    currency: str = "INR"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money needs a Decimal amount, got {type(self.amount).__name__}"
            )
        if self.amount.is_signed() and self.amount != 0:
            raise ValidationError(f"Money amount cannot be negative: {self.amount}")

    def __add__(self, other: Money) -> Money:
        self._require_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, quantity: int | float) -> Money:
        """Price of *quantity* display units, rounded half-up to the paisa."""
        if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
            raise TypeError(f"Can only multiply Money by a number, got {type(quantity).__name__}")
        total = self.amount * Decimal(str(quantity))
        return Money(total.quantize(PAISE, rounding=ROUND_HALF_UP), self.currency)

    def __str__(self) -> str:
        symbol = CURRENCY_SYMBOLS.get(self.currency, f"{self.currency} ")
        return f"{symbol}{self.amount:.2f}"

    def _require_currency(self, other: Money) -> None:
        if other.currency != self.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0.00"))

    @staticmethod
    def of(value: str | float | int | Decimal) -> Money:
        """Parse a price cell or user input such as ``"1,250.50"``."""
        text = str(value).replace(",", "").strip()
        try:
            amount = Decimal(text)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {value!r}") from exc
        if not amount.is_finite():
            raise ValidationError(f"Invalid money amount: {value!r}")
        return Money(amount)


@dataclass(frozen=True)
class Quantity:
    """How many display units were sold; fractional values like 1.5 kg are fine."""

    value: float

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise ValidationError(f"Quantity must be a number, got {self.value!r}")
        if not self.value > 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return f"{self.value:g}"
