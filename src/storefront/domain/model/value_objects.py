"""Prices, quantities and billing cycles.

Frozen dataclasses: two prices with the same amount and currency are
the same price. Construction rejects anything out of range.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from storefront.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "CZK"

_NON_DIGITS = re.compile(r"[^\d]")
_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """A non-negative Decimal amount in one currency (CZK unless stated)."""

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Price must be a Decimal amount, not {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Price {self.amount} is negative")

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Build from anything ``Decimal(str(x))`` understands."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0.00"), currency)

    # --- Arithmetic -----------------------------------------------------------

    def __add__(self, other: Money) -> Money:
        if other.currency != self.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, units: int) -> Money:
        if isinstance(units, bool) or not isinstance(units, int):
            raise TypeError(f"Money times {type(units).__name__} is not supported")
        return Money(self.amount * units, self.currency)

    def rounded(self) -> Money:
        """Round half-up to whole cents."""
        return Money(self.amount.quantize(_CENTS, rounding=ROUND_HALF_UP), self.currency)

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"


def numeric_price(label: str) -> Money:
    """Parse a display price such as ``"499 Kč"`` by dropping every non-digit.

    Decimal separators are dropped too (``"1 299,50 Kč"`` -> 129950); the
    storefront only ever shows whole-crown prices.
    """
    digits = _NON_DIGITS.sub("", label or "")
    if not digits:
        return Money.zero()
    return Money(Decimal(digits))


@dataclass(frozen=True)
class Quantity:
    """Units of one cart line; always at least one."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(f"Quantity {self.value!r} is not an integer")
        if self.value < 1:
            raise ValidationError(f"Quantity {self.value} is not positive")

    def __str__(self) -> str:
        return str(self.value)


class BillingCycle(Enum):
    """HostBill billing cycle codes."""

    MONTHLY = "m"
    QUARTERLY = "q"
    SEMIANNUALLY = "s"
    ANNUALLY = "a"

    @staticmethod
    def parse(raw: str | None) -> BillingCycle:
        """Accept either the HostBill code (``"m"``) or the long name (``"monthly"``)."""
        if not raw:
            return BillingCycle.MONTHLY
        value = raw.strip().lower()
        for cycle in BillingCycle:
            if value in (cycle.value, cycle.name.lower()):
                return cycle
        raise ValidationError(f"Unknown billing cycle: {raw!r}")
