"""Money value object for rental amounts."""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN
from functools import total_ordering
from typing import Union

from .exceptions import CurrencyMismatchError


# Display precision per currency
CURRENCY_DECIMALS = {
    'USD': 2, 'EUR': 2, 'GBP': 2, 'MXN': 2,
    'CAD': 2, 'AUD': 2, 'CHF': 2,
    'JPY': 0, 'KRW': 0,
}

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal, going through str to avoid float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@total_ordering
@dataclass(frozen=True)
class Money:
    """
    Immutable money value object.

    Amounts keep full Decimal precision through every pricing step.
    Rounding happens only when quantized() is called for display.

    Usage:
        rent = Money("4150", "USD")
        fee = rent * Decimal("0.12")     # Money('498.00', 'USD')
        due = (rent + fee).quantized()
    """
    amount: Decimal
    currency: str = "USD"

    def __post_init__(self):
        """Normalize amount to Decimal."""
        if not isinstance(self.amount, Decimal):
            # Use object.__setattr__ because dataclass is frozen
            object.__setattr__(self, 'amount', to_decimal(self.amount))

    @classmethod
    def zero(cls, currency: str = "USD") -> 'Money':
        return cls(Decimal("0"), currency)

    def quantized(self) -> 'Money':
        """
        Return a copy rounded to the currency's display precision.

        Uses banker's rounding (ROUND_HALF_EVEN).
        """
        decimals = CURRENCY_DECIMALS.get(self.currency, 2)
        quantized_amount = self.amount.quantize(
            Decimal(10) ** -decimals,
            rounding=ROUND_HALF_EVEN
        )
        return Money(quantized_amount, self.currency)

    def _require_same_currency(self, other: 'Money', verb: str):
        if not isinstance(other, Money):
            raise TypeError(f"Cannot {verb} Money and {type(other).__name__}")
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                f"Cannot {verb} {self.currency} and {other.currency}"
            )

    def __add__(self, other: 'Money') -> 'Money':
        self._require_same_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._require_same_currency(other, "subtract")
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor: Number) -> 'Money':
        """Multiply by a numeric factor (rates, fractions, day counts)."""
        if isinstance(factor, Money):
            raise TypeError("Cannot multiply Money by Money")
        return Money(self.amount * to_decimal(factor), self.currency)

    def __rmul__(self, factor: Number) -> 'Money':
        return self.__mul__(factor)

    def __neg__(self) -> 'Money':
        return Money(-self.amount, self.currency)

    def __lt__(self, other: 'Money') -> bool:
        self._require_same_currency(other, "compare")
        return self.amount < other.amount

    def __str__(self) -> str:
        return f"{self.quantized().amount} {self.currency}"

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def is_zero(self) -> bool:
        return self.amount == 0
