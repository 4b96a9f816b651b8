"""
Money value object.
Amounts are held as integer minor units (paise, cents) so that sums of
many line items and payments never drift the way binary floats do.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from functools import total_ordering
from typing import Any, Union

from invoice_engine.domain.models.base import InvalidAmount


Numeric = Union[int, str, float, Decimal]

MINOR_UNIT_EXPONENT = 2
_MINOR_UNIT_SCALE = Decimal(10) ** MINOR_UNIT_EXPONENT
_HUNDRED = Decimal(100)


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """
    Parse a numeric input into a finite Decimal.
    Floats go through their string form so that 0.1 stays 0.1.
    Raises InvalidAmount for None, booleans, NaN, infinities and garbage.
    """
    if value is None:
        raise InvalidAmount(f"{field.capitalize()} is required", field)

    if isinstance(value, bool):
        raise InvalidAmount(f"{field.capitalize()} must be a number", field)

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidAmount(f"{field.capitalize()} must be a number: {value!r}", field)
    else:
        raise InvalidAmount(f"{field.capitalize()} must be a number", field)

    if not result.is_finite():
        raise InvalidAmount(f"{field.capitalize()} must be a finite number", field)

    return result


@total_ordering
@dataclass(frozen=True)
class Money:
    """
    Monetary amount in minor units.

    Construct from user input with ``Money.of``; the raw constructor takes
    an already validated integer count of minor units and may be negative
    (balances can be).
    """

    minor_units: int = 0

    def __post_init__(self):
        if isinstance(self.minor_units, bool) or not isinstance(self.minor_units, int):
            raise InvalidAmount("Money must be built from an integer number of minor units")

    @classmethod
    def of(cls, value: Numeric, allow_negative: bool = False, field: str = "amount") -> "Money":
        """Build Money from a major-unit value, rounding half up to minor units."""
        amount = to_decimal(value, field)
        if amount < 0 and not allow_negative:
            raise InvalidAmount(f"{field.capitalize()} cannot be negative", field)
        return cls(cls.round(amount * _MINOR_UNIT_SCALE))

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    @staticmethod
    def round(value: Decimal, mode: str = ROUND_HALF_UP) -> int:
        """Round a Decimal count of minor units to a whole minor unit."""
        return int(value.quantize(Decimal(1), rounding=mode))

    @property
    def amount(self) -> Decimal:
        """Value in major units, quantized to the minor unit."""
        return (Decimal(self.minor_units) / _MINOR_UNIT_SCALE).quantize(
            Decimal(1).scaleb(-MINOR_UNIT_EXPONENT)
        )

    @property
    def is_zero(self) -> bool:
        return self.minor_units == 0

    @property
    def is_negative(self) -> bool:
        return self.minor_units < 0

    @property
    def is_positive(self) -> bool:
        return self.minor_units > 0

    def add(self, other: "Money") -> "Money":
        """Add two money values."""
        self._check_operand(other)
        return Money(self.minor_units + other.minor_units)

    def subtract(self, other: "Money") -> "Money":
        """Subtract a money value; the result may be negative."""
        self._check_operand(other)
        return Money(self.minor_units - other.minor_units)

    def multiply_by_ratio(self, numerator: Numeric, denominator: Numeric = 1,
                          mode: str = ROUND_HALF_UP) -> "Money":
        """Scale by numerator/denominator, rounding once at the end."""
        num = to_decimal(numerator, "numerator")
        den = to_decimal(denominator, "denominator")
        if num < 0:
            raise InvalidAmount("Ratio cannot be negative", "numerator")
        if den <= 0:
            raise InvalidAmount("Ratio denominator must be positive", "denominator")
        return Money(self.round(Decimal(self.minor_units) * num / den, mode))

    def percentage_of(self, percent: Numeric, mode: str = ROUND_HALF_UP) -> "Money":
        """Return ``percent`` percent of this amount."""
        return self.multiply_by_ratio(percent, _HUNDRED, mode)

    def min(self, other: "Money") -> "Money":
        self._check_operand(other)
        return self if self.minor_units <= other.minor_units else other

    def _check_operand(self, other: Any) -> None:
        if not isinstance(other, Money):
            raise TypeError("Can only combine Money with Money")

    def __add__(self, other: "Money") -> "Money":
        return self.add(other)

    def __sub__(self, other: "Money") -> "Money":
        return self.subtract(other)

    def __lt__(self, other: "Money") -> bool:
        self._check_operand(other)
        return self.minor_units < other.minor_units

    def __str__(self) -> str:
        return str(self.amount)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"amount": str(self.amount), "minor_units": self.minor_units}
