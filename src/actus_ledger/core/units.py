"""Exact fixed-point quantities for money and rates.

Every monetary amount and every rate in actus_ledger is a :class:`Units`
value: a signed integer count of the smallest denomination (10^-6 of a whole
unit). Arithmetic is exact integer arithmetic. Where a product with a
fraction is needed (interest accrual, fee accrual, annuity amounts) the exact
rational result is rounded half-even exactly once.

Values are bounded to the signed 128-bit range so the binary encoding is
total. Leaving that range raises :class:`MathError` instead of wrapping.

Example:
    >>> notional = Units.from_int(500_000)
    >>> rate = Units(50_000)  # 0.05
    >>> notional.checked_mul_ratio(rate.as_fraction())
    Units(raw=25000000000)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction

from actus_ledger.exceptions import MathError

UNITS_DECIMALS = 6
UNITS_SCALE = 10**UNITS_DECIMALS

UNITS_MIN = -(2**127)
UNITS_MAX = 2**127 - 1


def round_half_even(value: Fraction) -> int:
    """Round an exact rational to the nearest integer, ties to even.

    This is the only rounding rule used by the engine.

    Example:
        >>> round_half_even(Fraction(5, 2))
        2
        >>> round_half_even(Fraction(-7, 2))
        -4
    """
    # round() on a Fraction is exact and ties to even
    return round(value)


def _checked(raw: int, operation: str) -> int:
    if raw < UNITS_MIN or raw > UNITS_MAX:
        raise MathError("Units overflow", context={"operation": operation, "raw": raw})
    return raw


@dataclass(frozen=True, slots=True)
class Units:
    """Signed fixed-point quantity with six decimals.

    Immutable and hashable. Compares and orders by raw value.

    Attributes:
        raw: Integer count of 10^-6 units
    """

    raw: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.raw, bool) or not isinstance(self.raw, int):
            raise TypeError(f"Units raw value must be int, got {type(self.raw).__name__}")
        _checked(self.raw, "construct")

    @classmethod
    def zero(cls) -> Units:
        """Create a zero quantity."""
        return cls(0)

    @classmethod
    def from_int(cls, whole: int) -> Units:
        """Create a quantity from a whole number of units.

        Example:
            >>> Units.from_int(3).raw
            3000000
        """
        return cls(_checked(whole * UNITS_SCALE, "from_int"))

    @classmethod
    def from_decimal(cls, value: Decimal | str | Fraction, exact: bool = False) -> Units:
        """Create a quantity from a decimal value.

        Args:
            value: Decimal, decimal string or Fraction
            exact: If True, reject values with more than six decimals
                   instead of rounding them half-even

        Raises:
            MathError: If the value is out of range, or not representable
                       when ``exact`` is set
        """
        scaled = Fraction(Decimal(value) if isinstance(value, str) else value) * UNITS_SCALE
        if exact and scaled.denominator != 1:
            raise MathError(
                "Value is not representable with six decimals",
                context={"value": str(value)},
            )
        return cls(_checked(round_half_even(scaled), "from_decimal"))

    def to_decimal(self) -> Decimal:
        """Exact decimal representation."""
        return Decimal(self.raw).scaleb(-UNITS_DECIMALS)

    def as_fraction(self) -> Fraction:
        """Exact rational value in whole units."""
        return Fraction(self.raw, UNITS_SCALE)

    def checked_mul_ratio(self, ratio: Fraction) -> Units:
        """Multiply by an exact rational and round half-even once.

        Args:
            ratio: Exact multiplier (e.g. year fraction times rate)

        Returns:
            Rounded product

        Raises:
            MathError: If the result leaves the 128-bit range
        """
        return Units(_checked(round_half_even(self.raw * ratio), "mul_ratio"))

    def checked_div_ratio(self, ratio: Fraction) -> Units:
        """Divide by an exact rational and round half-even once.

        Raises:
            MathError: On division by zero or overflow
        """
        if ratio == 0:
            raise MathError("Division by zero", context={"operation": "div_ratio", "raw": self.raw})
        return Units(_checked(round_half_even(Fraction(self.raw) / ratio), "div_ratio"))

    def is_zero(self) -> bool:
        return self.raw == 0

    def signum(self) -> int:
        return (self.raw > 0) - (self.raw < 0)

    def scale_by_sign(self, sign: int) -> Units:
        """Apply a role sign (+1 or -1)."""
        return self if sign >= 0 else -self

    def __add__(self, other: Units) -> Units:
        if not isinstance(other, Units):
            return NotImplemented
        return Units(_checked(self.raw + other.raw, "add"))

    def __sub__(self, other: Units) -> Units:
        if not isinstance(other, Units):
            return NotImplemented
        return Units(_checked(self.raw - other.raw, "sub"))

    def __neg__(self) -> Units:
        return Units(_checked(-self.raw, "neg"))

    def __abs__(self) -> Units:
        return Units(_checked(abs(self.raw), "abs"))

    def __lt__(self, other: Units) -> bool:
        if not isinstance(other, Units):
            return NotImplemented
        return self.raw < other.raw

    def __le__(self, other: Units) -> bool:
        if not isinstance(other, Units):
            return NotImplemented
        return self.raw <= other.raw

    def __gt__(self, other: Units) -> bool:
        if not isinstance(other, Units):
            return NotImplemented
        return self.raw > other.raw

    def __ge__(self, other: Units) -> bool:
        if not isinstance(other, Units):
            return NotImplemented
        return self.raw >= other.raw

    def __str__(self) -> str:
        return str(self.to_decimal())
