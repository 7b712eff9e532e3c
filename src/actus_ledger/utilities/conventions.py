"""Day count convention implementations for ACTUS contracts.

This module provides year fraction calculations according to various day count
conventions used in financial contracts. Year fractions are exact
:class:`fractions.Fraction` values so that accrual can be rounded once, at the
end of a computation.

The actual conventions (A365, A360, AA) count elapsed seconds, so sub-day
timestamps accrue proportionally. The 30/360 conventions work on calendar
dates and ignore the time of day.

References:
    ACTUS Technical Specification v1.1, Section 4 (Day Count Conventions)
    ISDA 2006 Definitions
"""

from __future__ import annotations

import calendar
from fractions import Fraction

from actus_ledger.core.time import SECONDS_PER_DAY, make_timestamp, to_datetime
from actus_ledger.core.types import DayCountConvention, Timestamp
from actus_ledger.exceptions import ConventionError

SECONDS_PER_365_YEAR = 365 * SECONDS_PER_DAY
SECONDS_PER_360_YEAR = 360 * SECONDS_PER_DAY


def year_fraction(
    start: Timestamp,
    end: Timestamp,
    convention: DayCountConvention | None = None,
) -> Fraction:
    """Calculate year fraction between two dates using specified convention.

    Args:
        start: Start date
        end: End date
        convention: Day count convention to use (None means A365)

    Returns:
        Exact year fraction; zero when ``end`` is not after ``start``

    Raises:
        ConventionError: If the convention is not supported

    Example:
        >>> year_fraction(0, 31_536_000, DayCountConvention.A365)
        Fraction(1, 1)
        >>> year_fraction(0, 100)
        Fraction(1, 315360)

    References:
        ACTUS Technical Specification v1.1, Section 4.1
    """
    if end <= start:
        return Fraction(0)
    if convention is None or convention == DayCountConvention.A365:
        return Fraction(end - start, SECONDS_PER_365_YEAR)
    if convention == DayCountConvention.A360:
        return Fraction(end - start, SECONDS_PER_360_YEAR)
    if convention == DayCountConvention.AA:
        return _year_fraction_aa(start, end)
    if convention == DayCountConvention.E30360:
        return Fraction(days_between_30_360_methods(start, end, "30E/360"), 360)
    if convention == DayCountConvention.B30360:
        return Fraction(days_between_30_360_methods(start, end, "30/360"), 360)
    raise ConventionError("Unsupported day count convention", context={"convention": convention})


def _year_fraction_aa(start: Timestamp, end: Timestamp) -> Fraction:
    """Actual/Actual ISDA day count convention.

    Year fraction = Sum of (time in each calendar year / length of that year)

    References:
        ACTUS A/A, ISDA 2006 Section 4.16(b)
    """
    total = Fraction(0)
    current = start
    year = to_datetime(start).year

    while current < end:
        next_year_start = make_timestamp(year + 1, 1, 1) if year < 9999 else end
        piece_end = min(end, next_year_start)
        days_in_year = 366 if calendar.isleap(year) else 365
        total += Fraction(piece_end - current, days_in_year * SECONDS_PER_DAY)
        current = piece_end
        year += 1

    return total


def days_between_30_360_methods(
    start: Timestamp,
    end: Timestamp,
    method: str = "30E/360",
) -> int:
    """Calculate days between two dates using 30/360 methods.

    Args:
        start: Start date
        end: End date
        method: One of "30E/360", "30/360"

    Returns:
        Number of days (can be negative if end < start)

    Adjustments:
    - 30E/360: D1 = 31 becomes 30, D2 = 31 becomes 30
    - 30/360: D1 = 31 becomes 30; D2 = 31 becomes 30 only if D1 >= 30

    Example:
        >>> days_between_30_360_methods(make_timestamp(2024, 2, 15), make_timestamp(2024, 8, 15))
        180
    """
    s, e = to_datetime(start), to_datetime(end)
    y1, m1, d1 = s.year, s.month, s.day
    y2, m2, d2 = e.year, e.month, e.day

    if method == "30E/360":
        if d1 == 31:
            d1 = 30
        if d2 == 31:
            d2 = 30
    elif method == "30/360":
        if d1 == 31:
            d1 = 30
        if d1 >= 30 and d2 == 31:
            d2 = 30
    else:
        raise ConventionError("Unknown 30/360 method", context={"method": method})

    return (y2 - y1) * 360 + (m2 - m1) * 30 + (d2 - d1)
