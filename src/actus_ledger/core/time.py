"""Date and time handling for ACTUS contracts.

All dates in actus_ledger are plain integer timestamps: seconds since the
Unix epoch in UTC (u64 on the wire). Calendar logic (months, weekdays, month
ends) converts through :class:`datetime.datetime` with an explicit UTC zone.

This module provides the cycle notation parser and the anchor-based period
arithmetic used by the schedule engine.

References:
    ACTUS Technical Specification v1.1, Section 3 (Time and Schedules)
"""

from __future__ import annotations

import re
from calendar import monthrange
from datetime import datetime, timezone

from actus_ledger.core.types import Cycle, EndOfMonthConvention, Timestamp
from actus_ledger.exceptions import ContractValidationError, ScheduleGenerationError

SECONDS_PER_DAY = 86_400
TIMESTAMP_MAX = 2**64 - 1
# Latest timestamp representable as a calendar date (9999-12-31T23:59:59Z)
CALENDAR_TIMESTAMP_MAX = 253_402_300_799

_MONTHS_PER_PERIOD = {"M": 1, "Q": 3, "H": 6, "Y": 12}
_CYCLE_PATTERN = re.compile(r"^(\d+)([DWMQHY])([-+]?)$")


def validate_timestamp(value: int, name: str = "timestamp") -> Timestamp:
    """Check that a value is a valid u64 timestamp.

    Raises:
        ContractValidationError: If the value is not an integer in [0, 2^64)
    """
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= TIMESTAMP_MAX:
        raise ContractValidationError(
            "Timestamp out of range",
            context={"field": name, "value": value},
        )
    return value


def to_datetime(ts: Timestamp) -> datetime:
    """Convert a timestamp to an aware UTC datetime.

    Raises:
        ContractValidationError: If the timestamp is beyond the calendar range

    Example:
        >>> to_datetime(0)
        datetime.datetime(1970, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if not 0 <= ts <= CALENDAR_TIMESTAMP_MAX:
        raise ContractValidationError(
            "Timestamp outside the supported calendar range",
            context={"timestamp": ts, "max": CALENDAR_TIMESTAMP_MAX},
        )
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def from_datetime(dt: datetime) -> Timestamp:
    """Convert a datetime to a timestamp. Naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def make_timestamp(
    year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0
) -> Timestamp:
    """Build a timestamp from calendar fields in UTC.

    Example:
        >>> make_timestamp(2024, 1, 15)
        1705276800
    """
    return from_datetime(datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc))


def to_iso(ts: Timestamp) -> str:
    """Format a timestamp as ISO 8601 (used in log messages)."""
    return to_datetime(ts).strftime("%Y-%m-%dT%H:%M:%S")


def is_end_of_month(ts: Timestamp) -> bool:
    """Check whether a timestamp falls on the last day of its month.

    Example:
        >>> is_end_of_month(make_timestamp(2024, 2, 29))
        True
    """
    dt = to_datetime(ts)
    return dt.day == monthrange(dt.year, dt.month)[1]


def parse_cycle(cycle: Cycle) -> tuple[int, str, str]:
    """Parse ACTUS cycle notation.

    Cycle format: NPS
    - N: number (integer, at least 1)
    - P: period type (D/W/M/Q/H/Y)
    - S: stub indicator ('-' short, '+' long) - optional

    Args:
        cycle: Cycle string (e.g., '3M', '1Y-', '6M+')

    Returns:
        Tuple of (number, period_type, stub_indicator)

    Raises:
        ScheduleGenerationError: If cycle format is invalid

    Example:
        >>> parse_cycle("3M")
        (3, 'M', '')
        >>> parse_cycle("1Y-")
        (1, 'Y', '-')

    References:
        ACTUS Technical Specification v1.1, Section 3.2
    """
    match = _CYCLE_PATTERN.match(cycle.upper()) if isinstance(cycle, str) else None
    if not match:
        raise ScheduleGenerationError(
            "Invalid cycle format. Expected NPS where N=number, P=D/W/M/Q/H/Y, S='-'/'+'",
            context={"cycle": cycle},
        )

    number_str, period_type, stub = match.groups()
    number = int(number_str)
    if number < 1:
        raise ScheduleGenerationError("Cycle length must be at least 1", context={"cycle": cycle})
    return number, period_type, stub


def add_period(
    ts: Timestamp,
    cycle: Cycle,
    multiple: int = 1,
    end_of_month_convention: EndOfMonthConvention = EndOfMonthConvention.SD,
) -> Timestamp:
    """Compute the date ``multiple`` cycles after an anchor.

    The result is always computed from the anchor, never by stepping from a
    previous result, so month-end clipping (Jan 31 -> Feb 29) does not carry
    over into later periods. The time of day of the anchor is preserved.

    Args:
        ts: Anchor timestamp
        cycle: Period to add (e.g., '3M', '1Y')
        multiple: Number of cycles to add (k >= 0)
        end_of_month_convention: With EOM, an anchor on a month end produces
            month ends for month-based cycles

    Returns:
        The k-th date after the anchor

    Raises:
        ScheduleGenerationError: If the cycle is invalid or the result leaves
            the calendar range

    Example:
        >>> jan31 = make_timestamp(2024, 1, 31)
        >>> add_period(jan31, "1M") == make_timestamp(2024, 2, 29)
        True
        >>> add_period(jan31, "1M", 2) == make_timestamp(2024, 3, 31)
        True

    References:
        ACTUS Technical Specification v1.1, Section 3.2, 3.3
    """
    number, period_type, _ = parse_cycle(cycle)
    steps = number * multiple

    if period_type == "D":
        result = ts + steps * SECONDS_PER_DAY
    elif period_type == "W":
        result = ts + steps * 7 * SECONDS_PER_DAY
    else:
        dt = to_datetime(ts)
        total_months = (dt.year * 12 + dt.month - 1) + steps * _MONTHS_PER_PERIOD[period_type]
        new_year, new_month = divmod(total_months, 12)
        new_month += 1
        if not 1 <= new_year <= 9999:
            raise ScheduleGenerationError(
                "Period arithmetic left the calendar range",
                context={"anchor": ts, "cycle": cycle, "multiple": multiple},
            )

        last_day = monthrange(new_year, new_month)[1]
        if end_of_month_convention == EndOfMonthConvention.EOM and is_end_of_month(ts):
            day = last_day
        else:
            day = min(dt.day, last_day)
        result = from_datetime(dt.replace(year=new_year, month=new_month, day=day))

    if not 0 <= result <= CALENDAR_TIMESTAMP_MAX:
        raise ScheduleGenerationError(
            "Period arithmetic left the calendar range",
            context={"anchor": ts, "cycle": cycle, "multiple": multiple},
        )
    return result
