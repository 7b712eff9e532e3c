"""Business day calendar implementations for ACTUS contracts.

This module provides holiday calendar functionality for determining business days
and adjusting dates according to business day conventions. Calendars work on
whole UTC days: the time of day of a timestamp is preserved by every shift.

References:
    ACTUS Technical Specification v1.1, Section 3.4 (Business Day Conventions)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from actus_ledger.core.time import SECONDS_PER_DAY, to_datetime
from actus_ledger.core.types import BusinessDayConvention, Calendar, Timestamp
from actus_ledger.exceptions import ConventionError


class HolidayCalendar(ABC):
    """Abstract base class for holiday calendars.

    A holiday calendar determines which dates are business days and provides
    navigation functions for working with business days.
    """

    @abstractmethod
    def is_business_day(self, ts: Timestamp) -> bool:
        """Check if a date is a business day.

        Args:
            ts: Date to check

        Returns:
            True if the date is a business day

        Example:
            >>> cal = MondayToFridayCalendar()
            >>> cal.is_business_day(make_timestamp(2024, 1, 15))  # Monday
            True
        """

    def is_holiday(self, ts: Timestamp) -> bool:
        """Check if a date is a holiday (not a business day)."""
        return not self.is_business_day(ts)

    def next_business_day(self, ts: Timestamp) -> Timestamp:
        """Get the next business day on or after the given date.

        Example:
            >>> cal = MondayToFridayCalendar()
            >>> saturday = make_timestamp(2024, 1, 6)
            >>> cal.next_business_day(saturday) == make_timestamp(2024, 1, 8)
            True
        """
        current = ts
        while not self.is_business_day(current):
            current += SECONDS_PER_DAY
        return current

    def previous_business_day(self, ts: Timestamp) -> Timestamp:
        """Get the previous business day on or before the given date.

        Example:
            >>> cal = MondayToFridayCalendar()
            >>> sunday = make_timestamp(2024, 1, 7)
            >>> cal.previous_business_day(sunday) == make_timestamp(2024, 1, 5)
            True
        """
        current = ts
        while not self.is_business_day(current):
            current -= SECONDS_PER_DAY
        return current


class NoHolidayCalendar(HolidayCalendar):
    """Calendar with no holidays - every day is a business day."""

    def is_business_day(self, ts: Timestamp) -> bool:  # noqa: ARG002
        return True


class MondayToFridayCalendar(HolidayCalendar):
    """Calendar with Monday-Friday as business days (no holidays).

    Treats weekends (Saturday/Sunday) as non-business days but doesn't
    account for public holidays.
    """

    def is_business_day(self, ts: Timestamp) -> bool:
        return not is_weekend(ts)


class CustomCalendar(HolidayCalendar):
    """Calendar with custom holiday dates.

    Holidays are matched by UTC day, so any timestamp within a holiday's day
    is a holiday.
    """

    def __init__(self, holidays: Iterable[Timestamp] = (), include_weekends: bool = True):
        """Initialize custom calendar.

        Args:
            holidays: Holiday timestamps
            include_weekends: Whether weekends are also holidays (default True)
        """
        self.holidays: set[int] = {h // SECONDS_PER_DAY for h in holidays}
        self.include_weekends = include_weekends

    def add_holiday(self, ts: Timestamp) -> None:
        self.holidays.add(ts // SECONDS_PER_DAY)

    def is_business_day(self, ts: Timestamp) -> bool:
        """Check if date is a business day.

        A business day is not a weekend (if include_weekends=True) and not
        in the custom holidays list.
        """
        if ts // SECONDS_PER_DAY in self.holidays:
            return False
        return not (self.include_weekends and is_weekend(ts))


def get_calendar(calendar: Calendar, holidays: Iterable[Timestamp] = ()) -> HolidayCalendar:
    """Factory function to get a calendar.

    Args:
        calendar: Calendar enumerant
        holidays: Holiday list, used by ``Calendar.CUSTOM`` only

    Returns:
        HolidayCalendar instance

    Raises:
        ConventionError: If the calendar is unknown

    Example:
        >>> cal = get_calendar(Calendar.MONDAY_TO_FRIDAY)
        >>> cal.is_business_day(make_timestamp(2024, 1, 6))  # Saturday
        False
    """
    if calendar == Calendar.NO_CALENDAR:
        return NoHolidayCalendar()
    if calendar == Calendar.MONDAY_TO_FRIDAY:
        return MondayToFridayCalendar()
    if calendar == Calendar.CUSTOM:
        return CustomCalendar(holidays)
    raise ConventionError("Unknown calendar", context={"calendar": calendar})


def is_weekend(ts: Timestamp) -> bool:
    """Check if a date falls on a weekend (Saturday or Sunday).

    Example:
        >>> is_weekend(make_timestamp(2024, 1, 6))  # Saturday
        True
        >>> is_weekend(make_timestamp(2024, 1, 8))  # Monday
        False
    """
    return to_datetime(ts).weekday() >= 5


def adjust_to_business_day(
    ts: Timestamp,
    convention: BusinessDayConvention | None,
    calendar: HolidayCalendar,
) -> Timestamp:
    """Adjust a date to a business day according to the given convention.

    Following conventions move forward and preceding conventions move
    backward. Modified variants reverse direction when the move would leave
    the calendar month. SC and CS variants shift the same way; they only
    differ in which date accrual is calculated on.

    Args:
        ts: Date to adjust
        convention: Business day convention (None or NULL means no shift)
        calendar: Business day calendar

    Returns:
        Adjusted date (may be same as input if already a business day)

    Example:
        >>> saturday = make_timestamp(2024, 1, 13)
        >>> adjust_to_business_day(saturday, BusinessDayConvention.SCF, MondayToFridayCalendar()) \\
        ...     == make_timestamp(2024, 1, 15)
        True

    References:
        ACTUS Technical Specification v1.1, Section 3.4
    """
    if convention is None or convention == BusinessDayConvention.NULL:
        return ts

    if calendar.is_business_day(ts):
        return ts

    code = convention.value
    following = code.endswith("F")
    modified = code[-2] == "M"

    adjusted = calendar.next_business_day(ts) if following else calendar.previous_business_day(ts)
    if modified and to_datetime(adjusted).month != to_datetime(ts).month:
        adjusted = (
            calendar.previous_business_day(ts) if following else calendar.next_business_day(ts)
        )
    return adjusted
