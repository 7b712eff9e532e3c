"""Calendars, day count conventions, schedules and contract math."""

from actus_ledger.utilities.calendars import (
    CustomCalendar,
    HolidayCalendar,
    MondayToFridayCalendar,
    NoHolidayCalendar,
    adjust_to_business_day,
    get_calendar,
    is_weekend,
)
from actus_ledger.utilities.conventions import days_between_30_360_methods, year_fraction
from actus_ledger.utilities.math import (
    accrue_interest,
    calculate_actus_annuity,
    contract_role_sign,
)
from actus_ledger.utilities.schedules import (
    Schedule,
    ShiftedDay,
    fee_payment_schedule,
    interest_payment_schedule,
    lifecycle_schedule,
    principal_redemption_schedule,
)

__all__ = [
    # Calendars
    "CustomCalendar",
    "HolidayCalendar",
    "MondayToFridayCalendar",
    "NoHolidayCalendar",
    "adjust_to_business_day",
    "get_calendar",
    "is_weekend",
    # Conventions
    "days_between_30_360_methods",
    "year_fraction",
    # Math
    "accrue_interest",
    "calculate_actus_annuity",
    "contract_role_sign",
    # Schedules
    "Schedule",
    "ShiftedDay",
    "fee_payment_schedule",
    "interest_payment_schedule",
    "lifecycle_schedule",
    "principal_redemption_schedule",
]
