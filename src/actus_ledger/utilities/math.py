"""Financial mathematics utilities for ACTUS contracts.

This module provides contract role signs, interest accrual and the ACTUS
annuity formula. All calculations are exact rational arithmetic on
:class:`Units` and are rounded half-even once per returned amount.

References:
    ACTUS Technical Specification v1.1, Table 1 (Contract Role Signs)
    ACTUS Technical Specification v1.1, Section 5 (Mathematical Functions)
"""

from __future__ import annotations

from collections.abc import Sequence
from fractions import Fraction

from actus_ledger.core.types import ContractRole, DayCountConvention, Timestamp
from actus_ledger.core.units import Units
from actus_ledger.exceptions import MathError
from actus_ledger.utilities.conventions import year_fraction


def contract_role_sign(role: ContractRole) -> int:
    """Get the sign (+1 or -1) for a contract role.

    Example:
        >>> contract_role_sign(ContractRole.RPA)  # Creditor
        1
        >>> contract_role_sign(ContractRole.RPL)  # Debtor
        -1

    References:
        ACTUS Technical Specification v1.1, Table 1
    """
    return role.get_sign()


def accrue_interest(
    notional: Units,
    rate: Units,
    start: Timestamp,
    end: Timestamp,
    day_count_convention: DayCountConvention | None,
) -> Units:
    """Interest accrued on ``notional`` between two dates.

    Computes ``Y(start, end) x rate x notional`` exactly and rounds once.
    The result carries the sign of the notional.

    Example:
        >>> accrue_interest(Units.from_int(500_000), Units(50_000), 1000, 1100, None)
        Units(raw=79274)
    """
    ratio = year_fraction(start, end, day_count_convention) * rate.as_fraction()
    return notional.checked_mul_ratio(ratio)


def calculate_actus_annuity(
    start: Timestamp,
    pr_schedule: Sequence[Timestamp],
    notional: Units,
    accrued_interest: Units,
    rate: Units,
    day_count_convention: DayCountConvention | None,
) -> Units:
    """Calculate annuity amount using ACTUS specification formula.

    Implements the ACTUS annuity formula from Section 3.8:
        A(s, T, n, a, r) = (n + a) / Σ[∏((1 + Y_i × r)^-1)]

    Where:
        s = start time
        T = maturity (last PR date)
        n = notional principal
        a = accrued interest
        r = nominal interest rate
        Y_i = year fraction for period i

    The sum and products are kept as exact fractions; only the final amount
    is rounded.

    Args:
        start: Start time for calculation
        pr_schedule: Principal redemption dates, maturity included
        notional: Notional principal amount
        accrued_interest: Already accrued interest
        rate: Annual interest rate
        day_count_convention: Day count convention for year fractions

    Returns:
        Annuity payment amount per period

    Raises:
        MathError: If the schedule is empty or the discount sum is zero

    References:
        ACTUS Technical Specification v1.1, Section 3.8
    """
    if not pr_schedule:
        raise MathError("Annuity requires at least one redemption date", context={"start": start})

    principal = notional + accrued_interest
    r = rate.as_fraction()

    cumulative_discount = Fraction(0)
    product_term = Fraction(1)
    prev_date = start
    for pr_date in pr_schedule:
        product_term *= 1 + year_fraction(prev_date, pr_date, day_count_convention) * r
        if product_term == 0:
            raise MathError("Division by zero in annuity discounting", context={"date": pr_date})
        cumulative_discount += 1 / product_term
        prev_date = pr_date

    return principal.checked_div_ratio(cumulative_discount)
