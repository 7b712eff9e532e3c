"""Annuity (ANN) contract implementation.

This module implements the ANN contract type - an amortizing loan with a
constant total payment per period, like a classic mortgage. Each payment is
split into interest and principal exactly as for NAM; the difference is that
the payment amount can be derived from the terms with the ACTUS annuity
formula instead of being given.

ACTUS Reference:
    ACTUS v1.1 Section 7.5 - ANN: Annuity

Key Features:
    - Constant total payment (PRNXT)
    - PRNXT computed at construction when absent, over the PR schedule plus
      maturity, with exact rational arithmetic rounded once
    - Interest share decreases and principal share increases over time

Example:
    >>> terms = ContractTerms(
    ...     contract_id="ANN-001",
    ...     contract_type=ContractType.ANN,
    ...     contract_role=ContractRole.RPA,
    ...     status_date=make_timestamp(2024, 1, 15),
    ...     initial_exchange_date=make_timestamp(2024, 1, 15),
    ...     maturity_date=make_timestamp(2025, 1, 15),
    ...     notional_principal=Units.from_int(100_000),
    ...     nominal_interest_rate=Units(50_000),
    ...     principal_redemption_cycle="1M",
    ... )
    >>> contract = AnnuityContract(terms)
    >>> contract.annuity_amount > Units.from_int(8_500)
    True
"""

from __future__ import annotations

from actus_ledger.contracts.nam import NegativeAmortizerContract
from actus_ledger.core.states import ContractState
from actus_ledger.core.terms import ContractTerms
from actus_ledger.core.types import ContractType
from actus_ledger.core.units import Units
from actus_ledger.utilities.math import calculate_actus_annuity


class AnnuityContract(NegativeAmortizerContract):
    """Annuity (ANN) contract.

    Attributes:
        annuity_amount: Total payment per PR event (given or computed)

    References:
        ACTUS v1.1 Section 7.5 - ANN
    """

    CONTRACT_TYPE = ContractType.ANN
    REQUIRED_TERMS = ("NT", "IED", "MD")

    def __init__(self, terms: ContractTerms):
        super().__init__(terms)
        given = terms.next_principal_redemption_amount
        self.annuity_amount: Units = given if given is not None else self._compute_annuity()

    def _compute_annuity(self) -> Units:
        """ACTUS annuity over the PR dates and maturity, from initial exchange.

        Uses the unadjusted dates under CS conventions, like accrual does.
        """
        days = list(self.pr_schedule) if self.pr_schedule is not None else []
        days.append(self._maturity)
        if self._calculate_unadjusted:
            dates = [day.date for day in days]
            start = self._initial_exchange.date
        else:
            dates = [day.shifted for day in days]
            start = self._initial_exchange.shifted
        rate = self.terms.nominal_interest_rate or Units(0)
        return calculate_actus_annuity(
            start=start,
            pr_schedule=dates,
            notional=self.terms.notional_principal,
            accrued_interest=Units(0),
            rate=rate,
            day_count_convention=self.terms.day_count_convention,
        )

    def initialize_state(self) -> ContractState:
        state = super().initialize_state()
        state.next_principal_redemption = self.annuity_amount
        return state
