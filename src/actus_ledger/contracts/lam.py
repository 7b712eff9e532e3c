"""Linear Amortizer (LAM) contract implementation.

This module implements the LAM contract type - an amortizing loan with fixed
principal redemption amounts where principal is repaid in regular installments.

ACTUS Reference:
    ACTUS v1.1 Section 7.2 - LAM: Linear Amortizer

Key Features:
    - Fixed principal redemption amounts (PRNXT)
    - Regular principal reduction (PR events on the PR schedule)
    - Interest calculated on the current notional
    - The last redemption is capped at the outstanding notional; MD settles
      whatever remains

Example:
    >>> terms = ContractTerms(
    ...     contract_id="MORTGAGE-001",
    ...     contract_type=ContractType.LAM,
    ...     contract_role=ContractRole.RPA,
    ...     status_date=make_timestamp(2024, 1, 15),
    ...     initial_exchange_date=make_timestamp(2024, 1, 15),
    ...     maturity_date=make_timestamp(2025, 1, 15),
    ...     notional_principal=Units.from_int(12_000),
    ...     nominal_interest_rate=Units(65_000),
    ...     principal_redemption_cycle="1M",
    ...     next_principal_redemption_amount=Units.from_int(1_000),
    ... )
    >>> contract = LinearAmortizerContract(terms)
"""

from __future__ import annotations

from actus_ledger.contracts.pam import PrincipalAtMaturityContract
from actus_ledger.core.states import ContractState
from actus_ledger.core.types import ContractType
from actus_ledger.core.units import Units


class LinearAmortizerContract(PrincipalAtMaturityContract):
    """Linear Amortizer (LAM) contract.

    Each PR event repays ``min(PRNXT, |notional|)`` unless the caller
    supplies an explicit amount.

    References:
        ACTUS v1.1 Section 7.2 - LAM
    """

    CONTRACT_TYPE = ContractType.LAM
    REQUIRED_TERMS = ("NT", "IED", "MD", "PRNXT")

    def _default_redemption(self, state: ContractState) -> Units:
        return min(state.next_principal_redemption, self._outstanding(state))
