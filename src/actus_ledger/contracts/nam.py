"""Negative Amortizer (NAM) contract implementation.

This module implements the NAM contract type - an amortizing loan where the
periodic payment (PRNXT) covers both interest and principal. The principal
part of each payment is PRNXT minus the interest accrued so far; when the
interest exceeds PRNXT the difference is added to the notional (negative
amortization).

ACTUS Reference:
    ACTUS v1.1 Section 7.3 - NAM: Negative Amortizer

Key Features:
    - PRNXT is the total payment (principal plus interest)
    - PR settles the principal part only; interest stays accrued for IP
    - Principal part capped at the outstanding notional
    - Negative principal parts, when interest exceeds the payment, increase
      the notional; a negative payment is rejected
"""

from __future__ import annotations

from actus_ledger.contracts.pam import PrincipalAtMaturityContract
from actus_ledger.core.states import ContractState
from actus_ledger.core.types import ContractType, Timestamp
from actus_ledger.core.units import Units
from actus_ledger.exceptions import StateTransitionError


class NegativeAmortizerContract(PrincipalAtMaturityContract):
    """Negative Amortizer (NAM) contract.

    PR computes the principal part ``PRNXT - accrued interest`` (both seen
    from the creditor), caps it at the outstanding notional and reduces
    the notional by it. A negative principal part grows the notional.

    References:
        ACTUS v1.1 Section 7.3 - NAM
    """

    CONTRACT_TYPE = ContractType.NAM
    REQUIRED_TERMS = ("NT", "IED", "MD", "PRNXT")

    def _principal_part(self, state: ContractState, total_payment: Units) -> Units:
        """Principal part of a total payment, as an unsigned magnitude."""
        interest = state.accrued_interest.scale_by_sign(self.role_sign)
        return min(total_payment - interest, self._outstanding(state))

    def _apply_pr(
        self, state: ContractState, timestamp: Timestamp, amount: Units | None, context: dict
    ) -> Units:
        """PR: pay PRNXT, of which the principal part redeems the notional."""
        self._require_within_lifetime(timestamp, context)
        self._require_on_schedule(self.pr_schedule, timestamp, context)
        if amount is not None and amount.raw < 0:
            raise StateTransitionError(
                "Payment amount must not be negative",
                "redemption_within_outstanding",
                {**context, "amount": str(amount)},
            )
        self._accrue(state, timestamp)
        total_payment = amount if amount is not None else state.next_principal_redemption
        principal = self._principal_part(state, total_payment)
        if principal.raw >= 0:
            return self._redeem(state, principal, context)
        # Negative amortization: unpaid interest grows the notional
        signed = principal.scale_by_sign(self.role_sign)
        state.notional_principal -= signed
        return signed
