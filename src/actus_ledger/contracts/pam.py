"""Principal At Maturity (PAM) contract implementation.

This module implements the PAM contract type - a bullet loan with interest payments
where the principal is repaid at maturity. PAM is the foundational loan contract
and serves as a template for amortizing contracts (LAM, NAM, ANN).

ACTUS Reference:
    ACTUS v1.1 Section 7.1 - PAM: Principal At Maturity

Key Features:
    - Principal repaid in full at maturity
    - Interest payments (IP events), on the IP schedule when a cycle is set
    - Interest capitalization (IPCI)
    - Partial redemptions and prepayments (PR, PP)
    - Fees (FP events), absolute or notional based
    - Purchase and early termination (PRD, TD)
    - Credit events (CE)

All amounts are seen from the creditor: a lender (RPA) pays out the notional
at IED (negative amount) and receives interest and principal later (positive
amounts). A borrower (RPL) sees the same flows with opposite signs.

Example:
    >>> terms = ContractTerms(
    ...     contract_id="LOAN-001",
    ...     contract_type=ContractType.PAM,
    ...     contract_role=ContractRole.RPA,
    ...     status_date=1000,
    ...     initial_exchange_date=1000,
    ...     maturity_date=1300,
    ...     notional_principal=Units.from_int(500_000),
    ...     nominal_interest_rate=Units(50_000),
    ... )
    >>> contract = PrincipalAtMaturityContract(terms)
    >>> state = contract.initialize_state()
    >>> contract.transition(EventType.IED, 1000, state)
    Units(raw=-500000000000)
"""

from __future__ import annotations

from typing import Any

from actus_ledger.contracts.base import BaseContract
from actus_ledger.core.states import ContractState
from actus_ledger.core.types import ContractType, EventType, FeeBasis, LifecycleStage, Timestamp
from actus_ledger.core.units import Units
from actus_ledger.exceptions import ContractValidationError, StateTransitionError


class PrincipalAtMaturityContract(BaseContract):
    """Principal At Maturity (PAM) contract.

    The notional is exchanged at IED and repaid at MD. Interest accrues on
    the outstanding notional between events and is settled by IP events.

    Rule table (R is the role sign, accrual is rounded once per event):

    ====== ================================ ==================================
    Event  Precondition                     Amount
    ====== ================================ ==================================
    IED    PENDING, t == IED                -R x NT
    IP     on IP schedule (if cycle set)    accrued interest
    IPCI   within lifetime                  None (interest added to notional)
    PR     on PR schedule (if cycle set)    R x redeemed amount
    PP     amount given                     R x prepaid amount
    FP     on fee schedule (if cycle set)   fee
    PRD    t == PRD                         -R x PPRD - accrued interest
    TD     t == TD (if set)                 R x PTD + accrued interest
    CE     active                           None
    AD     not terminal                     None
    MD     t == MD                          notional + interest + fees
    ====== ================================ ==================================

    References:
        ACTUS v1.1 Section 7.1 - PAM
    """

    CONTRACT_TYPE = ContractType.PAM
    REQUIRED_TERMS = ("NT", "IED", "MD")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _apply_ied(
        self, state: ContractState, timestamp: Timestamp, amount: Any, context: dict
    ) -> Units:
        """IED: exchange the notional and activate the contract."""
        if state.stage != LifecycleStage.PENDING:
            raise StateTransitionError(
                "Initial exchange already applied",
                "initial_exchange_once",
                {**context, "stage": state.stage.value},
            )
        self._require_date(
            self._initial_exchange.shifted, timestamp, "initial_exchange_date", context
        )
        notional = self.terms.notional_principal.scale_by_sign(self.role_sign)
        state.notional_principal = notional
        state.accrued_interest = Units(0)
        state.accrued_fees = Units(0)
        state.stage = LifecycleStage.ACTIVE
        self._on_initial_exchange(state, timestamp)
        return -notional

    def _on_initial_exchange(self, state: ContractState, timestamp: Timestamp) -> None:
        """Hook for contract types that fix amounts at initial exchange."""

    def _apply_md(
        self, state: ContractState, timestamp: Timestamp, amount: Any, context: dict
    ) -> Units:
        """MD: settle everything outstanding."""
        self._require_maturity_date(timestamp, context)
        self._accrue(state, timestamp)
        payoff = state.notional_principal + state.accrued_interest + state.accrued_fees
        state.notional_principal = Units(0)
        state.accrued_interest = Units(0)
        state.accrued_fees = Units(0)
        state.stage = LifecycleStage.MATURED
        return payoff

    def _require_maturity_date(self, timestamp: Timestamp, context: dict) -> None:
        self._require_date(self._maturity.shifted, timestamp, "maturity_date", context)

    def _apply_td(
        self, state: ContractState, timestamp: Timestamp, amount: Any, context: dict
    ) -> Units:
        """TD: settle at the termination price plus accrued interest."""
        self._require_term("PTD", context)
        self._require_within_lifetime(timestamp, context)
        self._require_date(self.terms.termination_date, timestamp, "termination_date", context)
        self._accrue(state, timestamp)
        price = self.terms.price_at_termination_date.scale_by_sign(self.role_sign)
        payoff = price + state.accrued_interest
        state.notional_principal = Units(0)
        state.accrued_interest = Units(0)
        state.accrued_fees = Units(0)
        state.stage = LifecycleStage.TERMINATED
        return payoff

    def _apply_prd(
        self, state: ContractState, timestamp: Timestamp, amount: Any, context: dict
    ) -> Units:
        """PRD: the buyer pays the purchase price and the accrued interest."""
        self._require_term("PRD", context)
        self._require_term("PPRD", context)
        self._require_date(self.terms.purchase_date, timestamp, "purchase_date", context)
        self._accrue(state, timestamp)
        price = self.terms.price_at_purchase_date.scale_by_sign(self.role_sign)
        return -price - state.accrued_interest

    # ------------------------------------------------------------------
    # Interest
    # ------------------------------------------------------------------

    def _apply_ip(
        self, state: ContractState, timestamp: Timestamp, amount: Any, context: dict
    ) -> Units:
        """IP: pay the accrued interest."""
        self._require_within_lifetime(timestamp, context)
        self._require_on_schedule(self.ip_schedule, timestamp, context)
        self._accrue(state, timestamp)
        payoff = state.accrued_interest
        state.accrued_interest = Units(0)
        return payoff

    def _apply_ipci(
        self, state: ContractState, timestamp: Timestamp, amount: Any, context: dict
    ) -> None:
        """IPCI: capitalize the accrued interest into the notional."""
        self._require_within_lifetime(timestamp, context)
        self._accrue(state, timestamp)
        state.notional_principal += state.accrued_interest
        state.accrued_interest = Units(0)
        return None

    # ------------------------------------------------------------------
    # Principal
    # ------------------------------------------------------------------

    def _outstanding(self, state: ContractState) -> Units:
        return abs(state.notional_principal)

    def _check_redemption(self, redeemed: Units, state: ContractState, context: dict) -> None:
        if redeemed.raw < 0 or redeemed > self._outstanding(state):
            raise StateTransitionError(
                "Redemption amount outside the outstanding notional",
                "redemption_within_outstanding",
                {**context, "amount": str(redeemed), "outstanding": str(self._outstanding(state))},
            )

    def _redeem(self, state: ContractState, redeemed: Units, context: dict) -> Units:
        self._check_redemption(redeemed, state, context)
        signed = redeemed.scale_by_sign(self.role_sign)
        state.notional_principal -= signed
        return signed

    def _default_redemption(self, state: ContractState) -> Units:
        """PR amount when the caller supplies none: PRNXT, else everything."""
        prnxt = self.terms.next_principal_redemption_amount
        return prnxt if prnxt is not None else self._outstanding(state)

    def _apply_pr(
        self, state: ContractState, timestamp: Timestamp, amount: Units | None, context: dict
    ) -> Units:
        """PR: redeem part of the notional."""
        self._require_within_lifetime(timestamp, context)
        self._require_on_schedule(self.pr_schedule, timestamp, context)
        self._accrue(state, timestamp)
        redeemed = amount if amount is not None else self._default_redemption(state)
        return self._redeem(state, redeemed, context)

    def _apply_pp(
        self, state: ContractState, timestamp: Timestamp, amount: Units | None, context: dict
    ) -> Units:
        """PP: unscheduled prepayment of a caller supplied amount."""
        if amount is None:
            raise ContractValidationError("Prepayment requires an amount", context=context)
        self._require_within_lifetime(timestamp, context)
        self._accrue(state, timestamp)
        return self._redeem(state, amount, context)

    # ------------------------------------------------------------------
    # Fees
    # ------------------------------------------------------------------

    def _apply_fp(
        self, state: ContractState, timestamp: Timestamp, amount: Any, context: dict
    ) -> Units:
        """FP: pay the fee.

        With basis A the fee is the fixed FER amount. With basis N it is the
        fee accrued on the notional since the last fee payment.
        """
        self._require_term("FER", context)
        self._require_within_lifetime(timestamp, context)
        self._require_on_schedule(self.fee_schedule, timestamp, context)
        self._accrue(state, timestamp)
        if self.terms.fee_basis == FeeBasis.N:
            payoff = state.accrued_fees
        else:
            payoff = self.terms.fee_rate.scale_by_sign(self.role_sign) + state.accrued_fees
        state.accrued_fees = Units(0)
        return payoff
