"""Contract state variables for ACTUS debt contracts.

This module provides the ContractState dataclass for representing the mutable
state of one contract instance. Transitions work on a copy of the state and
commit it with :meth:`ContractState.assign` only when every check passes, so
a failed event never leaves a partially updated state behind.

ContractState is registered as a JAX pytree whose leaves are plain integers
(raw Units values, enumeration codes and the status date). The leaf order is
also the field order of the binary state encoding.

References:
    ACTUS Technical Specification v1.1, Section 6 (State Variables)
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING, Any

import jax

from actus_ledger.core.types import ContractPerformance, LifecycleStage, Timestamp
from actus_ledger.core.units import Units

if TYPE_CHECKING:
    from actus_ledger.core.terms import ContractTerms


@dataclass
class ContractState:
    """Mutable contract state variables.

    Amounts are signed by the contract role: a creditor (RPA) holds a
    positive notional, a debtor (RPL) a negative one.

    Attributes:
        notional_principal: Outstanding notional (nt)
        accrued_interest: Interest accrued since the last payment (ipac)
        accrued_fees: Fees accrued since the last fee payment (feac)
        next_principal_redemption: Periodic principal/total payment (prnxt)
        performance: Contract performance status (prf)
        stage: Lifecycle stage
        status_date: Timestamp of the last applied event (sd)

    Example:
        >>> state = ContractState(status_date=1000)
        >>> state.stage
        <LifecycleStage.PENDING: 'PENDING'>

    References:
        ACTUS Technical Specification v1.1, Section 6
    """

    notional_principal: Units = Units(0)
    accrued_interest: Units = Units(0)
    accrued_fees: Units = Units(0)
    next_principal_redemption: Units = Units(0)
    performance: ContractPerformance = ContractPerformance.PF
    stage: LifecycleStage = LifecycleStage.PENDING
    status_date: Timestamp = 0

    def copy(self) -> ContractState:
        """Return an independent working copy."""
        return replace(self)

    def assign(self, other: ContractState) -> None:
        """Overwrite every field with the values of ``other`` (commit)."""
        for f in fields(self):
            setattr(self, f.name, getattr(other, f.name))

    def is_settled(self) -> bool:
        """Whether no balance remains outstanding."""
        return (
            self.notional_principal.is_zero()
            and self.accrued_interest.is_zero()
            and self.accrued_fees.is_zero()
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary (amounts as decimal strings).

        Example:
            >>> ContractState(status_date=5).to_dict()["stage"]
            'PENDING'
        """
        return {
            "notional_principal": str(self.notional_principal),
            "accrued_interest": str(self.accrued_interest),
            "accrued_fees": str(self.accrued_fees),
            "next_principal_redemption": str(self.next_principal_redemption),
            "performance": self.performance.value,
            "stage": self.stage.value,
            "status_date": self.status_date,
        }


def initialize_state(terms: ContractTerms) -> ContractState:
    """Build the pre-IED state for a contract.

    All balances start at zero. The status date is the contract status date
    and PRNXT is taken from the terms when given (ANN contracts may replace
    it with a computed annuity at initial exchange).

    Args:
        terms: Validated contract terms

    Returns:
        New ContractState in the PENDING stage

    References:
        ACTUS Technical Specification v1.1, Section 6.2
    """
    prnxt = terms.next_principal_redemption_amount
    return ContractState(
        next_principal_redemption=prnxt if prnxt is not None else Units(0),
        status_date=terms.status_date,
    )


# Register ContractState as a JAX pytree
def _state_flatten(state: ContractState) -> tuple[tuple[int, ...], None]:
    """Flatten ContractState into integer leaves."""
    return (
        (
            state.notional_principal.raw,
            state.accrued_interest.raw,
            state.accrued_fees.raw,
            state.next_principal_redemption.raw,
            state.performance.code,
            state.stage.code,
            state.status_date,
        ),
        None,
    )


def _state_unflatten(aux: None, leaves: tuple[Any, ...]) -> ContractState:
    """Unflatten ContractState from integer leaves."""
    nt, ipac, feac, prnxt, prf, stage, sd = leaves
    return ContractState(
        notional_principal=Units(int(nt)),
        accrued_interest=Units(int(ipac)),
        accrued_fees=Units(int(feac)),
        next_principal_redemption=Units(int(prnxt)),
        performance=ContractPerformance.from_code(int(prf)),
        stage=LifecycleStage.from_code(int(stage)),
        status_date=int(sd),
    )


# Register with JAX
jax.tree_util.register_pytree_node(  # type: ignore[type-var]
    ContractState,
    _state_flatten,
    _state_unflatten,
)
