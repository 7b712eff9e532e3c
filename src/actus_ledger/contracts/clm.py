"""Call Money (CLM) contract implementation.

This module implements the CLM contract type - an on-demand loan where the maturity
is not fixed at inception but determined by a call from the lender or a
repayment by the borrower.

ACTUS Reference:
    ACTUS v1.1 Section 7.6 - CLM: Call Money

Key Features:
    - Maturity date optional; without it MD can be called at any time
      after the initial exchange
    - Interest paid or capitalized whenever the host calls for it; IP, PR
      and FP events are not bound to a schedule
    - Principal repaid when called

Typical Use Cases:
    - Lines of credit
    - Overnight/call loans
    - Demand deposits
"""

from __future__ import annotations

from actus_ledger.contracts.pam import PrincipalAtMaturityContract
from actus_ledger.core.types import ContractType, EventType, Timestamp
from actus_ledger.utilities.schedules import Schedule


class CallMoneyContract(PrincipalAtMaturityContract):
    """Call Money (CLM) contract.

    References:
        ACTUS v1.1 Section 7.6 - CLM
    """

    CONTRACT_TYPE = ContractType.CLM
    REQUIRED_TERMS = ("NT", "IED")
    SUPPORTED_EVENTS = frozenset(EventType) - {EventType.PRD}

    def _require_on_schedule(
        self, schedule: Schedule | None, timestamp: Timestamp, context: dict
    ) -> None:
        """Events are called by the host, never checked against a schedule."""

    def _require_maturity_date(self, timestamp: Timestamp, context: dict) -> None:
        if self._maturity is not None:
            super()._require_maturity_date(timestamp, context)
