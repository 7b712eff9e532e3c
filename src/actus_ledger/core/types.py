"""Type definitions and enumerations for ACTUS debt contracts.

This module defines all enumerations and type aliases used throughout
actus_ledger. All enumerations inherit from str for JSON serializability and
easy comparison, and every enumeration carries a stable small integer code
used at the host boundary and by the binary codec.

Codes follow declaration order. New members must be appended to the end of
an enumeration so existing codes never change.

References:
    ACTUS Technical Specification v1.1, Section 2 (Notations)
"""

from __future__ import annotations

from enum import Enum
from typing import TypeAlias

from actus_ledger.exceptions import ContractValidationError

# Type aliases for clarity
Timestamp: TypeAlias = int  # Seconds since the Unix epoch, UTC
Cycle: TypeAlias = str  # Format: NPS (e.g., '1Y', '3M', '1W-')


class CodedEnum(str, Enum):
    """String enumeration with a stable integer code per member."""

    @property
    def code(self) -> int:
        """Integer code for this member (its declaration index)."""
        return type(self)._member_names_.index(self.name)

    @classmethod
    def from_code(cls, code: int) -> CodedEnum:
        """Decode a member from its integer code.

        Args:
            code: Integer code as produced by :attr:`code`

        Returns:
            The enumeration member

        Raises:
            ContractValidationError: If the code is not recognized

        Example:
            >>> EventType.from_code(0)
            <EventType.IED: 'IED'>
        """
        names = cls._member_names_
        if isinstance(code, bool) or not isinstance(code, int) or not 0 <= code < len(names):
            raise ContractValidationError(
                f"Unknown {cls.__name__} code",
                context={"code": code, "valid_codes": f"0..{len(names) - 1}"},
            )
        return cls[names[code]]


class ContractType(CodedEnum):
    """ACTUS debt contract types supported by the engine.

    References:
        ACTUS Technical Specification v1.1, Table 3
    """

    PAM = "PAM"  # Principal At Maturity
    LAM = "LAM"  # Linear Amortizer
    NAM = "NAM"  # Negative Amortizer
    ANN = "ANN"  # Annuity
    CLM = "CLM"  # Call Money


class ContractRole(CodedEnum):
    """Contract party role definition.

    Defines the role of the contract creator, which determines
    the sign of cash flows (+1 for the creditor, -1 for the debtor).

    References:
        ACTUS Technical Specification v1.1, Table 1
    """

    RPA = "RPA"  # Real Position Asset (creditor)
    RPL = "RPL"  # Real Position Liability (debtor)

    def get_sign(self) -> int:
        """Get the sign convention for this role.

        Returns:
            +1 or -1 according to ACTUS Table 1

        Example:
            >>> ContractRole.RPA.get_sign()
            1
            >>> ContractRole.RPL.get_sign()
            -1
        """
        return 1 if self is ContractRole.RPA else -1


class EventType(CodedEnum):
    """ACTUS contract event types.

    Event types define the nature of contract events that trigger
    state transitions and cash flows.

    References:
        ACTUS Technical Specification v1.1, Table 4
    """

    IED = "IED"  # Initial Exchange Date
    IP = "IP"  # Interest Payment
    PR = "PR"  # Principal Redemption
    PRD = "PRD"  # Purchase
    MD = "MD"  # Maturity Date
    FP = "FP"  # Fee Payment
    CE = "CE"  # Credit Event
    IPCI = "IPCI"  # Interest Capitalization
    PP = "PP"  # Principal Prepayment
    TD = "TD"  # Termination
    AD = "AD"  # Analysis Date


# ACTUS event scheduling priority: determines processing order when multiple
# events fall on the same date. Lower number = processed first.
EVENT_SCHEDULE_PRIORITY: dict[EventType, int] = {
    EventType.AD: 0,
    EventType.IED: 1,
    EventType.PR: 4,
    EventType.PP: 6,
    EventType.IP: 8,
    EventType.IPCI: 9,
    EventType.FP: 15,
    EventType.PRD: 16,
    EventType.TD: 17,
    EventType.MD: 18,
    EventType.CE: 23,
}


class DayCountConvention(CodedEnum):
    """Day count conventions for year fraction calculation.

    References:
        ACTUS Technical Specification v1.1, Section 3.6
        ISDA Definitions
    """

    A365 = "A365"  # Actual/365
    A360 = "A360"  # Actual/360
    AA = "AA"  # Actual/Actual ISDA
    E30360 = "30E360"  # 30E/360
    B30360 = "30360"  # 30/360 US (Bond Basis)


class BusinessDayConvention(CodedEnum):
    """Business day adjustment conventions.

    Convention format: S/C + Direction + Modified
    - SC = Shift then Calculate, CS = Calculate then Shift
    - F = Following, P = Preceding
    - M prefix = Modified (don't cross month boundary)

    References:
        ACTUS Technical Specification v1.1, Section 3.4
    """

    NULL = "NULL"  # No adjustment
    SCF = "SCF"  # Shift/Calculate Following
    SCMF = "SCMF"  # Shift/Calculate Modified Following
    SCP = "SCP"  # Shift/Calculate Preceding
    SCMP = "SCMP"  # Shift/Calculate Modified Preceding
    CSF = "CSF"  # Calculate/Shift Following
    CSMF = "CSMF"  # Calculate/Shift Modified Following
    CSP = "CSP"  # Calculate/Shift Preceding
    CSMP = "CSMP"  # Calculate/Shift Modified Preceding

    @property
    def calculates_on_unadjusted(self) -> bool:
        """Whether accrual uses the unadjusted schedule date (CS variants)."""
        return self.value.startswith("CS")


class EndOfMonthConvention(CodedEnum):
    """End of month adjustment convention.

    References:
        ACTUS Technical Specification v1.1, Section 3.3
    """

    SD = "SD"  # Same Day - keep same day number (default)
    EOM = "EOM"  # End of Month - move to last day of month


class Calendar(CodedEnum):
    """Business day calendar definitions."""

    NO_CALENDAR = "NO_CALENDAR"  # No holidays (all days are business days)
    MONDAY_TO_FRIDAY = "MONDAY_TO_FRIDAY"  # Weekends only
    CUSTOM = "CUSTOM"  # Weekends plus an explicit holiday list


class ContractPerformance(CodedEnum):
    """Contract performance status.

    References:
        ACTUS Technical Specification v1.1
    """

    PF = "PF"  # Performant - payments on time
    DL = "DL"  # Delayed - minor delays
    DQ = "DQ"  # Delinquent - significant delays
    DF = "DF"  # Default - major payment failure


class FeeBasis(CodedEnum):
    """Fee calculation basis.

    Determines whether fees are absolute amounts or percentages of notional.
    """

    A = "A"  # Absolute amount
    N = "N"  # Notional percentage


class LifecycleStage(CodedEnum):
    """Lifecycle stage of a contract instance."""

    PENDING = "PENDING"  # Before initial exchange
    ACTIVE = "ACTIVE"  # Between initial exchange and maturity
    MATURED = "MATURED"  # Maturity settled, terminal
    TERMINATED = "TERMINATED"  # Terminated early, terminal

    @property
    def is_terminal(self) -> bool:
        """Whether no further events can be applied."""
        return self in (LifecycleStage.MATURED, LifecycleStage.TERMINATED)
