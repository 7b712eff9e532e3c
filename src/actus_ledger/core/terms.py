"""Contract terms for ACTUS debt contracts.

This module provides the ContractTerms class, which represents the immutable
terms and conditions of a contract, using Pydantic for validation. Terms are
constructed once, validated, and never mutated.

References:
    ACTUS Technical Specification v1.1, Sections 4-5 (Contract Attributes)
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from actus_ledger.core.time import TIMESTAMP_MAX, parse_cycle
from actus_ledger.core.types import (
    BusinessDayConvention,
    Calendar,
    ContractPerformance,
    ContractRole,
    ContractType,
    Cycle,
    DayCountConvention,
    EndOfMonthConvention,
    FeeBasis,
    Timestamp,
)
from actus_ledger.core.units import UNITS_SCALE, Units
from actus_ledger.exceptions import ContractValidationError


def _pydantic_error_context(exc: ValidationError) -> dict[str, Any]:
    errors = exc.errors()
    return {
        "error_count": len(errors),
        "errors": "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<model>'}: {err['msg']}" for err in errors
        ),
    }


class ScheduleConfig(BaseModel):
    """Business-day and end-of-month configuration for schedules.

    Absent fields mean the documented default: no calendar, same-day
    end-of-month handling, and no business-day shift.

    Example:
        >>> config = ScheduleConfig(
        ...     calendar=Calendar.MONDAY_TO_FRIDAY,
        ...     business_day_convention=BusinessDayConvention.SCMF,
        ... )
        >>> config.resolved_end_of_month_convention
        <EndOfMonthConvention.SD: 'SD'>
    """

    calendar: Calendar | None = Field(None, description="Business day calendar (CLDR)")
    end_of_month_convention: EndOfMonthConvention | None = Field(
        None, description="End of month convention (EOMC)"
    )
    business_day_convention: BusinessDayConvention | None = Field(
        None, description="Business day convention (BDC)"
    )
    holidays: tuple[Timestamp, ...] = Field(
        (), description="Holiday timestamps for the CUSTOM calendar"
    )

    model_config = {"frozen": True}

    @field_validator("holidays")
    @classmethod
    def validate_holidays(cls, v: tuple[Timestamp, ...]) -> tuple[Timestamp, ...]:
        """Keep holidays in range and sorted."""
        for holiday in v:
            if not 0 <= holiday <= TIMESTAMP_MAX:
                raise ContractValidationError(
                    "Holiday timestamp out of range", context={"holiday": holiday}
                )
        return tuple(sorted(set(v)))

    @property
    def resolved_calendar(self) -> Calendar:
        return self.calendar or Calendar.NO_CALENDAR

    @property
    def resolved_end_of_month_convention(self) -> EndOfMonthConvention:
        return self.end_of_month_convention or EndOfMonthConvention.SD

    @property
    def resolved_business_day_convention(self) -> BusinessDayConvention:
        return self.business_day_convention or BusinessDayConvention.NULL


class ContractTerms(BaseModel):
    """Immutable terms of a single debt contract.

    Not all terms are required for all contract types; each contract rule
    set checks the terms it needs when it is constructed.

    Monetary amounts and rates are :class:`Units` (six decimals). Dates are
    integer timestamps (seconds since epoch, UTC).

    Example:
        >>> terms = ContractTerms(
        ...     contract_id="LOAN-001",
        ...     contract_type=ContractType.PAM,
        ...     contract_role=ContractRole.RPA,
        ...     status_date=1000,
        ...     initial_exchange_date=1000,
        ...     maturity_date=2000,
        ...     notional_principal=Units.from_int(500_000),
        ...     nominal_interest_rate=Units(50_000),
        ... )

    References:
        ACTUS Technical Specification v1.1, Section 4
    """

    # ========== CRITICAL ATTRIBUTES ==========
    contract_id: str = Field(..., min_length=1, description="Unique contract identifier")
    contract_type: ContractType = Field(..., description="ACTUS contract type (CT)")
    contract_role: ContractRole = Field(
        ..., description="Contract role - creditor or debtor (CNTRL)"
    )
    settlement_currency: bytes | None = Field(
        None, description="Opaque settlement currency identifier (CUR)"
    )
    status_date: Timestamp = Field(..., ge=0, le=TIMESTAMP_MAX, description="Status date (SD)")
    initial_exchange_date: Timestamp | None = Field(
        None, ge=0, le=TIMESTAMP_MAX, description="Initial exchange date (IED)"
    )
    maturity_date: Timestamp | None = Field(
        None, ge=0, le=TIMESTAMP_MAX, description="Maturity date (MD)"
    )
    purchase_date: Timestamp | None = Field(
        None, ge=0, le=TIMESTAMP_MAX, description="Purchase date (PRD)"
    )
    termination_date: Timestamp | None = Field(
        None, ge=0, le=TIMESTAMP_MAX, description="Early termination date (TD)"
    )

    # ========== NOTIONAL AND RATES ==========
    notional_principal: Units | None = Field(None, description="Notional principal (NT)")
    nominal_interest_rate: Units | None = Field(
        None, description="Nominal interest rate as a fraction (IPNR)"
    )
    day_count_convention: DayCountConvention | None = Field(
        None, description="Day count convention (DCC)"
    )

    # ========== SCHEDULES ==========
    interest_payment_cycle: Cycle | None = Field(None, description="Interest payment cycle (IPCL)")
    interest_payment_anchor: Timestamp | None = Field(
        None, ge=0, le=TIMESTAMP_MAX, description="Interest payment anchor (IPANX)"
    )
    principal_redemption_cycle: Cycle | None = Field(
        None, description="Principal redemption cycle (PRCL)"
    )
    principal_redemption_anchor: Timestamp | None = Field(
        None, ge=0, le=TIMESTAMP_MAX, description="Principal redemption anchor (PRANX)"
    )
    next_principal_redemption_amount: Units | None = Field(
        None, description="Next principal redemption amount (PRNXT)"
    )

    # ========== FEES ==========
    fee_payment_cycle: Cycle | None = Field(None, description="Fee payment cycle (FECL)")
    fee_payment_anchor: Timestamp | None = Field(
        None, ge=0, le=TIMESTAMP_MAX, description="Fee payment anchor (FEANX)"
    )
    fee_rate: Units | None = Field(None, description="Fee rate or absolute fee (FER)")
    fee_basis: FeeBasis | None = Field(None, description="Fee basis (FEB)")

    # ========== SECONDARY MARKET / CREDIT ==========
    price_at_purchase_date: Units | None = Field(None, description="Price at purchase date (PPRD)")
    price_at_termination_date: Units | None = Field(
        None, description="Price at termination (PTD)"
    )
    credit_event_type: ContractPerformance | None = Field(
        None, description="Performance status set by a credit event (CET)"
    )

    schedule_config: ScheduleConfig = Field(
        default_factory=ScheduleConfig, description="Business day and end-of-month handling"
    )

    # Pydantic v2 config
    model_config = {
        "arbitrary_types_allowed": True,  # Allow Units
        "frozen": True,
    }

    @field_validator("notional_principal")
    @classmethod
    def validate_notional(cls, v: Units | None) -> Units | None:
        """Validate that notional is strictly positive if defined."""
        if v is not None and v.raw <= 0:
            raise ContractValidationError(
                "Notional principal must be positive", context={"notional_principal": str(v)}
            )
        return v

    @field_validator("nominal_interest_rate")
    @classmethod
    def validate_interest_rate(cls, v: Units | None) -> Units | None:
        """Validate that interest rate is greater than -1 (can be negative)."""
        if v is not None and v.raw <= -UNITS_SCALE:
            raise ContractValidationError(
                "Interest rate must be > -1", context={"nominal_interest_rate": str(v)}
            )
        return v

    @field_validator("next_principal_redemption_amount")
    @classmethod
    def validate_next_principal_redemption(cls, v: Units | None) -> Units | None:
        if v is not None and v.raw < 0:
            raise ContractValidationError(
                "Next principal redemption amount must not be negative",
                context={"next_principal_redemption_amount": str(v)},
            )
        return v

    @field_validator("interest_payment_cycle", "principal_redemption_cycle", "fee_payment_cycle")
    @classmethod
    def validate_cycle(cls, v: Cycle | None) -> Cycle | None:
        """Reject malformed cycles at construction."""
        if v is not None:
            parse_cycle(v)
        return v

    @model_validator(mode="after")
    def validate_dates(self) -> ContractTerms:
        """Validate date ordering constraints."""
        ied = self.initial_exchange_date
        md = self.maturity_date

        # The pre-exchange state starts at SD, so IED must not precede it
        if ied is not None and self.status_date > ied:
            raise ContractValidationError(
                "Status date must not be after initial exchange date",
                context={"contract_id": self.contract_id, "SD": self.status_date, "IED": ied},
            )

        if ied is not None and md is not None and md <= ied:
            raise ContractValidationError(
                "Maturity date must be after initial exchange date",
                context={"contract_id": self.contract_id, "IED": ied, "MD": md},
            )

        if ied is not None and self.termination_date is not None and self.termination_date <= ied:
            raise ContractValidationError(
                "Termination date must be after initial exchange date",
                context={"contract_id": self.contract_id, "IED": ied, "TD": self.termination_date},
            )

        if self.purchase_date is not None:
            prd = self.purchase_date
            if (ied is not None and prd < ied) or (md is not None and prd > md):
                raise ContractValidationError(
                    "Purchase date must lie within the contract lifetime",
                    context={"contract_id": self.contract_id, "PRD": prd, "IED": ied, "MD": md},
                )

        return self

    @classmethod
    def create(cls, **kwargs: Any) -> ContractTerms:
        """Construct terms, reporting every failure as ContractValidationError.

        Raises:
            ContractValidationError: If any field is missing, mistyped or invalid
        """
        try:
            return cls(**kwargs)
        except ValidationError as e:
            raise ContractValidationError(
                "Invalid contract terms", context=_pydantic_error_context(e)
            ) from e

    @property
    def resolved_day_count_convention(self) -> DayCountConvention:
        """Day count convention, A365 when absent."""
        return self.day_count_convention or DayCountConvention.A365

    @property
    def role_sign(self) -> int:
        return self.contract_role.get_sign()

    def get_attribute(self, actus_name: str) -> Any:
        """Get attribute value by ACTUS short name.

        Args:
            actus_name: ACTUS short name (e.g., 'IPNR', 'NT', 'MD')

        Returns:
            Attribute value

        Raises:
            KeyError: If ACTUS name not recognized

        Example:
            >>> terms.get_attribute('NT')
            Units(raw=500000000000)
        """
        if actus_name not in ATTRIBUTE_MAP:
            raise KeyError(f"Unknown ACTUS attribute name: {actus_name}")
        return getattr(self, ATTRIBUTE_MAP[actus_name])

    def is_attribute_defined(self, actus_name: str) -> bool:
        """Check if an attribute has a non-None value."""
        try:
            return self.get_attribute(actus_name) is not None
        except KeyError:
            return False


# Mapping from ACTUS short names to Python attribute names
ATTRIBUTE_MAP: dict[str, str] = {
    "CT": "contract_type",
    "CNTRL": "contract_role",
    "CUR": "settlement_currency",
    "SD": "status_date",
    "IED": "initial_exchange_date",
    "MD": "maturity_date",
    "PRD": "purchase_date",
    "TD": "termination_date",
    "NT": "notional_principal",
    "IPNR": "nominal_interest_rate",
    "DCC": "day_count_convention",
    "IPCL": "interest_payment_cycle",
    "IPANX": "interest_payment_anchor",
    "PRCL": "principal_redemption_cycle",
    "PRANX": "principal_redemption_anchor",
    "PRNXT": "next_principal_redemption_amount",
    "FECL": "fee_payment_cycle",
    "FEANX": "fee_payment_anchor",
    "FER": "fee_rate",
    "FEB": "fee_basis",
    "PPRD": "price_at_purchase_date",
    "PTD": "price_at_termination_date",
    "CET": "credit_event_type",
}
