"""Unit tests for ContractTerms and ScheduleConfig."""

import pytest
from pydantic import ValidationError

from actus_ledger.core.terms import ATTRIBUTE_MAP, ContractTerms, ScheduleConfig
from actus_ledger.core.types import (
    BusinessDayConvention,
    Calendar,
    ContractRole,
    ContractType,
    DayCountConvention,
    EndOfMonthConvention,
)
from actus_ledger.core.units import Units
from actus_ledger.exceptions import ContractValidationError, ScheduleGenerationError


class TestContractTerms:
    """Test ContractTerms construction and validation."""

    def test_minimal_terms(self):
        """Test that only identity, type, role and status date are required."""
        terms = ContractTerms(
            contract_id="X",
            contract_type=ContractType.CLM,
            contract_role=ContractRole.RPL,
            status_date=0,
        )
        assert terms.initial_exchange_date is None
        assert terms.schedule_config == ScheduleConfig()

    def test_terms_are_frozen(self, pam_terms):
        """Test immutability."""
        with pytest.raises(ValidationError):
            pam_terms.maturity_date = 2000

    def test_notional_must_be_positive(self, make_terms):
        """Test the notional check."""
        with pytest.raises(ContractValidationError, match="Notional principal must be positive"):
            make_terms(notional_principal=Units(0))
        with pytest.raises(ContractValidationError):
            make_terms(notional_principal=Units.from_int(-1))

    def test_rate_above_minus_one(self, make_terms):
        """Test that negative rates are allowed down to (but excluding) -100%."""
        assert make_terms(nominal_interest_rate=Units(-500_000)).nominal_interest_rate.raw == -500_000
        with pytest.raises(ContractValidationError):
            make_terms(nominal_interest_rate=Units(-1_000_000))

    def test_malformed_cycle_rejected(self, make_terms):
        """Test that cycles are parsed at construction."""
        with pytest.raises(ScheduleGenerationError):
            make_terms(interest_payment_cycle="0M")

    def test_maturity_after_initial_exchange(self, make_terms, sample_dates):
        """Test date ordering."""
        with pytest.raises(ContractValidationError, match="Maturity date"):
            make_terms(maturity_date=sample_dates["initial_exchange"])

    def test_termination_after_initial_exchange(self, make_terms, sample_dates):
        """Test termination date ordering."""
        with pytest.raises(ContractValidationError, match="Termination date"):
            make_terms(termination_date=sample_dates["initial_exchange"] - 1)

    def test_purchase_within_lifetime(self, make_terms, sample_dates):
        """Test purchase date bounds."""
        assert make_terms(purchase_date=sample_dates["purchase"]).purchase_date is not None
        with pytest.raises(ContractValidationError, match="Purchase date"):
            make_terms(purchase_date=sample_dates["maturity"] + 1)

    def test_status_date_not_after_initial_exchange(self, make_terms, sample_dates):
        """Test that SD may equal or precede IED but not follow it."""
        ied = sample_dates["initial_exchange"]
        assert make_terms(status_date=ied - 86_400).status_date == ied - 86_400
        with pytest.raises(ContractValidationError, match="Status date") as exc_info:
            make_terms(status_date=ied + 1)
        assert exc_info.value.context["IED"] == ied

    def test_next_principal_redemption_not_negative(self, make_terms):
        """Test that PRNXT may be zero but not negative."""
        assert make_terms(next_principal_redemption_amount=Units(0)).next_principal_redemption_amount == Units(0)
        with pytest.raises(ContractValidationError, match="Next principal redemption"):
            make_terms(next_principal_redemption_amount=Units(-1))

    def test_create_wraps_pydantic_errors(self):
        """Test that create reports every failure as ContractValidationError."""
        with pytest.raises(ContractValidationError) as exc_info:
            ContractTerms.create(
                contract_id="X",
                contract_type=ContractType.PAM,
                contract_role=ContractRole.RPA,
                status_date=-1,
            )
        assert "status_date" in exc_info.value.context["errors"]

    def test_create_missing_field(self):
        """Test that a missing required field is a validation error."""
        with pytest.raises(ContractValidationError):
            ContractTerms.create(contract_type=ContractType.PAM, contract_role=ContractRole.RPA)

    def test_resolved_day_count_convention(self, make_terms):
        """Test the A365 default."""
        assert make_terms().resolved_day_count_convention == DayCountConvention.A365
        terms = make_terms(day_count_convention=DayCountConvention.A360)
        assert terms.resolved_day_count_convention == DayCountConvention.A360

    def test_role_sign(self, make_terms):
        """Test the role sign shortcut."""
        assert make_terms().role_sign == 1
        assert make_terms(contract_role=ContractRole.RPL).role_sign == -1


class TestAttributeAccess:
    """Test ACTUS short name access."""

    def test_get_attribute(self, pam_terms):
        """Test lookups by ACTUS name."""
        assert pam_terms.get_attribute("NT") == Units.from_int(500_000)
        assert pam_terms.get_attribute("IED") == 1000
        assert pam_terms.get_attribute("CT") == ContractType.PAM

    def test_unknown_attribute(self, pam_terms):
        """Test that unknown names raise KeyError."""
        with pytest.raises(KeyError):
            pam_terms.get_attribute("NOPE")

    def test_is_attribute_defined(self, pam_terms):
        """Test presence checks."""
        assert pam_terms.is_attribute_defined("MD")
        assert not pam_terms.is_attribute_defined("PRNXT")
        assert not pam_terms.is_attribute_defined("NOPE")

    def test_attribute_map_targets_exist(self):
        """Test that every mapped field exists on the model."""
        assert set(ATTRIBUTE_MAP.values()) <= set(ContractTerms.model_fields)


class TestScheduleConfig:
    """Test ScheduleConfig defaults and validation."""

    def test_defaults(self):
        """Test documented defaults of absent fields."""
        config = ScheduleConfig()
        assert config.resolved_calendar == Calendar.NO_CALENDAR
        assert config.resolved_end_of_month_convention == EndOfMonthConvention.SD
        assert config.resolved_business_day_convention == BusinessDayConvention.NULL

    def test_holidays_sorted_and_deduplicated(self):
        """Test holiday normalization."""
        config = ScheduleConfig(holidays=(300, 100, 300))
        assert config.holidays == (100, 300)

    def test_holiday_out_of_range(self):
        """Test that negative holidays are rejected."""
        with pytest.raises(ContractValidationError):
            ScheduleConfig(holidays=(-5,))
