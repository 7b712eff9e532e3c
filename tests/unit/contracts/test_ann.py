"""Unit tests for Annuity (ANN) contract implementation."""

import pytest

from actus_ledger.contracts.ann import AnnuityContract
from actus_ledger.core import (
    BusinessDayConvention,
    Calendar,
    ContractType,
    EventType,
    LifecycleStage,
    ScheduleConfig,
    Units,
    make_timestamp,
)
from actus_ledger.exceptions import ContractValidationError, StateTransitionError
from actus_ledger.utilities.math import calculate_actus_annuity

PR_DATES = [make_timestamp(2024, 4, 15), make_timestamp(2024, 7, 15), make_timestamp(2024, 10, 15)]


@pytest.fixture
def ann_terms(make_terms):
    def _make(**overrides):
        fields = {"contract_type": ContractType.ANN, "principal_redemption_cycle": "3M"}
        fields.update(overrides)
        return make_terms(**fields)

    return _make


class TestAnnuityAmount:
    """Test the annuity computed at construction."""

    def test_zero_rate(self, ann_terms):
        """Test that without interest the notional splits over PR dates and MD."""
        contract = AnnuityContract(ann_terms(nominal_interest_rate=Units(0)))
        assert contract.annuity_amount == Units.from_int(25_000)

    def test_positive_rate(self, ann_terms, sample_dates):
        """Test the ACTUS annuity over the PR dates plus maturity."""
        terms = ann_terms()
        contract = AnnuityContract(terms)
        expected = calculate_actus_annuity(
            sample_dates["initial_exchange"],
            PR_DATES + [sample_dates["maturity"]],
            terms.notional_principal,
            Units(0),
            terms.nominal_interest_rate,
            None,
        )
        assert contract.annuity_amount == expected
        assert contract.annuity_amount > Units.from_int(25_000)

    def test_given_prnxt_used(self, ann_terms):
        """Test that an explicit PRNXT is not recomputed."""
        contract = AnnuityContract(ann_terms(next_principal_redemption_amount=Units.from_int(1)))
        assert contract.annuity_amount == Units.from_int(1)

    def test_state_carries_annuity(self, ann_terms):
        """Test that the initial state holds the annuity as PRNXT."""
        contract = AnnuityContract(ann_terms())
        assert contract.initialize_state().next_principal_redemption == contract.annuity_amount

    def test_without_cycle(self, ann_terms):
        """Test a single-payment annuity (maturity only)."""
        contract = AnnuityContract(ann_terms(principal_redemption_cycle=None))
        assert contract.pr_schedule is None
        assert contract.annuity_amount > Units.from_int(100_000)

    def test_requires_maturity(self, ann_terms):
        """Test that MD is required."""
        with pytest.raises(ContractValidationError):
            AnnuityContract(ann_terms(maturity_date=None))


class TestAnnuityLifecycle:
    """Test the ANN payment sequence."""

    def test_constant_total_payment(self, ann_terms):
        """Test that principal plus interest equals the annuity."""
        terms = ann_terms()
        contract = AnnuityContract(terms)
        state = contract.initialize_state()
        contract.transition(EventType.IED, terms.initial_exchange_date, state)
        for date in PR_DATES:
            principal = contract.transition(EventType.PR, date, state)
            interest = contract.transition(EventType.IP, date, state)
            assert principal + interest == contract.annuity_amount

    def test_zero_rate_amortizes_fully(self, ann_terms, sample_dates):
        """Test that the zero-rate annuity repays the notional exactly."""
        terms = ann_terms(nominal_interest_rate=Units(0))
        contract = AnnuityContract(terms)
        state = contract.initialize_state()
        contract.transition(EventType.IED, terms.initial_exchange_date, state)
        for date in PR_DATES:
            contract.transition(EventType.PR, date, state)
        assert state.notional_principal == Units.from_int(25_000)
        assert contract.transition(EventType.MD, sample_dates["maturity"], state) == Units.from_int(
            25_000
        )
        assert state.stage == LifecycleStage.MATURED

    def test_negative_payment_rejected(self, ann_terms):
        """Test that a negative caller-supplied payment fails and changes nothing."""
        terms = ann_terms()
        contract = AnnuityContract(terms)
        state = contract.initialize_state()
        contract.transition(EventType.IED, terms.initial_exchange_date, state)
        snapshot = state.copy()
        with pytest.raises(StateTransitionError) as exc_info:
            contract.transition(EventType.PR, PR_DATES[0], state, Units.from_int(-5))
        assert exc_info.value.invariant == "redemption_within_outstanding"
        assert state == snapshot


class TestAnnuityBusinessDays:
    """Test which dates the annuity is computed on."""

    @pytest.fixture
    def weekend_terms(self, ann_terms):
        def _make(convention):
            return ann_terms(
                # Saturday; later entries fall on Sundays
                principal_redemption_anchor=make_timestamp(2024, 6, 15),
                schedule_config=ScheduleConfig(
                    calendar=Calendar.MONDAY_TO_FRIDAY, business_day_convention=convention
                ),
            )

        return _make

    def test_calculate_shift_uses_unadjusted_dates(self, weekend_terms, sample_dates):
        """Test that CSF computes the annuity on the unadjusted PR dates."""
        terms = weekend_terms(BusinessDayConvention.CSF)
        expected = calculate_actus_annuity(
            sample_dates["initial_exchange"],
            [
                make_timestamp(2024, 6, 15),
                make_timestamp(2024, 9, 15),
                make_timestamp(2024, 12, 15),
                sample_dates["maturity"],
            ],
            terms.notional_principal,
            Units(0),
            terms.nominal_interest_rate,
            None,
        )
        assert AnnuityContract(terms).annuity_amount == expected

    def test_shift_calculate_uses_settlement_dates(self, weekend_terms, sample_dates):
        """Test that SCF computes the annuity on the shifted PR dates."""
        terms = weekend_terms(BusinessDayConvention.SCF)
        expected = calculate_actus_annuity(
            sample_dates["initial_exchange"],
            [
                make_timestamp(2024, 6, 17),
                make_timestamp(2024, 9, 16),
                make_timestamp(2024, 12, 16),
                sample_dates["maturity"],
            ],
            terms.notional_principal,
            Units(0),
            terms.nominal_interest_rate,
            None,
        )
        contract = AnnuityContract(terms)
        assert contract.annuity_amount == expected
        assert contract.annuity_amount != AnnuityContract(
            weekend_terms(BusinessDayConvention.CSF)
        ).annuity_amount
