"""Integration tests for amortizing contracts.

This module runs complete schedules for the amortizing contract types and
checks the behaviour they share.

Test Categories:
- Full schedule runs end matured and settled
- Cross-contract consistency (notional never increases for LAM/ANN)
- Comparison tests (LAM vs ANN)
"""

import pytest

from actus_ledger.contracts import create_contract
from actus_ledger.core import ContractRole, ContractType, EventType, LifecycleStage, Units

pytestmark = pytest.mark.integration


def run_schedule(contract):
    """Apply every scheduled event in order; return states and payoffs."""
    state = contract.initialize_state()
    history = []
    for day, event in contract.scheduled_events():
        payoff = contract.transition(event, day.shifted, state)
        history.append((event, payoff, state.copy()))
    return state, history


@pytest.fixture
def amortizing_terms(make_terms):
    """Factory for monthly amortizing terms of a given contract type."""

    def _make(contract_type, **overrides):
        fields = {
            "contract_id": f"{contract_type.value}-INTEGRATION-001",
            "contract_type": contract_type,
            "principal_redemption_cycle": "1M",
            "interest_payment_cycle": "1M",
        }
        if contract_type in (ContractType.LAM, ContractType.NAM):
            fields["next_principal_redemption_amount"] = Units.from_int(9_000)
        fields.update(overrides)
        return make_terms(**fields)

    return _make


class TestFullSchedules:
    """Run whole schedules for each amortizing type."""

    @pytest.mark.parametrize(
        "contract_type", [ContractType.LAM, ContractType.NAM, ContractType.ANN]
    )
    @pytest.mark.parametrize("role", [ContractRole.RPA, ContractRole.RPL])
    def test_schedule_runs_to_maturity(self, amortizing_terms, contract_type, role):
        """Test that the scheduled events apply cleanly and settle the contract."""
        contract = create_contract(amortizing_terms(contract_type, contract_role=role))
        state, history = run_schedule(contract)
        assert state.stage == LifecycleStage.MATURED
        assert state.is_settled()
        assert history[0][0] == EventType.IED
        assert history[-1][0] == EventType.MD

    @pytest.mark.parametrize("contract_type", [ContractType.LAM, ContractType.ANN])
    def test_notional_never_increases(self, amortizing_terms, contract_type):
        """Test that the outstanding notional only goes down."""
        contract = create_contract(amortizing_terms(contract_type))
        _, history = run_schedule(contract)
        outstanding = [abs(s.notional_principal) for _, _, s in history[:-1]]
        assert outstanding == sorted(outstanding, reverse=True)

    @pytest.mark.parametrize(
        "contract_type", [ContractType.LAM, ContractType.NAM, ContractType.ANN]
    )
    def test_principal_flows_sum_to_notional(self, amortizing_terms, contract_type):
        """Test that PR payoffs plus the MD principal repay the notional exactly."""
        contract = create_contract(amortizing_terms(contract_type))
        _, history = run_schedule(contract)
        redeemed = sum((p for e, p, _ in history if e == EventType.PR), Units(0))
        before_md = history[-2][2]
        assert redeemed + before_md.notional_principal == Units.from_int(100_000)


class TestComparisons:
    """Compare amortizing types on the same loan."""

    def test_annuity_pays_less_interest_than_pam(self, amortizing_terms):
        """Test that amortizing reduces total interest compared to a bullet loan."""
        ann = create_contract(amortizing_terms(ContractType.ANN))
        pam = create_contract(
            amortizing_terms(ContractType.PAM, principal_redemption_cycle=None)
        )

        def total_interest(contract):
            _, history = run_schedule(contract)
            return sum((p for e, p, _ in history if e == EventType.IP), Units(0))

        assert total_interest(ann) < total_interest(pam)

    def test_annuity_payments_constant(self, amortizing_terms):
        """Test that every ANN installment (PR plus IP on a date) is equal."""
        contract = create_contract(amortizing_terms(ContractType.ANN))
        state = contract.initialize_state()
        installments = {}
        for day, event in contract.scheduled_events():
            payoff = contract.transition(event, day.shifted, state)
            if event in (EventType.PR, EventType.IP):
                installments[day.shifted] = installments.get(day.shifted, Units(0)) + payoff
        pr_dates = contract.pr_schedule.dates()
        assert {installments[d] for d in pr_dates} == {contract.annuity_amount}
