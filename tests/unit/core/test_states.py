"""Unit tests for ContractState."""

import jax

from actus_ledger.core.states import ContractState, initialize_state
from actus_ledger.core.types import ContractPerformance, LifecycleStage
from actus_ledger.core.units import Units


class TestContractState:
    """Test ContractState behaviour."""

    def test_defaults(self):
        """Test the pre-IED default state."""
        state = ContractState()
        assert state.notional_principal == Units(0)
        assert state.performance == ContractPerformance.PF
        assert state.stage == LifecycleStage.PENDING
        assert state.status_date == 0
        assert state.is_settled()

    def test_copy_is_independent(self):
        """Test that copies do not share updates."""
        state = ContractState(notional_principal=Units(5), status_date=10)
        work = state.copy()
        work.notional_principal = Units(7)
        work.stage = LifecycleStage.ACTIVE
        assert state.notional_principal == Units(5)
        assert state.stage == LifecycleStage.PENDING

    def test_assign_commits_every_field(self):
        """Test that assign overwrites the whole state."""
        state = ContractState()
        other = ContractState(
            notional_principal=Units(1),
            accrued_interest=Units(2),
            accrued_fees=Units(3),
            next_principal_redemption=Units(4),
            performance=ContractPerformance.DL,
            stage=LifecycleStage.ACTIVE,
            status_date=99,
        )
        state.assign(other)
        assert state == other

    def test_is_settled(self):
        """Test the outstanding balance check."""
        assert not ContractState(accrued_interest=Units(1)).is_settled()
        assert ContractState(next_principal_redemption=Units(1)).is_settled()

    def test_to_dict(self):
        """Test the plain dictionary view."""
        data = ContractState(notional_principal=Units.from_int(2), status_date=5).to_dict()
        assert data["notional_principal"] == "2.000000"
        assert data["stage"] == "PENDING"
        assert data["status_date"] == 5


class TestInitializeState:
    """Test initialize_state."""

    def test_from_terms(self, pam_terms):
        """Test that the initial state starts at the status date."""
        state = initialize_state(pam_terms)
        assert state.status_date == 1000
        assert state.stage == LifecycleStage.PENDING
        assert state.is_settled()

    def test_prnxt_taken_from_terms(self, make_terms):
        """Test that PRNXT seeds the state."""
        terms = make_terms(next_principal_redemption_amount=Units.from_int(10))
        assert initialize_state(terms).next_principal_redemption == Units.from_int(10)


class TestPytree:
    """Test JAX pytree registration."""

    def test_leaves_are_integers(self):
        """Test that the state flattens to integer leaves."""
        state = ContractState(
            notional_principal=Units(-3),
            stage=LifecycleStage.MATURED,
            performance=ContractPerformance.DF,
            status_date=7,
        )
        leaves = jax.tree_util.tree_leaves(state)
        assert leaves == [-3, 0, 0, 0, ContractPerformance.DF.code, LifecycleStage.MATURED.code, 7]

    def test_flatten_unflatten(self):
        """Test reconstruction from leaves."""
        state = ContractState(accrued_interest=Units(11), status_date=3)
        leaves, treedef = jax.tree_util.tree_flatten(state)
        assert jax.tree_util.tree_unflatten(treedef, leaves) == state
