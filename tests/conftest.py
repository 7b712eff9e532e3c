"""Pytest configuration and shared fixtures for actus_ledger tests.

This module provides common fixtures and configuration for all tests.
"""

from collections.abc import Callable
from typing import Any

import jax
import pytest

from actus_ledger.core import (
    ContractRole,
    ContractTerms,
    ContractType,
    Units,
    make_timestamp,
)


@pytest.fixture
def sample_dates() -> dict[str, int]:
    """Provide common date fixtures for testing.

    Returns:
        Dictionary of commonly used timestamps in tests
    """
    return {
        "status_date": make_timestamp(2024, 1, 15),
        "initial_exchange": make_timestamp(2024, 1, 15),
        "maturity": make_timestamp(2025, 1, 15),
        "purchase": make_timestamp(2024, 7, 15),
        "termination": make_timestamp(2024, 10, 15),
    }


@pytest.fixture(autouse=True)
def reset_jax_config() -> None:
    """Clear JAX caches after each test.

    Contract state and schedule days are registered as pytrees; clearing the
    caches keeps tests independent.
    """
    yield
    jax.clear_caches()


@pytest.fixture
def pam_terms() -> ContractTerms:
    """The reference PAM contract: 500000 at 5%, IED 1000, MD 1300.

    Returns:
        Terms of a creditor PAM contract without cycles
    """
    return ContractTerms(
        contract_id="PAM-001",
        contract_type=ContractType.PAM,
        contract_role=ContractRole.RPA,
        settlement_currency=b"USD",
        status_date=1000,
        initial_exchange_date=1000,
        maturity_date=1300,
        notional_principal=Units.from_int(500_000),
        nominal_interest_rate=Units(50_000),
    )


@pytest.fixture
def make_terms(sample_dates: dict[str, int]) -> Callable[..., ContractTerms]:
    """Factory for calendar-dated terms with overridable fields.

    Defaults describe a one-year creditor PAM of 100000 at 5% from
    2024-01-15; any field can be overridden by keyword.

    Example:
        >>> terms = make_terms(contract_type=ContractType.LAM, principal_redemption_cycle="3M")
    """

    def _make(**overrides: Any) -> ContractTerms:
        fields: dict[str, Any] = {
            "contract_id": "TEST-001",
            "contract_type": ContractType.PAM,
            "contract_role": ContractRole.RPA,
            "status_date": sample_dates["status_date"],
            "initial_exchange_date": sample_dates["initial_exchange"],
            "maturity_date": sample_dates["maturity"],
            "notional_principal": Units.from_int(100_000),
            "nominal_interest_rate": Units(50_000),
        }
        fields.update(overrides)
        return ContractTerms(**fields)

    return _make


# Configure pytest markers
def pytest_configure(config: Any) -> None:
    """Configure custom pytest markers.

    Args:
        config: Pytest configuration object
    """
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")
