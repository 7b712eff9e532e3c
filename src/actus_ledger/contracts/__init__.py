"""Contract rule sets for the ACTUS debt contract types.

This module provides:
- Base contract infrastructure (BaseContract)
- Concrete contract implementations (PAM, LAM, NAM, ANN, CLM)
- Contract factory pattern for dynamic instantiation
- Type registration system for extensibility
- A stateless ``transition`` entry point

Example:
    >>> from actus_ledger.contracts import create_contract, transition
    >>> contract = create_contract(terms)
    >>> state = contract.initialize_state()
    >>> transition(EventType.IED, 1000, state, terms)
    Units(raw=-500000000000)
"""

from actus_ledger.contracts.ann import AnnuityContract
from actus_ledger.contracts.base import BaseContract
from actus_ledger.contracts.clm import CallMoneyContract
from actus_ledger.contracts.lam import LinearAmortizerContract
from actus_ledger.contracts.nam import NegativeAmortizerContract
from actus_ledger.contracts.pam import PrincipalAtMaturityContract
from actus_ledger.core.states import ContractState
from actus_ledger.core.terms import ContractTerms
from actus_ledger.core.types import ContractType, EventType, Timestamp
from actus_ledger.core.units import Units
from actus_ledger.exceptions import ContractValidationError

# Contract Registry
# Maps ContractType enum values to their implementation classes
CONTRACT_REGISTRY: dict[ContractType, type[BaseContract]] = {
    ContractType.PAM: PrincipalAtMaturityContract,
    ContractType.LAM: LinearAmortizerContract,
    ContractType.NAM: NegativeAmortizerContract,
    ContractType.ANN: AnnuityContract,
    ContractType.CLM: CallMoneyContract,
}


def register_contract_type(contract_type: ContractType, contract_class: type[BaseContract]) -> None:
    """Register a new contract type in the factory registry.

    Args:
        contract_type: The ContractType enum value
        contract_class: The contract implementation class (must extend BaseContract)

    Raises:
        TypeError: If contract_class doesn't extend BaseContract
        ValueError: If contract_type is already registered
    """
    if not issubclass(contract_class, BaseContract):
        raise TypeError(f"Contract class must extend BaseContract, got {contract_class.__name__}")

    if contract_type in CONTRACT_REGISTRY:
        raise ValueError(
            f"Contract type {contract_type.value} is already registered "
            f"with {CONTRACT_REGISTRY[contract_type].__name__}"
        )

    CONTRACT_REGISTRY[contract_type] = contract_class


def create_contract(terms: ContractTerms) -> BaseContract:
    """Create a contract rule set using the factory pattern.

    Instantiating the rule set validates the type-specific required terms
    and builds the contract's schedules.

    Args:
        terms: Contract terms (must include contract_type)

    Returns:
        Instance of the appropriate contract class

    Raises:
        ContractValidationError: If contract_type is not registered or the
            terms are invalid for it

    Example:
        >>> contract = create_contract(terms)
        >>> isinstance(contract, PrincipalAtMaturityContract)
        True
    """
    contract_type = terms.contract_type
    if contract_type not in CONTRACT_REGISTRY:
        available_types = ", ".join(ct.value for ct in CONTRACT_REGISTRY)
        raise ContractValidationError(
            "Unknown contract type",
            context={"contract_type": contract_type.value, "available": available_types},
        )
    return CONTRACT_REGISTRY[contract_type](terms)


def get_available_contract_types() -> list[ContractType]:
    """Get list of all registered contract types."""
    return list(CONTRACT_REGISTRY.keys())


def transition(
    event_type: EventType,
    timestamp: Timestamp,
    state: ContractState,
    terms: ContractTerms,
    amount: Units | None = None,
) -> Units | None:
    """Apply one event to a contract state given only its terms.

    Builds the rule set for ``terms`` and delegates to
    :meth:`BaseContract.transition`. The state is updated in place on
    success and left untouched on failure.

    Returns:
        Signed settlement amount, or None
    """
    return create_contract(terms).transition(event_type, timestamp, state, amount)


__all__ = [
    # Base classes
    "BaseContract",
    # Contract implementations
    "AnnuityContract",
    "CallMoneyContract",
    "LinearAmortizerContract",
    "NegativeAmortizerContract",
    "PrincipalAtMaturityContract",
    # Factory pattern
    "CONTRACT_REGISTRY",
    "create_contract",
    "register_contract_type",
    "get_available_contract_types",
    "transition",
]
