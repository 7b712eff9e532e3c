"""Thin host-facing facade for a single contract instance.

The facade speaks the boundary's language: numeric enumeration codes, opaque
currency bytes and encoded terms. It decodes its inputs, delegates to the
contract rule set and persists the encoded state only when an event
succeeds. It performs no financial logic itself.

Mutating calls must be serialized by the host. The facade asserts this with
a non-blocking lock: a second writer entering while one is active fails
immediately instead of waiting.

Example:
    >>> contract = ActusContract()
    >>> contract.init(ContractType.PAM.code, ContractRole.RPA.code, b"USD", encode_terms(terms))
    >>> contract.process_event(EventType.IED.code, 1000)
    Units(raw=-500000000000)
    >>> contract.get_state().stage
    <LifecycleStage.ACTIVE: 'ACTIVE'>
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from actus_ledger.contracts import BaseContract, create_contract
from actus_ledger.core.codec import decode_state, decode_terms, encode_state, encode_terms
from actus_ledger.core.states import ContractState
from actus_ledger.core.terms import ContractTerms
from actus_ledger.core.types import ContractRole, ContractType, EventType, Timestamp
from actus_ledger.core.units import Units
from actus_ledger.engine.store import InMemoryStateStore, StateStore
from actus_ledger.exceptions import ActusException, ContractValidationError, StateTransitionError
from actus_ledger.logging_config import get_logger

logger = get_logger(__name__)

TERMS_KEY = "terms"
STATE_KEY = "state"


class ActusContract:
    """One persisted ACTUS contract instance.

    Args:
        store: Storage backend; defaults to a fresh InMemoryStateStore. A
            store that already holds terms and state reopens that contract.
    """

    def __init__(self, store: StateStore | None = None) -> None:
        self._store: StateStore = store if store is not None else InMemoryStateStore()
        self._lock = threading.Lock()
        self._rules: BaseContract | None = None

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise StateTransitionError(
                "Concurrent mutation of contract state", "single_writer", {"operation": operation}
            )
        try:
            yield
        finally:
            self._lock.release()

    @property
    def is_initialized(self) -> bool:
        return self._store.has(TERMS_KEY)

    def init(
        self, contract_type: int, contract_role: int, currency: bytes, terms: bytes
    ) -> None:
        """Validate and store the terms and the initial state.

        Args:
            contract_type: ContractType code
            contract_role: ContractRole code
            currency: Opaque settlement currency identifier
            terms: Encoded ContractTerms

        Raises:
            ContractValidationError: If a code is unknown, the codes or the
                currency disagree with the terms, the terms are invalid, or
                the contract is already initialized
            StateTransitionError: On concurrent mutation
        """
        with self._exclusive("init"):
            if self.is_initialized:
                raise ContractValidationError("Contract is already initialized")

            ct = ContractType.from_code(contract_type)
            role = ContractRole.from_code(contract_role)
            decoded = decode_terms(terms)
            context = {"contract_id": decoded.contract_id}

            if decoded.contract_type != ct or decoded.contract_role != role:
                raise ContractValidationError(
                    "Contract type or role disagrees with the terms",
                    context={
                        **context,
                        "contract_type": ct.value,
                        "terms_contract_type": decoded.contract_type.value,
                        "contract_role": role.value,
                        "terms_contract_role": decoded.contract_role.value,
                    },
                )
            if not isinstance(currency, (bytes, bytearray, memoryview)):
                raise ContractValidationError(
                    "Settlement currency must be bytes",
                    context={**context, "type": type(currency).__name__},
                )
            currency = bytes(currency)
            if decoded.settlement_currency is None:
                decoded = decoded.model_copy(update={"settlement_currency": currency})
            elif decoded.settlement_currency != currency:
                raise ContractValidationError(
                    "Settlement currency disagrees with the terms", context=context
                )

            rules = create_contract(decoded)
            state = rules.initialize_state()

            self._store.set(TERMS_KEY, encode_terms(decoded))
            self._store.set(STATE_KEY, encode_state(state))
            self._rules = rules
            logger.info(
                "Initialized %s contract %s",
                ct.value,
                decoded.contract_id,
                extra={"contract_id": decoded.contract_id},
            )

    def process_event(
        self, event_type: int, timestamp: Timestamp, amount: Units | None = None
    ) -> Units | None:
        """Apply one event and persist the new state.

        Args:
            event_type: EventType code
            timestamp: Event timestamp (seconds since epoch)
            amount: Optional amount for PR and PP events

        Returns:
            Signed settlement amount, or None

        Raises:
            ContractValidationError: Unknown event code or malformed call
            StateTransitionError: Event not applicable now, contract not
                initialized, or concurrent mutation
            MathError: On fixed-point overflow

        The stored state is unchanged whenever an exception is raised.
        """
        with self._exclusive("process_event"):
            event = EventType.from_code(event_type)
            rules = self._get_rules()
            state = self._load_state()
            try:
                payoff = rules.transition(event, timestamp, state, amount)
            except ActusException as e:
                logger.warning(
                    "Rejected %s at %s: %s",
                    event.value,
                    timestamp,
                    e.message,
                    extra={
                        "contract_id": rules.terms.contract_id,
                        "event_type": event.value,
                        "event_time": timestamp,
                    },
                )
                raise
            self._store.set(STATE_KEY, encode_state(state))
            return payoff

    def get_state(self) -> ContractState:
        """Snapshot of the persisted state (an independent copy)."""
        return self._load_state()

    def get_state_bytes(self) -> bytes:
        """Persisted state in its binary encoding."""
        self._require_initialized()
        return self._store.get(STATE_KEY)

    def get_terms(self) -> ContractTerms:
        return self._get_rules().terms

    def _require_initialized(self) -> None:
        if not self.is_initialized:
            raise StateTransitionError("Contract is not initialized", "contract_initialized")

    def _get_rules(self) -> BaseContract:
        self._require_initialized()
        if self._rules is None:
            self._rules = create_contract(decode_terms(self._store.get(TERMS_KEY)))
        return self._rules

    def _load_state(self) -> ContractState:
        self._require_initialized()
        return decode_state(self._store.get(STATE_KEY))
