"""Base contract class for all ACTUS debt contracts.

This module implements the abstract base class that every contract rule set
inherits from. It owns the shared state-machine contract that all contract
types obey:

1. Events must not go back in time (``timestamp >= state.status_date``).
2. Matured or terminated contracts accept no further events, and each type
   only accepts the events it supports.
3. The event rule runs on a working copy of the state, checking its stage,
   lifetime and schedule preconditions.
4. The status date advances to the event timestamp, and a terminal state
   must have no outstanding balance.
5. Only then is the working copy committed into the caller's state.

Any failure raises before step 5, so the caller's state is never partially
updated.

References:
    ACTUS v1.1 Section 3 - Contract Types
    ACTUS v1.1 Section 4 - Event Schedules
"""

from __future__ import annotations

from abc import ABC
from typing import ClassVar

import flax.nnx as nnx

from actus_ledger.core.states import ContractState, initialize_state
from actus_ledger.core.terms import ContractTerms
from actus_ledger.core.time import validate_timestamp
from actus_ledger.core.types import (
    EVENT_SCHEDULE_PRIORITY,
    ContractPerformance,
    ContractType,
    EventType,
    FeeBasis,
    LifecycleStage,
    Timestamp,
)
from actus_ledger.core.units import Units
from actus_ledger.exceptions import ContractValidationError, StateTransitionError
from actus_ledger.logging_config import get_logger
from actus_ledger.utilities.math import accrue_interest
from actus_ledger.utilities.schedules import (
    Schedule,
    ShiftedDay,
    fee_payment_schedule,
    interest_payment_schedule,
    lifecycle_schedule,
    principal_redemption_schedule,
)

logger = get_logger(__name__)

ALL_EVENTS: frozenset[EventType] = frozenset(EventType)


class BaseContract(nnx.Module, ABC):
    """Abstract base class for all ACTUS debt contracts.

    Subclasses declare the contract type they implement, the ACTUS terms
    they require and the events they support, and provide one
    ``_apply_<event>`` method per supported event. Each rule method mutates
    the working copy it receives and returns the settlement amount (or None).

    The class extends flax.nnx.Module so contract instances share the Flax
    module machinery (attribute tracking, ``nnx.graphdef``/``nnx.state``
    splitting) with the rest of the JAX stack.

    Attributes:
        terms: Validated contract terms
        role_sign: +1 for the creditor, -1 for the debtor
        lifecycle: Degenerate schedule of IED and MD
        ip_schedule: Interest payment schedule, None without IP cycle
        pr_schedule: Principal redemption schedule, None without PR cycle
        fee_schedule: Fee payment schedule, None without fee cycle

    Example:
        >>> contract = PrincipalAtMaturityContract(terms)
        >>> state = contract.initialize_state()
        >>> contract.transition(EventType.IED, 1000, state)
        Units(raw=-500000000000)

    References:
        ACTUS v1.1 Section 3 - Contract Types
        ACTUS v1.1 Section 4 - Algorithm
    """

    CONTRACT_TYPE: ClassVar[ContractType]
    REQUIRED_TERMS: ClassVar[tuple[str, ...]] = ("NT", "IED")
    SUPPORTED_EVENTS: ClassVar[frozenset[EventType]] = ALL_EVENTS
    # Events that accept a caller supplied amount
    AMOUNT_EVENTS: ClassVar[frozenset[EventType]] = frozenset({EventType.PR, EventType.PP})

    def __init__(self, terms: ContractTerms):
        """Validate terms and build the contract's schedules.

        Args:
            terms: Contract terms; their contract type must match this class

        Raises:
            ContractValidationError: If the contract type does not match, a
                required term is missing, or a schedule cannot be built
        """
        super().__init__()
        if terms.contract_type != self.CONTRACT_TYPE:
            raise ContractValidationError(
                "Contract type does not match rule set",
                context={
                    "contract_id": terms.contract_id,
                    "expected": self.CONTRACT_TYPE.value,
                    "got": terms.contract_type.value,
                },
            )
        self.terms = terms
        self.role_sign = terms.role_sign
        self._validate_required_terms()
        self._validate_terms()

        self.lifecycle = lifecycle_schedule(terms)
        days = list(self.lifecycle)
        self._initial_exchange: ShiftedDay = days[0]
        self._maturity: ShiftedDay | None = days[-1] if terms.maturity_date is not None else None

        if self._initial_exchange.shifted < terms.status_date:
            raise ContractValidationError(
                "Initial exchange settles before the status date",
                context={
                    "contract_id": terms.contract_id,
                    "SD": terms.status_date,
                    "IED": self._initial_exchange.shifted,
                },
            )

        self.ip_schedule: Schedule | None = interest_payment_schedule(terms)
        self.pr_schedule: Schedule | None = principal_redemption_schedule(terms)
        self.fee_schedule: Schedule | None = fee_payment_schedule(terms)
        self._calculate_unadjusted = (
            terms.schedule_config.resolved_business_day_convention.calculates_on_unadjusted
        )

    # ========================================================================
    # Validation
    # ========================================================================

    def _validate_required_terms(self) -> None:
        missing = [name for name in self.REQUIRED_TERMS if not self.terms.is_attribute_defined(name)]
        if missing:
            raise ContractValidationError(
                f"Missing required terms for {self.CONTRACT_TYPE.value}",
                context={"contract_id": self.terms.contract_id, "missing": ",".join(missing)},
            )

    def _validate_terms(self) -> None:
        """Hook for contract-specific term checks."""

    # ========================================================================
    # State
    # ========================================================================

    def initialize_state(self) -> ContractState:
        """Initialize contract state before the initial exchange.

        Returns:
            ContractState in the PENDING stage at the status date
        """
        return initialize_state(self.terms)

    def scheduled_events(self) -> list[tuple[ShiftedDay, EventType]]:
        """All scheduled events of the contract in processing order.

        Events are sorted by settlement date, then by ACTUS event priority
        for events on the same date.

        Example:
            >>> [e.value for _, e in contract.scheduled_events()]
            ['IED', 'MD']
        """
        events: list[tuple[ShiftedDay, EventType]] = [(self._initial_exchange, EventType.IED)]
        for schedule, event_type in (
            (self.ip_schedule, EventType.IP),
            (self.pr_schedule, EventType.PR),
            (self.fee_schedule, EventType.FP),
        ):
            if schedule is not None and event_type in self.SUPPORTED_EVENTS:
                events.extend((day, event_type) for day in schedule)
        if self._maturity is not None:
            events.append((self._maturity, EventType.MD))
        return sorted(events, key=lambda e: (e[0].shifted, EVENT_SCHEDULE_PRIORITY[e[1]]))

    # ========================================================================
    # Transition
    # ========================================================================

    def transition(
        self,
        event_type: EventType,
        timestamp: Timestamp,
        state: ContractState,
        amount: Units | None = None,
    ) -> Units | None:
        """Apply one event to the contract state.

        Args:
            event_type: Event to apply
            timestamp: Event timestamp (seconds since epoch)
            state: Contract state, updated in place on success only
            amount: Optional caller supplied amount (PR and PP only)

        Returns:
            Signed settlement amount from the creditor's point of view, or
            None for events without a cash flow

        Raises:
            StateTransitionError: If the event does not apply now
            ContractValidationError: If the call is malformed
            MathError: On fixed-point overflow
        """
        validate_timestamp(timestamp)
        context = {
            "contract_id": self.terms.contract_id,
            "event_type": event_type.value,
            "timestamp": timestamp,
        }

        if timestamp < state.status_date:
            raise StateTransitionError(
                "Event timestamp precedes status date",
                "status_date_monotonic",
                {**context, "status_date": state.status_date},
            )
        if state.stage.is_terminal:
            raise StateTransitionError(
                "Contract has reached a terminal stage",
                "terminal_stage_final",
                {**context, "stage": state.stage.value},
            )
        if event_type not in self.SUPPORTED_EVENTS:
            raise StateTransitionError(
                f"Event not supported by {self.CONTRACT_TYPE.value}",
                "event_supported",
                context,
            )
        if amount is not None and event_type not in self.AMOUNT_EVENTS:
            raise ContractValidationError("Event does not accept an amount", context=context)
        if event_type != EventType.IED and event_type != EventType.AD:
            self._require_active(state, context)

        work = state.copy()
        rule = getattr(self, f"_apply_{event_type.value.lower()}")
        payoff: Units | None = rule(work, timestamp, amount, context)
        work.status_date = timestamp
        self._check_terminal(work, context)

        state.assign(work)
        logger.debug(
            "Applied %s at %d",
            event_type.value,
            timestamp,
            extra={
                "contract_id": self.terms.contract_id,
                "event_type": event_type.value,
                "event_time": timestamp,
            },
        )
        return payoff

    # ========================================================================
    # Preconditions
    # ========================================================================

    def _require_active(self, state: ContractState, context: dict) -> None:
        if state.stage != LifecycleStage.ACTIVE:
            raise StateTransitionError(
                "Contract is not active",
                "event_requires_active_contract",
                {**context, "stage": state.stage.value},
            )

    def _require_within_lifetime(self, timestamp: Timestamp, context: dict) -> None:
        if self._maturity is not None and timestamp > self._maturity.shifted:
            raise StateTransitionError(
                "Event lies after maturity",
                "event_within_lifetime",
                {**context, "maturity": self._maturity.shifted},
            )

    def _require_on_schedule(
        self, schedule: Schedule | None, timestamp: Timestamp, context: dict
    ) -> None:
        if schedule is not None and schedule.find(timestamp) is None:
            raise StateTransitionError(
                "Event is not on its schedule", "event_on_schedule", context
            )

    def _require_date(
        self, expected: Timestamp | None, timestamp: Timestamp, invariant: str, context: dict
    ) -> None:
        if expected is not None and timestamp != expected:
            raise StateTransitionError(
                "Event timestamp does not match contract date",
                invariant,
                {**context, "expected": expected},
            )

    def _require_term(self, actus_name: str, context: dict) -> None:
        if not self.terms.is_attribute_defined(actus_name):
            raise ContractValidationError(
                f"Event requires term {actus_name}", context={**context, "term": actus_name}
            )

    def _check_terminal(self, state: ContractState, context: dict) -> None:
        if state.stage.is_terminal and not state.is_settled():
            raise StateTransitionError(
                "Terminal state has outstanding balances",
                "terminal_balances_zero",
                {**context, "state": state.to_dict()},
            )

    # ========================================================================
    # Accrual
    # ========================================================================

    def _calculation_date(self, timestamp: Timestamp) -> Timestamp:
        """Date that accrual is calculated on for an event settling at ``timestamp``.

        Under SC conventions (and without a shift) this is the settlement
        date itself. Under CS conventions a settlement date produced by one
        of the contract's schedules is mapped back to its unadjusted date;
        if several entries settle there, the earliest unadjusted date wins.
        """
        if not self._calculate_unadjusted:
            return timestamp
        dates = [
            day.date
            for schedule in (self.lifecycle, self.ip_schedule, self.pr_schedule, self.fee_schedule)
            if schedule is not None
            for day in (schedule.find(timestamp),)
            if day is not None
        ]
        return min(dates, default=timestamp)

    def _accrue(self, state: ContractState, timestamp: Timestamp) -> None:
        """Accrue interest and notional-based fees from the status date."""
        if state.stage != LifecycleStage.ACTIVE or timestamp <= state.status_date:
            return
        start = self._calculation_date(state.status_date)
        end = self._calculation_date(timestamp)
        rate = self.terms.nominal_interest_rate
        if rate is not None:
            state.accrued_interest += accrue_interest(
                state.notional_principal,
                rate,
                start,
                end,
                self.terms.day_count_convention,
            )
        fee_rate = self.terms.fee_rate
        if fee_rate is not None and self.terms.fee_basis == FeeBasis.N:
            state.accrued_fees += accrue_interest(
                state.notional_principal,
                fee_rate,
                start,
                end,
                self.terms.day_count_convention,
            )

    # ========================================================================
    # Rules common to all contract types
    # ========================================================================

    def _apply_ad(self, state, timestamp, amount, context) -> None:
        """AD: accrue only."""
        self._accrue(state, timestamp)
        return None

    def _apply_ce(self, state, timestamp, amount, context) -> None:
        """CE: accrue and set the performance status."""
        self._accrue(state, timestamp)
        state.performance = self.terms.credit_event_type or ContractPerformance.DF
        return None
