"""Schedule generation utilities for ACTUS contracts.

This module generates event schedules according to ACTUS specifications,
including handling of cycle notation, end-of-month conventions, and business
day conventions.

A :class:`Schedule` is a lazy, finite and restartable sequence of
:class:`ShiftedDay` values. Unadjusted dates are always computed from the
anchor (the k-th date is ``anchor + k * cycle``), then shifted to a business
day. The yielded shifted dates are strictly increasing: a date whose shifted
value does not advance past the previous one is dropped.

All validation happens in the constructor, so iterating a schedule never
raises for a configuration that was accepted.

References:
    ACTUS Technical Specification v1.1, Section 3 (Schedule Generation)
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import jax

from actus_ledger.core.terms import ScheduleConfig
from actus_ledger.core.time import (
    CALENDAR_TIMESTAMP_MAX,
    add_period,
    parse_cycle,
    validate_timestamp,
)
from actus_ledger.core.types import Cycle, Timestamp
from actus_ledger.exceptions import ContractValidationError, ScheduleGenerationError
from actus_ledger.utilities.calendars import adjust_to_business_day, get_calendar

if TYPE_CHECKING:
    from actus_ledger.core.terms import ContractTerms


@dataclass(frozen=True)
class ShiftedDay:
    """A schedule date together with its business-day adjusted settlement date.

    Attributes:
        date: Unadjusted date, used for calculation under CS conventions
        shifted: Adjusted date on which the event settles
    """

    date: Timestamp
    shifted: Timestamp


jax.tree_util.register_pytree_node(  # type: ignore[type-var]
    ShiftedDay,
    lambda day: ((day.date, day.shifted), None),
    lambda _, leaves: ShiftedDay(int(leaves[0]), int(leaves[1])),
)


class Schedule:
    """Regular event schedule S(s, c, T).

    Generates dates starting from the anchor ``s``, adding the cycle ``c``
    while the result stays before the end ``T``, then appends ``T``. Without
    a cycle the schedule degenerates to ``{s, T}``.

    A short stub ('-' or no indicator) keeps a shorter final period. A long
    stub ('+') drops the last regular date so the final period is longer.

    Example:
        >>> s = Schedule(make_timestamp(2024, 1, 31), make_timestamp(2024, 4, 30), "1M")
        >>> [to_iso(d.shifted)[:10] for d in s]
        ['2024-01-31', '2024-02-29', '2024-03-31', '2024-04-30']

    References:
        ACTUS Technical Specification v1.1, Section 3.1
    """

    def __init__(
        self,
        anchor: Timestamp,
        end: Timestamp,
        cycle: Cycle | None = None,
        config: ScheduleConfig | None = None,
        include_anchor: bool = True,
        include_end: bool = True,
    ) -> None:
        """Validate and prepare a schedule.

        Args:
            anchor: First date (cycle anchor)
            end: Last date of the schedule
            cycle: Cycle in NPS notation, or None for a degenerate schedule
            config: Business day and end-of-month configuration
            include_anchor: Whether the anchor itself is part of the schedule
            include_end: Whether the end date is part of the schedule

        Raises:
            ScheduleGenerationError: If the cycle is malformed, the dates are
                out of range, or the anchor lies after the end
        """
        try:
            validate_timestamp(anchor, "anchor")
            validate_timestamp(end, "end")
        except ContractValidationError as e:
            raise ScheduleGenerationError(e.message, context=e.context) from e
        if anchor > end:
            raise ScheduleGenerationError(
                "Schedule anchor lies after its end",
                context={"anchor": anchor, "end": end, "cycle": cycle},
            )

        self.anchor = anchor
        self.end = end
        self.cycle = cycle
        self.config = config or ScheduleConfig()
        self.include_anchor = include_anchor
        self.include_end = include_end
        parsed = parse_cycle(cycle) if cycle is not None else None
        self._long_stub = parsed is not None and parsed[2] == "+"
        # Month-based periods are computed on the calendar date of the anchor
        if parsed is not None and parsed[1] not in ("D", "W") and anchor > CALENDAR_TIMESTAMP_MAX:
            raise ScheduleGenerationError(
                "Schedule anchor lies outside the calendar range",
                context={"anchor": anchor, "cycle": cycle},
            )
        self._calendar = get_calendar(self.config.resolved_calendar, self.config.holidays)
        self._convention = self.config.resolved_business_day_convention
        self._eom = self.config.resolved_end_of_month_convention
        self._length: int | None = None

        # Check the calendar range of the end once, so iteration cannot fail
        self._shift(end)

    def _shift(self, ts: Timestamp) -> ShiftedDay:
        try:
            shifted = adjust_to_business_day(ts, self._convention, self._calendar)
        except ContractValidationError as e:
            raise ScheduleGenerationError(e.message, context=e.context) from e
        return ShiftedDay(ts, shifted)

    def _regular_dates(self) -> Iterator[Timestamp]:
        """Unadjusted cycle dates strictly before the end."""
        if self.cycle is None:
            if self.anchor < self.end:
                yield self.anchor
            return

        k = 0
        current: Timestamp | None = self.anchor
        while current is not None and current < self.end:
            try:
                following: Timestamp | None = add_period(self.anchor, self.cycle, k + 1, self._eom)
            except ScheduleGenerationError:
                # Past the calendar range, no further regular dates
                following = None
            is_last = following is None or following > self.end
            # Long stub merges the last short period into the one before
            if not (self._long_stub and k > 0 and is_last and self.include_end):
                yield current
            k += 1
            current = following

    def _unadjusted(self) -> Iterator[Timestamp]:
        for date in self._regular_dates():
            if date == self.anchor and not self.include_anchor:
                continue
            yield date
        if self.include_end and (self.include_anchor or self.end != self.anchor):
            yield self.end

    def __iter__(self) -> Iterator[ShiftedDay]:
        last_shifted: Timestamp | None = None
        for date in self._unadjusted():
            day = self._shift(date)
            if last_shifted is not None and day.shifted <= last_shifted:
                continue
            last_shifted = day.shifted
            yield day

    def __len__(self) -> int:
        if self._length is None:
            self._length = sum(1 for _ in self)
        return self._length

    def __repr__(self) -> str:
        return (
            f"Schedule(anchor={self.anchor}, end={self.end}, cycle={self.cycle!r}, "
            f"include_anchor={self.include_anchor}, include_end={self.include_end})"
        )

    def find(self, ts: Timestamp) -> ShiftedDay | None:
        """Find the schedule entry that settles at ``ts``.

        Args:
            ts: Settlement timestamp to look up

        Returns:
            The matching ShiftedDay, or None if no entry settles at ``ts``
        """
        for day in self:
            if day.shifted == ts:
                return day
            if day.shifted > ts:
                return None
        return None

    def __contains__(self, ts: Any) -> bool:
        return isinstance(ts, int) and self.find(ts) is not None

    def dates(self) -> list[Timestamp]:
        """Materialize the settlement (shifted) dates."""
        return [day.shifted for day in self]


def _cycle_schedule(
    terms: ContractTerms,
    cycle: Cycle | None,
    anchor: Timestamp | None,
    include_end: bool,
) -> Schedule | None:
    ied = terms.initial_exchange_date
    md = terms.maturity_date
    if cycle is None or ied is None or md is None:
        return None
    if anchor is None:
        # ACTUS default: one cycle after initial exchange, capped at maturity
        anchor = min(
            add_period(ied, cycle, 1, terms.schedule_config.resolved_end_of_month_convention), md
        )
    return Schedule(anchor, md, cycle, terms.schedule_config, include_end=include_end)


def lifecycle_schedule(terms: ContractTerms) -> Schedule:
    """Degenerate schedule of explicit lifecycle dates (IED, and MD if set).

    Raises:
        ScheduleGenerationError: If the terms have no initial exchange date
    """
    ied = terms.initial_exchange_date
    if ied is None:
        raise ScheduleGenerationError(
            "Initial exchange date is required", context={"contract_id": terms.contract_id}
        )
    md = terms.maturity_date
    return Schedule(ied, md if md is not None else ied, None, terms.schedule_config)


def interest_payment_schedule(terms: ContractTerms) -> Schedule | None:
    """IP schedule S(IPANX, IPCL, MD), or None without an IP cycle."""
    return _cycle_schedule(
        terms, terms.interest_payment_cycle, terms.interest_payment_anchor, include_end=True
    )


def principal_redemption_schedule(terms: ContractTerms) -> Schedule | None:
    """PR schedule S(PRANX, PRCL, MD) excluding MD, or None without a PR cycle.

    The final redemption is settled by the MD event.
    """
    return _cycle_schedule(
        terms,
        terms.principal_redemption_cycle,
        terms.principal_redemption_anchor,
        include_end=False,
    )


def fee_payment_schedule(terms: ContractTerms) -> Schedule | None:
    """FP schedule S(FEANX, FECL, MD), or None without a fee cycle."""
    return _cycle_schedule(terms, terms.fee_payment_cycle, terms.fee_payment_anchor, include_end=True)
