"""Core types, fixed-point units, terms, state and codec.

This module provides the foundational types, enumerations and data
structures used throughout the actus_ledger package.
"""

from actus_ledger.core.codec import (
    decode_state,
    decode_terms,
    decode_units,
    encode_state,
    encode_terms,
    encode_units,
)
from actus_ledger.core.states import ContractState, initialize_state
from actus_ledger.core.terms import ATTRIBUTE_MAP, ContractTerms, ScheduleConfig
from actus_ledger.core.time import (
    CALENDAR_TIMESTAMP_MAX,
    SECONDS_PER_DAY,
    TIMESTAMP_MAX,
    add_period,
    from_datetime,
    make_timestamp,
    parse_cycle,
    to_datetime,
    to_iso,
    validate_timestamp,
)
from actus_ledger.core.types import (
    EVENT_SCHEDULE_PRIORITY,
    # Enumerations
    BusinessDayConvention,
    Calendar,
    CodedEnum,
    ContractPerformance,
    ContractRole,
    ContractType,
    # Type aliases
    Cycle,
    DayCountConvention,
    EndOfMonthConvention,
    EventType,
    FeeBasis,
    LifecycleStage,
    Timestamp,
)
from actus_ledger.core.units import UNITS_DECIMALS, UNITS_MAX, UNITS_MIN, UNITS_SCALE, Units

__all__ = [
    # Codec
    "decode_state",
    "decode_terms",
    "decode_units",
    "encode_state",
    "encode_terms",
    "encode_units",
    # State
    "ContractState",
    "initialize_state",
    # Terms
    "ATTRIBUTE_MAP",
    "ContractTerms",
    "ScheduleConfig",
    # Time
    "CALENDAR_TIMESTAMP_MAX",
    "SECONDS_PER_DAY",
    "TIMESTAMP_MAX",
    "add_period",
    "from_datetime",
    "make_timestamp",
    "parse_cycle",
    "to_datetime",
    "to_iso",
    "validate_timestamp",
    # Types
    "EVENT_SCHEDULE_PRIORITY",
    "BusinessDayConvention",
    "Calendar",
    "CodedEnum",
    "ContractPerformance",
    "ContractRole",
    "ContractType",
    "Cycle",
    "DayCountConvention",
    "EndOfMonthConvention",
    "EventType",
    "FeeBasis",
    "LifecycleStage",
    "Timestamp",
    # Units
    "UNITS_DECIMALS",
    "UNITS_MAX",
    "UNITS_MIN",
    "UNITS_SCALE",
    "Units",
]
