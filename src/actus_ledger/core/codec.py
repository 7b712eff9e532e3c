"""Deterministic binary encoding of terms, state and amounts.

The layout is Borsh-like and little-endian:

- enumerations: u8 code
- timestamps: u64
- Units: i128 (raw value)
- optional values: u8 tag (0 = absent, 1 = present) followed by the value
- strings: u32 byte length + UTF-8 bytes
- bytes: u32 length + raw bytes
- tuples: u32 count + items

Fields are written in a fixed order, so equal values always encode to equal
bytes. Decoding rejects truncated input, trailing bytes, bad option tags,
unknown enumeration codes and invalid field values with
:class:`ContractValidationError`.

Example:
    >>> blob = encode_units(Units(42))
    >>> decode_units(blob)
    Units(raw=42)
"""

from __future__ import annotations

import struct
from collections.abc import Callable
from typing import Any

import jax

from actus_ledger.core.states import ContractState
from actus_ledger.core.terms import ContractTerms, ScheduleConfig
from actus_ledger.core.types import (
    BusinessDayConvention,
    Calendar,
    CodedEnum,
    ContractPerformance,
    ContractRole,
    ContractType,
    DayCountConvention,
    EndOfMonthConvention,
    FeeBasis,
    LifecycleStage,
)
from actus_ledger.core.units import Units
from actus_ledger.exceptions import ContractValidationError

_U8 = struct.Struct("<B")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")
_I128_SIZE = 16


class _Writer:
    def __init__(self) -> None:
        self._parts: list[bytes] = []

    def u8(self, value: int) -> None:
        self._parts.append(_U8.pack(value))

    def u32(self, value: int) -> None:
        self._parts.append(_U32.pack(value))

    def u64(self, value: int) -> None:
        self._parts.append(_U64.pack(value))

    def i128(self, value: int) -> None:
        self._parts.append(value.to_bytes(_I128_SIZE, "little", signed=True))

    def raw(self, data: bytes) -> None:
        self.u32(len(data))
        self._parts.append(data)

    def getvalue(self) -> bytes:
        return b"".join(self._parts)


class _Reader:
    def __init__(self, data: bytes, what: str) -> None:
        self._data = memoryview(data)
        self._pos = 0
        self._what = what

    def _take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise ContractValidationError(
                f"Truncated {self._what} encoding",
                context={"offset": self._pos, "needed": size, "length": len(self._data)},
            )
        chunk = bytes(self._data[self._pos : end])
        self._pos = end
        return chunk

    def u8(self) -> int:
        return _U8.unpack(self._take(_U8.size))[0]

    def u32(self) -> int:
        return _U32.unpack(self._take(_U32.size))[0]

    def u64(self) -> int:
        return _U64.unpack(self._take(_U64.size))[0]

    def i128(self) -> int:
        return int.from_bytes(self._take(_I128_SIZE), "little", signed=True)

    def raw(self) -> bytes:
        return self._take(self.u32())

    def finish(self) -> None:
        if self._pos != len(self._data):
            raise ContractValidationError(
                f"Trailing bytes after {self._what} encoding",
                context={"offset": self._pos, "length": len(self._data)},
            )


# A field codec is a pair of (encode, decode) callables
_Encode = Callable[[_Writer, Any], None]
_Decode = Callable[[_Reader], Any]
_FieldCodec = tuple[_Encode, _Decode]


def _decode_str(r: _Reader) -> str:
    data = r.raw()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ContractValidationError("Invalid UTF-8 string", context={"reason": str(e)}) from e


_STR: _FieldCodec = (lambda w, v: w.raw(v.encode("utf-8")), _decode_str)
_BYTES: _FieldCodec = (lambda w, v: w.raw(bytes(v)), lambda r: r.raw())
_TIMESTAMP: _FieldCodec = (lambda w, v: w.u64(v), lambda r: r.u64())
_UNITS: _FieldCodec = (lambda w, v: w.i128(v.raw), lambda r: Units(r.i128()))
_TIMESTAMPS: _FieldCodec = (
    lambda w, v: (w.u32(len(v)), [w.u64(item) for item in v]),
    lambda r: tuple(r.u64() for _ in range(r.u32())),
)


def _enum(enum_cls: type[CodedEnum]) -> _FieldCodec:
    return (lambda w, v: w.u8(v.code), lambda r: enum_cls.from_code(r.u8()))


def _option(inner: _FieldCodec) -> _FieldCodec:
    encode_inner, decode_inner = inner

    def encode(w: _Writer, v: Any) -> None:
        if v is None:
            w.u8(0)
        else:
            w.u8(1)
            encode_inner(w, v)

    def decode(r: _Reader) -> Any:
        tag = r.u8()
        if tag == 0:
            return None
        if tag != 1:
            raise ContractValidationError("Invalid option tag", context={"tag": tag})
        return decode_inner(r)

    return encode, decode


_SCHEDULE_CONFIG_LAYOUT: tuple[tuple[str, _FieldCodec], ...] = (
    ("calendar", _option(_enum(Calendar))),
    ("end_of_month_convention", _option(_enum(EndOfMonthConvention))),
    ("business_day_convention", _option(_enum(BusinessDayConvention))),
    ("holidays", _TIMESTAMPS),
)

_TERMS_LAYOUT: tuple[tuple[str, _FieldCodec], ...] = (
    ("contract_id", _STR),
    ("contract_type", _enum(ContractType)),
    ("contract_role", _enum(ContractRole)),
    ("settlement_currency", _option(_BYTES)),
    ("status_date", _TIMESTAMP),
    ("initial_exchange_date", _option(_TIMESTAMP)),
    ("maturity_date", _option(_TIMESTAMP)),
    ("purchase_date", _option(_TIMESTAMP)),
    ("termination_date", _option(_TIMESTAMP)),
    ("notional_principal", _option(_UNITS)),
    ("nominal_interest_rate", _option(_UNITS)),
    ("day_count_convention", _option(_enum(DayCountConvention))),
    ("interest_payment_cycle", _option(_STR)),
    ("interest_payment_anchor", _option(_TIMESTAMP)),
    ("principal_redemption_cycle", _option(_STR)),
    ("principal_redemption_anchor", _option(_TIMESTAMP)),
    ("next_principal_redemption_amount", _option(_UNITS)),
    ("fee_payment_cycle", _option(_STR)),
    ("fee_payment_anchor", _option(_TIMESTAMP)),
    ("fee_rate", _option(_UNITS)),
    ("fee_basis", _option(_enum(FeeBasis))),
    ("price_at_purchase_date", _option(_UNITS)),
    ("price_at_termination_date", _option(_UNITS)),
    ("credit_event_type", _option(_enum(ContractPerformance))),
)

# Leaf order of the ContractState pytree
_STATE_LEAVES: tuple[_FieldCodec, ...] = (
    (lambda w, v: w.i128(v), lambda r: r.i128()),  # notional_principal
    (lambda w, v: w.i128(v), lambda r: r.i128()),  # accrued_interest
    (lambda w, v: w.i128(v), lambda r: r.i128()),  # accrued_fees
    (lambda w, v: w.i128(v), lambda r: r.i128()),  # next_principal_redemption
    (lambda w, v: w.u8(v), lambda r: ContractPerformance.from_code(r.u8()).code),
    (lambda w, v: w.u8(v), lambda r: LifecycleStage.from_code(r.u8()).code),
    (lambda w, v: w.u64(v), lambda r: r.u64()),  # status_date
)

_STATE_TREEDEF = jax.tree_util.tree_structure(ContractState())


def encode_terms(terms: ContractTerms) -> bytes:
    """Encode contract terms to bytes.

    Args:
        terms: Validated contract terms

    Returns:
        Deterministic byte encoding
    """
    w = _Writer()
    for name, (encode, _) in _TERMS_LAYOUT:
        encode(w, getattr(terms, name))
    for name, (encode, _) in _SCHEDULE_CONFIG_LAYOUT:
        encode(w, getattr(terms.schedule_config, name))
    return w.getvalue()


def decode_terms(data: bytes) -> ContractTerms:
    """Decode and validate contract terms.

    Raises:
        ContractValidationError: If the bytes are malformed or the decoded
            terms fail validation
    """
    r = _Reader(data, "terms")
    values = {name: decode(r) for name, (_, decode) in _TERMS_LAYOUT}
    config = {name: decode(r) for name, (_, decode) in _SCHEDULE_CONFIG_LAYOUT}
    r.finish()
    return ContractTerms.create(**values, schedule_config=ScheduleConfig(**config))


def encode_state(state: ContractState) -> bytes:
    """Encode a contract state to bytes (pytree leaf order)."""
    w = _Writer()
    leaves = jax.tree_util.tree_leaves(state)
    for (encode, _), leaf in zip(_STATE_LEAVES, leaves, strict=True):
        encode(w, leaf)
    return w.getvalue()


def decode_state(data: bytes) -> ContractState:
    """Decode a contract state.

    Raises:
        ContractValidationError: If the bytes are malformed
    """
    r = _Reader(data, "state")
    leaves = [decode(r) for _, decode in _STATE_LEAVES]
    r.finish()
    return jax.tree_util.tree_unflatten(_STATE_TREEDEF, leaves)


def encode_units(value: Units) -> bytes:
    """Encode a single amount as i128."""
    w = _Writer()
    _UNITS[0](w, value)
    return w.getvalue()


def decode_units(data: bytes) -> Units:
    """Decode a single i128 amount."""
    r = _Reader(data, "units")
    value = _UNITS[1](r)
    r.finish()
    return value
