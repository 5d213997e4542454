"""Coercion of matched JSON values into typed values."""

from __future__ import annotations

from typing import Any

from influx_sink.errors import PayloadParseError
from influx_sink.mapping.paths import ExpectedType, PathMapping
from influx_sink.types import (
    BooleanValue,
    FloatValue,
    SignedIntegerValue,
    TextValue,
    TypedValue,
    UnsignedIntegerValue,
)

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
U64_MAX = 2**64 - 1


def convert(value: Any, mapping: PathMapping) -> TypedValue:
    """Coerce `value` according to `mapping.expected_type`.

    Explicit types are strict: the JSON value must already have that shape.
    `ExpectedType.NONE` infers the variant from the JSON value itself.
    """

    expected = mapping.expected_type
    if expected is ExpectedType.NONE:
        return _infer(value, mapping)

    if expected is ExpectedType.BOOLEAN:
        if isinstance(value, bool):
            return BooleanValue(value)
    elif expected is ExpectedType.TEXT:
        if isinstance(value, str):
            return TextValue(value)
    elif expected is ExpectedType.UNSIGNED_INTEGER:
        unsigned = _as_unsigned(value)
        if unsigned is not None:
            return UnsignedIntegerValue(unsigned)
    elif expected is ExpectedType.SIGNED_INTEGER:
        signed = _as_signed(value)
        if signed is not None:
            return SignedIntegerValue(signed)
    elif expected is ExpectedType.FLOAT:
        number = _as_float(value)
        if number is not None:
            return FloatValue(number)

    raise PayloadParseError(
        f"Value does not match expected type {expected.value} - "
        f"path: {mapping.expression}, value: {value!r}"
    )


def _infer(value: Any, mapping: PathMapping) -> TypedValue:
    if isinstance(value, str):
        return TextValue(value)
    if isinstance(value, bool):
        return BooleanValue(value)
    if _is_number(value):
        # Float first, even for whole numbers.
        number = _as_float(value)
        if number is not None:
            return FloatValue(number)
        signed = _as_signed(value)
        if signed is not None:
            return SignedIntegerValue(signed)
        unsigned = _as_unsigned(value)
        if unsigned is not None:
            return UnsignedIntegerValue(unsigned)
        raise PayloadParseError(
            f"Unknown numeric type - path: {mapping.expression}, value: {value!r}"
        )
    raise PayloadParseError(
        f"Invalid value type selected - path: {mapping.expression}, value: {value!r}"
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_float(value: Any) -> float | None:
    if not _is_number(value):
        return None
    try:
        return float(value)
    except OverflowError:
        return None


def _as_signed(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and I64_MIN <= value <= I64_MAX:
        return value
    return None


def _as_unsigned(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= U64_MAX:
        return value
    return None
