"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union


@dataclass(frozen=True, slots=True)
class BooleanValue:
    value: bool


@dataclass(frozen=True, slots=True)
class FloatValue:
    value: float


@dataclass(frozen=True, slots=True)
class SignedIntegerValue:
    value: int


@dataclass(frozen=True, slots=True)
class UnsignedIntegerValue:
    value: int


@dataclass(frozen=True, slots=True)
class TextValue:
    value: str


TypedValue = Union[
    BooleanValue,
    FloatValue,
    SignedIntegerValue,
    UnsignedIntegerValue,
    TextValue,
]


@dataclass(slots=True)
class WriteRecord:
    """A timestamped row for one measurement, built per request."""

    timestamp: datetime
    measurement: str
    fields: dict[str, TypedValue] = field(default_factory=dict)
    tags: dict[str, TypedValue] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Outcome reported by a store client."""

    success: bool
    message: str | None = None
