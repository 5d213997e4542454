"""Accumulation of mapping results into a write record."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from influx_sink.errors import SelectorError
from influx_sink.mapping.coercion import convert
from influx_sink.mapping.paths import PathMapping
from influx_sink.types import TypedValue, WriteRecord

Sink = Callable[[WriteRecord, str, TypedValue], None]


def add_to_record(
    record: WriteRecord,
    mappings: Mapping[str, PathMapping],
    document: Any,
    sink: Sink,
) -> tuple[WriteRecord, int]:
    """Evaluate every mapping against `document` and hand results to `sink`.

    Zero matches contribute nothing, one match is coerced, more than one is a
    `SelectorError`. Returns the record and the number of values added.
    """

    added = 0
    for name, mapping in mappings.items():
        matches = mapping.select(document)
        if not matches:
            continue
        if len(matches) > 1:
            raise SelectorError(f"Selector found more than one value: {len(matches)}")
        sink(record, name, convert(matches[0], mapping))
        added += 1
    return record, added


def add_fields(
    record: WriteRecord,
    mappings: Mapping[str, PathMapping],
    document: Any,
) -> tuple[WriteRecord, int]:
    return add_to_record(record, mappings, document, _set_field)


def add_tags(
    record: WriteRecord,
    mappings: Mapping[str, PathMapping],
    document: Any,
) -> tuple[WriteRecord, int]:
    return add_to_record(record, mappings, document, _set_tag)


def _set_field(record: WriteRecord, name: str, value: TypedValue) -> None:
    record.fields[name] = value


def _set_tag(record: WriteRecord, name: str, value: TypedValue) -> None:
    record.tags[name] = value
