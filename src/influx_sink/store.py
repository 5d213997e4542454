"""Store client contract and concrete adapters."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from influx_sink.config import InfluxDbConfig
from influx_sink.types import (
    BooleanValue,
    FloatValue,
    SignedIntegerValue,
    TextValue,
    TypedValue,
    UnsignedIntegerValue,
    WriteRecord,
    WriteResult,
)

logger = logging.getLogger(__name__)


class StoreClient(Protocol):
    """Minimal write contract for the time-series store."""

    def write(self, record: WriteRecord) -> WriteResult:
        """Persist one record and report the outcome."""


class InMemoryStore:
    """Deterministic store used for tests and dry runs."""

    def __init__(self, *, fail_with: str | None = None) -> None:
        self._records: list[WriteRecord] = []
        self._fail_with = fail_with

    def write(self, record: WriteRecord) -> WriteResult:
        if self._fail_with is not None:
            return WriteResult(success=False, message=self._fail_with)
        self._records.append(record)
        return WriteResult(success=True)

    @property
    def records(self) -> list[WriteRecord]:
        return list(self._records)


class InfluxDbStore:
    """Writes records to InfluxDB through `influxdb_client_3`."""

    def __init__(self, config: InfluxDbConfig, client: Any | None = None) -> None:
        self._config = config
        self._client = client if client is not None else _create_client(config)

    def write(self, record: WriteRecord) -> WriteResult:
        point = to_point(record)
        try:
            self._client.write(record=point)
        except Exception as exc:
            logger.error("Write to %s failed: %s", self._config.database, exc)
            return WriteResult(success=False, message=str(exc))
        return WriteResult(success=True)


def to_point(record: WriteRecord) -> Any:
    """Convert a record into an InfluxDB `Point`."""

    from influxdb_client_3 import Point, WritePrecision

    point = Point(record.measurement).time(record.timestamp, write_precision=WritePrecision.NS)
    for name, value in record.tags.items():
        point = point.tag(name, _tag_text(value))
    for name, value in record.fields.items():
        point = point.field(name, plain_value(value))
    return point


def plain_value(value: TypedValue) -> bool | float | int | str:
    if isinstance(value, BooleanValue):
        return value.value
    if isinstance(value, FloatValue):
        return value.value
    if isinstance(value, SignedIntegerValue):
        return value.value
    if isinstance(value, UnsignedIntegerValue):
        return value.value
    if isinstance(value, TextValue):
        return value.value
    raise TypeError(f"Unsupported value: {value!r}")


def _tag_text(value: TypedValue) -> str:
    if isinstance(value, BooleanValue):
        return "true" if value.value else "false"
    return str(plain_value(value))


def _create_client(config: InfluxDbConfig) -> Any:
    from influxdb_client_3 import InfluxDBClient3

    return InfluxDBClient3(
        host=config.uri,
        database=config.database,
        token=config.auth_token(),
    )
