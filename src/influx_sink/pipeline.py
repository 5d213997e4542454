"""End-to-end event handling: decode -> extract fields -> extract tags -> write."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone

from influx_sink.errors import PayloadTooLargeError
from influx_sink.events import CloudEvent, from_http, parse_payload, to_json
from influx_sink.mapping.paths import Mappings
from influx_sink.obs.stats import SinkOutcome, SinkStats
from influx_sink.records.builder import add_fields, add_tags
from influx_sink.store import StoreClient
from influx_sink.types import WriteRecord

logger = logging.getLogger(__name__)


class EventProcessor:
    """Turns one event into a write record using shared, read-only mappings.

    Fields are evaluated against the event payload, tags against the JSON
    form of the whole event. Tags are only evaluated once at least one field
    matched.
    """

    def __init__(self, mappings: Mappings, table: str) -> None:
        self._mappings = mappings
        self._table = table

    @property
    def mappings(self) -> Mappings:
        return self._mappings

    @property
    def table(self) -> str:
        return self._table

    def build_record(self, event: CloudEvent) -> WriteRecord | None:
        """Return the assembled record, or `None` when no field matched.

        Raises `SelectorError` or `PayloadParseError`; no partial record is
        returned in that case.
        """

        timestamp = event.get_time() or datetime.now(timezone.utc)
        record = WriteRecord(timestamp=timestamp, measurement=self._table)

        payload = parse_payload(event)
        record, num_fields = add_fields(record, self._mappings.fields, payload)
        if num_fields == 0:
            return None

        record, _ = add_tags(record, self._mappings.tags, to_json(event))
        return record


class EventSink:
    """Coordinates decoding, record building, the store write, and processing stats.

    Every call is counted once. Request errors propagate after being counted
    as rejected.
    """

    def __init__(
        self,
        processor: EventProcessor,
        store: StoreClient,
        stats: SinkStats | None = None,
        *,
        max_payload_size: int | None = None,
    ) -> None:
        self._processor = processor
        self._store = store
        self._stats = stats or SinkStats()
        self._max_payload_size = max_payload_size

    @property
    def stats(self) -> SinkStats:
        return self._stats

    def handle(self, event: CloudEvent) -> tuple[SinkOutcome, str | None]:
        """Process one decoded event and return its outcome with an optional message."""

        with self._stats.measure() as measurement:
            measurement.outcome, message = self._write(event)
        return measurement.outcome, message

    def handle_http(self, headers: Mapping[str, str], body: bytes) -> tuple[SinkOutcome, str | None]:
        """Decode an HTTP delivery, then process it like `handle`."""

        with self._stats.measure() as measurement:
            if self._max_payload_size is not None and len(body) > self._max_payload_size:
                raise PayloadTooLargeError(f"Payload exceeds {self._max_payload_size} bytes")
            event = from_http(headers, body)
            measurement.outcome, message = self._write(event)
        return measurement.outcome, message

    def _write(self, event: CloudEvent) -> tuple[SinkOutcome, str | None]:
        logger.debug("Received event: %s", event.get_id())
        record = self._processor.build_record(event)
        if record is None:
            return SinkOutcome.NOTHING_TO_WRITE, None

        result = self._store.write(record)
        logger.debug("Result: %s", result)
        if result.success:
            return SinkOutcome.WRITTEN, None

        message = result.message or "Store write failed"
        logger.warning("Store write failed for event %s: %s", event.get_id(), message)
        return SinkOutcome.STORE_FAILED, message
