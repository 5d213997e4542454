"""CloudEvents decoding and payload parsing on top of the `cloudevents` SDK."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from cloudevents.core.bindings import http
from cloudevents.core.exceptions import BaseCloudEventException
from cloudevents.core.formats.json import JSONFormat
from cloudevents.core.v1.event import REQUIRED_ATTRIBUTES, CloudEvent

from influx_sink.errors import PayloadParseError

__all__ = ["CloudEvent", "from_http", "parse_payload", "to_json"]

BATCH_CONTENT_TYPE = "application/cloudevents-batch+json"

_FORMAT = JSONFormat()

# Malformed JSON, undecodable bytes, bad timestamps and non-object
# structured bodies surface from the SDK as these.
_DECODE_ERRORS = (BaseCloudEventException, ValueError, TypeError, AttributeError)


def from_http(headers: Mapping[str, str], body: bytes) -> CloudEvent:
    """Decode a CloudEvents 1.0 event delivered in binary or structured mode.

    Any `ce-*` header selects binary mode; otherwise the body must be a
    structured-mode JSON event.
    """

    plain_headers = {key.lower(): value for key, value in headers.items()}
    media_type = plain_headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if media_type == BATCH_CONTENT_TYPE:
        raise PayloadParseError("Batched events are not supported")

    message = http.HTTPMessage(headers=plain_headers, body=body)
    try:
        return http.from_http(message, _FORMAT, _received_event)
    except _DECODE_ERRORS as exc:
        raise PayloadParseError(f"Invalid event: {exc}") from exc


def to_json(event: CloudEvent) -> dict[str, Any]:
    """Structured-mode JSON form of the whole event; bytes data becomes `data_base64`."""

    return json.loads(_FORMAT.write(event))


def parse_payload(event: CloudEvent) -> Any:
    """Return the event data as a parsed JSON document."""

    data = event.get_data()
    if data is None:
        raise PayloadParseError("Unknown event payload")
    if isinstance(data, (str, bytes, bytearray)):
        try:
            return json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise PayloadParseError(str(exc)) from exc
    return data


def _received_event(attributes: dict[str, Any], data: Any) -> CloudEvent:
    # The SDK fills in a missing id or specversion; a received event must carry them.
    missing = [name for name in REQUIRED_ATTRIBUTES if name not in attributes]
    if missing:
        raise PayloadParseError(f"Invalid event: missing required attribute(s) {', '.join(missing)}")
    return CloudEvent(attributes, data)
