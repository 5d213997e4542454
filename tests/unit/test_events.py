import base64
import json
from datetime import datetime, timezone

import pytest

from influx_sink.errors import PayloadParseError
from influx_sink.events import CloudEvent, from_http, parse_payload, to_json

_BINARY_HEADERS = {
    "ce-id": "evt-1",
    "ce-source": "sensor-1",
    "ce-type": "reading",
    "ce-specversion": "1.0",
}


def _event(data: object = None, **attributes: object) -> CloudEvent:
    return CloudEvent({"id": "evt-1", "source": "sensor-1", "type": "reading", **attributes}, data)


def test_parse_payload_accepts_json_string_and_bytes() -> None:
    assert parse_payload(_event({"value": 1})) == {"value": 1}
    assert parse_payload(_event('{"value": 2}')) == {"value": 2}
    assert parse_payload(_event(b'{"value": 3}')) == {"value": 3}


def test_parse_payload_rejects_missing_or_invalid_data() -> None:
    with pytest.raises(PayloadParseError) as excinfo:
        parse_payload(_event())
    assert excinfo.value.details == "Unknown event payload"

    with pytest.raises(PayloadParseError):
        parse_payload(_event("not json"))

    with pytest.raises(PayloadParseError):
        parse_payload(_event(b"\xff\xfe"))


def test_binary_mode_reads_ce_headers() -> None:
    headers = {
        **_BINARY_HEADERS,
        "ce-time": "2024-01-02T03:04:05Z",
        "ce-region": "eu-west",
        "Content-Type": "application/json",
    }

    event = from_http(headers, b'{"value": 12.5}')

    assert event.get_id() == "evt-1"
    assert event.get_time() == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert event.get_datacontenttype() == "application/json"
    assert event.get_extension("region") == "eu-west"
    assert event.get_data() == {"value": 12.5}


def test_binary_mode_percent_decodes_header_values() -> None:
    headers = {**_BINARY_HEADERS, "ce-source": "urn%3Asensor%201", "content-type": "application/json"}

    event = from_http(headers, b'{"value": 1}')

    assert event.get_source() == "urn:sensor 1"
    assert to_json(event)["source"] == "urn:sensor 1"


def test_binary_mode_text_body_is_decoded_later() -> None:
    event = from_http({**_BINARY_HEADERS, "content-type": "text/plain"}, b'{"value": 3}')

    assert event.get_data() == '{"value": 3}'
    assert parse_payload(event) == {"value": 3}


def test_structured_mode_decodes_data_base64() -> None:
    body = json.dumps(
        {
            "specversion": "1.0",
            "id": "evt-2",
            "source": "sensor-2",
            "type": "reading",
            "data_base64": base64.b64encode(b'{"value": 7}').decode("ascii"),
        }
    ).encode("utf-8")

    event = from_http({"content-type": "application/cloudevents+json"}, body)

    assert event.get_data() == b'{"value": 7}'
    assert parse_payload(event) == {"value": 7}
    assert "data_base64" not in event.get_attributes()


@pytest.mark.parametrize("missing", ["ce-id", "ce-specversion"])
def test_missing_required_attribute_rejected(missing: str) -> None:
    headers = {key: value for key, value in _BINARY_HEADERS.items() if key != missing}

    with pytest.raises(PayloadParseError) as excinfo:
        from_http(headers, b"{}")

    assert missing.removeprefix("ce-") in excinfo.value.details


def test_unsupported_specversion_rejected() -> None:
    with pytest.raises(PayloadParseError) as excinfo:
        from_http({**_BINARY_HEADERS, "ce-specversion": "0.3"}, b"{}")

    assert "specversion" in excinfo.value.details


@pytest.mark.parametrize(
    "body",
    [b"not json", b"[1, 2]", b'{"id": "evt-3", "source": "s", "type": "t", "specversion": "1.0", "time": "yesterday"}'],
)
def test_malformed_structured_body_rejected(body: bytes) -> None:
    with pytest.raises(PayloadParseError):
        from_http({"content-type": "application/cloudevents+json"}, body)


def test_batched_events_rejected() -> None:
    with pytest.raises(PayloadParseError):
        from_http({"content-type": "application/cloudevents-batch+json"}, b"[]")


def test_to_json_serializes_attributes_extensions_and_data() -> None:
    event = _event(
        {"value": 1},
        specversion="1.0",
        time=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        metadata={"src": "sensor-1"},
    )

    document = to_json(event)

    assert document == {
        "specversion": "1.0",
        "id": "evt-1",
        "type": "reading",
        "source": "sensor-1",
        "time": "2024-01-02T03:04:05Z",
        "metadata": {"src": "sensor-1"},
        "data": {"value": 1},
    }


def test_to_json_encodes_bytes_as_base64() -> None:
    document = to_json(_event(b"\x00\x01"))

    assert document["data_base64"] == "AAE="
    assert "data" not in document
