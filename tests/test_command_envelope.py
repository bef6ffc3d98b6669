"""Tests for envelope formatting and record header parsing"""

import json

import pytest

from command_spool.char_encoding import REPLACEMENT_CHARACTER, utf8_string
from command_spool.command_envelope import (
    MalformedRecordError,
    SerializationError,
    format_envelope,
    parse_envelope,
    parse_header,
)


def test_format_envelope_wraps_name_version_payload():
    payload = {"facts": {"a": 1, "b": [1.5, True, None, "x"]}}
    envelope = format_envelope("replace facts", 1, payload)

    assert json.loads(envelope) == {
        "command": "replace facts",
        "version": 1,
        "payload": payload,
    }


def test_format_envelope_keeps_non_ascii_text():
    envelope = format_envelope("store report", 3, {"msg": "héllo ✓"})
    assert "héllo ✓" in envelope
    envelope.encode("utf-8")


def test_format_envelope_rejects_custom_objects():
    with pytest.raises(SerializationError):
        format_envelope("store report", 3, {"obj": object()})


def test_format_envelope_rejects_nan():
    with pytest.raises(SerializationError):
        format_envelope("store report", 3, {"x": float("nan")})


def test_format_envelope_sanitizes_lone_surrogates():
    envelope = format_envelope("store report", 3, {"path": "bad\udcffname"})

    envelope.encode("utf-8")
    assert REPLACEMENT_CHARACTER in envelope
    assert json.loads(envelope)["payload"]["path"].startswith("bad")


def test_utf8_string_replaces_invalid_bytes():
    assert utf8_string(b"ok\xff") == "ok" + REPLACEMENT_CHARACTER
    assert utf8_string("plain") == "plain"


def test_parse_header_splits_three_lines_and_keeps_tail():
    tail = '{"command":"replace facts","version":2,"payload":{"a":"x\\ny"}}\n'
    raw = b"replace facts\n2\nnode1.example.com\n" + tail.encode("utf-8")

    name, version, node_id, envelope = parse_header(raw)

    assert name == "replace facts"
    assert version == 2
    assert node_id == "node1.example.com"
    assert envelope == tail


def test_parse_header_tolerates_crlf_header_lines():
    name, version, node_id, envelope = parse_header(b"store report\r\n3\r\nnode1\r\n{}")
    assert (name, version, node_id, envelope) == ("store report", 3, "node1", "{}")


@pytest.mark.parametrize("version_line", ["three", "+3", "1_0", "-1", "\u0663", ""])
def test_parse_header_rejects_non_decimal_version(version_line):
    raw = b"store report\n" + version_line.encode("utf-8") + b"\nnode1\n{}"
    with pytest.raises(MalformedRecordError):
        parse_header(raw)


def test_parse_header_rejects_short_record():
    with pytest.raises(MalformedRecordError):
        parse_header(b"store report\n3\nnode1")


def test_parse_envelope_roundtrips_formatted_envelope():
    envelope = format_envelope("deactivate node", 1, "node1")
    assert parse_envelope(envelope) == {
        "command": "deactivate node",
        "version": 1,
        "payload": "node1",
    }


def test_parse_envelope_rejects_missing_keys():
    with pytest.raises(MalformedRecordError):
        parse_envelope('{"command": "store report"}')

    with pytest.raises(MalformedRecordError):
        parse_envelope("not json")
