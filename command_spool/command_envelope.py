"""
Command envelope - the wire shape of a spooled command.

Envelope:   {"command": <name>, "version": <int>, "payload": <value>}
Record:     name\\n version\\n node_id\\n <envelope bytes>

Formatting goes one way (values -> envelope string).
Parsing a record gives the envelope back untouched.
"""

import json
from typing import Any, Dict, Tuple

from command_spool.char_encoding import utf8_string

HEADER_LINES = 3
ENVELOPE_KEYS = ("command", "version", "payload")


class SerializationError(Exception):
    """Payload cannot be represented as JSON"""
    pass


class MalformedRecordError(Exception):
    """Spooled record bytes do not follow the record layout"""
    pass


def format_envelope(name: str, version: int, payload: Any) -> str:
    """
    Wrap name, version and payload into the canonical envelope string.

    Does NOT:
    - Sort keys
    - Pretty print
    - Accept custom objects

    Only:
    - Serializes JSON-native values (dict, list, str, int, float, bool, None)
    - Guarantees the result is valid UTF-8
    """
    message = {
        "command": name,
        "version": version,
        "payload": payload,
    }

    try:
        serialized = json.dumps(
            message,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot serialize payload for '{name}': {e}") from e

    return utf8_string(serialized)


def parse_header(raw: bytes) -> Tuple[str, int, str, str]:
    """
    Split raw record bytes into (name, version, node_id, envelope).

    Exact inverse of what the spool writes. The envelope is
    returned verbatim - no re-serialization.
    """
    parts = raw.split(b"\n", HEADER_LINES)
    if len(parts) <= HEADER_LINES:
        raise MalformedRecordError(
            f"Expected {HEADER_LINES} header lines, found {len(parts) - 1}"
        )

    name_line, version_line, node_line, tail = parts

    try:
        name = name_line.decode("utf-8").strip()
        node_id = node_line.decode("utf-8").strip()
        version_text = version_line.decode("utf-8").strip()
        envelope = tail.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedRecordError(f"Record is not valid UTF-8: {e}") from e

    # plain ASCII digits only; int() alone would take "+3", "1_0" or non-ASCII digits
    if not (version_text.isascii() and version_text.isdigit()):
        raise MalformedRecordError(f"Version line is not an integer: {version_text!r}")
    version = int(version_text)

    return name, version, node_id, envelope


def parse_envelope(envelope: str) -> Dict[str, Any]:
    """Decode an envelope string back to its mapping."""
    try:
        message = json.loads(envelope)
    except ValueError as e:
        raise MalformedRecordError(f"Envelope is not valid JSON: {e}") from e

    if not isinstance(message, dict):
        raise MalformedRecordError("Envelope must be a JSON object")

    missing = [key for key in ENVELOPE_KEYS if key not in message]
    if missing:
        raise MalformedRecordError(f"Envelope missing keys: {', '.join(missing)}")

    return message
