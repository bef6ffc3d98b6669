"""
Command - a named, versioned, node-scoped unit of work.

The payload held by a Command is always the serialized envelope
string. Construction formats it unless told the payload is already
an envelope (reloading from the spool).
"""

import os
from typing import Any, Dict

from command_spool.command_envelope import format_envelope
from command_spool.naming import spool_file_name


class InvalidCommandError(Exception):
    """Command header fields cannot be written to a spool record"""
    pass


class InvalidPayloadError(InvalidCommandError):
    """Payload is not a string after formatting"""
    pass


def validate_header(name: Any, version: Any, node_id: Any) -> None:
    """
    Header fields become lines of the record and part of its file name.

    Only checks:
    - name and node_id are non-empty, single-line, unpadded strings
    - name and node_id encode to UTF-8 and hold no NUL
    - node_id holds no path separator
    - version is a positive int
    """
    for field, value in (("name", name), ("node_id", node_id)):
        if not isinstance(value, str) or not value:
            raise InvalidCommandError(f"{field} must be a non-empty string")
        if "\n" in value or "\r" in value:
            raise InvalidCommandError(f"{field} must not contain line breaks: {value!r}")
        # header lines are stripped on load
        if value != value.strip():
            raise InvalidCommandError(f"{field} has surrounding whitespace: {value!r}")
        if "\x00" in value:
            raise InvalidCommandError(f"{field} must not contain NUL: {value!r}")
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            raise InvalidCommandError(f"{field} is not valid UTF-8 text: {value!r}")

    if "/" in node_id or os.sep in node_id or node_id in (".", ".."):
        raise InvalidCommandError(f"node_id is not a valid file name component: {node_id!r}")

    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        raise InvalidCommandError(f"version must be a positive integer, got {version!r}")


class Command:
    """
    In-memory command.

    Args:
        name: one of the names in `command_spool.command_names`
        version: command schema version
        node_id: node the command concerns
        payload: JSON-native value (dict, list, str, number, bool, None)
        format_payload: pass False only when `payload` is already an
            envelope string, e.g. when loading a record from disk
    """

    __slots__ = ("_name", "_version", "_node_id", "_payload", "_storage_key")

    def __init__(self, name: str, version: int, node_id: str, payload: Any,
                 format_payload: bool = True):
        validate_header(name, version, node_id)

        if format_payload:
            payload = format_envelope(name, version, payload)

        if not isinstance(payload, str):
            raise InvalidPayloadError(
                "payload must be a str (perhaps you passed format_payload=False?)"
            )

        self._name = name
        self._version = version
        self._node_id = node_id
        self._payload = payload
        self._storage_key = spool_file_name(name, node_id, payload)

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> int:
        return self._version

    @property
    def node_id(self) -> str:
        return self._node_id

    @property
    def payload(self) -> str:
        return self._payload

    @property
    def storage_key(self) -> str:
        """Spool file name, computed once at construction."""
        return self._storage_key

    def _identity(self):
        return (self._name, self._version, self._node_id, self._payload)

    def __eq__(self, other):
        if not isinstance(other, Command):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self):
        return hash(self._identity())

    def __repr__(self):
        return (f"Command(name={self._name!r}, version={self._version!r}, "
                f"node_id={self._node_id!r}, storage_key={self._storage_key!r})")

    def to_dict(self) -> Dict[str, Any]:
        """Header fields and storage key, for logs and diagnostics"""
        return {
            "name": self._name,
            "version": self._version,
            "node_id": self._node_id,
            "storage_key": self._storage_key,
        }
