"""
Naming strategy - command identity to spool file name.

Singleton commands (catalog, facts) get one file per node so a newer
one overwrites the older. Everything else is keyed by a SHA-1 of the
serialized payload, so distinct payloads never collide and an
unchanged command re-enqueues onto the same file.
"""

import hashlib
import re

from command_spool.command_names import is_singleton

RECORD_SUFFIX = ".command"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_]")


def clean_command_name(name: str) -> str:
    """Replace every character outside [A-Za-z0-9_] with '_'."""
    return _UNSAFE_CHARS.sub("_", name)


def payload_digest(payload: str) -> str:
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


def spool_file_name(name: str, node_id: str, payload: str) -> str:
    """
    Storage key for a command.

    `payload` is the serialized envelope string, not the raw value.
    """
    clean_name = clean_command_name(name)

    if is_singleton(name):
        return f"{node_id}_{clean_name}{RECORD_SUFFIX}"

    return f"{node_id}_{clean_name}_{payload_digest(payload)}{RECORD_SUFFIX}"
