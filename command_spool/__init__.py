"""
command_spool - durable disk-backed outbox for collector commands.

Producer:   Command(...) -> SpoolStore.enqueue
Consumer:   SpoolStore.for_each_enqueued / load -> deliver -> dequeue
"""

from command_spool.command import Command, InvalidCommandError, InvalidPayloadError
from command_spool.command_envelope import (
    MalformedRecordError,
    SerializationError,
    format_envelope,
    parse_envelope,
    parse_header,
)
from command_spool.command_names import (
    CommandDeactivateNode,
    CommandReplaceCatalog,
    CommandReplaceFacts,
    CommandStoreReport,
)
from command_spool.config import SpoolConfig, build_store, configure_logging
from command_spool.drain import drain_spool
from command_spool.spool import (
    SpoolStore,
    StorageError,
    StorageMissingError,
    StorageWriteError,
)

__all__ = [
    "Command",
    "CommandDeactivateNode",
    "CommandReplaceCatalog",
    "CommandReplaceFacts",
    "CommandStoreReport",
    "InvalidCommandError",
    "InvalidPayloadError",
    "MalformedRecordError",
    "SerializationError",
    "SpoolConfig",
    "SpoolStore",
    "StorageError",
    "StorageMissingError",
    "StorageWriteError",
    "build_store",
    "configure_logging",
    "drain_spool",
    "format_envelope",
    "parse_envelope",
    "parse_header",
]
