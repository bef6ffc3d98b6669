"""
Administrative spool operations.

Not for producers or consumers. Running these while commands are
being enqueued or dequeued can lose records.
"""

import logging
import os

from command_spool.spool import SpoolStore

log = logging.getLogger(__name__)


def clear_spool(store: SpoolStore) -> int:
    """Delete every record in the spool. Returns how many were removed."""
    directory = store.resolve_directory()
    removed = 0

    for storage_key in store.list_all():
        try:
            os.remove(os.path.join(directory, storage_key))
            removed += 1
        except FileNotFoundError:
            # taken by a consumer between list and remove
            continue

    log.info(f"Cleared {removed} record(s) from {directory}")
    return removed
