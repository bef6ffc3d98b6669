"""
Drain - walk the spool and hand each command to a delivery callable.

This is the loop a transmitter runs. The transport itself lives
outside this package.

Invariants:
- Delivered: "deliver returned, so the record is gone."
- Failed: "deliver raised, so the record stays for next time."
- Rejected: "record is unreadable; left on disk for inspection."
"""

import logging
from typing import Any, Callable, Dict

from command_spool.command import Command
from command_spool.command_envelope import MalformedRecordError
from command_spool.spool import SpoolStore, StorageMissingError

logger = logging.getLogger(__name__)


def drain_spool(store: SpoolStore, deliver: Callable[[Command], Any]) -> Dict[str, Any]:
    """
    Deliver and dequeue every spooled command, once.

    Does NOT:
    - Retry a failed delivery
    - Back off between commands
    - Delete unreadable records

    Only:
    - Loads each record
    - Calls deliver(command)
    - Dequeues on success
    - Reports what happened
    """
    delivered = []
    failed = []
    rejected = []
    skipped = []

    for storage_key in store.list_all():
        try:
            command = store.load(storage_key)
        except MalformedRecordError as e:
            logger.warning(f"Rejected spooled record {storage_key}: {e}")
            rejected.append(storage_key)
            continue
        except StorageMissingError:
            # another consumer got there first
            skipped.append(storage_key)
            continue

        try:
            deliver(command)
        except Exception as e:
            logger.error(f"Delivery failed for {storage_key}: {e}")
            failed.append({
                'storage_key': storage_key,
                'reason': str(e)
            })
            continue

        try:
            store.dequeue_key(storage_key)
        except StorageMissingError:
            logger.warning(f"Record vanished after delivery: {storage_key}")

        delivered.append(storage_key)

    logger.info(
        f"Drained spool: delivered={len(delivered)} failed={len(failed)} "
        f"rejected={len(rejected)} skipped={len(skipped)}"
    )

    return {
        'delivered': len(delivered),
        'failed': len(failed),
        'rejected': len(rejected),
        'skipped': len(skipped),
        'failed_details': failed
    }
