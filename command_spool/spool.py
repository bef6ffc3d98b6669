"""
spool.py - file-backed outbox for commands

One directory, one file per record:
- Producers enqueue, consumers enumerate/load/dequeue
- File name comes from the command (see naming.py)
- Same file name means overwrite, last writer wins

No locking between is_queued / enqueue / dequeue. Each record
appears atomically (temp file + os.replace), nothing more.
"""

import logging
import os
import tempfile
import threading
from typing import Callable, List, Optional

from command_spool.command import Command, InvalidCommandError
from command_spool.command_envelope import MalformedRecordError, parse_header
from command_spool.naming import RECORD_SUFFIX

log = logging.getLogger(__name__)

DEFAULT_SPOOL_SUBDIR = os.path.join("spool", "commands")


def _record_file_mode() -> int:
    """0666 minus the process umask, what open() would have given."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class StorageError(Exception):
    """Spool filesystem operation failed"""
    pass


class StorageWriteError(StorageError):
    """Record or spool directory could not be written"""
    pass


class StorageMissingError(StorageError):
    """Record does not exist"""
    pass


class SpoolStore:
    """
    Spool directory for commands.

    Pass one instance to producers and consumers. The directory is
    resolved (and created) once, on first use.
    Location: <base_dir>/<subdir>, e.g. /var/lib/agent/spool/commands
    """

    def __init__(self, base_dir: str, subdir: str = DEFAULT_SPOOL_SUBDIR):
        self.base_dir = base_dir
        self.subdir = subdir
        self._directory: Optional[str] = None
        self._init_lock = threading.Lock()
        self.file_mode = _record_file_mode()

    def resolve_directory(self) -> str:
        """Create the spool directory if needed and return its path."""
        if self._directory is not None:
            return self._directory

        with self._init_lock:
            if self._directory is None:
                path = os.path.abspath(os.path.join(self.base_dir, self.subdir))
                try:
                    # exist_ok: another process may have created it already
                    os.makedirs(path, exist_ok=True)
                except OSError as e:
                    raise StorageWriteError(f"Cannot create spool directory {path}: {e}") from e
                self._directory = path
                log.debug(f"Spool directory ready: {path}")

        return self._directory

    def path_for(self, command: Command) -> str:
        return self._key_path(command.storage_key)

    def _key_path(self, storage_key: str) -> str:
        if not storage_key or os.path.basename(storage_key) != storage_key:
            raise ValueError(f"Storage key must be a bare file name: {storage_key!r}")
        return os.path.join(self.resolve_directory(), storage_key)

    def enqueue(self, command: Command) -> str:
        """
        Write the command's record, replacing any record with the same key.

        Layout: name, version, node_id lines, then the envelope bytes.
        Returns the record path.
        """
        path = self.path_for(command)
        header = f"{command.name}\n{command.version}\n{command.node_id}\n"
        data = header.encode("utf-8") + command.payload.encode("utf-8")

        # temp name does not end in RECORD_SUFFIX, so list_all never sees it
        fd, tmp_path = None, None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path), prefix=".", suffix=".tmp")
            os.fchmod(fd, self.file_mode)
            with os.fdopen(fd, "wb") as f:
                fd = None
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise StorageWriteError(f"Cannot spool command for node '{command.node_id}' to {path}: {e}") from e
        finally:
            if fd is not None:
                os.close(fd)
            if tmp_path is not None:
                try:
                    os.remove(tmp_path)
                except OSError as cleanup_error:
                    log.warning(f"Could not remove temp file {tmp_path}: {cleanup_error}")

        log.info(f"Spooled command for node '{command.node_id}' to file: '{path}'")
        return path

    def dequeue(self, command: Command) -> None:
        """Delete the command's record. Missing record is an error."""
        self.dequeue_key(command.storage_key)

    def dequeue_key(self, storage_key: str) -> None:
        """
        Delete the record stored under `storage_key`.

        Consumers that enumerated the spool remove what they read by
        the key they read it from.
        """
        path = self._key_path(storage_key)
        try:
            os.remove(path)
        except FileNotFoundError as e:
            raise StorageMissingError(f"No spooled record at {path}") from e
        except OSError as e:
            raise StorageWriteError(f"Cannot remove {path}: {e}") from e

        log.info(f"Dequeued spooled record: {storage_key}")

    def is_queued(self, command: Command) -> bool:
        """Point-in-time check; may be stale by the time you act on it."""
        return os.path.exists(self.path_for(command))

    def list_all(self) -> List[str]:
        """Storage keys of all records currently in the spool."""
        directory = self.resolve_directory()
        keys = []
        for entry in os.scandir(directory):
            if entry.name.endswith(RECORD_SUFFIX) and entry.is_file():
                keys.append(entry.name)
        return sorted(keys)

    def load(self, storage_key: str) -> Command:
        """
        Read a record back into a Command.

        The payload is the envelope exactly as stored - it is not
        formatted again.
        """
        path = self._key_path(storage_key)
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except FileNotFoundError as e:
            raise StorageMissingError(f"No spooled record at {path}") from e
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

        name, version, node_id, envelope = parse_header(raw)

        try:
            command = Command(name, version, node_id, envelope, format_payload=False)
        except InvalidCommandError as e:
            raise MalformedRecordError(f"Invalid header in {storage_key}: {e}") from e

        log.debug(f"Loaded {storage_key}")
        return command

    def for_each_enqueued(self, visitor: Callable[[Command], None]) -> None:
        """Load every record and hand it to `visitor`, in list_all order."""
        for storage_key in self.list_all():
            visitor(self.load(storage_key))
