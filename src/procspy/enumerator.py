"""Process table enumeration for procspy."""

import logging
import pwd

import psutil

from procspy.models import ProcessRecord, Snapshot

logger = logging.getLogger(__name__)

MAX_RECORDS = 1024
MAX_COMMAND_LEN = 255
UNKNOWN_OWNER = "Unknown"
NO_COMMAND = "N/A"

_SEPARATORS = str.maketrans("\0\n\t\r", "    ")


class EnumerationError(Exception):
    """The process registry itself could not be listed."""


def format_command(argv: list[str] | None) -> str:
    """Join an argument vector into a single display line."""
    if not argv:
        return NO_COMMAND
    # Separators are replaced one-for-one so spacing inside arguments survives
    command = " ".join(argv).translate(_SEPARATORS)
    if not command.strip():
        return NO_COMMAND
    return command[:MAX_COMMAND_LEN]


def lookup_owner(uid: int) -> str:
    """Resolve a numeric uid to a login name."""
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return UNKNOWN_OWNER


def describe_process(pid: int) -> ProcessRecord:
    """
    Build a record for a single pid.

    Never raises for per-process failures: the process may exit between
    listing and resolution, or its resources may be unreadable. Each field
    that cannot be resolved gets its placeholder.
    """
    try:
        proc = psutil.Process(pid)
    except (psutil.Error, OSError):
        return ProcessRecord(pid=pid, owner=UNKNOWN_OWNER, command=NO_COMMAND)

    with proc.oneshot():
        try:
            command = format_command(proc.cmdline())
        except (psutil.Error, OSError):
            command = NO_COMMAND

        try:
            owner = lookup_owner(proc.uids().real)
        except (psutil.Error, OSError):
            owner = UNKNOWN_OWNER

    return ProcessRecord(pid=pid, owner=owner, command=command)


class ProcessEnumerator:
    """
    Reads the OS process table into immutable snapshots.

    The number of records per snapshot is capped; a capped snapshot is
    flagged as truncated rather than silently dropping processes.
    """

    def __init__(self, max_records: int = MAX_RECORDS) -> None:
        if max_records < 1:
            raise ValueError("max_records must be at least 1")
        self.max_records = max_records

    def enumerate(self, max_records: int | None = None) -> Snapshot:
        """
        Take a snapshot of the current process table.

        Args:
            max_records: Override for the capacity bound of this call.

        Raises:
            EnumerationError: The process registry is inaccessible.
        """
        limit = self.max_records if max_records is None else max_records

        try:
            pids = psutil.pids()
        except (psutil.Error, OSError) as exc:
            raise EnumerationError(f"cannot list processes: {exc}") from exc

        records: list[ProcessRecord] = []
        truncated = False
        for pid in pids:
            if pid <= 0:
                continue
            if len(records) >= limit:
                truncated = True
                break
            records.append(describe_process(pid))

        if truncated:
            logger.debug("Process table truncated at %d records", limit)

        return Snapshot(records=tuple(records), truncated=truncated)
