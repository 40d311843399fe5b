"""Data models for procspy."""

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable description of one process within a snapshot."""

    pid: int
    owner: str  # Login name or "Unknown"
    command: str  # Joined argv or "N/A"


@dataclass(slots=True, frozen=True)
class Snapshot:
    """
    One complete enumeration of the process table.

    Records keep the order in which the OS listed them. ``truncated`` is set
    when the table held more processes than the enumerator's capacity bound.
    """

    records: tuple[ProcessRecord, ...] = ()
    truncated: bool = False

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ProcessRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> ProcessRecord:
        return self.records[index]
