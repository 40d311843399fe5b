"""Shared refresh logic for the timer and filesystem triggers."""

import logging
from collections.abc import Callable

from procspy.enumerator import EnumerationError, ProcessEnumerator
from procspy.models import Snapshot
from procspy.state import Mutation, ReplaceSnapshot

logger = logging.getLogger(__name__)

Submit = Callable[[Mutation], bool]


class SnapshotRefresher:
    """Takes a new snapshot and hands it to the coordinator as a mutation."""

    def __init__(self, submit: Submit, enumerator: ProcessEnumerator) -> None:
        self._submit = submit
        self._enumerator = enumerator

    def refresh(self) -> Snapshot:
        """Enumerate the process table synchronously."""
        return self._enumerator.enumerate()

    def trigger(self) -> bool:
        """
        Refresh and submit the result.

        A failed enumeration skips this cycle; whatever is on screen stays
        until the next trigger succeeds.

        Returns:
            True if a new snapshot was submitted.
        """
        try:
            snapshot = self.refresh()
        except EnumerationError as exc:
            logger.warning("Skipping refresh: %s", exc)
            return False
        return self._submit(ReplaceSnapshot(snapshot))
