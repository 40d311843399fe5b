"""Periodic refresh trigger for procspy."""

import logging
import threading

from procspy.enumerator import ProcessEnumerator
from procspy.refresher import SnapshotRefresher, Submit

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 2.0
MIN_INTERVAL = 0.1


class TimerRefresher(SnapshotRefresher):
    """
    Refreshes the process snapshot on a fixed interval.

    Runs in a separate daemon thread and submits a replace-snapshot mutation
    to the coordinator after every enumeration.
    """

    def __init__(
        self,
        submit: Submit,
        enumerator: ProcessEnumerator,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        """
        Initialize the TimerRefresher.

        Args:
            submit: Coordinator entry point for mutations.
            enumerator: Source of process snapshots.
            interval: Seconds between refreshes. Default 2.0s.
        """
        super().__init__(submit, enumerator)
        self._interval = max(MIN_INTERVAL, interval)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval(self) -> float:
        """Get the current refresh interval."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the refresh interval."""
        self._interval = max(MIN_INTERVAL, value)

    @property
    def is_running(self) -> bool:
        """Check if the refresher thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the refresher thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="TimerRefresher",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the refresher thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                self.trigger()
            except Exception:
                # Keep the timer alive; the next tick retries
                logger.exception("Timer refresh failed")

            # Wait for interval seconds or until stop is requested
            self._stop_event.wait(timeout=self._interval)
