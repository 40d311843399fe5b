"""Filesystem activity trigger for procspy."""

import logging
import os
import threading
from collections.abc import Iterable
from queue import Empty, Queue

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CLOSED_NO_WRITE,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_OPENED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from procspy.enumerator import ProcessEnumerator
from procspy.refresher import SnapshotRefresher, Submit

logger = logging.getLogger(__name__)

# Read activity shows up as open/close-without-write, write activity as
# modify/close-after-write.
ACTIVITY_EVENTS = frozenset(
    {
        EVENT_TYPE_OPENED,
        EVENT_TYPE_CLOSED_NO_WRITE,
        EVENT_TYPE_MODIFIED,
        EVENT_TYPE_CLOSED,
    }
)

_STOP = object()


class WatchSetupError(Exception):
    """The watched directory could not be monitored."""


class ActivityHandler(FileSystemEventHandler):
    """Forwards read/write activity inside the watched directory to a queue."""

    def __init__(
        self,
        root: str,
        events: "Queue[FileSystemEvent | object]",
        ignore_paths: Iterable[str] = (),
    ) -> None:
        super().__init__()
        self._root = os.path.abspath(root)
        self._events = events
        self._ignored = frozenset(os.path.abspath(p) for p in ignore_paths)

    def is_activity(self, event: FileSystemEvent) -> bool:
        """Check if ``event`` should trigger a refresh."""
        if event.event_type not in ACTIVITY_EVENTS:
            return False
        path = os.path.abspath(os.fsdecode(event.src_path))
        # Changes to the directory entry itself are not activity inside it
        return path != self._root and path not in self._ignored

    def on_any_event(self, event: FileSystemEvent) -> None:
        if self.is_activity(event):
            self._events.put(event)


class FilesystemRefresher(SnapshotRefresher):
    """
    Refreshes the process snapshot when the watched directory sees activity.

    A watchdog observer feeds events into a queue. A worker thread blocks on
    that queue and, once woken, drains everything already queued before
    doing a single refresh, so a burst of events costs one enumeration.
    """

    def __init__(
        self,
        submit: Submit,
        enumerator: ProcessEnumerator,
        path: str,
        ignore_paths: Iterable[str] = (),
    ) -> None:
        """
        Initialize the FilesystemRefresher.

        Args:
            submit: Coordinator entry point for mutations.
            enumerator: Source of process snapshots.
            path: Directory to watch.
            ignore_paths: Files whose activity never triggers a refresh.
        """
        super().__init__(submit, enumerator)
        self._path = path
        self._events: Queue[FileSystemEvent | object] = Queue()
        self._handler = ActivityHandler(path, self._events, ignore_paths)
        self._observer: Observer | None = None
        self._thread: threading.Thread | None = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def handler(self) -> ActivityHandler:
        return self._handler

    @property
    def is_running(self) -> bool:
        """Check if the worker thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """
        Start watching and the worker thread.

        Raises:
            WatchSetupError: The path is not a directory or cannot be watched.
        """
        if self.is_running:
            return

        if not os.path.isdir(self._path):
            raise WatchSetupError(f"not a directory: {self._path}")

        observer = Observer()
        try:
            observer.schedule(self._handler, self._path, recursive=False)
            observer.start()
        except OSError as exc:
            raise WatchSetupError(f"cannot watch {self._path}: {exc}") from exc
        self._observer = observer
        logger.debug("Watching %s for activity", self._path)

        self.start_worker()

    def start_worker(self) -> None:
        """Start only the draining worker thread."""
        if self.is_running:
            return

        self._thread = threading.Thread(
            target=self._drain_loop,
            daemon=True,
            name="FilesystemRefresher",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the observer and the worker thread.

        Args:
            timeout: How long to wait for each thread to stop (seconds).
        """
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=timeout)
            self._observer = None

        if self._thread is not None:
            self._events.put(_STOP)
            self._thread.join(timeout=timeout)
            self._thread = None

    def drain(self) -> tuple[int, bool]:
        """
        Take every event currently queued without blocking.

        Returns:
            The number of activity events taken and whether a stop request
            was among them.
        """
        count = 0
        stopping = False
        while True:
            try:
                event = self._events.get_nowait()
            except Empty:
                return count, stopping
            if event is _STOP:
                stopping = True
            else:
                count += 1

    def _drain_loop(self) -> None:
        """Main loop running in the worker thread."""
        while True:
            first = self._events.get()
            if first is _STOP:
                return

            count, stopping = self.drain()
            if stopping:
                return

            logger.debug("Coalesced %d filesystem events into one refresh", count + 1)
            try:
                self.trigger()
            except Exception:
                logger.exception("Filesystem refresh failed")
