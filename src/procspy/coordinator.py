"""Single owner of the view state.

Refreshers and the input handler never touch the view directly. They submit
mutations, which the coordinator applies one at a time in arrival order,
rendering a full frame after each.
"""

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from queue import Empty, Queue
from typing import Any

from procspy.render import render
from procspy.state import Mutation, ViewState

logger = logging.getLogger(__name__)

Frame = Any
FrameSink = Callable[[Frame], None]
Renderer = Callable[[ViewState, int, datetime], Frame]

# Wakes the coordinator thread so it can notice the shutdown
_STOP = object()


class CoordinatorState(Enum):
    """Lifecycle of the coordinator."""

    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"


class Coordinator:
    """
    Serializes mutations of the view state and drives redraws.

    Mutations are queued by any thread via ``submit`` and applied by a
    dedicated daemon thread. Each applied mutation produces exactly one frame,
    handed to ``sink``.
    """

    def __init__(
        self,
        sink: FrameSink,
        renderer: Renderer = render,
        clock: Callable[[], datetime] = datetime.now,
        on_failure: Callable[[BaseException], None] | None = None,
    ) -> None:
        """
        Initialize the Coordinator.

        Args:
            sink: Receives each rendered frame. Must not block.
            renderer: Turns a view state and terminal height into a frame.
            clock: Source of the timestamp drawn in each frame.
            on_failure: Called once if the sink raises.
        """
        self._sink = sink
        self._renderer = renderer
        self._clock = clock
        self._on_failure = on_failure
        self._queue: Queue[Mutation | object] = Queue()
        self._lock = threading.Lock()
        self._view = ViewState()
        self._state = CoordinatorState.RUNNING
        self._thread: threading.Thread | None = None

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def view(self) -> ViewState:
        """A consistent copy of the current view state."""
        with self._lock:
            return self._view.copy()

    @property
    def is_running(self) -> bool:
        """Check if the coordinator thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def submit(self, mutation: Mutation) -> bool:
        """
        Queue a mutation for application.

        Returns False if the coordinator is shutting down and the request
        was dropped.
        """
        if self._state is CoordinatorState.SHUTTING_DOWN:
            return False
        self._queue.put(mutation)
        return True

    def start(self) -> None:
        """Start the coordinator thread."""
        if self.is_running or self._state is CoordinatorState.SHUTTING_DOWN:
            return

        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="Coordinator",
        )
        self._thread.start()

    def shutdown(self, timeout: float | None = 5.0) -> None:
        """
        Stop accepting and applying mutations.

        Anything still queued is discarded.

        Args:
            timeout: How long to wait for the thread to stop (seconds).
        """
        self._state = CoordinatorState.SHUTTING_DOWN
        self._queue.put(_STOP)
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def apply(self, mutation: Mutation) -> Frame:
        """Apply one mutation, render the result and send it to the sink."""
        with self._lock:
            mutation.apply(self._view)
            view = self._view.copy()
        frame = self._renderer(view, view.terminal_rows, self._clock())

        try:
            self._sink(frame)
        except Exception as exc:
            logger.exception("Failed to draw frame")
            self._fail(exc)
        return frame

    def drain(self) -> int:
        """
        Apply every mutation queued so far in the calling thread.

        Only for use while the coordinator thread is not running.

        Returns:
            Number of mutations applied.
        """
        applied = 0
        while self._state is CoordinatorState.RUNNING:
            try:
                mutation = self._queue.get_nowait()
            except Empty:
                break
            if mutation is not _STOP:
                self.apply(mutation)
                applied += 1
        return applied

    def _run(self) -> None:
        """Main loop running in the coordinator thread."""
        while True:
            mutation = self._queue.get()
            if mutation is _STOP or self._state is CoordinatorState.SHUTTING_DOWN:
                break
            self.apply(mutation)

    def _fail(self, exc: BaseException) -> None:
        self._state = CoordinatorState.SHUTTING_DOWN
        if self._on_failure is not None:
            self._on_failure(exc)
