"""procspy - Main Textual application."""

import asyncio
import logging
import signal
import sys
from collections.abc import Sequence

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.css.query import NoMatches
from textual.widgets import Static

from procspy.config import Config, configure_logging, parse_args
from procspy.coordinator import Coordinator, Frame
from procspy.enumerator import ProcessEnumerator
from procspy.keys import InputHandler
from procspy.monitor import TimerRefresher
from procspy.state import Resize
from procspy.watcher import FilesystemRefresher, WatchSetupError

logger = logging.getLogger(__name__)


class ProcessFrame(Static):
    """Shows the most recent frame produced by the coordinator."""

    DEFAULT_CSS = """
    ProcessFrame {
        height: 1fr;
        width: 1fr;
    }
    """


class ProcspyApp(App):
    """Main procspy application."""

    TITLE = "procspy"

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        config: Config | None = None,
        enumerator: ProcessEnumerator | None = None,
    ) -> None:
        """Initialize the ProcspyApp."""
        super().__init__()
        self._config = config or Config()
        enumerator = enumerator or ProcessEnumerator(self._config.max_records)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._coordinator = Coordinator(self._post_frame, on_failure=self._post_failure)
        self._timer = TimerRefresher(
            self._coordinator.submit,
            enumerator,
            interval=self._config.interval,
        )
        self._watcher = FilesystemRefresher(
            self._coordinator.submit,
            enumerator,
            self._config.watch_path,
            ignore_paths=[self._config.log_file] if self._config.log_file else [],
        )
        self._input = InputHandler(self._coordinator.submit, self.action_quit)

    @property
    def coordinator(self) -> Coordinator:
        return self._coordinator

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield ProcessFrame(id="frame")

    def start_watching(self) -> None:
        """
        Begin watching the configured directory.

        Called before the UI starts so a bad watch target fails early.

        Raises:
            WatchSetupError: The directory cannot be watched.
        """
        self._watcher.start()

    def on_mount(self) -> None:
        """Start the coordinator and the timer once the terminal is ready."""
        self._loop = asyncio.get_running_loop()
        try:
            self._loop.add_signal_handler(signal.SIGINT, self.action_quit)
        except (NotImplementedError, RuntimeError):
            # Not on the main thread or not supported by this platform
            logger.debug("SIGINT handler not installed")

        self._coordinator.submit(Resize(self.size.height))
        self._coordinator.start()
        self._timer.start()

    def on_resize(self, event: events.Resize) -> None:
        """Re-fit the list to the new terminal height."""
        self._coordinator.submit(Resize(event.size.height))

    def on_key(self, event: events.Key) -> None:
        """Hand every key to the input handler."""
        if not self._input.handle(event.key):
            event.stop()

    def _post_frame(self, frame: Frame) -> None:
        """Schedule a frame for display. Called from the coordinator thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._show_frame, frame)

    def _show_frame(self, frame: Frame) -> None:
        try:
            self.query_one("#frame", ProcessFrame).update(frame)
        except NoMatches:
            pass  # Screen already torn down

    def _post_failure(self, exc: BaseException) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._abort)

    def _abort(self) -> None:
        """Restore the terminal and exit with an error status."""
        self.stop_workers()
        self.exit(return_code=1, message="procspy: terminal output failed")

    def stop_workers(self) -> None:
        self._coordinator.shutdown()
        self._timer.stop()
        self._watcher.stop()
        if self._loop is not None and not self._loop.is_closed():
            self._loop.remove_signal_handler(signal.SIGINT)

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self.stop_workers()
        self.exit()


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for procspy application."""
    config = parse_args(argv)
    configure_logging(config)

    app = ProcspyApp(config)
    try:
        app.start_watching()
    except WatchSetupError as exc:
        logger.error("Watch setup failed: %s", exc)
        print(f"procspy: {exc}", file=sys.stderr)
        return 1

    try:
        app.run()
    finally:
        app.stop_workers()
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
