"""Tests for the Coordinator."""

import threading
from datetime import datetime

import pytest

from procspy.coordinator import Coordinator, CoordinatorState
from procspy.state import MoveDown, MoveUp, Redraw, ReplaceSnapshot, Resize, ViewState

NOW = datetime(2024, 1, 1, 12, 0, 0)


class RecordingSink:
    """Collects frames and signals once a target count is reached."""

    def __init__(self, expected: int = 0) -> None:
        self.frames = []
        self.expected = expected
        self.done = threading.Event()
        self.lock = threading.Lock()

    def __call__(self, frame) -> None:
        with self.lock:
            self.frames.append(frame)
            if len(self.frames) >= self.expected:
                self.done.set()


def view_renderer(view: ViewState, terminal_rows: int, now: datetime):
    """Renderer that returns what it was given, for inspection."""
    return (view, terminal_rows, now)


def make_coordinator(sink, **kwargs):
    return Coordinator(sink, renderer=view_renderer, clock=lambda: NOW, **kwargs)


class TestCoordinatorSync:
    """Tests driving the coordinator without its thread."""

    def test_initial_view_is_empty(self):
        coordinator = make_coordinator(RecordingSink())

        view = coordinator.view
        assert len(view.snapshot) == 0
        assert view.selected_index is None
        assert coordinator.state is CoordinatorState.RUNNING

    def test_one_frame_per_mutation(self, make_snapshot):
        sink = RecordingSink()
        coordinator = make_coordinator(sink)

        coordinator.submit(ReplaceSnapshot(make_snapshot(5)))
        coordinator.submit(MoveDown())
        coordinator.submit(Redraw())
        applied = coordinator.drain()

        assert applied == 3
        assert len(sink.frames) == 3

    def test_frames_reflect_each_mutation_in_order(self, make_snapshot):
        sink = RecordingSink()
        coordinator = make_coordinator(sink)

        coordinator.submit(ReplaceSnapshot(make_snapshot(5)))
        coordinator.submit(MoveDown())
        coordinator.submit(MoveDown())
        coordinator.submit(MoveUp())
        coordinator.drain()

        selections = [view.selected_index for view, _, _ in sink.frames]
        assert selections == [0, 1, 2, 1]

    def test_renderer_gets_copy_and_terminal_rows(self, make_snapshot):
        sink = RecordingSink()
        coordinator = make_coordinator(sink)

        coordinator.submit(Resize(24))
        coordinator.submit(ReplaceSnapshot(make_snapshot(3)))
        coordinator.drain()

        view, rows, now = sink.frames[-1]
        assert rows == 24
        assert now == NOW
        view.selected_index = 2
        assert coordinator.view.selected_index == 0

    def test_uses_real_renderer_by_default(self, make_snapshot):
        frames = []
        coordinator = Coordinator(frames.append)

        coordinator.apply(ReplaceSnapshot(make_snapshot(2)))

        assert frames[0].title == "Process Monitor"

    def test_shrinking_refresh_clamps_selection(self, make_snapshot):
        sink = RecordingSink()
        coordinator = make_coordinator(sink)
        coordinator.submit(Resize(20))
        coordinator.submit(ReplaceSnapshot(make_snapshot(5)))
        for _ in range(4):
            coordinator.submit(MoveDown())
        coordinator.drain()
        assert coordinator.view.selected_index == 4

        coordinator.apply(ReplaceSnapshot(make_snapshot(2)))

        assert coordinator.view.selected_index == 1

    def test_sink_failure_shuts_down(self, make_snapshot):
        failures = []

        def broken_sink(frame):
            raise OSError("terminal gone")

        coordinator = make_coordinator(broken_sink, on_failure=failures.append)
        coordinator.submit(Redraw())
        coordinator.submit(Redraw())

        coordinator.drain()

        assert len(failures) == 1
        assert isinstance(failures[0], OSError)
        assert coordinator.state is CoordinatorState.SHUTTING_DOWN


class TestCoordinatorThread:
    """Tests for the coordinator thread."""

    def test_start_stop(self):
        coordinator = make_coordinator(RecordingSink())

        coordinator.start()
        assert coordinator.is_running

        coordinator.shutdown()
        assert not coordinator.is_running
        assert coordinator.state is CoordinatorState.SHUTTING_DOWN

    def test_start_idempotent(self):
        coordinator = make_coordinator(RecordingSink())

        coordinator.start()
        thread1 = coordinator._thread
        coordinator.start()
        thread2 = coordinator._thread

        assert thread1 is thread2
        coordinator.shutdown()

    def test_daemon_thread(self):
        coordinator = make_coordinator(RecordingSink())
        coordinator.start()

        try:
            assert coordinator._thread.daemon is True
            assert coordinator._thread.name == "Coordinator"
        finally:
            coordinator.shutdown()

    def test_concurrent_triggers_apply_in_submission_order(self, make_snapshot):
        """Test two refreshes submitted together give exactly two frames, in order."""
        sink = RecordingSink(expected=2)
        coordinator = make_coordinator(sink)
        first = make_snapshot(3, start_pid=100)
        second = make_snapshot(4, start_pid=200)
        barrier = threading.Barrier(2)
        order = []
        order_lock = threading.Lock()

        def fire(snapshot):
            barrier.wait()
            with order_lock:
                order.append(snapshot)
                coordinator.submit(ReplaceSnapshot(snapshot))

        threads = [
            threading.Thread(target=fire, args=(first,)),
            threading.Thread(target=fire, args=(second,)),
        ]
        coordinator.start()
        try:
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=2.0)

            assert sink.done.wait(timeout=2.0)
        finally:
            coordinator.shutdown()

        assert len(sink.frames) == 2
        assert [view.snapshot for view, _, _ in sink.frames] == order
        assert coordinator.view.snapshot == order[-1]

    def test_many_producers_never_break_invariants(self, make_snapshot):
        total = 3 * 200
        sink = RecordingSink(expected=total + 1)
        coordinator = make_coordinator(sink)
        coordinator.submit(Resize(8))

        def refresher(sizes):
            for size in sizes:
                coordinator.submit(ReplaceSnapshot(make_snapshot(size)))

        def keys():
            for i in range(200):
                coordinator.submit(MoveDown() if i % 3 else MoveUp())

        threads = [
            threading.Thread(target=refresher, args=([i % 17 for i in range(200)],)),
            threading.Thread(target=refresher, args=([i % 5 + 10 for i in range(200)],)),
            threading.Thread(target=keys),
        ]
        coordinator.start()
        try:
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=5.0)
            assert sink.done.wait(timeout=5.0)
        finally:
            coordinator.shutdown()

        assert len(sink.frames) == total + 1
        for view, _, _ in sink.frames:
            count = len(view.snapshot)
            if count == 0:
                assert view.selected_index is None
                continue
            assert 0 <= view.scroll_offset <= view.selected_index <= count - 1
            assert view.selected_index <= view.scroll_offset + view.visible_rows - 1

    def test_submit_refused_after_shutdown(self):
        sink = RecordingSink()
        coordinator = make_coordinator(sink)
        coordinator.start()
        coordinator.shutdown()

        assert coordinator.submit(Redraw()) is False
        assert coordinator.drain() == 0
        assert sink.frames == []

    def test_shutdown_discards_pending(self, make_snapshot):
        sink = RecordingSink()
        coordinator = make_coordinator(sink)
        coordinator.submit(ReplaceSnapshot(make_snapshot(3)))

        coordinator.shutdown()
        coordinator.start()

        assert not coordinator.is_running
        assert sink.frames == []


@pytest.mark.parametrize("mutations", [[], [Redraw()], [MoveUp(), MoveDown()]])
def test_drain_counts(mutations):
    coordinator = make_coordinator(RecordingSink())
    for mutation in mutations:
        coordinator.submit(mutation)

    assert coordinator.drain() == len(mutations)
