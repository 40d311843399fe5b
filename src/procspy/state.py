"""View state and the mutations the coordinator applies to it."""

from dataclasses import dataclass, field, replace

from procspy.models import Snapshot

BORDER_ROWS = 2


@dataclass(slots=True)
class ViewState:
    """
    What is currently displayed: the process table, selection and scroll.

    Owned by the Coordinator. Everything else receives a copy.
    """

    snapshot: Snapshot = field(default_factory=Snapshot)
    selected_index: int | None = None
    scroll_offset: int = 0
    terminal_rows: int = BORDER_ROWS + 1

    @property
    def visible_rows(self) -> int:
        """Number of list rows inside the bordered frame."""
        return visible_rows_for(self.terminal_rows)

    def copy(self) -> "ViewState":
        """Return a detached copy (snapshots are immutable and shared)."""
        return replace(self)

    def clamp(self) -> None:
        """Restore the selection invariants after the list or window changed."""
        count = len(self.snapshot)
        if count == 0:
            self.selected_index = None
            self.scroll_offset = 0
            return

        if self.selected_index is None:
            self.selected_index = 0
        self.selected_index = max(0, min(self.selected_index, count - 1))

        self.scroll_offset = max(0, min(self.scroll_offset, self.selected_index))
        if self.selected_index >= self.scroll_offset + self.visible_rows:
            self.scroll_offset = self.selected_index - self.visible_rows + 1


def visible_rows_for(terminal_rows: int) -> int:
    """Number of list rows inside a bordered frame of the given height."""
    return max(1, terminal_rows - BORDER_ROWS)


class Mutation:
    """A request to change the view state. Applied only by the Coordinator."""

    __slots__ = ()

    def apply(self, view: ViewState) -> None:
        raise NotImplementedError


@dataclass(slots=True, frozen=True)
class ReplaceSnapshot(Mutation):
    """Swap in a freshly enumerated process table."""

    snapshot: Snapshot

    def apply(self, view: ViewState) -> None:
        view.snapshot = self.snapshot
        view.clamp()


@dataclass(slots=True, frozen=True)
class MoveUp(Mutation):
    """Move the selection one row up, scrolling if it leaves the window."""

    def apply(self, view: ViewState) -> None:
        if view.selected_index is None:
            return
        if view.selected_index > 0:
            view.selected_index -= 1
        if view.selected_index < view.scroll_offset:
            view.scroll_offset = view.selected_index


@dataclass(slots=True, frozen=True)
class MoveDown(Mutation):
    """Move the selection one row down, scrolling if it leaves the window."""

    def apply(self, view: ViewState) -> None:
        if view.selected_index is None:
            return
        if view.selected_index < len(view.snapshot) - 1:
            view.selected_index += 1
        if view.selected_index >= view.scroll_offset + view.visible_rows:
            view.scroll_offset += 1


@dataclass(slots=True, frozen=True)
class Resize(Mutation):
    """The terminal changed height."""

    terminal_rows: int

    def apply(self, view: ViewState) -> None:
        view.terminal_rows = self.terminal_rows
        view.clamp()


@dataclass(slots=True, frozen=True)
class Redraw(Mutation):
    """Change nothing; only ask for a fresh frame."""

    def apply(self, view: ViewState) -> None:
        return None
