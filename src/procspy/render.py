"""Frame rendering for procspy."""

from datetime import datetime

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from procspy.models import ProcessRecord
from procspy.state import BORDER_ROWS, ViewState

TITLE = "Process Monitor"
TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"
SELECTED_STYLE = "reverse"


def format_row(record: ProcessRecord, timestamp: str) -> str:
    """Format one process line."""
    return (
        f"{timestamp} CMD: {record.command:<10} "
        f"USER: {record.owner:<10} PID: {record.pid:<10}"
    )


def visible_range(view: ViewState, terminal_rows: int) -> range:
    """
    Indices of the records that fit in a frame of ``terminal_rows``.

    Starts at the scroll offset, shifted down if the selection would
    otherwise fall below the window (the terminal may have shrunk since the
    view was last clamped).
    """
    rows = max(0, terminal_rows - BORDER_ROWS)
    count = len(view.snapshot)
    if rows == 0 or count == 0:
        return range(0)

    top = min(view.scroll_offset, count - 1)
    selected = view.selected_index
    if selected is not None:
        if selected < top:
            top = selected
        elif selected >= top + rows:
            top = selected - rows + 1
    return range(top, min(count, top + rows))


def render(view: ViewState, terminal_rows: int, now: datetime | None = None) -> Panel:
    """
    Draw the whole frame for ``view``.

    Pure: ``view`` is only read. Every call produces a complete frame sized
    to ``terminal_rows``.
    """
    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)

    lines = []
    for index in visible_range(view, terminal_rows):
        lines.append(
            Text(
                format_row(view.snapshot[index], timestamp),
                style=SELECTED_STYLE if index == view.selected_index else "",
                no_wrap=True,
                overflow="ellipsis",
            )
        )

    count = len(view.snapshot)
    if count == 0:
        subtitle = "no processes"
    else:
        subtitle = f"{count} processes"
        if view.snapshot.truncated:
            subtitle += " (truncated)"

    return Panel(
        Group(*lines),
        title=TITLE,
        title_align="left",
        subtitle=subtitle,
        subtitle_align="right",
        box=box.SQUARE,
        height=max(terminal_rows, BORDER_ROWS),
    )
