"""Keyboard input handling for procspy."""

from collections.abc import Callable

from procspy.refresher import Submit
from procspy.state import MoveDown, MoveUp, Mutation, Redraw

QUIT_KEYS = frozenset({"q"})

KEY_MUTATIONS: dict[str, Mutation] = {
    "up": MoveUp(),
    "down": MoveDown(),
}


class InputHandler:
    """
    Turns key presses into mutation requests.

    Every key other than quit is followed by a redraw, even when it changes
    nothing.
    """

    def __init__(self, submit: Submit, on_quit: Callable[[], None]) -> None:
        self._submit = submit
        self._on_quit = on_quit

    def handle(self, key: str) -> bool:
        """
        Process one key.

        Returns:
            False if the key requested shutdown.
        """
        if key in QUIT_KEYS:
            self._on_quit()
            return False

        self._submit(KEY_MUTATIONS.get(key, Redraw()))
        return True
