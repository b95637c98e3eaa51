from __future__ import annotations

from typing import Literal

from .editor import TextEditor
from .focus import FocusState, nearest, tab_target
from .geometry import GeometryRegistry
from .keys import Key

Mode = Literal["command", "editing"]

COMMAND: Mode = "command"
EDITING: Mode = "editing"

# Signals handed back to the application shell.
SIGNAL_QUIT = "quit"
SIGNAL_ACTIVATE = "activate"

# (mode, key) -> action. Printable characters in editing mode are matched on
# the "char" tag. Any pair not listed here is ignored.
DISPATCH: dict[tuple[str, str], str] = {
    (COMMAND, "q"): "quit",
    (COMMAND, "i"): "start_editing",
    (COMMAND, "enter"): "activate",
    (COMMAND, "up"): "navigate",
    (COMMAND, "down"): "navigate",
    (COMMAND, "left"): "navigate",
    (COMMAND, "right"): "navigate",
    (COMMAND, "tab"): "tab",
    (EDITING, "enter"): "stop_editing",
    (EDITING, "escape"): "cancel_editing",
    (EDITING, "char"): "insert",
    (EDITING, "backspace"): "delete",
    (EDITING, "left"): "cursor_left",
    (EDITING, "right"): "cursor_right",
    (EDITING, "clear"): "clear",
}


def lookup_action(mode: str, key: Key | None) -> str | None:
    if key is None:
        return None
    if isinstance(key, tuple):
        tag, ch = key
        if mode == COMMAND:
            # Command mode binds single letters, not arbitrary text.
            return DISPATCH.get((mode, ch))
        return DISPATCH.get((mode, tag))
    return DISPATCH.get((mode, key))


class InputMachine:
    """Command/Editing modal key handling for the login form.

    handle() mutates focus, editor and mode in place and returns a signal for
    the shell ("quit" or "activate") when the key needs work outside the
    engine. Unknown keys are dropped.
    """

    def __init__(self, focus: FocusState, editor: TextEditor, registry: GeometryRegistry) -> None:
        self.focus = focus
        self.editor = editor
        self.registry = registry
        self.mode: Mode = COMMAND

    def handle(self, key: Key | None) -> str | None:
        action = lookup_action(self.mode, key)
        if action is None:
            return None

        if action == "quit":
            return SIGNAL_QUIT
        if action == "activate":
            return SIGNAL_ACTIVATE
        if action == "start_editing":
            self.mode = EDITING
            self.editor.move_cursor_rightest()
            return None
        if action in {"stop_editing", "cancel_editing"}:
            self.mode = COMMAND
            return None
        if action == "navigate":
            assert isinstance(key, str)
            self.move_focus(nearest(self.focus.current, key, self.registry))
            return None
        if action == "tab":
            self.move_focus(tab_target(self.focus.current, self.registry))
            return None
        if action == "insert":
            assert isinstance(key, tuple)
            self.editor.enter_char(key[1])
            return None
        if action == "delete":
            self.editor.delete_char()
            return None
        if action == "cursor_left":
            self.editor.move_cursor_left()
            return None
        if action == "cursor_right":
            self.editor.move_cursor_right()
            return None
        if action == "clear":
            self.editor.clear_current_content()
        return None

    def move_focus(self, focus_id: str | None) -> bool:
        if not self.focus.set(focus_id):
            return False
        self.editor.reset_cursor()
        return True
