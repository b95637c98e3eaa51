from __future__ import annotations

import curses
from typing import Union

KEY_ENTER = {10, 13, curses.KEY_ENTER}
KEY_BACK = {curses.KEY_BACKSPACE, 127}
KEY_ESCAPE = {27, curses.KEY_EXIT}
KEY_ARROWS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
}

# Ctrl+U and Ctrl+H clear the edited field. Backspace arrives as KEY_BACKSPACE
# or DEL (0x7f), so ^H is free for clearing.
CLEAR_CHARS = {"\x15", "\x08"}

Key = Union[str, tuple[str, str]]


def is_enter(key: object) -> bool:
    return isinstance(key, int) and key in KEY_ENTER or key in ("\n", "\r")


def is_backspace(key: object) -> bool:
    return isinstance(key, int) and key in KEY_BACK or key == "\x7f"


def is_escape(key: object) -> bool:
    return isinstance(key, int) and key in KEY_ESCAPE or key == "\x1b"


def normalize_key(key: object) -> Key | None:
    """Map a curses get_wch() result to a symbolic key.

    Returns one of "up", "down", "left", "right", "tab", "enter", "escape",
    "backspace", "clear", a ("char", c) pair for printable text, or None for
    anything this UI does not use.
    """
    if key is None:
        return None
    if is_enter(key):
        return "enter"
    if is_escape(key):
        return "escape"
    if is_backspace(key):
        return "backspace"
    if isinstance(key, int):
        if key in KEY_ARROWS:
            return KEY_ARROWS[key]
        if key == 9:
            return "tab"
        return None
    if not isinstance(key, str):
        return None
    if key == "\t":
        return "tab"
    if key in CLEAR_CHARS:
        return "clear"
    if len(key) == 1 and key.isprintable():
        return ("char", key)
    return None
