from __future__ import annotations

import curses

from .geometry import Rect
from .theme import Theme

SPINNER_FRAMES = "|/-\\"

# Border plus one column of padding before the text starts.
TEXT_OFFSET = 2
FIELD_HEIGHT = 3


def clamp(n: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, n))


def safe_addstr(stdscr: curses.window, y: int, x: int, text: str, attr: int = 0) -> None:
    """addnstr that clips to the window instead of raising at the edges."""
    h, w = stdscr.getmaxyx()
    if x < 0:
        text, x = text[-x:], 0
    room = w - x - 1
    if not text or not 0 <= y < h or room <= 0:
        return
    try:
        stdscr.addnstr(y, x, text, room, attr)
    except curses.error:
        pass


def safe_addch(stdscr: curses.window, y: int, x: int, ch: int, attr: int = 0) -> None:
    h, w = stdscr.getmaxyx()
    if not (0 <= y < h and 0 <= x < w):
        return
    try:
        stdscr.addch(y, x, ch, attr)
    except curses.error:
        pass


def draw_centered(stdscr: curses.window, y: int, x: int, w: int, text: str, attr: int = 0) -> None:
    text = text[: max(0, w)]
    safe_addstr(stdscr, y, x + max(0, (w - len(text)) // 2), text, attr)


def draw_box(stdscr: curses.window, y: int, x: int, h: int, w: int, title: str = "", attr: int = 0) -> None:
    if h < 2 or w < 2:
        return
    bottom, right = y + h - 1, x + w - 1
    for cy, cx, ch in (
        (y, x, curses.ACS_ULCORNER),
        (y, right, curses.ACS_URCORNER),
        (bottom, x, curses.ACS_LLCORNER),
        (bottom, right, curses.ACS_LRCORNER),
    ):
        safe_addch(stdscr, cy, cx, ch, attr)
    for cx in range(x + 1, right):
        safe_addch(stdscr, y, cx, curses.ACS_HLINE, attr)
        safe_addch(stdscr, bottom, cx, curses.ACS_HLINE, attr)
    for cy in range(y + 1, bottom):
        safe_addch(stdscr, cy, x, curses.ACS_VLINE, attr)
        safe_addch(stdscr, cy, right, curses.ACS_VLINE, attr)
    if title:
        safe_addstr(stdscr, y, x + 1, title, attr)


def spinner(tick: int) -> str:
    return SPINNER_FRAMES[tick % len(SPINNER_FRAMES)]


def draw_input(
    stdscr: curses.window,
    theme: Theme,
    y: int,
    x: int,
    w: int,
    label: str,
    text: str,
    *,
    focused: bool = False,
) -> Rect:
    attr = theme.attrs.focus if focused else theme.attrs.panel
    draw_box(stdscr, y, x, FIELD_HEIGHT, w, f" {label} ", attr)
    inner_w = max(0, w - 2 * TEXT_OFFSET)
    safe_addstr(stdscr, y + 1, x + TEXT_OFFSET, text[:inner_w], attr)
    return Rect(y=y, x=x, h=FIELD_HEIGHT, w=w)


def draw_button(
    stdscr: curses.window,
    theme: Theme,
    y: int,
    x: int,
    w: int,
    label: str,
    *,
    focused: bool = False,
) -> Rect:
    attr = theme.attrs.focus if focused else theme.attrs.button
    draw_box(stdscr, y, x, FIELD_HEIGHT, w, "", attr)
    draw_centered(stdscr, y + 1, x + 1, w - 2, label, attr)
    return Rect(y=y, x=x, h=FIELD_HEIGHT, w=w)


def text_cursor(rect: Rect, cursor: int) -> tuple[int, int]:
    """Screen cell for the terminal cursor inside an input drawn at rect."""
    col = rect.x + TEXT_OFFSET + cursor
    return rect.y + 1, clamp(col, rect.x + 1, rect.x + max(1, rect.w - 2))
