from __future__ import annotations

import curses
from dataclasses import dataclass


@dataclass(frozen=True)
class ThemeAttrs:
    panel: int
    heading: int
    muted: int
    info: int
    error: int
    focus: int
    button: int


# Used when the terminal has no colours (and before curses is initialised).
MONOCHROME = {
    "panel": 0,
    "heading": curses.A_BOLD,
    "muted": curses.A_DIM,
    "info": curses.A_BOLD,
    "error": curses.A_BOLD,
    "focus": curses.A_REVERSE,
    "button": curses.A_BOLD,
}

# role -> (foreground or None for no colour pair, extra attributes)
PALETTE = {
    "panel": (curses.COLOR_WHITE, 0),
    "heading": (curses.COLOR_WHITE, curses.A_BOLD),
    "muted": (None, curses.A_DIM),
    "info": (curses.COLOR_WHITE, curses.A_BOLD),
    "error": (curses.COLOR_RED, curses.A_BOLD),
    "focus": (curses.COLOR_YELLOW, curses.A_BOLD),
    "button": (curses.COLOR_WHITE, curses.A_BOLD),
}


class Theme:
    def __init__(self, has_color: bool) -> None:
        self.has_color = has_color
        self.attrs = ThemeAttrs(**MONOCHROME)

    @classmethod
    def init(cls) -> "Theme":
        theme = cls(has_color=curses.has_colors())
        if not theme.has_color:
            return theme

        curses.start_color()
        curses.use_default_colors()

        pairs: dict[int, int] = {}
        roles: dict[str, int] = {}
        for role, (fg, extra) in PALETTE.items():
            if fg is None:
                roles[role] = extra
                continue
            if fg not in pairs:
                pairs[fg] = len(pairs) + 1
                curses.init_pair(pairs[fg], fg, -1)
            roles[role] = curses.color_pair(pairs[fg]) | extra
        theme.attrs = ThemeAttrs(**roles)
        return theme
