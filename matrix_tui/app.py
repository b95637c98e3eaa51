#!/usr/bin/env python3
"""Matrix TUI: keyboard-driven login front-end for a Matrix homeserver account."""

from __future__ import annotations

import curses
import os
import queue
import sys
import threading
from typing import Any

from matrix_tui.tui.focus import FOCUS_LOGIN, FOCUS_PASSWORD, FOCUS_SERVER, FOCUS_USERNAME
from matrix_tui.tui.keys import normalize_key
from matrix_tui.tui.logstore import LogStore
from matrix_tui.tui.models import AppPaths
from matrix_tui.tui.modes import COMMAND, EDITING, SIGNAL_ACTIVATE, SIGNAL_QUIT, lookup_action
from matrix_tui.tui.saves import SavedSession
from matrix_tui.tui.screens import (
    COMMAND_HELP,
    EDITING_HELP,
    FIELD_INDEX,
    LOGIN_FIELDS,
    LOGIN_TITLE,
    MAIN_HELP,
)
from matrix_tui.tui.session import SessionRunner
from matrix_tui.tui.state import SessionStatus, UIState, apply_session_event
from matrix_tui.tui.system_ops import detect_paths
from matrix_tui.tui.theme import Theme
from matrix_tui.tui.widgets import FIELD_HEIGHT, draw_button, draw_centered, draw_input, safe_addstr, spinner, text_cursor

MIN_H = 20
MIN_W = 40
FORM_MARGIN_X = 10


class MatrixTUI:
    def __init__(
        self,
        stdscr: curses.window,
        paths: AppPaths,
        logstore: LogStore,
        runner: SessionRunner | None = None,
    ) -> None:
        self.stdscr = stdscr
        self.paths = paths
        self.logstore = logstore
        self.runner = runner or SessionRunner(paths.save_file, logstore)
        self.ui = UIState()
        self.status = SessionStatus()
        self.theme = Theme(has_color=False)
        self.events: queue.Queue[dict[str, Any]] = queue.Queue()
        self.session_thread: threading.Thread | None = None

    def run(self) -> None:
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        self.stdscr.timeout(50)
        self.stdscr.keypad(True)
        curses.mousemask(curses.BUTTON1_CLICKED)
        self.theme = Theme.init()

        while self.ui.running:
            self._drain_events()
            self._draw()
            self.ui.spinner_tick += 1
            try:
                key = self.stdscr.get_wch()
            except curses.error:
                key = None
            if key is None:
                continue
            self._handle_key(key)

    def preload(self, restore: bool = True) -> None:
        saved, err = SavedSession.load(self.paths.save_file)
        if err:
            self.logstore.append("error", "preload", err, category="system")
            apply_session_event(self.status, {"type": "error", "message": err})
            return
        if saved.server:
            self.ui.editor.set_value(FOCUS_SERVER, saved.server)
        if saved.username:
            self.ui.editor.set_value(FOCUS_USERNAME, saved.username)
        if restore and saved.has_token:
            self.logstore.append("info", "preload", f"saved session found for {saved.username}@{saved.server}", category="auth")
            self._start_session(self.runner.login_with_token, saved.server, saved.token)

    # Rendering

    def _draw(self) -> None:
        self.stdscr.erase()
        # Regions not drawn below must not stay navigable.
        self.ui.registry.clear()
        cursor_at: tuple[int, int] | None = None
        h, w = self.stdscr.getmaxyx()
        if h < MIN_H or w < MIN_W:
            safe_addstr(self.stdscr, 0, 0, f"Terminal too small. Resize to at least {MIN_W}x{MIN_H}.", self.theme.attrs.error)
            self.stdscr.refresh()
            return

        main_y, main_h = 1, h - 4
        self._draw_header(w)
        if self.status.loading:
            self._draw_loading(main_y, main_h, w)
        elif self.ui.screen == "login":
            cursor_at = self._draw_login(main_y, main_h, w)
        else:
            self._draw_main(main_y, main_h, w)
        self._draw_footer(h - 3, w)

        self._place_cursor(cursor_at)
        self.stdscr.refresh()

    def _draw_header(self, w: int) -> None:
        safe_addstr(self.stdscr, 0, 2, "MATRIX TUI", self.theme.attrs.heading)
        badge = f"[{self.ui.mode.upper()}]"
        safe_addstr(self.stdscr, 0, max(2, w - len(badge) - 2), badge, self.theme.attrs.muted)

    def _draw_login(self, y: int, h: int, w: int) -> tuple[int, int] | None:
        form_x = FORM_MARGIN_X if w - 2 * FORM_MARGIN_X >= 20 else 1
        form_w = w - 2 * form_x
        rows = len(LOGIN_FIELDS)
        gap = max(0, (h - 2 - 1 - rows * FIELD_HEIGHT) // rows)
        row = y + 1
        draw_centered(self.stdscr, row, form_x, form_w, LOGIN_TITLE, self.theme.attrs.heading)
        row += 1 + gap

        editor = self.ui.editor
        current = self.ui.focus.current
        cursor_at: tuple[int, int] | None = None
        for field in LOGIN_FIELDS:
            focused = field.name == current
            if field.ftype == "button":
                btn_w = max(len(field.label) + 4, form_w // 10)
                rect = draw_button(
                    self.stdscr,
                    self.theme,
                    row,
                    form_x + (form_w - btn_w) // 2,
                    btn_w,
                    field.label,
                    focused=focused,
                )
            else:
                rect = draw_input(
                    self.stdscr,
                    self.theme,
                    row,
                    form_x,
                    form_w,
                    field.label,
                    editor.display_value(field.name),
                    focused=focused,
                )
                if focused and self.ui.mode == EDITING:
                    cursor_at = text_cursor(rect, editor.cursor)
            self.ui.registry.register(field.name, rect)
            row += FIELD_HEIGHT + gap
        return cursor_at

    def _draw_loading(self, y: int, h: int, w: int) -> None:
        draw_centered(self.stdscr, y + h // 2, 0, w, f"Loading... {spinner(self.ui.spinner_tick)}", self.theme.attrs.heading)

    def _draw_main(self, y: int, h: int, w: int) -> None:
        lines = [
            f"Logged in as {self.status.user_id or '(unknown)'}",
            f"Device: {self.status.device_id or '-'}",
            f"Homeserver: {self.status.homeserver or '-'}",
            f"Joined rooms: {self.status.joined_rooms}",
        ]
        top = y + max(0, (h - len(lines)) // 2)
        for idx, line in enumerate(lines):
            attr = self.theme.attrs.heading if idx == 0 else self.theme.attrs.panel
            draw_centered(self.stdscr, top + idx, 0, w, line, attr)

    def _draw_footer(self, y: int, w: int) -> None:
        message, is_error = self.status.display_message
        if message:
            draw_centered(self.stdscr, y, 0, w, message, self.theme.attrs.error if is_error else self.theme.attrs.info)
        else:
            draw_centered(self.stdscr, y, 0, w, self.ui.status_line, self.theme.attrs.muted)
        if self.ui.screen != "login":
            keys = MAIN_HELP
        elif self.ui.mode == EDITING:
            keys = EDITING_HELP
        else:
            keys = COMMAND_HELP
        draw_centered(self.stdscr, y + 1, 0, w, keys, self.theme.attrs.muted)

    def _place_cursor(self, cursor_at: tuple[int, int] | None) -> None:
        try:
            if cursor_at is None:
                curses.curs_set(0)
                return
            curses.curs_set(1)
            self.stdscr.move(*cursor_at)
        except curses.error:
            pass

    # Input

    def _handle_key(self, key: object) -> None:
        if key == curses.KEY_MOUSE:
            self._handle_mouse()
            return
        symbol = normalize_key(key)
        if not self._form_visible():
            # Only quitting is meaningful without the form on screen.
            if lookup_action(COMMAND, symbol) == "quit":
                self.ui.running = False
            return

        before = self.ui.mode
        signal = self.ui.machine.handle(symbol)
        if self.ui.mode != before:
            self.logstore.append("debug", "input", f"mode {before} -> {self.ui.mode}", category="ui")
        if signal == SIGNAL_QUIT:
            self.ui.running = False
        elif signal == SIGNAL_ACTIVATE:
            self._activate_focus(self.ui.focus.current)

    def _handle_mouse(self) -> None:
        try:
            _, mx, my, _, _ = curses.getmouse()
        except curses.error:
            return
        if not self._form_visible() or self.ui.mode != COMMAND:
            return
        target = self.ui.registry.hit(my, mx)
        if target is None:
            return
        self.ui.machine.move_focus(target)
        if target == FOCUS_LOGIN:
            self._activate_focus(target)

    def _form_visible(self) -> bool:
        return self.ui.screen == "login" and not self.status.loading

    def _activate_focus(self, focus_id: str) -> None:
        field = FIELD_INDEX.get(focus_id)
        if field is None or field.ftype != "button":
            return
        if focus_id == FOCUS_LOGIN:
            editor = self.ui.editor
            server = editor.value(FOCUS_SERVER)
            username = editor.value(FOCUS_USERNAME)
            self.logstore.append("info", "login", f"login requested for {username or '?'}@{server or '?'}", category="ui")
            self._start_session(self.runner.login, server, username, editor.value(FOCUS_PASSWORD))

    # Session worker

    def _start_session(self, target: Any, *args: str) -> None:
        if self.session_thread and self.session_thread.is_alive():
            self.ui.status_line = "Login already in progress."
            return

        def emit(evt: dict[str, Any]) -> None:
            self.events.put(evt)

        def worker() -> None:
            target(*args, emit)

        self.session_thread = threading.Thread(target=worker, daemon=True)
        self.session_thread.start()

    def _drain_events(self) -> None:
        while True:
            try:
                evt = self.events.get_nowait()
            except queue.Empty:
                break
            apply_session_event(self.status, evt)
            if evt.get("type") == "connected" and self.status.connected:
                self.ui.screen = "main"
                self.ui.status_line = "Connected."


def _main(stdscr: curses.window, paths: AppPaths, logstore: LogStore, restore: bool) -> None:
    app = MatrixTUI(stdscr, paths, logstore)
    app.preload(restore=restore)
    app.run()


def run_logout(paths: AppPaths, logstore: LogStore) -> int:
    saved, err = SavedSession.load(paths.save_file)
    if err:
        print(err)
    result = SessionRunner(paths.save_file, logstore).logout(saved)
    for error in result.errors:
        print(f"[WARN] {error.message} {error.suggested_fix}".strip())
    print(f"Saved session removed: {paths.save_file}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    paths = detect_paths()
    logstore = LogStore(log_dir=paths.log_dir)
    if "--logout" in args:
        return run_logout(paths, logstore)
    os.environ.setdefault("ESCDELAY", "25")
    try:
        curses.wrapper(_main, paths, logstore, "--no-restore" not in args)
    except KeyboardInterrupt:
        pass
    logstore.append("info", "shutdown", "bye", category="system")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
