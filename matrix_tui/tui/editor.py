from __future__ import annotations

from .focus import FOCUS_PASSWORD, FocusState

MASK_GLYPH = "*"
SENSITIVE_FIELDS = frozenset({FOCUS_PASSWORD})


def mask(text: str) -> str:
    return MASK_GLYPH * len(text)


class TextEditor:
    """Per-field text buffers with one cursor shared by the focused field.

    The cursor is a character offset into the focused field's text and is
    kept within [0, len(text)].
    """

    def __init__(self, focus: FocusState) -> None:
        self.focus = focus
        self.buffers: dict[str, str] = {}
        self.cursor = 0

    def value(self, focus_id: str) -> str:
        return self.buffers.get(focus_id, "")

    def current_value(self) -> str:
        return self.value(self.focus.current)

    def display_value(self, focus_id: str) -> str:
        text = self.value(focus_id)
        if focus_id in SENSITIVE_FIELDS:
            return mask(text)
        return text

    def set_value(self, focus_id: str, text: str) -> None:
        if text:
            self.buffers[focus_id] = text
        else:
            self.buffers.pop(focus_id, None)
        if focus_id == self.focus.current:
            self.cursor = self._clamp(self.cursor)

    def enter_char(self, ch: str) -> None:
        if len(ch) != 1:
            raise ValueError(f"expected a single character, got {ch!r}")
        text = self.current_value()
        cursor = self._clamp(self.cursor)
        self.buffers[self.focus.current] = text[:cursor] + ch + text[cursor:]
        self.move_cursor_right()

    def delete_char(self) -> None:
        if self.cursor == 0:
            return
        text = self.current_value()
        cursor = self._clamp(self.cursor)
        self.buffers[self.focus.current] = text[: cursor - 1] + text[cursor:]
        self.move_cursor_left()

    def move_cursor_left(self) -> None:
        self.cursor = self._clamp(self.cursor - 1)

    def move_cursor_right(self) -> None:
        self.cursor = self._clamp(self.cursor + 1)

    def move_cursor_rightest(self) -> None:
        self.cursor = len(self.current_value())

    def reset_cursor(self) -> None:
        self.cursor = 0

    def clear_current_content(self) -> None:
        self.buffers.pop(self.focus.current, None)
        self.reset_cursor()

    def _clamp(self, pos: int) -> int:
        return max(0, min(pos, len(self.current_value())))
