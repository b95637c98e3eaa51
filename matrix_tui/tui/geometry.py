from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Rect:
    y: int
    x: int
    h: int
    w: int

    def contains(self, y: int, x: int) -> bool:
        return self.y <= y < self.y + self.h and self.x <= x < self.x + self.w


class GeometryRegistry:
    """Screen rectangles of the focusable regions drawn in the last frame.

    The render pass calls clear() once and then register() for every region it
    actually drew, so a region hidden this frame never keeps an old rectangle.
    Iteration follows registration order.
    """

    def __init__(self) -> None:
        self._rects: dict[str, Rect] = {}

    def clear(self) -> None:
        self._rects.clear()

    def register(self, focus_id: str, rect: Rect) -> None:
        self._rects[focus_id] = rect

    def lookup(self, focus_id: str) -> Rect | None:
        return self._rects.get(focus_id)

    def items(self) -> Iterator[tuple[str, Rect]]:
        return iter(list(self._rects.items()))

    def hit(self, y: int, x: int) -> str | None:
        for focus_id, rect in self._rects.items():
            if rect.contains(y, x):
                return focus_id
        return None

    def __contains__(self, focus_id: object) -> bool:
        return focus_id in self._rects

    def __len__(self) -> int:
        return len(self._rects)
