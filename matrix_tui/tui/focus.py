from __future__ import annotations

from dataclasses import dataclass

from .geometry import GeometryRegistry

FOCUS_SERVER = "server"
FOCUS_USERNAME = "username"
FOCUS_PASSWORD = "password"
FOCUS_LOGIN = "login"

# Traversal order of the login form. The first entry is the default focus.
FOCUS_ORDER: tuple[str, ...] = (FOCUS_SERVER, FOCUS_USERNAME, FOCUS_PASSWORD, FOCUS_LOGIN)

DIRECTIONS = ("up", "down", "left", "right")


@dataclass
class FocusState:
    items: tuple[str, ...] = FOCUS_ORDER
    index: int = 0

    @property
    def current(self) -> str:
        if not self.items:
            return ""
        self.index = max(0, min(self.index, len(self.items) - 1))
        return self.items[self.index]

    def set(self, focus_id: str | None) -> bool:
        """Make focus_id current. Unknown ids and None leave focus unchanged."""
        if not focus_id or focus_id not in self.items:
            return False
        if focus_id == self.current:
            return False
        self.index = self.items.index(focus_id)
        return True


def _distance(current_x: int, current_y: int, x: int, y: int, direction: str) -> int:
    if direction == "left":
        return current_x - x
    if direction == "right":
        return x - current_x
    if direction == "up":
        return current_y - y
    if direction == "down":
        return y - current_y
    raise ValueError(f"unknown direction: {direction!r}")


def nearest(current: str, direction: str, registry: GeometryRegistry) -> str | None:
    """Closest region strictly in front of current along the direction's axis.

    Distance is measured between rectangle origins on one axis only. Ties go
    to the region registered first. Returns None when current was not drawn
    this frame or nothing lies in that direction.
    """
    if direction not in DIRECTIONS:
        raise ValueError(f"unknown direction: {direction!r}")
    origin = registry.lookup(current)
    if origin is None:
        return None

    best: str | None = None
    best_distance = 0
    for focus_id, rect in registry.items():
        if focus_id == current:
            continue
        distance = _distance(origin.x, origin.y, rect.x, rect.y, direction)
        if distance <= 0:
            continue
        if best is None or distance < best_distance:
            best = focus_id
            best_distance = distance
    return best


def top_left(registry: GeometryRegistry) -> str | None:
    """Wrap-around target for Tab.

    Two running minima share one candidate: a region with a strictly smaller x
    takes it, and a region with a strictly smaller y takes it too, so the
    answer is whichever update happened last in registration order. On a single
    column of fields this is the top field; on other layouts it can differ
    from true_top_left().
    """
    candidate: str | None = None
    min_x: int | None = None
    min_y: int | None = None
    for focus_id, rect in registry.items():
        if min_x is None or rect.x < min_x:
            min_x = rect.x
            candidate = focus_id
        if min_y is None or rect.y < min_y:
            min_y = rect.y
            candidate = focus_id
    return candidate


def true_top_left(registry: GeometryRegistry) -> str | None:
    """Smallest x, then smallest y, then registration order."""
    candidate: str | None = None
    best: tuple[int, int] | None = None
    for focus_id, rect in registry.items():
        key = (rect.x, rect.y)
        if best is None or key < best:
            best = key
            candidate = focus_id
    return candidate


def tab_target(current: str, registry: GeometryRegistry) -> str | None:
    return nearest(current, "down", registry) or nearest(current, "right", registry) or top_left(registry)
