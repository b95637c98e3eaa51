from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from .editor import TextEditor
from .focus import FocusState
from .geometry import GeometryRegistry
from .modes import InputMachine

Screen = Literal["login", "main"]


@dataclass
class SessionStatus:
    info_message: str = ""
    error_message: str = ""
    connected: bool = False
    loading: bool = False
    user_id: str = ""
    device_id: str = ""
    homeserver: str = ""
    joined_rooms: int = 0

    @property
    def display_message(self) -> tuple[str, bool]:
        """Text for the status line and whether it is an error."""
        if self.error_message:
            return self.error_message, True
        return self.info_message, False


@dataclass
class UIState:
    screen: Screen = "login"
    status_line: str = "Ready."
    spinner_tick: int = 0
    running: bool = True
    focus: FocusState = field(default_factory=FocusState)
    registry: GeometryRegistry = field(default_factory=GeometryRegistry)
    editor: TextEditor = field(init=False)
    machine: InputMachine = field(init=False)

    def __post_init__(self) -> None:
        self.editor = TextEditor(self.focus)
        self.machine = InputMachine(self.focus, self.editor, self.registry)

    @property
    def mode(self) -> str:
        return self.machine.mode


def apply_session_event(status: SessionStatus, event: dict[str, Any]) -> None:
    etype = str(event.get("type", ""))

    if etype == "loading":
        status.loading = bool(event.get("value", False))
        return

    if etype == "info":
        status.info_message = str(event.get("message", ""))
        return

    if etype == "error":
        status.error_message = str(event.get("message", ""))
        return

    if etype == "clear_error":
        status.error_message = ""
        return

    if etype == "logged_in":
        status.user_id = str(event.get("user_id", status.user_id))
        status.device_id = str(event.get("device_id", status.device_id))
        status.homeserver = str(event.get("homeserver", status.homeserver))
        return

    if etype == "synced":
        try:
            status.joined_rooms = max(0, int(str(event.get("joined_rooms", status.joined_rooms))))
        except ValueError:
            pass
        return

    if etype == "connected":
        status.connected = bool(event.get("value", True))
        return

