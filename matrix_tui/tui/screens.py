from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .focus import FOCUS_LOGIN, FOCUS_PASSWORD, FOCUS_SERVER, FOCUS_USERNAME

FieldType = Literal["text", "secret", "button"]


@dataclass(frozen=True)
class FieldDef:
    name: str
    label: str
    ftype: FieldType


LOGIN_FIELDS: tuple[FieldDef, ...] = (
    FieldDef(FOCUS_SERVER, "Server Address", "text"),
    FieldDef(FOCUS_USERNAME, "Username", "text"),
    FieldDef(FOCUS_PASSWORD, "Password", "secret"),
    FieldDef(FOCUS_LOGIN, "Login", "button"),
)

FIELD_INDEX: dict[str, FieldDef] = {f.name: f for f in LOGIN_FIELDS}

LOGIN_TITLE = "Login to your matrix account"

COMMAND_HELP = "Press <q> to exit, <i> to start editing, <Enter> to select, arrows/Tab to control focus."
EDITING_HELP = "Press <Esc> to stop editing, <Enter> to confirm, Ctrl+U to clear."
MAIN_HELP = "Press <q> to exit."
