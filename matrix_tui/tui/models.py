from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

SessionOutcome = Literal["ok", "failed"]


@dataclass(frozen=True)
class AppPaths:
    config_dir: Path
    save_file: Path
    log_dir: Path | None = None


@dataclass
class SessionError:
    code: str
    message: str
    step: str
    suggested_fix: str = ""


@dataclass
class SessionResult:
    status: SessionOutcome
    user_id: str = ""
    device_id: str = ""
    errors: list[SessionError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "ok"
