from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path


@dataclass
class SavedSession:
    token: str = ""
    username: str = ""
    server: str = ""

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    @classmethod
    def load(cls, path: Path) -> tuple["SavedSession", str]:
        """Read the save file. Returns the session and an error message ("" on success)."""
        if not path.exists():
            return cls(), ""
        try:
            with path.open("r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            return cls(), f"Failed to load savings: {exc}"
        if not isinstance(raw, dict):
            return cls(), "Failed to load savings: expected a JSON object"
        return (
            cls(
                token=str(raw.get("token", "")),
                username=str(raw.get("username", "")),
                server=str(raw.get("server", "")),
            ),
            "",
        )

    def save(self, path: Path) -> str:
        """Write the save file. Returns an error message ("" on success)."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as fh:
                json.dump(asdict(self), fh, indent=2)
                fh.write("\n")
            path.chmod(0o600)
        except OSError as exc:
            return f"Error creating save file: {exc}"
        return ""

    @staticmethod
    def clear(path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
