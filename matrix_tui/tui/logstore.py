from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path

LEVELS = ("debug", "info", "warn", "error")
CATEGORIES = ("system", "network", "auth", "ui")


@dataclass(frozen=True)
class LogEntry:
    ts: float
    level: str
    step: str
    category: str
    message: str

    def format_line(self) -> str:
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(self.ts))
        return f"{stamp} {self.level.upper():<5} {self.category}/{self.step or '-'}: {self.message}"


def _probe_writable(directory: Path) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    probe = directory / ".write-test"
    probe.write_text("ok\n", encoding="utf-8")
    probe.unlink()


def pick_log_dir(preferred: Path | None) -> tuple[Path, str]:
    """Return a writable log directory and a note explaining any fallback."""
    fallback = Path.home() / ".cache" / "matrix-tui" / "logs"
    note = ""
    if preferred is not None and preferred != fallback:
        try:
            _probe_writable(preferred)
            return preferred, ""
        except OSError as exc:
            note = f"{preferred} unusable ({exc}), using {fallback}"
    _probe_writable(fallback)
    return fallback, note


class LogStore:
    """Recent log entries kept in memory and mirrored to a per-run file.

    Both the UI thread and the session worker append, so writes go through
    a lock. Unknown categories are filed under "system".
    """

    def __init__(self, max_entries: int = 2000, log_dir: Path | None = None) -> None:
        self.entries: deque[LogEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()
        self.log_dir, note = pick_log_dir(log_dir)
        self.log_path = self.log_dir / time.strftime("tui-%Y%m%d-%H%M%S.log", time.localtime())
        self.append("info", "startup", f"logging to {self.log_path}" + (f" ({note})" if note else ""))

    def append(
        self,
        level: str,
        step: str,
        message: str,
        ts: float | None = None,
        category: str = "system",
    ) -> LogEntry:
        if level not in LEVELS:
            raise ValueError(f"unknown log level: {level!r}")
        if category not in CATEGORIES:
            category = "system"
        entry = LogEntry(ts=ts or time.time(), level=level, step=step, category=category, message=message)
        with self._lock:
            self.entries.append(entry)
            with self.log_path.open("a", encoding="utf-8") as fh:
                fh.write(entry.format_line() + "\n")
        return entry
