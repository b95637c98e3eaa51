from __future__ import annotations

import os
import sys
from pathlib import Path

from .models import AppPaths

BUNDLE_ID = "com.iewnfod.matrix.tui"
SAVE_FILE_NAME = "saves.json"


def default_config_dir() -> Path:
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / BUNDLE_ID
    return home / ".config" / BUNDLE_ID


def detect_paths() -> AppPaths:
    # 1) Explicit override for the save directory.
    raw_config = os.environ.get("MATRIX_TUI_CONFIG_DIR", "").strip()
    config_dir = Path(raw_config).expanduser() if raw_config else default_config_dir()

    # 2) Log directory override; LogStore picks its own fallback otherwise.
    raw_log = os.environ.get("MATRIX_TUI_LOG_DIR", "").strip()
    log_dir = Path(raw_log).expanduser() if raw_log else None

    return AppPaths(
        config_dir=config_dir,
        save_file=config_dir / SAVE_FILE_NAME,
        log_dir=log_dir,
    )
