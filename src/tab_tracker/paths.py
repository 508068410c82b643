"""Where the tracker keeps its database and log file."""

from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs


_DIRS = PlatformDirs(appname="TabTracker", appauthor=False)


def _ensure(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    return _ensure(Path(_DIRS.user_data_path))


def get_db_path() -> Path:
    """SQLite file holding the activity summary record."""
    return get_data_dir() / "tab_activity.sqlite3"


def get_log_path() -> Path:
    """Log file appended to by ``tab-tracker serve``; lives in the platform log dir."""
    return _ensure(Path(_DIRS.user_log_path)) / "tracker.log"
