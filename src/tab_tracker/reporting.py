"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from pathlib import Path

from .config import DEFAULT_STORAGE_KEY
from .models import ActivitySummary, sorted_entries
from .storage import SqliteSummaryStore


class SummaryPrinter:
    """Render the stored activity summary in the console."""

    def __init__(self, db_path: Path, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.db_path = Path(db_path)
        self.key = key

    def print_summary(self, limit: int | None = None) -> None:
        store = SqliteSummaryStore(self.db_path, key=self.key)
        summary = store.load()
        for line in render_summary(summary, limit=limit):
            print(line)


def render_summary(summary: ActivitySummary, limit: int | None = None) -> list[str]:
    if not summary:
        return ["No activity logged yet. Start browsing!"]

    entries = sorted_entries(summary)
    total = sum(entry.duration_ms for entry in entries)
    lines = [
        "Activity summary",
        "-" * 40,
        f"Tracked time: {format_duration(total)} across {len(entries)} addresses",
        "",
    ]
    for entry in entries[:limit]:
        lines.append(f"  {entry.address[:60]:<60} {format_duration(entry.duration_ms)}")
    return lines


def format_duration(ms: int) -> str:
    """Render milliseconds as ``1h 2m 3s``, dropping empty components."""
    seconds = max(0, int(ms)) // 1000
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)
