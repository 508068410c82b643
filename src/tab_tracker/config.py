"""Configuration models and helpers for the tab tracker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


DEFAULT_STORAGE_KEY = "tabActivity"


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration for the activity tracker."""

    tick_interval: timedelta = timedelta(seconds=1)
    drain_timeout: timedelta = timedelta(seconds=5)
    storage_key: str = DEFAULT_STORAGE_KEY

    @classmethod
    def from_intervals(
        cls,
        tick_seconds: float,
        drain_seconds: float | None = None,
        storage_key: str | None = None,
    ) -> "TrackerSettings":
        drain = drain_seconds if drain_seconds is not None else max(tick_seconds * 5, 5.0)
        return cls(
            tick_interval=timedelta(seconds=tick_seconds),
            drain_timeout=timedelta(seconds=drain),
            storage_key=storage_key or DEFAULT_STORAGE_KEY,
        )
