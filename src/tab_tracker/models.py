"""Domain models for tracked tab activity."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

# Accumulated milliseconds keyed by normalized address.
ActivitySummary = Dict[str, int]

NO_ACTIVE_ADDRESS = "No active tab"
UNFOCUSED_ADDRESS = "No active tab (window unfocused)"
UNKNOWN_ADDRESS = "Unknown URL"


class TrackerState(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"


@dataclass(slots=True, frozen=True)
class ActivationRecord:
    """The address currently being timed and when it became active."""

    address: str
    activated_at: int

    def elapsed(self, now: int) -> int:
        return max(0, now - self.activated_at)


@dataclass(slots=True, frozen=True)
class SummaryEntry:
    address: str
    duration_ms: int


@dataclass(slots=True)
class DisplayState:
    """Everything the presentation layer needs to render the popup."""

    current_address: Optional[str]
    live_ms: int
    entries: list[SummaryEntry] = field(default_factory=list)
    unfocused: bool = False

    @property
    def label(self) -> str:
        if self.current_address is not None:
            return self.current_address
        return UNFOCUSED_ADDRESS if self.unfocused else NO_ACTIVE_ADDRESS

    @property
    def total_ms(self) -> int:
        return sum(entry.duration_ms for entry in self.entries)


def sorted_entries(summary: ActivitySummary) -> list[SummaryEntry]:
    """Return summary entries longest first, ties broken by address."""
    ordered = sorted(summary.items(), key=lambda item: (-item[1], item[0]))
    return [SummaryEntry(address=address, duration_ms=ms) for address, ms in ordered]
