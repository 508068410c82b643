import asyncio
import time
from typing import Optional

import pytest

from tab_tracker.events import HostEvent, ListenerRegistry, Subscription


class FakeClock:
    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now


class FakeEventSource:
    """Scriptable event source: tab ids map to addresses, lookups can fail or lag."""

    def __init__(self):
        self.listeners = ListenerRegistry()
        self.tabs: dict[int, str] = {}
        self.current: Optional[str] = None
        self.failing_tabs: set[int] = set()
        self.delays: dict[int, float] = {}
        self.unavailable = False
        self.on_lookup = None

    def subscribe(self, listener) -> Subscription:
        if self.unavailable:
            raise ConnectionError("host API unavailable")
        return self.listeners.add(listener)

    def emit(self, event: HostEvent) -> None:
        self.listeners.dispatch(event)

    async def resolve_current_address(self, window_id=None):
        return self.current

    async def resolve_tab_address(self, tab_id):
        if self.on_lookup is not None:
            self.on_lookup(tab_id)
        if tab_id in self.delays:
            await asyncio.sleep(self.delays[tab_id])
        if tab_id in self.failing_tabs:
            raise LookupError(f"no tab {tab_id}")
        return self.tabs.get(tab_id)


class FakeStore:
    def __init__(self, initial=None):
        self.data = dict(initial) if initial is not None else None
        self.saves: list[dict] = []
        self.fail_load = False
        self.fail_save = False
        self.save_delay = 0.0

    def load(self):
        if self.fail_load:
            raise OSError("disk unavailable")
        return dict(self.data or {})

    def save(self, summary):
        if self.save_delay:
            time.sleep(self.save_delay)
        if self.fail_save:
            raise OSError("disk full")
        self.saves.append(dict(summary))
        self.data = dict(summary)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def source():
    return FakeEventSource()


@pytest.fixture
def store():
    return FakeStore()
