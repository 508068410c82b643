"""Event source fed by a browser extension reporting its tabs and windows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .events import (
    EventListener,
    FocusGained,
    FocusLost,
    ListenerRegistry,
    Subscription,
    TabActivated,
)
from .normalization import normalize_address

logger = logging.getLogger(__name__)

# Window id the browser reports when none of its windows has focus.
WINDOW_ID_NONE = -1


@dataclass(slots=True)
class TabInfo:
    tab_id: int
    window_id: int
    url: Optional[str] = None


class BridgeEventSource:
    """Mirrors the browser's tab table and forwards activation changes."""

    def __init__(self) -> None:
        self._listeners = ListenerRegistry()
        self._tabs: dict[int, TabInfo] = {}
        self._active_by_window: dict[int, int] = {}
        self._focused_window: Optional[int] = None
        self._last_window: Optional[int] = None

    @property
    def focused_window(self) -> Optional[int]:
        return self._focused_window

    def subscribe(self, listener: EventListener) -> Subscription:
        return self._listeners.add(listener)

    def report_tab_updated(self, tab_id: int, window_id: int, url: Optional[str]) -> None:
        """Record a tab's URL without treating it as an activation."""
        self._tabs[tab_id] = TabInfo(tab_id=tab_id, window_id=window_id, url=url)

    def report_tab_activated(
        self, tab_id: int, window_id: int, url: Optional[str] = None
    ) -> None:
        known = self._tabs.get(tab_id)
        if url is None and known is not None:
            url = known.url
        self._tabs[tab_id] = TabInfo(tab_id=tab_id, window_id=window_id, url=url)
        self._active_by_window[window_id] = tab_id
        self._last_window = window_id
        logger.debug("Tab %s activated in window %s", tab_id, window_id)
        self._listeners.dispatch(TabActivated(tab_id=tab_id, window_id=window_id))

    def report_tab_removed(self, tab_id: int) -> None:
        tab = self._tabs.pop(tab_id, None)
        if tab is not None and self._active_by_window.get(tab.window_id) == tab_id:
            del self._active_by_window[tab.window_id]

    def report_focus_changed(self, window_id: int) -> None:
        if window_id == WINDOW_ID_NONE:
            self._focused_window = None
            logger.debug("Browser lost focus")
            self._listeners.dispatch(FocusLost())
            return
        self._focused_window = window_id
        self._last_window = window_id
        logger.debug("Window %s gained focus", window_id)
        self._listeners.dispatch(FocusGained(window_id=window_id))

    async def resolve_tab_address(self, tab_id: int) -> Optional[str]:
        tab = self._tabs.get(tab_id)
        if tab is None:
            return None
        return normalize_address(tab.url)

    async def resolve_current_address(
        self, window_id: Optional[int] = None
    ) -> Optional[str]:
        if window_id is None:
            window_id = self._focused_window if self._focused_window is not None else self._last_window
        if window_id is None:
            return None
        tab_id = self._active_by_window.get(window_id)
        if tab_id is None:
            return None
        return await self.resolve_tab_address(tab_id)
