"""Host events consumed by the tracker and the event source contract."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Union

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TabActivated:
    tab_id: int
    window_id: Optional[int] = None


@dataclass(slots=True, frozen=True)
class FocusLost:
    pass


@dataclass(slots=True, frozen=True)
class FocusGained:
    window_id: Optional[int] = None


HostEvent = Union[TabActivated, FocusLost, FocusGained]
EventListener = Callable[[HostEvent], None]


class Subscription:
    """Handle returned by an event source; cancelling it detaches the listener."""

    def __init__(self, unsubscribe: Callable[[], None]) -> None:
        self._unsubscribe: Optional[Callable[[], None]] = unsubscribe

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def cancel(self) -> None:
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()


class EventSource(Protocol):
    """Anything that reports tab and window changes and resolves addresses."""

    def subscribe(self, listener: EventListener) -> Subscription: ...

    async def resolve_current_address(
        self, window_id: Optional[int] = None
    ) -> Optional[str]: ...

    async def resolve_tab_address(self, tab_id: int) -> Optional[str]: ...


class ListenerRegistry:
    """Fan-out helper for event sources with any number of subscribers."""

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def add(self, listener: EventListener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(lambda: self._remove(listener))

    def dispatch(self, event: HostEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener failed for %r", event)

    def _remove(self, listener: EventListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass
