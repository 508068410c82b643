"""Activity tracker: attributes focused browser time to tab addresses."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Awaitable, Callable, Optional

from .config import TrackerSettings
from .events import EventSource, FocusGained, FocusLost, HostEvent, Subscription, TabActivated
from .models import (
    ActivationRecord,
    ActivitySummary,
    DisplayState,
    TrackerState,
    sorted_entries,
)
from .storage import SummaryStore

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
DisplayListener = Callable[[DisplayState], None]


def monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


class ActivityTracker:
    """Tracks which address is active and accumulates time spent on each.

    Host events are stamped with the clock when they arrive, queued, and
    handled one at a time by a single worker task, so a slow address lookup
    can neither let a later event complete first nor shift the moment a
    switch is attributed to. Accumulated time only grows in :meth:`_flush`;
    the live duration shown for the current address is derived separately on
    every tick. Snapshots of the summary are written by one saver task off the
    event loop, newest snapshot wins.
    """

    def __init__(
        self,
        source: EventSource,
        store: SummaryStore,
        settings: Optional[TrackerSettings] = None,
        *,
        clock: Clock = monotonic_ms,
    ) -> None:
        self.settings = settings or TrackerSettings()
        self._source = source
        self._store = store
        self._clock = clock
        self._record: Optional[ActivationRecord] = None
        self._summary: ActivitySummary = {}
        self._live_ms = 0
        self._unfocused = False
        self._listeners: list[DisplayListener] = []
        self._queue: Optional[asyncio.Queue[tuple[HostEvent, int]]] = None
        self._subscription: Optional[Subscription] = None
        self._worker: Optional[asyncio.Task[None]] = None
        self._ticker: Optional[asyncio.Task[None]] = None
        self._saver: Optional[asyncio.Task[None]] = None
        self._save_wanted: Optional[asyncio.Event] = None
        self._pending_save: Optional[ActivitySummary] = None
        self._closing = False
        self._stopped = False

    async def __aenter__(self) -> "ActivityTracker":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    @property
    def state(self) -> TrackerState:
        return TrackerState.TRACKING if self._record else TrackerState.IDLE

    @property
    def current(self) -> Optional[ActivationRecord]:
        return self._record

    @property
    def live_ms(self) -> int:
        return self._live_ms

    @property
    def summary(self) -> ActivitySummary:
        return dict(self._summary)

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._stopped

    def add_listener(self, listener: DisplayListener) -> None:
        self._listeners.append(listener)

    def snapshot(self) -> DisplayState:
        return DisplayState(
            current_address=self._record.address if self._record else None,
            live_ms=self._live_ms,
            entries=sorted_entries(self._summary),
            unfocused=self._unfocused,
        )

    async def start(self) -> None:
        if self._worker is not None or self._stopped:
            raise RuntimeError("Tracker can only be started once.")
        self._summary = await self._load_summary()
        self._save_wanted = asyncio.Event()
        self._saver = asyncio.create_task(self._run_saver(self._save_wanted))
        queue: asyncio.Queue[tuple[HostEvent, int]] = asyncio.Queue()
        self._queue = queue

        try:
            self._subscription = self._source.subscribe(self._enqueue)
        except Exception:
            logger.exception("Event source unavailable; showing no active tab.")
        else:
            address = await self._resolve(self._source.resolve_current_address)
            if address is not None:
                self._activate(address, self._clock())

        self._worker = asyncio.create_task(self._process_events(queue))
        self._ticker = asyncio.create_task(self._run_ticker())
        logger.info("Tracker started with %d stored addresses.", len(self._summary))
        self._notify()

    async def drain(self) -> None:
        """Wait until every event received so far has been handled."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

        if self._worker is not None:
            try:
                await asyncio.wait_for(
                    self.drain(), self.settings.drain_timeout.total_seconds()
                )
            except asyncio.TimeoutError:
                logger.warning("Gave up waiting for queued events during shutdown.")

        self._end_activation(self._clock())

        for task in (self._ticker, self._worker):
            if task is None:
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._ticker = None
        self._worker = None
        await self._close_saver()
        logger.info("Tracker stopped.")

    def tick(self) -> None:
        if self._record is None:
            return
        self._live_ms = self._record.elapsed(self._clock())
        self._notify()

    def clear(self) -> None:
        """Forget all accumulated time; an open activation restarts now."""
        self._summary = {}
        if self._record is not None:
            self._activate(self._record.address, self._clock())
        self._persist()
        logger.info("Activity summary cleared.")
        self._notify()

    def _enqueue(self, event: HostEvent) -> None:
        if self._stopped or self._queue is None:
            logger.debug("Ignoring %r received after shutdown.", event)
            return
        self._queue.put_nowait((event, self._clock()))

    async def _process_events(self, queue: asyncio.Queue[tuple[HostEvent, int]]) -> None:
        while True:
            event, arrived_at = await queue.get()
            try:
                await self._handle(event, arrived_at)
            except Exception:
                logger.exception("Failed to handle %r", event)
            finally:
                queue.task_done()

    async def _handle(self, event: HostEvent, arrived_at: int) -> None:
        if isinstance(event, TabActivated):
            address = await self._resolve(self._source.resolve_tab_address, event.tab_id)
            if address is None:
                logger.warning(
                    "Could not resolve address for tab %s; keeping current state.",
                    event.tab_id,
                )
                return
            self._switch_to(address, arrived_at)
        elif isinstance(event, FocusLost):
            self._end_activation(arrived_at)
            self._unfocused = True
            self._notify()
        elif isinstance(event, FocusGained):
            address = await self._resolve(
                self._source.resolve_current_address, event.window_id
            )
            if address is None:
                logger.debug("Focus gained without a resolvable tab.")
                if self._unfocused:
                    self._unfocused = False
                    self._notify()
                return
            self._switch_to(address, arrived_at)

    async def _resolve(
        self, lookup: Callable[..., Awaitable[Optional[str]]], *args: object
    ) -> Optional[str]:
        try:
            return await lookup(*args)
        except Exception:
            name = getattr(lookup, "__name__", "lookup")
            logger.exception("Address lookup %s%r failed.", name, args)
            return None

    def _switch_to(self, address: str, now: int) -> None:
        self._end_activation(now)
        self._activate(address, now)
        self._notify()

    def _activate(self, address: str, now: int) -> None:
        self._record = ActivationRecord(address=address, activated_at=now)
        self._live_ms = 0
        self._unfocused = False
        logger.debug("Now timing %s", address)

    def _end_activation(self, now: int) -> None:
        record, self._record = self._record, None
        self._live_ms = 0
        if record is not None:
            logger.debug("Stopped timing %s", record.address)
            self._flush(record.address, record.elapsed(now))

    def _flush(self, address: str, elapsed_ms: int) -> None:
        self._summary[address] = self._summary.get(address, 0) + elapsed_ms
        self._persist()

    def _persist(self) -> None:
        snapshot = dict(self._summary)
        if self._save_wanted is None or self._closing:
            # No saver running (before start or after stop): write in place.
            self._write(snapshot)
            return
        self._pending_save = snapshot
        self._save_wanted.set()

    def _write(self, snapshot: ActivitySummary) -> None:
        try:
            self._store.save(snapshot)
        except Exception:
            logger.exception("Failed to persist activity summary; keeping it in memory.")

    async def _run_saver(self, wanted: asyncio.Event) -> None:
        while True:
            await wanted.wait()
            wanted.clear()
            snapshot, self._pending_save = self._pending_save, None
            if snapshot is not None:
                await asyncio.to_thread(self._write, snapshot)
            if self._closing and self._pending_save is None:
                return

    async def _close_saver(self) -> None:
        saver, wanted = self._saver, self._save_wanted
        if saver is None or wanted is None:
            return
        self._closing = True
        wanted.set()
        try:
            await asyncio.wait_for(saver, self.settings.drain_timeout.total_seconds())
        except asyncio.TimeoutError:
            logger.warning("Gave up waiting for the last summary write during shutdown.")
        self._saver = None
        self._save_wanted = None

    async def _load_summary(self) -> ActivitySummary:
        try:
            return dict(await asyncio.to_thread(self._store.load))
        except Exception:
            logger.exception("Failed to load activity summary; starting empty.")
            return {}

    async def _run_ticker(self) -> None:
        interval = self.settings.tick_interval.total_seconds()
        while True:
            await asyncio.sleep(interval)
            self.tick()

    def _notify(self) -> None:
        if not self._listeners:
            return
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Display listener failed.")
