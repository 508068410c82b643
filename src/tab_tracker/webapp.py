"""FastAPI application that hosts the tracker and exposes its state."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from .bridge import WINDOW_ID_NONE, BridgeEventSource
from .config import TrackerSettings
from .models import DisplayState
from .paths import get_db_path
from .reporting import format_duration
from .storage import SqliteSummaryStore
from .tracker import ActivityTracker

logger = logging.getLogger(__name__)


class TabActivatedPayload(BaseModel):
    tab_id: int = Field(ge=0)
    window_id: int = Field(ge=0)
    url: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class TabUpdatedPayload(BaseModel):
    tab_id: int = Field(ge=0)
    window_id: int = Field(ge=0)
    url: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class TabRemovedPayload(BaseModel):
    tab_id: int = Field(ge=0)

    model_config = ConfigDict(extra="forbid")


class FocusChangedPayload(BaseModel):
    window_id: int = Field(ge=WINDOW_ID_NONE)

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    db_path: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_db_path = Path(db_path or get_db_path())
    resolved_settings = settings or TrackerSettings()
    source = BridgeEventSource()
    store = SqliteSummaryStore(resolved_db_path, key=resolved_settings.storage_key)
    tracker = ActivityTracker(source, store, resolved_settings)

    app = FastAPI(title="Tab Tracker", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.db_path = resolved_db_path
    app.state.source = source
    app.state.tracker = tracker

    @app.on_event("startup")
    async def _startup() -> None:
        await tracker.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await tracker.stop()

    # Handlers are coroutines so they run on the loop that owns the tracker.

    @app.get("/api/status")
    async def status(request: Request) -> Dict[str, Any]:
        return {
            "tracker_running": request.app.state.tracker.running,
            "tracker_state": request.app.state.tracker.state.value,
            "database_path": str(request.app.state.db_path),
            "tick_seconds": resolved_settings.tick_interval.total_seconds(),
        }

    @app.get("/api/state")
    async def state(request: Request) -> Dict[str, Any]:
        return _display_payload(request.app.state.tracker.snapshot())

    @app.post("/api/clear")
    async def clear(request: Request) -> Dict[str, Any]:
        running_tracker = _require_running(request)
        running_tracker.clear()
        return _display_payload(running_tracker.snapshot())

    @app.post("/api/events/tab-activated", status_code=202)
    async def tab_activated(payload: TabActivatedPayload, request: Request) -> Dict[str, Any]:
        _require_running(request)
        request.app.state.source.report_tab_activated(
            payload.tab_id, payload.window_id, payload.url
        )
        return {"accepted": True}

    @app.post("/api/events/tab-updated", status_code=202)
    async def tab_updated(payload: TabUpdatedPayload, request: Request) -> Dict[str, Any]:
        request.app.state.source.report_tab_updated(
            payload.tab_id, payload.window_id, payload.url
        )
        return {"accepted": True}

    @app.post("/api/events/tab-removed", status_code=202)
    async def tab_removed(payload: TabRemovedPayload, request: Request) -> Dict[str, Any]:
        request.app.state.source.report_tab_removed(payload.tab_id)
        return {"accepted": True}

    @app.post("/api/events/focus-changed", status_code=202)
    async def focus_changed(payload: FocusChangedPayload, request: Request) -> Dict[str, Any]:
        _require_running(request)
        request.app.state.source.report_focus_changed(payload.window_id)
        return {"accepted": True}

    return app


def _require_running(request: Request) -> ActivityTracker:
    tracker: ActivityTracker = request.app.state.tracker
    if not tracker.running:
        raise HTTPException(status_code=503, detail="Tracker is not running")
    return tracker


def _display_payload(state: DisplayState) -> Dict[str, Any]:
    return {
        "current_address": state.current_address,
        "label": state.label,
        "live_ms": state.live_ms,
        "live": format_duration(state.live_ms),
        "total_ms": state.total_ms,
        "entries": [
            {
                "address": entry.address,
                "duration_ms": entry.duration_ms,
                "duration": format_duration(entry.duration_ms),
            }
            for entry in state.entries
        ],
    }
