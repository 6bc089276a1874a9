"""FastAPI application that exposes a local dashboard and API for TimeSense."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from . import __version__
from .aggregator import percentage, time_distribution_rating, time_distribution_score
from .clustering import cluster_durations
from .config import TrackerConfig
from .models import DailySummary, TimeBlock
from .paths import get_data_dir
from .reporting import render_html_report
from .storage import SummaryWriter, list_summary_dates, load_summary
from .tracker import ActivityTracker, create_tracker

logger = logging.getLogger(__name__)

TrackerFactory = Callable[[], ActivityTracker]


class TrackerRunner:
    """Manage the activity tracker in a background thread."""

    def __init__(self, factory: TrackerFactory) -> None:
        self._factory = factory
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._tracker: Optional[ActivityTracker] = None

    @property
    def tracker(self) -> Optional[ActivityTracker]:
        with self._lock:
            return self._tracker

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            stop_event = threading.Event()
            tracker = self._factory()
            thread = threading.Thread(
                target=tracker.run_until_stopped,
                args=(stop_event,),
                name="timesense-tracker",
                daemon=True,
            )
            self._thread = thread
            self._stop_event = stop_event
            self._tracker = tracker
            thread.start()
            logger.info("Tracker background thread started.")

    def stop(self) -> None:
        thread: Optional[threading.Thread] = None
        with self._lock:
            if not self._thread or not self._thread.is_alive() or not self._stop_event:
                return
            self._stop_event.set()
            thread = self._thread
            self._thread = None
            self._stop_event = None
        if thread:
            thread.join(timeout=10)
            logger.info("Tracker background thread stopped.")

    def is_running(self) -> bool:
        with self._lock:
            return bool(self._thread and self._thread.is_alive())


def create_app(
    *,
    config: Optional[TrackerConfig] = None,
    data_dir: Optional[Path] = None,
    tracker_factory: Optional[TrackerFactory] = None,
    run_tracker: bool = True,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_config = config or TrackerConfig()
    resolved_data_dir = Path(data_dir or resolved_config.data_directory or get_data_dir())
    settings = resolved_config.settings()
    rules = resolved_config.rules()

    def _default_factory() -> ActivityTracker:
        return create_tracker(settings, rules, sink=SummaryWriter(resolved_data_dir))

    runner = TrackerRunner(tracker_factory or _default_factory)

    app = FastAPI(title="TimeSense", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.data_dir = resolved_data_dir
    app.state.tracker_runner = runner

    @app.on_event("startup")
    async def _startup() -> None:
        if run_tracker:
            runner.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        runner.stop()

    def _resolve_summary(request: Request, day: date) -> DailySummary:
        tracker = request.app.state.tracker_runner.tracker
        if tracker is not None and tracker.period == day:
            return tracker.live_summary()
        summary = load_summary(request.app.state.data_dir, day)
        if summary is None:
            raise HTTPException(status_code=404, detail="No summary for the selected day")
        return summary

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        runner_: TrackerRunner = request.app.state.tracker_runner
        tracker = runner_.tracker
        current = tracker.current_block if tracker else None
        return {
            "tracker_running": runner_.is_running(),
            "data_directory": str(request.app.state.data_dir),
            "sample_seconds": settings.sample_interval.total_seconds(),
            "idle_seconds": settings.idle_threshold.total_seconds(),
            "productive_apps": sorted(rules.productive_apps),
            "distraction_apps": sorted(rules.distraction_apps),
            "current_block": _block_payload(current) if current else None,
        }

    @app.get("/api/summaries")
    def summaries(request: Request) -> Dict[str, Any]:
        days = list_summary_dates(request.app.state.data_dir)
        return {"dates": [day.isoformat() for day in days]}

    @app.get("/api/summary")
    def summary(
        request: Request,
        date: Optional[str] = Query(
            default=None,
            description="Target date in YYYY-MM-DD format.",
        ),
    ) -> Dict[str, Any]:
        target_day = _parse_date(date)
        return _summary_payload(_resolve_summary(request, target_day))

    @app.get("/api/applications")
    def applications(
        request: Request,
        date: Optional[str] = Query(
            default=None,
            description="Target date in YYYY-MM-DD format.",
        ),
    ) -> Dict[str, Any]:
        target_day = _parse_date(date)
        daily = _resolve_summary(request, target_day)
        total = daily.tracked_time
        return {
            "date": target_day.isoformat(),
            "groups": [
                {
                    "canonical_name": group.canonical_name,
                    "seconds": group.total_duration.total_seconds(),
                    "percentage": percentage(group.total_duration, total),
                    "members": [
                        {"name": name, "seconds": duration.total_seconds()}
                        for name, duration in group.members
                    ],
                }
                for group in cluster_durations(daily.application_breakdown)
            ],
        }

    @app.get("/reports/{day}", response_class=HTMLResponse)
    def report(day: str, request: Request) -> HTMLResponse:
        return HTMLResponse(render_html_report(_resolve_summary(request, _parse_date(day))))

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request) -> HTMLResponse:
        return HTMLResponse(render_html_report(_resolve_summary(request, _parse_date(None))))

    return app


def _parse_date(value: Optional[str]) -> date:
    if not value:
        return datetime.now().date()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid date format") from exc


def _summary_payload(summary: DailySummary) -> Dict[str, Any]:
    score = time_distribution_score(summary)
    return {
        "date": summary.date.isoformat(),
        "totals": {
            "productive_seconds": summary.productive_time.total_seconds(),
            "distracted_seconds": summary.distracted_time.total_seconds(),
            "idle_seconds": summary.idle_time.total_seconds(),
            "tracked_seconds": summary.tracked_time.total_seconds(),
        },
        "score": score,
        "rating": time_distribution_rating(score),
        "applications": {
            name: duration.total_seconds()
            for name, duration in summary.application_breakdown.items()
        },
        "activities": {
            activity.value: duration.total_seconds()
            for activity, duration in summary.activity_breakdown.items()
        },
    }


def _block_payload(block: TimeBlock) -> Dict[str, Any]:
    return {
        "application": block.application,
        "activity_type": block.activity_type.value,
        "idle": block.idle,
        "start_time": block.start_time.isoformat(),
    }
