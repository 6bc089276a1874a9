"""The control loop: sample, classify, segment, and emit daily summaries."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from .aggregator import summarize
from .classifier import classify, is_idle
from .config import ClassificationRules, CollectorSettings
from .detectors import ActiveAppDetector, create_app_detector
from .idle import IdleProbe, create_idle_probe
from .models import DailySummary, Sample, TimeBlock
from .segmenter import Segmenter

logger = logging.getLogger(__name__)

SummarySink = Callable[[DailySummary], None]


@dataclass(slots=True)
class TrackerState:
    period: date
    last_input_time: Optional[datetime] = None
    blocks: list[TimeBlock] = field(default_factory=list)


class ActivityTracker:
    """Samples the focused application at a fixed interval and emits daily summaries."""

    def __init__(
        self,
        settings: CollectorSettings,
        rules: ClassificationRules,
        detector: ActiveAppDetector,
        idle_probe: IdleProbe,
        sink: Optional[SummarySink] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.settings = settings
        self.rules = rules
        self._detector = detector
        self._idle_probe = idle_probe
        self._sink = sink
        self._clock = clock
        self._segmenter = Segmenter()
        now = clock()
        self._state = TrackerState(period=now.date())
        self._lock = threading.Lock()
        self._finalized = False

    @property
    def period(self) -> date:
        return self._state.period

    @property
    def current_block(self) -> Optional[TimeBlock]:
        with self._lock:
            current = self._segmenter.current_block
            return replace(current) if current else None

    def tick(self, now: Optional[datetime] = None) -> Sample:
        """Take one sample and feed it through the pipeline."""
        now = now or self._clock()
        idle_seconds = self._idle_probe.safe_seconds_since_input()
        application = self._detector.get_active_application()
        reported_input = now - timedelta(seconds=idle_seconds)

        finished: list[DailySummary] = []
        with self._lock:
            if now.date() > self._state.period:
                finished = self._roll_over_locked(now)
            last_input = self._state.last_input_time
            if last_input is None or reported_input > last_input:
                last_input = reported_input
                self._state.last_input_time = last_input
            sample = Sample(
                timestamp=now,
                application_name=application,
                user_active=now - last_input < self.settings.sample_interval,
            )
            idle = is_idle(now, last_input, self.settings.idle_threshold)
            activity = classify(application, self.rules)
            closed = self._segmenter.observe(now, application, activity, idle)
            if closed is not None:
                self._state.blocks.append(closed)
                logger.info(
                    "New time block: %s (%s%s)",
                    application,
                    activity.value,
                    ", idle" if idle else "",
                )
        for summary in finished:
            self._deliver(summary)
        return sample

    def set_idle_threshold(self, threshold: timedelta) -> None:
        """Change the idle threshold; the next sample ends the open block.

        The open block keeps running until that sample, so the period stays
        contiguous.
        """
        with self._lock:
            self.settings.idle_threshold = threshold
            self._segmenter.request_boundary()
        logger.info("Idle threshold set to %ss", threshold.total_seconds())

    def snapshot(self, now: Optional[datetime] = None) -> list[TimeBlock]:
        """Copy of the period's blocks, with the open block provisionally ended at ``now``."""
        now = now or self._clock()
        with self._lock:
            blocks = [replace(block) for block in self._state.blocks]
            current = self._segmenter.current_block
            if current is not None:
                blocks.append(replace(current, end_time=max(now, current.start_time)))
        return blocks

    def live_summary(self, now: Optional[datetime] = None) -> DailySummary:
        return summarize(self.snapshot(now), self.period)

    def shutdown(self, now: Optional[datetime] = None) -> Optional[DailySummary]:
        """Close the open block and emit the period summary. Safe to call twice."""
        now = now or self._clock()
        with self._lock:
            if self._finalized:
                return None
            self._finalized = True
            closed = self._segmenter.shutdown(now)
            if closed is not None:
                self._state.blocks.append(closed)
            summary = self._summarize_locked(self._state.period)
        self._deliver(summary)
        try:
            self._detector.stop()
        finally:
            logger.info("Tracker stopped.")
        return summary

    def run_forever(self) -> None:
        stop_event = threading.Event()
        try:
            self._run_loop(stop_event)
        except KeyboardInterrupt:
            logger.info("Tracker interrupted; generating final report.")
        finally:
            self.shutdown()

    def run_until_stopped(self, stop_event: threading.Event) -> None:
        """Run the tracker until the provided event is set."""
        try:
            self._run_loop(stop_event)
        finally:
            self.shutdown()

    def _run_loop(self, stop_event: threading.Event) -> None:
        logger.info(
            "Starting tracker; sampling every %ss, idle after %ss",
            self.settings.sample_interval.total_seconds(),
            self.settings.idle_threshold.total_seconds(),
        )
        self._detector.start()
        interval = self.settings.sample_interval.total_seconds()
        while not stop_event.is_set():
            self.tick()
            # Sleep in an interruptible manner.
            stop_event.wait(interval)

    def _roll_over_locked(self, now: datetime) -> list[DailySummary]:
        """Close every period that ended before ``now``, one midnight at a time."""
        finished: list[DailySummary] = []
        while self._state.period < now.date():
            next_day = self._state.period + timedelta(days=1)
            midnight = datetime.combine(next_day, time.min, tzinfo=now.tzinfo)
            closed = self._segmenter.split(midnight)
            if closed is not None:
                self._state.blocks.append(closed)
            summary = self._summarize_locked(self._state.period)
            if summary is not None:
                finished.append(summary)
            self._state.blocks = []
            self._state.period = next_day
            logger.info("Started new period %s", next_day)
        return finished

    def _summarize_locked(self, day: date) -> Optional[DailySummary]:
        if not self._state.blocks:
            return None
        return summarize(self._state.blocks, day)

    def _deliver(self, summary: Optional[DailySummary]) -> None:
        if summary is not None and self._sink is not None:
            self._sink(summary)


def create_tracker(
    settings: CollectorSettings,
    rules: ClassificationRules,
    sink: Optional[SummarySink] = None,
) -> ActivityTracker:
    """Build a tracker wired to the detector and idle probe of this platform."""
    return ActivityTracker(
        settings=settings,
        rules=rules,
        detector=create_app_detector(settings.poll_interval),
        idle_probe=create_idle_probe(),
        sink=sink,
    )
