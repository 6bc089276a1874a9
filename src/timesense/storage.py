"""JSON persistence of daily summaries and the best-effort summary sink."""

from __future__ import annotations

import logging
import re
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from .models import ActivityType, DailySummary
from .paths import report_path, summary_path

logger = logging.getLogger(__name__)

_SUMMARY_NAME_PATTERN = re.compile(r"^summary_(\d{4}-\d{2}-\d{2})\.json$")


class DailySummaryRecord(BaseModel):
    """Serialized form of a summary; durations are stored in seconds."""

    date: date
    productive_seconds: float
    distracted_seconds: float
    idle_seconds: float
    application_breakdown: dict[str, float]
    activity_breakdown: dict[ActivityType, float]

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_summary(cls, summary: DailySummary) -> "DailySummaryRecord":
        return cls(
            date=summary.date,
            productive_seconds=summary.productive_time.total_seconds(),
            distracted_seconds=summary.distracted_time.total_seconds(),
            idle_seconds=summary.idle_time.total_seconds(),
            application_breakdown={
                name: duration.total_seconds()
                for name, duration in summary.application_breakdown.items()
            },
            activity_breakdown={
                activity: duration.total_seconds()
                for activity, duration in summary.activity_breakdown.items()
            },
        )

    def to_summary(self) -> DailySummary:
        return DailySummary(
            date=self.date,
            productive_time=timedelta(seconds=self.productive_seconds),
            distracted_time=timedelta(seconds=self.distracted_seconds),
            idle_time=timedelta(seconds=self.idle_seconds),
            application_breakdown={
                name: timedelta(seconds=seconds)
                for name, seconds in self.application_breakdown.items()
            },
            activity_breakdown={
                activity: timedelta(seconds=seconds)
                for activity, seconds in self.activity_breakdown.items()
            },
        )


def write_summary(summary: DailySummary, data_dir: Path) -> Path:
    path = summary_path(data_dir, summary.date)
    path.parent.mkdir(parents=True, exist_ok=True)
    record = DailySummaryRecord.from_summary(summary)
    path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
    return path


def load_summary(data_dir: Path, day: date) -> Optional[DailySummary]:
    """Return the stored summary for ``day``, or ``None`` if there is none."""
    path = summary_path(data_dir, day)
    if not path.exists():
        return None
    try:
        record = DailySummaryRecord.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError:
        logger.warning("Ignoring unreadable summary file %s", path)
        return None
    return record.to_summary()


def list_summary_dates(data_dir: Path) -> list[date]:
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        return []
    days: list[date] = []
    for entry in data_dir.iterdir():
        match = _SUMMARY_NAME_PATTERN.match(entry.name)
        if not match:
            continue
        try:
            days.append(date.fromisoformat(match.group(1)))
        except ValueError:
            continue
    return sorted(days, reverse=True)


def write_report(summary: DailySummary, data_dir: Path) -> Path:
    from .reporting import render_html_report

    path = report_path(data_dir, summary.date)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_html_report(summary), encoding="utf-8")
    return path


class SummaryWriter:
    """Sink that stores each emitted summary as JSON plus an HTML report."""

    def __init__(self, data_dir: Path, *, write_html: bool = True) -> None:
        self.data_dir = Path(data_dir)
        self.write_html = write_html

    def __call__(self, summary: DailySummary) -> None:
        try:
            json_path = write_summary(summary, self.data_dir)
            logger.info("Saved summary for %s to %s", summary.date, json_path)
            if self.write_html:
                html_path = write_report(summary, self.data_dir)
                logger.info("Saved report for %s to %s", summary.date, html_path)
        except OSError:
            logger.exception("Failed to write summary for %s", summary.date)
