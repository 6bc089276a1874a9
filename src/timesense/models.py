"""Domain models for observed activity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum


class ActivityType(str, Enum):
    PRODUCTIVE = "productive"
    DISTRACTION = "distraction"
    NEUTRAL = "neutral"


AppDurationMap = dict[str, timedelta]


@dataclass(slots=True, frozen=True)
class Sample:
    """One polling tick worth of observation."""

    timestamp: datetime
    application_name: str
    user_active: bool


@dataclass(slots=True)
class TimeBlock:
    """Represents a contiguous interval with a constant (application, idle) label."""

    start_time: datetime
    end_time: datetime
    application: str
    activity_type: ActivityType
    idle: bool

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    def same_label(self, application: str, idle: bool) -> bool:
        return self.application == application and self.idle == idle


@dataclass(slots=True)
class CanonicalGroup:
    """Application-name variants merged under one representative name."""

    canonical_name: str
    total_duration: timedelta = timedelta(0)
    members: list[tuple[str, timedelta]] = field(default_factory=list)

    def add(self, raw_name: str, duration: timedelta) -> None:
        self.total_duration += duration
        self.members.append((raw_name, duration))


@dataclass(slots=True, frozen=True)
class DailySummary:
    date: date
    productive_time: timedelta
    distracted_time: timedelta
    idle_time: timedelta
    application_breakdown: AppDurationMap
    activity_breakdown: dict[ActivityType, timedelta]

    @property
    def tracked_time(self) -> timedelta:
        return self.productive_time + self.distracted_time + self.idle_time
