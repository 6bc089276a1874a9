"""Summing closed time blocks into daily totals."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable

from .models import ActivityType, DailySummary, TimeBlock


def summarize(blocks: Iterable[TimeBlock], day: date) -> DailySummary:
    """Aggregate ``blocks`` into a :class:`DailySummary`.

    Idle blocks count only toward idle time, whatever their activity type.
    Neutral blocks are recorded in the breakdowns but in neither bucket.
    """
    productive = timedelta(0)
    distracted = timedelta(0)
    idle = timedelta(0)
    applications: defaultdict[str, timedelta] = defaultdict(timedelta)
    activities: defaultdict[ActivityType, timedelta] = defaultdict(timedelta)

    for block in blocks:
        duration = block.duration
        applications[block.application] += duration
        activities[block.activity_type] += duration
        if block.idle:
            idle += duration
        elif block.activity_type is ActivityType.PRODUCTIVE:
            productive += duration
        elif block.activity_type is ActivityType.DISTRACTION:
            distracted += duration

    return DailySummary(
        date=day,
        productive_time=productive,
        distracted_time=distracted,
        idle_time=idle,
        application_breakdown=dict(applications),
        activity_breakdown=dict(activities),
    )


def percentage(part: timedelta, total: timedelta) -> float:
    if total <= timedelta(0):
        return 0.0
    return part / total * 100.0


def time_distribution_score(summary: DailySummary) -> float:
    """Share of active time spent productively, 0-100.

    With no tracked or no active time the user is treated as focused (100).
    """
    active = summary.productive_time + summary.distracted_time
    if summary.tracked_time <= timedelta(0) or active <= timedelta(0):
        return 100.0
    return summary.productive_time / active * 100.0


def time_distribution_rating(score: float) -> str:
    if score >= 80.0:
        return "High Focus"
    if score >= 60.0:
        return "Moderate Focus"
    if score >= 40.0:
        return "Balanced"
    # Score 0 means fully distracted; days with no active time already score 100.
    return "Distracted"
