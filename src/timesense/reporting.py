"""Console and HTML rendering of daily summaries."""

from __future__ import annotations

from datetime import date, timedelta
from html import escape
from pathlib import Path
from string import Template

from .aggregator import (
    percentage,
    time_distribution_rating,
    time_distribution_score,
)
from .clustering import cluster_durations
from .models import CanonicalGroup, DailySummary
from .storage import load_summary


class SummaryPrinter:
    """Render human-readable summaries in the console."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def print_daily_summary(self, day: date) -> None:
        summary = load_summary(self.data_dir, day)
        if summary is None:
            print("No activity recorded for the selected day.")
            return
        print_summary(summary)


def print_summary(summary: DailySummary, *, top: int = 5) -> None:
    score = time_distribution_score(summary)
    print(f"Summary for {summary.date.isoformat()}")
    print("-" * 40)
    print(f"Focused time:    {format_duration(summary.productive_time)}")
    print(f"Distracted time: {format_duration(summary.distracted_time)}")
    print(f"Idle time:       {format_duration(summary.idle_time)}")
    print(f"Score:           {score:.1f}% ({time_distribution_rating(score)})")

    groups = cluster_durations(summary.application_breakdown)
    if groups:
        print()
        print("Top applications:")
        for group in groups[:top]:
            print(f"  {group.canonical_name[:30]:<30} {format_duration(group.total_duration)}")
            if len(group.members) > 1:
                names = ", ".join(name for name, _ in group.members)
                print(f"    ({names})")


def format_duration(value: timedelta | float) -> str:
    seconds = value.total_seconds() if isinstance(value, timedelta) else value
    total_seconds = int(round(seconds))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def _minutes(value: timedelta) -> float:
    return value.total_seconds() / 60.0


def distribution_class(score: float) -> str:
    if score >= 60.0:
        return "high-distribution"
    if score >= 40.0:
        return "medium-distribution"
    return "low-distribution"


def build_observations(summary: DailySummary) -> str:
    total = summary.tracked_time
    if total <= timedelta(0):
        return "No activity tracked during this session."

    parts: list[str] = []
    if summary.productive_time > timedelta(0):
        parts.append(
            f"You spent {_minutes(summary.productive_time):.0f} minutes on focused activities, "
            f"which is {percentage(summary.productive_time, total):.1f}% of your tracked time."
        )
    if summary.distracted_time > timedelta(0):
        parts.append(
            f"You spent {_minutes(summary.distracted_time):.0f} minutes on distracting activities "
            f"({percentage(summary.distracted_time, total):.1f}% of your time)."
        )
    if summary.idle_time > timedelta(0):
        parts.append(
            f"You were idle for {_minutes(summary.idle_time):.0f} minutes "
            f"({percentage(summary.idle_time, total):.1f}% of your time)."
        )

    groups = cluster_durations(summary.application_breakdown)
    if groups and groups[0].total_duration >= timedelta(minutes=1):
        top = groups[0]
        parts.append(
            f"The application you used most was '{top.canonical_name}' "
            f"for {_minutes(top.total_duration):.0f} minutes."
        )

    rating = time_distribution_rating(time_distribution_score(summary))
    parts.append(f"Your time distribution pattern for this session is categorized as '{rating}'.")
    return " ".join(parts)


def _application_rows(groups: list[CanonicalGroup], total: timedelta) -> str:
    rows: list[str] = []
    for group in groups:
        members = ", ".join(escape(name) for name, _ in group.members)
        rows.append(
            "<tr><td>{name}</td><td class=\"members\">{members}</td>"
            "<td>{minutes:.0f}</td><td>{share:.1f}%</td></tr>".format(
                name=escape(group.canonical_name),
                members=members,
                minutes=_minutes(group.total_duration),
                share=percentage(group.total_duration, total),
            )
        )
    return "\n".join(rows)


def _activity_rows(summary: DailySummary, total: timedelta) -> str:
    ordered = sorted(
        summary.activity_breakdown.items(), key=lambda item: item[1], reverse=True
    )
    return "\n".join(
        "<tr><td>{name}</td><td>{minutes:.0f}</td><td>{share:.1f}%</td></tr>".format(
            name=escape(activity.value),
            minutes=_minutes(duration),
            share=percentage(duration, total),
        )
        for activity, duration in ordered
    )


def render_html_report(summary: DailySummary) -> str:
    """Render a standalone HTML page for one day."""
    total = summary.tracked_time
    score = time_distribution_score(summary)
    groups = cluster_durations(summary.application_breakdown)
    return _REPORT_TEMPLATE.substitute(
        date=summary.date.isoformat(),
        score_class=distribution_class(score),
        score=f"{score:.1f}",
        rating=time_distribution_rating(score),
        productive_minutes=f"{_minutes(summary.productive_time):.0f}",
        distracted_minutes=f"{_minutes(summary.distracted_time):.0f}",
        idle_minutes=f"{_minutes(summary.idle_time):.0f}",
        productive_pct=f"{percentage(summary.productive_time, total):.2f}",
        distracted_pct=f"{percentage(summary.distracted_time, total):.2f}",
        idle_pct=f"{percentage(summary.idle_time, total):.2f}",
        application_rows=_application_rows(groups, total),
        activity_rows=_activity_rows(summary, total),
        observations=escape(build_observations(summary)),
    )


_REPORT_TEMPLATE = Template(
    """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>TimeSense Daily Report - $date</title>
    <style>
        body { font-family: 'Segoe UI', Arial, sans-serif; margin: 0; background-color: #f5f5f5; color: #333; }
        .container { max-width: 1000px; margin: 0 auto; padding: 20px; }
        header { background-color: #2c3e50; color: white; padding: 20px; text-align: center; border-radius: 5px 5px 0 0; }
        .content { background-color: white; padding: 20px; border-radius: 0 0 5px 5px; }
        .chart { width: 100%; background-color: #f0f0f0; height: 30px; margin-bottom: 15px; border-radius: 15px; overflow: hidden; }
        .productive { background-color: #4CAF50; height: 100%; float: left; }
        .distracted { background-color: #F44336; height: 100%; float: left; }
        .idle { background-color: #9E9E9E; height: 100%; float: left; }
        table { border-collapse: collapse; width: 100%; margin-bottom: 20px; }
        th, td { text-align: left; padding: 12px 8px; border-bottom: 1px solid #ddd; }
        th { background-color: #f2f2f2; }
        td.members { color: #777; font-size: 0.9em; }
        .time-distribution-score { font-size: 24px; font-weight: bold; text-align: center; margin: 20px 0; padding: 10px; border-radius: 5px; }
        .high-distribution { background-color: #dff0d8; color: #3c763d; }
        .medium-distribution { background-color: #fcf8e3; color: #8a6d3b; }
        .low-distribution { background-color: #f2dede; color: #a94442; }
        .stats-grid { display: grid; grid-template-columns: repeat(3, 1fr); gap: 20px; margin-bottom: 20px; }
        .stat-card { background-color: #f9f9f9; padding: 15px; border-radius: 5px; text-align: center; }
        .stat-value { font-size: 24px; font-weight: bold; }
    </style>
</head>
<body>
<div class="container">
    <header>
        <h1>TimeSense Daily Report</h1>
        <h2>$date</h2>
    </header>
    <div class="content">
        <div class="time-distribution-score $score_class">
            Time Distribution Score: $score% - $rating
        </div>
        <h3>Time Distribution</h3>
        <div class="stats-grid">
            <div class="stat-card"><div class="stat-value">$productive_minutes minutes</div>Focused Time</div>
            <div class="stat-card"><div class="stat-value">$distracted_minutes minutes</div>Distracted Time</div>
            <div class="stat-card"><div class="stat-value">$idle_minutes minutes</div>Idle Time</div>
        </div>
        <div class="chart">
            <div class="productive" style="width: $productive_pct%"></div>
            <div class="distracted" style="width: $distracted_pct%"></div>
            <div class="idle" style="width: $idle_pct%"></div>
        </div>
        <h3>Application Usage</h3>
        <table>
            <tr><th>Application</th><th>Also seen as</th><th>Minutes</th><th>Percentage</th></tr>
$application_rows
        </table>
        <h3>Activity Distribution</h3>
        <table>
            <tr><th>Activity Type</th><th>Minutes</th><th>Percentage</th></tr>
$activity_rows
        </table>
        <h3>Time Distribution Observations</h3>
        <p>$observations</p>
    </div>
</div>
</body>
</html>
"""
)
