"""Helpers for locating application directories and output files."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from platformdirs import PlatformDirs


APP_NAME = "TimeSense"
APP_AUTHOR = "TimeSense"
CONFIG_FILENAME = "timesense_config.json"


def _dirs() -> PlatformDirs:
    return PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)


def get_data_dir() -> Path:
    """Return the base directory for summaries and reports."""
    path = Path(_dirs().user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_path() -> Path:
    return Path(_dirs().user_config_path) / CONFIG_FILENAME


def get_log_path() -> Path:
    return get_data_dir() / "tracker.log"


def summary_path(data_dir: Path, day: date) -> Path:
    return Path(data_dir) / f"summary_{day.isoformat()}.json"


def report_path(data_dir: Path, day: date) -> Path:
    return Path(data_dir) / f"report_{day.isoformat()}.html"
