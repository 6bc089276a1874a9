"""Configuration models and helpers for TimeSense."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_PRODUCTIVE_APPS = ("code", "terminal", "notion")
DEFAULT_DISTRACTION_APPS = ("twitter", "youtube", "reddit")


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or validated."""


@dataclass(slots=True)
class CollectorSettings:
    """Runtime timing configuration for the tracker control loop."""

    sample_interval: timedelta = timedelta(seconds=60)
    idle_threshold: timedelta = timedelta(seconds=180)
    poll_interval: timedelta = timedelta(milliseconds=500)

    @classmethod
    def from_intervals(
        cls,
        sample_seconds: float,
        idle_seconds: float,
        poll_seconds: float | None = None,
    ) -> "CollectorSettings":
        poll = poll_seconds if poll_seconds is not None else min(sample_seconds, 0.5)
        return cls(
            sample_interval=timedelta(seconds=sample_seconds),
            idle_threshold=timedelta(seconds=idle_seconds),
            poll_interval=timedelta(seconds=poll),
        )


@dataclass(slots=True, frozen=True)
class ClassificationRules:
    """Lower-cased substrings that mark an application as productive or distracting."""

    productive_apps: frozenset[str] = frozenset(DEFAULT_PRODUCTIVE_APPS)
    distraction_apps: frozenset[str] = frozenset(DEFAULT_DISTRACTION_APPS)


class TrackerConfig(BaseModel):
    """On-disk configuration, validated once at startup."""

    sample_interval_seconds: float = Field(default=60.0, gt=0)
    idle_threshold_seconds: float = Field(default=180.0, ge=0)
    poll_interval_seconds: float = Field(default=0.5, gt=0)
    productive_apps: list[str] = Field(default_factory=lambda: list(DEFAULT_PRODUCTIVE_APPS))
    distraction_apps: list[str] = Field(default_factory=lambda: list(DEFAULT_DISTRACTION_APPS))
    data_directory: Optional[Path] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("productive_apps", "distraction_apps")
    @classmethod
    def _normalize_rules(cls, values: list[str]) -> list[str]:
        cleaned: list[str] = []
        for value in values:
            lowered = value.strip().lower()
            if not lowered:
                raise ValueError("application rules must not be blank")
            if lowered not in cleaned:
                cleaned.append(lowered)
        return cleaned

    def rules(self) -> ClassificationRules:
        return ClassificationRules(
            productive_apps=frozenset(self.productive_apps),
            distraction_apps=frozenset(self.distraction_apps),
        )

    def settings(self) -> CollectorSettings:
        return CollectorSettings.from_intervals(
            sample_seconds=self.sample_interval_seconds,
            idle_seconds=self.idle_threshold_seconds,
            poll_seconds=self.poll_interval_seconds,
        )


def load_config(path: Path) -> TrackerConfig:
    """Load the configuration at ``path``, writing defaults when it does not exist."""
    path = Path(path)
    if not path.exists():
        config = TrackerConfig()
        save_config(config, path)
        logger.info("Wrote default configuration to %s", path)
        return config

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Could not read configuration {path}: {exc}") from exc
    try:
        return TrackerConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration {path}:\n{exc}") from exc


def save_config(config: TrackerConfig, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
