"""Rule-based activity classification and idle detection."""

from __future__ import annotations

from datetime import datetime, timedelta

from .config import ClassificationRules
from .models import ActivityType


def classify(raw_name: str, rules: ClassificationRules) -> ActivityType:
    """Map an application name to an activity type by substring rules.

    Productive rules are checked first, so a name matching both lists is
    productive. Rule substrings are expected to be lower-case already.
    """
    lowered = raw_name.lower()
    if any(rule in lowered for rule in rules.productive_apps):
        return ActivityType.PRODUCTIVE
    if any(rule in lowered for rule in rules.distraction_apps):
        return ActivityType.DISTRACTION
    return ActivityType.NEUTRAL


def is_idle(now: datetime, last_input_time: datetime, threshold: timedelta) -> bool:
    return (now - last_input_time) > threshold
