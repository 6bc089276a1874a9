from datetime import datetime, timedelta

from timesense.classifier import classify, is_idle
from timesense.config import ClassificationRules
from timesense.models import ActivityType


def test_productive_substring_match_is_case_insensitive(rules):
    assert classify("Visual Studio CODE", rules) is ActivityType.PRODUCTIVE
    assert classify("iTerm2 Terminal", rules) is ActivityType.PRODUCTIVE


def test_distraction_match(rules):
    assert classify("YouTube - Firefox", rules) is ActivityType.DISTRACTION


def test_unmatched_and_empty_names_are_neutral(rules):
    assert classify("Finder", rules) is ActivityType.NEUTRAL
    assert classify("", rules) is ActivityType.NEUTRAL


def test_productive_wins_when_both_lists_match():
    rules = ClassificationRules(
        productive_apps=frozenset({"studio"}),
        distraction_apps=frozenset({"youtube"}),
    )
    assert classify("YouTube Studio", rules) is ActivityType.PRODUCTIVE


def test_idle_requires_strictly_exceeding_threshold():
    now = datetime(2024, 3, 4, 12, 0, 0)
    threshold = timedelta(seconds=180)
    assert not is_idle(now, now - timedelta(seconds=180), threshold)
    assert is_idle(now, now - timedelta(seconds=181), threshold)
    assert not is_idle(now, now, threshold)
