from datetime import datetime, timedelta

import pytest

from timesense.config import ClassificationRules, CollectorSettings
from timesense.detectors import ActiveAppDetector
from timesense.idle import IdleProbe
from timesense.tracker import ActivityTracker

T0 = datetime(2024, 3, 4, 9, 0, 0)


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


class ScriptedDetector(ActiveAppDetector):
    """Returns whatever name the test sets."""

    def __init__(self, name: str = "Code") -> None:
        self.name = name
        self.started = False
        self.stopped = False

    def get_active_application(self) -> str:
        return self.name

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True


class FakeIdleProbe(IdleProbe):
    def __init__(self) -> None:
        self.seconds = 0.0

    def seconds_since_input(self) -> float:
        return self.seconds


@pytest.fixture
def rules():
    return ClassificationRules(
        productive_apps=frozenset({"code", "terminal"}),
        distraction_apps=frozenset({"youtube", "slack"}),
    )


@pytest.fixture
def settings():
    return CollectorSettings(
        sample_interval=timedelta(seconds=5),
        idle_threshold=timedelta(seconds=180),
    )


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def detector():
    return ScriptedDetector()


@pytest.fixture
def idle_probe():
    return FakeIdleProbe()


@pytest.fixture
def emitted():
    return []


@pytest.fixture
def tracker(settings, rules, detector, idle_probe, emitted, clock):
    return ActivityTracker(
        settings=settings,
        rules=rules,
        detector=detector,
        idle_probe=idle_probe,
        sink=emitted.append,
        clock=clock,
    )
