from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from timesense.config import TrackerConfig
from timesense.models import ActivityType, DailySummary
from timesense.storage import write_summary
from timesense.tracker import ActivityTracker
from timesense.webapp import create_app

from conftest import FakeIdleProbe, ScriptedDetector

DAY = date(2024, 3, 4)


@pytest.fixture
def stored_day(tmp_path):
    write_summary(
        DailySummary(
            date=DAY,
            productive_time=timedelta(minutes=75),
            distracted_time=timedelta(minutes=25),
            idle_time=timedelta(minutes=10),
            application_breakdown={
                "Code": timedelta(minutes=30),
                "Visual Studio Code": timedelta(minutes=45),
                "YouTube": timedelta(minutes=35),
            },
            activity_breakdown={
                ActivityType.PRODUCTIVE: timedelta(minutes=75),
                ActivityType.DISTRACTION: timedelta(minutes=35),
            },
        ),
        tmp_path,
    )
    return tmp_path


@pytest.fixture
def client(stored_day):
    app = create_app(config=TrackerConfig(), data_dir=stored_day, run_tracker=False)
    with TestClient(app) as test_client:
        yield test_client


def test_status_reports_configuration(client):
    payload = client.get("/api/status").json()
    assert payload["tracker_running"] is False
    assert payload["idle_seconds"] == 180
    assert payload["productive_apps"] == ["code", "notion", "terminal"]
    assert payload["current_block"] is None


def test_stored_summary(client):
    payload = client.get("/api/summary", params={"date": "2024-03-04"}).json()
    assert payload["totals"]["productive_seconds"] == 75 * 60
    assert payload["totals"]["tracked_seconds"] == 110 * 60
    assert payload["score"] == pytest.approx(75.0)
    assert payload["rating"] == "Moderate Focus"
    assert payload["activities"]["distraction"] == 35 * 60


def test_applications_are_grouped(client):
    payload = client.get("/api/applications", params={"date": "2024-03-04"}).json()
    groups = payload["groups"]
    assert [group["canonical_name"] for group in groups] == ["Visual Studio Code", "YouTube"]
    assert groups[0]["seconds"] == 75 * 60
    assert {member["name"] for member in groups[0]["members"]} == {"Code", "Visual Studio Code"}


def test_summary_dates(client):
    assert client.get("/api/summaries").json() == {"dates": ["2024-03-04"]}


def test_html_report(client):
    response = client.get("/reports/2024-03-04")
    assert response.status_code == 200
    assert "TimeSense Daily Report - 2024-03-04" in response.text


def test_invalid_and_missing_dates(client):
    assert client.get("/api/summary", params={"date": "03/04/2024"}).status_code == 400
    assert client.get("/api/summary", params={"date": "2024-01-01"}).status_code == 404
    assert client.get("/reports/2024-01-01").status_code == 404


def test_live_summary_from_running_tracker(tmp_path, settings, rules):
    detector = ScriptedDetector("Code")
    emitted = []

    def factory():
        return ActivityTracker(settings, rules, detector, FakeIdleProbe(), emitted.append)

    app = create_app(data_dir=tmp_path, tracker_factory=factory)
    with TestClient(app) as test_client:
        status = test_client.get("/api/status").json()
        assert status["tracker_running"] is True
        today = datetime.now().date().isoformat()
        payload = test_client.get("/api/summary", params={"date": today}).json()
        assert payload["date"] == today
    assert detector.started
    assert detector.stopped
