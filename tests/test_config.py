import json
from datetime import timedelta

import pytest

from timesense.config import (
    DEFAULT_PRODUCTIVE_APPS,
    CollectorSettings,
    ConfigError,
    TrackerConfig,
    load_config,
    save_config,
)


def test_missing_file_is_created_with_defaults(tmp_path):
    path = tmp_path / "nested" / "timesense_config.json"
    config = load_config(path)

    assert path.exists()
    assert config.idle_threshold_seconds == 180
    assert config.rules().productive_apps == frozenset(DEFAULT_PRODUCTIVE_APPS)
    assert load_config(path) == config


def test_rules_are_trimmed_lowercased_and_deduplicated(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"productive_apps": [" Code ", "CODE", "Vim"]}))

    config = load_config(path)
    assert config.productive_apps == ["code", "vim"]


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"productive_apps": ["code", "   "]}),
        json.dumps({"sample_interval_seconds": 0}),
        json.dumps({"unknown_option": True}),
        json.dumps({"distraction_apps": "youtube"}),
    ],
)
def test_malformed_configuration_is_fatal(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content)
    with pytest.raises(ConfigError):
        load_config(path)


def test_settings_conversion():
    settings = TrackerConfig(
        sample_interval_seconds=10, idle_threshold_seconds=90, poll_interval_seconds=1
    ).settings()
    assert settings == CollectorSettings(
        sample_interval=timedelta(seconds=10),
        idle_threshold=timedelta(seconds=90),
        poll_interval=timedelta(seconds=1),
    )


def test_save_and_reload_data_directory(tmp_path):
    path = tmp_path / "config.json"
    save_config(TrackerConfig(data_directory=tmp_path / "data"), path)
    assert load_config(path).data_directory == tmp_path / "data"
