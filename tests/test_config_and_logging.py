import json

import pytest

from orla_vision import logger, processing_config
from orla_vision.processing_config import ConfigError
from orla_vision.face_engine.session import VisionSession


def test_update_coerces_and_ignores_unknown_keys():
    cfg = processing_config.update_config({"emotion_history_size": "12", "log_events": 1, "nope": True})
    assert cfg["emotion_history_size"] == 12
    assert cfg["log_events"] is True
    assert "nope" not in cfg


def test_reset_restores_defaults():
    processing_config.update_config({"smoothing_factor": 0.9})
    processing_config.reset_config()
    assert processing_config.get_config()["smoothing_factor"] == 0.3


def test_get_config_returns_a_copy():
    processing_config.get_config()["smoothing_factor"] = 0.0
    assert processing_config.get_config()["smoothing_factor"] == 0.3


def test_event_log_disabled_by_default(tmp_path, monkeypatch):
    path = tmp_path / "events.jsonl"
    monkeypatch.setattr(logger, "LOG_FILE", str(path))
    logger.log_event("session_enabled")
    assert not path.exists()


def test_session_events_are_logged(tmp_path, monkeypatch, provider, cameras):
    path = tmp_path / "logs" / "events.jsonl"
    monkeypatch.setattr(logger, "LOG_FILE", str(path))
    processing_config.update_config({"log_events": True})

    session = VisionSession(provider=provider, camera_factory=cameras)
    session.enable(run_loop=False)
    session.disable()

    events = [json.loads(line) for line in path.read_text().splitlines()]
    assert [e["type"] for e in events] == ["session_enabled", "session_disabled"]
    assert all("timestamp" in e for e in events)


def test_config_applies_on_next_enable(provider, cameras):
    session = VisionSession(provider=provider, camera_factory=cameras)
    processing_config.update_config({"gesture_history_size": 3, "enable_emotion": False})
    session.enable(run_loop=False)
    assert session.engine.gestures.history.maxlen == 3
    assert session.status().capabilities["emotion_detection"] is False
    session.disable()


@pytest.mark.parametrize("raw, expected", [
    ("false", False), ("False", False), ("0", False), ("off", False), (0, False),
    ("true", True), ("yes", True), (1, True), (True, True),
])
def test_flags_are_parsed_explicitly(raw, expected):
    assert processing_config.update_config({"enable_gestures": raw})["enable_gestures"] is expected


@pytest.mark.parametrize("updates", [
    {"smoothing_factor": 0},
    {"smoothing_factor": 1.5},
    {"emotion_history_size": -1},
    {"gesture_history_size": 0},
    {"camera_width": 0},
    {"camera_src": "/dev/video0"},
    {"emotion_history_size": "many"},
    {"enable_emotion": "maybe"},
    {"camera_height": True},
])
def test_bad_values_are_rejected(updates):
    before = processing_config.get_config()
    with pytest.raises(ConfigError, match=next(iter(updates))):
        processing_config.update_config(updates)
    assert processing_config.get_config() == before


def test_rejected_update_applies_nothing():
    with pytest.raises(ConfigError):
        processing_config.update_config({"enable_gestures": False, "smoothing_factor": 2.0})
    assert processing_config.get_config()["enable_gestures"] is True


def test_validate_config_fills_missing_keys():
    cfg = processing_config.validate_config({"smoothing_factor": "0.5"})
    assert cfg["smoothing_factor"] == 0.5
    assert cfg["emotion_history_size"] == 30
