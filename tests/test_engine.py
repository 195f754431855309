from dataclasses import replace

import numpy as np
import pytest

from orla_vision.face_engine.engine import FaceEngine
from orla_vision.face_engine.landmarks import TopologyError
from orla_vision.face_engine.types import Distance, Emotion, FACE_FIELD_RANGES, Gesture, VisionSnapshot
from orla_vision.processing_config import get_config

from synthetic_landmarks import FakeClock, make_face, make_smile


def run(engine, frame, n=1):
    for _ in range(n):
        snap = engine.process_landmarks(frame)
    return snap


def test_smiling_face_classifies_happy():
    engine = FaceEngine(clock=FakeClock())
    snap = run(engine, make_smile(), 20)
    assert snap.face.face_detected
    assert snap.face.head_rotation_x == pytest.approx(0.0, abs=1e-6)
    assert snap.face.head_rotation_y == pytest.approx(0.0, abs=1e-6)
    assert snap.face.head_rotation_z == pytest.approx(0.0, abs=1e-6)
    assert snap.face.mouth_width > 0.6
    assert snap.emotion.primary is Emotion.HAPPY
    assert 0.7 <= snap.emotion.valence <= 0.9
    assert snap.emotion.arousal == pytest.approx(0.6)
    assert snap.presence.is_present
    assert snap.gesture.gesture is Gesture.NONE


def test_no_face_frames_hold_smoothed_values():
    clock = FakeClock()
    engine = FaceEngine(clock=clock)
    last = run(engine, make_face(mouth_w=0.12, yaw_dx=0.1, brow_gap=0.005), 10)
    for empty in (None, [], np.zeros((0, 3))):
        clock.advance(1.0)
        snap = engine.process_landmarks(empty)
        assert not snap.face.face_detected
        assert replace(snap.face, face_detected=True) == last.face
        assert not snap.presence.is_present
        assert snap.presence.attention_level == 0.0
        assert snap.presence.distance_from_screen is Distance.UNKNOWN
        assert snap.presence.last_seen_at == last.presence.last_seen_at
        assert snap.emotion.primary is Emotion.NEUTRAL
        assert snap.emotion.confidence == 0
        assert snap.gesture.gesture is Gesture.NONE


@pytest.mark.parametrize("kw", [
    {"yaw_dx": 5.0}, {"yaw_dx": -5.0}, {"pitch_dy": 3.0}, {"pitch_dy": -3.0}, {"ear_dy": 2.0, "yaw_dx": -0.1},
])
def test_pose_always_within_range(kw):
    engine = FaceEngine(clock=FakeClock())
    for _ in range(25):
        face = engine.process_landmarks(make_face(**kw)).face
        for name, lo, hi in FACE_FIELD_RANGES:
            assert lo <= getattr(face, name) <= hi


def test_nod_reaches_gesture_after_smoothing():
    engine = FaceEngine(clock=FakeClock())
    snap = run(engine, make_face(pitch_dy=0.2), 10)
    assert snap.face.head_rotation_x > 10
    assert snap.gesture.gesture is Gesture.THUMBS_UP
    assert engine.gestures.recent()[-1] is Gesture.THUMBS_UP


def test_every_frame_feeds_the_trend_history():
    engine = FaceEngine(clock=FakeClock())
    run(engine, make_smile(), 6)
    engine.process_landmarks(None)
    assert len(engine.trends.samples()) == 7
    assert engine.trends.dominant_emotion() is Emotion.HAPPY


def test_short_frame_raises_topology_error():
    engine = FaceEngine(clock=FakeClock())
    with pytest.raises(TopologyError):
        engine.process_landmarks(np.zeros((10, 3)))


def test_disabled_stages_report_defaults():
    cfg = dict(get_config(), enable_emotion=False, enable_gestures=False, enable_presence=False)
    engine = FaceEngine(cfg=cfg, clock=FakeClock())
    snap = run(engine, make_face(pitch_dy=0.2), 10)
    assert snap.face.face_detected
    assert snap.emotion.primary is Emotion.NEUTRAL and snap.emotion.confidence == 0
    assert snap.gesture.gesture is Gesture.NONE
    assert not snap.presence.is_present
    assert engine.trends.samples() == []


def test_disabled_smoothing_uses_raw_values():
    cfg = dict(get_config(), enable_smoothing=False)
    engine = FaceEngine(cfg=cfg, clock=FakeClock())
    face = engine.process_landmarks(make_smile()).face
    assert face.mouth_width == pytest.approx(0.7)


def test_reset_returns_to_defaults():
    engine = FaceEngine(clock=FakeClock())
    run(engine, make_smile(), 5)
    engine.reset()
    assert engine.latest == VisionSnapshot()
    assert engine.trends.samples() == []
    assert engine.presence.session_start is None
