"""
Presence and attention interpretation from pose and gaze.

Distance is estimated from total rotation magnitude (|pitch| + |yaw|); there
is no calibration data, so it is a rough orientation-based proxy rather than
a true depth estimate.
"""
import time
from typing import Optional

from orla_vision.face_engine.types import Distance, FaceData, PresenceData


def _clamp01(v: float) -> float:
    return max(0.0, min(1.0, float(v)))


class PresenceAnalyzer:
    def __init__(self, clock=time.time, gaze_threshold: float = 0.3, yaw_threshold: float = 20.0):
        self.clock = clock
        self.gaze_threshold = float(gaze_threshold)
        self.yaw_threshold = float(yaw_threshold)
        self.session_start: Optional[float] = None
        self.last_seen_at: Optional[float] = None
        self.session_duration = 0

    def reset(self):
        self.session_start = None
        self.last_seen_at = None
        self.session_duration = 0

    def looking_at_screen(self, face: FaceData) -> bool:
        return (
            abs(face.eye_gaze_x) < self.gaze_threshold
            and abs(face.eye_gaze_y) < self.gaze_threshold
            and abs(face.head_rotation_y) < self.yaw_threshold
        )

    @staticmethod
    def attention(face: FaceData) -> float:
        level = 1.0
        level -= abs(face.head_rotation_y) / 90.0 * 0.5
        level -= abs(face.eye_gaze_x) * 0.3
        if face.is_blinking:
            level -= 0.1
        if face.is_talking:
            level += 0.2
        return _clamp01(level)

    @staticmethod
    def distance(face: FaceData) -> Distance:
        magnitude = abs(face.head_rotation_x) + abs(face.head_rotation_y)
        if magnitude < 10:
            return Distance.CLOSE
        if magnitude > 30:
            return Distance.FAR
        return Distance.MEDIUM

    def analyze(self, face: FaceData) -> PresenceData:
        if not face.face_detected:
            # duration is held, not reset, while the face is briefly lost
            return PresenceData(
                is_present=False,
                is_looking_at_screen=False,
                attention_level=0.0,
                distance_from_screen=Distance.UNKNOWN,
                last_seen_at=self.last_seen_at,
                session_duration=self.session_duration,
            )

        now = self.clock()
        self.last_seen_at = now
        if self.session_start is None:
            self.session_start = now
        self.session_duration = max(self.session_duration, int(now - self.session_start))

        return PresenceData(
            is_present=True,
            is_looking_at_screen=self.looking_at_screen(face),
            attention_level=self.attention(face),
            distance_from_screen=self.distance(face),
            last_seen_at=now,
            session_duration=self.session_duration,
        )
