import math
import time

import numpy as np

from orla_vision.face_engine.landmarks import Landmark, LandmarkSet
from orla_vision.face_engine.types import FaceData


# Calibration factors mapping normalized-coordinate distances to 0..1 measures.
POSE_SCALE = 100.0
EYE_SCALE = 30.0
MOUTH_OPEN_SCALE = 15.0
MOUTH_WIDTH_SCALE = 5.0
EYEBROW_SCALE = 20.0
EYEBROW_NEUTRAL = 0.5
GAZE_SCALE = 10.0

BLINK_THRESHOLD = 0.2
SMILE_THRESHOLD = 0.6
TALK_THRESHOLD = 0.15
DETECTION_CONFIDENCE = 0.95


def _clamp(v, lo, hi):
    return float(max(lo, min(hi, v)))


def _dist3(a, b):
    return float(np.linalg.norm(a - b))


class GeometryExtractor:
    """
    Compute raw (unsmoothed) pose and expression parameters from one frame.

    Only called when the detector reported a face. Returned values are
    already clamped to the FaceData ranges.
    """

    def __init__(self, blink_min_interval_ms: float = 100.0, clock=time.time):
        self.blink_min_interval = float(blink_min_interval_ms) / 1000.0
        self.clock = clock
        self.last_blink_at = None
        self.blink_count = 0

    def reset(self):
        self.last_blink_at = None
        self.blink_count = 0

    def head_pose(self, pts: LandmarkSet):
        """Return (pitch, yaw, roll) in degrees."""
        nose = pts[Landmark.NOSE_TIP]
        forehead = pts[Landmark.FOREHEAD]
        chin = pts[Landmark.CHIN]
        left_ear = pts[Landmark.LEFT_EAR]
        right_ear = pts[Landmark.RIGHT_EAR]

        yaw = (left_ear[0] - right_ear[0]) * POSE_SCALE
        pitch = (nose[1] - (forehead[1] + chin[1]) / 2.0) * POSE_SCALE
        roll = math.degrees(math.atan2(left_ear[1] - right_ear[1], left_ear[0] - right_ear[0]))
        return _clamp(pitch, -30, 30), _clamp(yaw, -45, 45), _clamp(roll, -20, 20)

    def eye_openness(self, pts: LandmarkSet):
        left = _dist3(pts[Landmark.LEFT_EYE_TOP], pts[Landmark.LEFT_EYE_BOTTOM])
        right = _dist3(pts[Landmark.RIGHT_EYE_TOP], pts[Landmark.RIGHT_EYE_BOTTOM])
        return _clamp(left * EYE_SCALE, 0, 1), _clamp(right * EYE_SCALE, 0, 1)

    def gaze(self, pts: LandmarkSet):
        """Iris offset from each eye centre, summed over both eyes. (0, 0) without iris points."""
        if not pts.has_iris:
            return 0.0, 0.0

        def center(inner, outer, top, bottom):
            return np.array([
                (pts[inner][0] + pts[outer][0]) / 2.0,
                (pts[top][1] + pts[bottom][1]) / 2.0,
            ])

        left_center = center(Landmark.LEFT_EYE_INNER, Landmark.LEFT_EYE_OUTER,
                             Landmark.LEFT_EYE_TOP, Landmark.LEFT_EYE_BOTTOM)
        right_center = center(Landmark.RIGHT_EYE_INNER, Landmark.RIGHT_EYE_OUTER,
                              Landmark.RIGHT_EYE_TOP, Landmark.RIGHT_EYE_BOTTOM)
        offset = (pts[Landmark.LEFT_IRIS][:2] - left_center) + (pts[Landmark.RIGHT_IRIS][:2] - right_center)
        gx, gy = (offset * GAZE_SCALE).tolist()
        return _clamp(gx, -1, 1), _clamp(gy, -1, 1)

    def mouth(self, pts: LandmarkSet):
        """Return (openness, width)."""
        height = _dist3(pts[Landmark.MOUTH_TOP], pts[Landmark.MOUTH_BOTTOM])
        width = _dist3(pts[Landmark.MOUTH_LEFT], pts[Landmark.MOUTH_RIGHT])
        return _clamp(height * MOUTH_OPEN_SCALE, 0, 1), _clamp(width * MOUTH_WIDTH_SCALE, 0, 1)

    def eyebrows(self, pts: LandmarkSet):
        # y grows downward, so a raised brow sits further above the eye top
        def raise_for(eye_top, inner, outer):
            brow_y = (pts[inner][1] + pts[outer][1]) / 2.0
            gap = pts[eye_top][1] - brow_y
            return _clamp(gap * EYEBROW_SCALE + EYEBROW_NEUTRAL, 0, 1)

        left = raise_for(Landmark.LEFT_EYE_TOP, Landmark.LEFT_EYEBROW_INNER, Landmark.LEFT_EYEBROW_OUTER)
        right = raise_for(Landmark.RIGHT_EYE_TOP, Landmark.RIGHT_EYEBROW_INNER, Landmark.RIGHT_EYEBROW_OUTER)
        return left, right

    def _register_blink(self, blinking: bool):
        if not blinking:
            return
        now = self.clock()
        if self.last_blink_at is None or now - self.last_blink_at > self.blink_min_interval:
            self.last_blink_at = now
            self.blink_count += 1

    def compute(self, pts: LandmarkSet) -> FaceData:
        pitch, yaw, roll = self.head_pose(pts)
        left_eye, right_eye = self.eye_openness(pts)
        gaze_x, gaze_y = self.gaze(pts)
        mouth_open, mouth_width = self.mouth(pts)
        left_brow, right_brow = self.eyebrows(pts)

        blinking = left_eye < BLINK_THRESHOLD or right_eye < BLINK_THRESHOLD
        self._register_blink(blinking)

        return FaceData(
            head_rotation_x=pitch,
            head_rotation_y=yaw,
            head_rotation_z=roll,
            left_eye_openness=left_eye,
            right_eye_openness=right_eye,
            eye_gaze_x=gaze_x,
            eye_gaze_y=gaze_y,
            mouth_openness=mouth_open,
            mouth_width=mouth_width,
            left_eyebrow_raise=left_brow,
            right_eyebrow_raise=right_brow,
            is_smiling=mouth_width > SMILE_THRESHOLD,
            is_talking=mouth_open > TALK_THRESHOLD,
            is_blinking=blinking,
            face_detected=True,
            confidence=DETECTION_CONFIDENCE,
        )
