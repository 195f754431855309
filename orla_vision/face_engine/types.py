"""
Data records that flow between the stages of the vision pipeline.

Every record has sensible defaults so a stage that has nothing to say (no
face, stage disabled) can still hand a complete value downstream. `to_dict()`
returns JSON-safe values for the CLI and the control routes.
"""
from dataclasses import dataclass, field, asdict, replace
from enum import Enum
from typing import List, Optional, Tuple


def _clamp(v: float, lo: float, hi: float) -> float:
    return float(max(lo, min(hi, v)))


class Emotion(str, Enum):
    NEUTRAL = "neutral"
    HAPPY = "happy"
    SAD = "sad"
    SURPRISED = "surprised"
    ANGRY = "angry"
    # reserved, no classifier rule produces these
    FEARFUL = "fearful"
    DISGUSTED = "disgusted"


class Distance(str, Enum):
    CLOSE = "close"
    MEDIUM = "medium"
    FAR = "far"
    UNKNOWN = "unknown"


class Gesture(str, Enum):
    NONE = "none"
    WAVE = "wave"
    THUMBS_UP = "thumbs_up"
    THUMBS_DOWN = "thumbs_down"
    PEACE = "peace"
    POINTING = "pointing"
    OPEN_PALM = "open_palm"
    FIST = "fist"


class Trend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


# (field, low, high) for every bounded numeric FaceData field
FACE_FIELD_RANGES: Tuple[Tuple[str, float, float], ...] = (
    ("head_rotation_x", -30.0, 30.0),
    ("head_rotation_y", -45.0, 45.0),
    ("head_rotation_z", -20.0, 20.0),
    ("left_eye_openness", 0.0, 1.0),
    ("right_eye_openness", 0.0, 1.0),
    ("eye_gaze_x", -1.0, 1.0),
    ("eye_gaze_y", -1.0, 1.0),
    ("mouth_openness", 0.0, 1.0),
    ("mouth_width", 0.0, 1.0),
    ("left_eyebrow_raise", 0.0, 1.0),
    ("right_eyebrow_raise", 0.0, 1.0),
)


@dataclass
class FaceData:
    """Pose and expression parameters for one frame.

    Rotations are degrees: x = pitch (nod), y = yaw (turn), z = roll (tilt).
    """
    head_rotation_x: float = 0.0
    head_rotation_y: float = 0.0
    head_rotation_z: float = 0.0
    left_eye_openness: float = 1.0
    right_eye_openness: float = 1.0
    eye_gaze_x: float = 0.0
    eye_gaze_y: float = 0.0
    mouth_openness: float = 0.0
    mouth_width: float = 0.5  # smile proxy
    left_eyebrow_raise: float = 0.5
    right_eyebrow_raise: float = 0.5
    is_smiling: bool = False
    is_talking: bool = False
    is_blinking: bool = False
    face_detected: bool = False
    confidence: float = 0.0

    def clamped(self) -> "FaceData":
        """Return a copy with every bounded field forced into its range."""
        updates = {name: _clamp(getattr(self, name), lo, hi) for name, lo, hi in FACE_FIELD_RANGES}
        updates["confidence"] = _clamp(self.confidence, 0.0, 1.0)
        return replace(self, **updates)

    @property
    def avg_eye_openness(self) -> float:
        return (self.left_eye_openness + self.right_eye_openness) / 2.0

    @property
    def avg_eyebrow_raise(self) -> float:
        return (self.left_eyebrow_raise + self.right_eyebrow_raise) / 2.0

    def to_dict(self):
        return asdict(self)


@dataclass
class SecondaryEmotion:
    emotion: str
    confidence: float


@dataclass
class EmotionData:
    primary: Emotion = Emotion.NEUTRAL
    confidence: float = 0.0
    valence: float = 0.0  # -1 (negative) .. 1 (positive)
    arousal: float = 0.5  # 0 (calm) .. 1 (excited)
    secondary_emotions: List[SecondaryEmotion] = field(default_factory=list)

    def to_dict(self):
        return {
            "primary": self.primary.value,
            "confidence": float(self.confidence),
            "valence": float(self.valence),
            "arousal": float(self.arousal),
            "secondary_emotions": [asdict(s) for s in self.secondary_emotions],
        }


@dataclass
class PresenceData:
    is_present: bool = False
    is_looking_at_screen: bool = False
    attention_level: float = 0.0
    distance_from_screen: Distance = Distance.UNKNOWN
    last_seen_at: Optional[float] = None  # epoch seconds
    session_duration: int = 0  # whole seconds

    def to_dict(self):
        out = asdict(self)
        out["distance_from_screen"] = self.distance_from_screen.value
        return out


@dataclass
class GestureData:
    gesture: Gesture = Gesture.NONE
    confidence: float = 0.0
    # no hand tracking, always None
    hand_position: Optional[Tuple[float, float]] = None

    def to_dict(self):
        return {"gesture": self.gesture.value, "confidence": float(self.confidence), "hand_position": self.hand_position}


@dataclass
class VisionSnapshot:
    """Everything the pipeline derived from one frame."""
    face: FaceData = field(default_factory=FaceData)
    emotion: EmotionData = field(default_factory=EmotionData)
    presence: PresenceData = field(default_factory=PresenceData)
    gesture: GestureData = field(default_factory=GestureData)

    def to_dict(self):
        return {
            "face": self.face.to_dict(),
            "emotion": self.emotion.to_dict(),
            "presence": self.presence.to_dict(),
            "gesture": self.gesture.to_dict(),
        }
