"""
Rule-based emotion classifier over smoothed face parameters.

Each rule lists the feature flags it uses. Rules are checked in a fixed
order and the first match wins, so a face that is both smiling and showing
the surprise pattern is reported as happy.
"""
from orla_vision.face_engine.types import Emotion, EmotionData, FaceData, SecondaryEmotion


def _clamp(v, lo, hi):
    return float(max(lo, min(hi, v)))


class EmotionClassifier:
    """
    Map FaceData to a primary emotion with valence/arousal.

    Stateless: `classify()` depends only on its argument.
    """

    def __init__(self, cfg=None):
        self.cfg = cfg or {
            "smile_width": 0.6,
            "mouth_open": 0.3,
            "eyebrows_raised": 0.6,
            "eyebrows_furrowed": 0.35,
            "eyes_wide": 0.85,
            "eyes_squinted": 0.5,
        }

    def features(self, face: FaceData) -> dict:
        brow = face.avg_eyebrow_raise
        eyes = face.avg_eye_openness
        return {
            "mouth_smile": face.mouth_width > self.cfg["smile_width"],
            "mouth_open": face.mouth_openness > self.cfg["mouth_open"],
            "eyebrows_raised": brow > self.cfg["eyebrows_raised"],
            "eyebrows_furrowed": brow < self.cfg["eyebrows_furrowed"],
            "eyes_wide": eyes > self.cfg["eyes_wide"],
            "eyes_squinted": eyes < self.cfg["eyes_squinted"],
        }

    def classify(self, face: FaceData) -> EmotionData:
        if not face.face_detected:
            return EmotionData()

        f = self.features(face)
        secondary = []

        if f["mouth_smile"] and not f["eyebrows_furrowed"]:
            primary = Emotion.HAPPY
            valence = 0.7 + (face.mouth_width - self.cfg["smile_width"]) * 0.5
            arousal = 0.6
            confidence = min(1.0, face.mouth_width * 1.2)
        elif f["eyebrows_raised"] and f["mouth_open"] and f["eyes_wide"]:
            primary = Emotion.SURPRISED
            valence = 0.1
            arousal = 0.9
            # brows 0.5 + mouth 0.3 + eyes 0.2, all present
            confidence = 1.0
        elif f["eyebrows_furrowed"] and not f["mouth_smile"]:
            primary = Emotion.ANGRY
            valence = -0.6
            arousal = 0.7
            confidence = 0.7
            secondary.append(SecondaryEmotion("frustrated", 0.5))
        elif not f["mouth_smile"] and not f["eyebrows_raised"] and f["eyes_squinted"]:
            primary = Emotion.SAD
            valence = -0.5
            arousal = 0.3
            confidence = 0.6
        else:
            primary = Emotion.NEUTRAL
            valence = 0.2 if face.is_smiling else 0.0
            arousal = 0.6 if face.is_talking else 0.4
            confidence = face.confidence
            if f["eyebrows_raised"]:
                secondary.append(SecondaryEmotion("curious", 0.4))
            if face.is_talking:
                secondary.append(SecondaryEmotion("engaged", 0.5))

        return EmotionData(
            primary=primary,
            confidence=_clamp(confidence, 0, 1),
            valence=_clamp(valence, -1, 1),
            arousal=_clamp(arousal, 0, 1),
            secondary_emotions=secondary,
        )
