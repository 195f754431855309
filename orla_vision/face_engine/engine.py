import time

from orla_vision.face_engine.emotion import EmotionClassifier
from orla_vision.face_engine.features import GeometryExtractor
from orla_vision.face_engine.gestures import GestureDetector
from orla_vision.face_engine.landmarks import LandmarkSet, to_array
from orla_vision.face_engine.presence import PresenceAnalyzer
from orla_vision.face_engine.smoother import FaceDataSmoother
from orla_vision.face_engine.trends import TrendAggregator
from orla_vision.face_engine.types import EmotionData, GestureData, PresenceData, VisionSnapshot
from orla_vision.processing_config import get_config


class FaceEngine:
    """
    FaceEngine ties together geometry extraction, smoothing and the signal
    analyzers. Use FaceEngine.process_landmarks(points) once per frame with
    the detector output (None or empty when no face was found).

    Data flows one way: extract -> smooth -> {emotion, presence, gesture}
    -> trend history. The latest snapshot is kept in `self.latest`.
    """

    def __init__(self, cfg=None, clock=time.time):
        cfg = cfg or get_config()
        self.cfg = cfg
        factor = cfg["smoothing_factor"] if cfg["enable_smoothing"] else 1.0
        self.extractor = GeometryExtractor(blink_min_interval_ms=cfg["blink_min_interval_ms"], clock=clock)
        self.smoother = FaceDataSmoother(factor=factor)
        self.emotions = EmotionClassifier()
        self.presence = PresenceAnalyzer(clock=clock)
        self.gestures = GestureDetector(history_size=cfg["gesture_history_size"])
        self.trends = TrendAggregator(history_size=cfg["emotion_history_size"])
        self.latest = VisionSnapshot()

    def process_landmarks(self, points) -> VisionSnapshot:
        arr = to_array(points)
        if arr is None:
            face = self.smoother.mark_lost()
        else:
            raw = self.extractor.compute(LandmarkSet(arr))
            face = self.smoother.smooth(raw)

        emotion = self.emotions.classify(face) if self.cfg["enable_emotion"] else EmotionData()
        presence = self.presence.analyze(face) if self.cfg["enable_presence"] else PresenceData()
        gesture = self.gestures.detect(face) if self.cfg["enable_gestures"] else GestureData()
        if self.cfg["enable_emotion"]:
            self.trends.add(emotion)

        self.latest = VisionSnapshot(face=face, emotion=emotion, presence=presence, gesture=gesture)
        return self.latest

    def reset(self):
        self.extractor.reset()
        self.smoother.reset()
        self.presence.reset()
        self.gestures.reset()
        self.trends.reset()
        self.latest = VisionSnapshot()
