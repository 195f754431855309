"""
Rolling emotion history.

Keeps the last `history_size` EmotionData samples and answers two questions
over them: which primary emotion dominates, and whether valence is moving up
or down. The trend compares the mean valence of the newest `window` samples
against the oldest `window` samples still retained.
"""
from collections import deque
from typing import List

from orla_vision.face_engine.types import Emotion, EmotionData, Trend


class TrendAggregator:
    def __init__(self, history_size: int = 30, window: int = 5, trend_threshold: float = 0.2):
        self.window = int(window)
        self.trend_threshold = float(trend_threshold)
        self.history = deque(maxlen=int(history_size))

    def reset(self):
        self.history.clear()

    def add(self, emotion: EmotionData):
        self.history.append(emotion)

    def samples(self) -> List[EmotionData]:
        return list(self.history)

    def dominant_emotion(self) -> Emotion:
        if not self.history:
            return Emotion.NEUTRAL
        counts = {}
        for e in self.history:
            counts[e.primary] = counts.get(e.primary, 0) + 1
        # max() keeps the first key reaching the top count (insertion order)
        return max(counts, key=counts.get)

    def emotion_trend(self) -> Trend:
        n = len(self.history)
        if n < self.window:
            return Trend.STABLE
        samples = list(self.history)
        recent = sum(e.valence for e in samples[-self.window:]) / self.window
        oldest = sum(e.valence for e in samples[:self.window]) / min(self.window, n)
        diff = recent - oldest
        if diff > self.trend_threshold:
            return Trend.IMPROVING
        if diff < -self.trend_threshold:
            return Trend.DECLINING
        return Trend.STABLE
