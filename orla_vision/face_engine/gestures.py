"""
Head-motion gesture heuristics.

There is no hand tracking: a nod (pitch without much yaw) is reported as
"thumbs_up" (approval) and a head shake (yaw without a nod) as
"thumbs_down" (disapproval). These are symbolic stand-ins for the real hand
gestures of the same name.
"""
from collections import deque
from typing import List

from orla_vision.face_engine.types import FaceData, Gesture, GestureData


class GestureDetector:
    def __init__(self, history_size: int = 10, nod_threshold: float = 10.0, shake_threshold: float = 15.0):
        self.nod_threshold = float(nod_threshold)
        self.shake_threshold = float(shake_threshold)
        self.history = deque(maxlen=int(history_size))

    def reset(self):
        self.history.clear()

    def recent(self) -> List[Gesture]:
        return list(self.history)

    def detect(self, face: FaceData) -> GestureData:
        if not face.face_detected:
            return GestureData()

        nodding = abs(face.head_rotation_x) > self.nod_threshold
        shaking = abs(face.head_rotation_y) > self.shake_threshold

        if nodding and not shaking:
            out = GestureData(Gesture.THUMBS_UP, 0.5)
        elif shaking and not nodding:
            out = GestureData(Gesture.THUMBS_DOWN, 0.4)
        else:
            out = GestureData()

        self.history.append(out.gesture)
        return out
