"""Stand-ins for the MediaPipe FaceMesh class and the webcam."""
from types import SimpleNamespace

import numpy as np

from orla_vision.face_engine.streamer import CameraError


def as_mediapipe(arr):
    return SimpleNamespace(landmark=[SimpleNamespace(x=x, y=y, z=z) for x, y, z in arr])


class FakeFaceMesh:
    """Returns `FakeFaceMesh.frames` in order, repeating the last one; None entries mean no face."""

    frames = []
    instances = []
    fail = False

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.calls = 0
        self.closed = False
        FakeFaceMesh.instances.append(self)

    def process(self, img_rgb):
        assert img_rgb.ndim == 3
        if FakeFaceMesh.fail:
            raise ValueError("bad frame")
        frames = FakeFaceMesh.frames
        frame = frames[min(self.calls, len(frames) - 1)] if frames else None
        self.calls += 1
        if frame is None:
            return SimpleNamespace(multi_face_landmarks=None)
        return SimpleNamespace(multi_face_landmarks=[as_mediapipe(frame)])

    def close(self):
        self.closed = True


class FakeCamera:
    def __init__(self, error_kind=None, frames=None):
        self.error_kind = error_kind
        self.frames = frames
        self.opened = False
        self.closed = False
        self.reads = 0

    def open(self):
        if self.error_kind:
            raise CameraError(self.error_kind, "fake camera failure")
        self.opened = True
        return self

    def read(self):
        if not self.opened or self.closed:
            return None
        self.reads += 1
        if self.frames is not None and self.reads > self.frames:
            return None
        return np.zeros((48, 64, 3), dtype=np.uint8)

    def close(self):
        self.closed = True
