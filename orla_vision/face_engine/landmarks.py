from enum import IntEnum

import numpy as np


# MediaPipe FaceMesh topology sizes. Refinement appends 10 iris points.
BASE_POINTS = 468
REFINED_POINTS = 478


class Landmark(IntEnum):
    """Named FaceMesh landmark indices used by the geometry extractor."""
    # head pose
    NOSE_TIP = 1
    FOREHEAD = 10
    CHIN = 152
    LEFT_EAR = 234
    RIGHT_EAR = 454

    # eyes
    LEFT_EYE_TOP = 159
    LEFT_EYE_BOTTOM = 145
    RIGHT_EYE_TOP = 386
    RIGHT_EYE_BOTTOM = 374
    LEFT_EYE_INNER = 133
    LEFT_EYE_OUTER = 33
    RIGHT_EYE_INNER = 362
    RIGHT_EYE_OUTER = 263
    LEFT_IRIS = 468
    RIGHT_IRIS = 473

    # mouth
    MOUTH_TOP = 13
    MOUTH_BOTTOM = 14
    MOUTH_LEFT = 61
    MOUTH_RIGHT = 291
    UPPER_LIP = 0
    LOWER_LIP = 17

    # eyebrows
    LEFT_EYEBROW_INNER = 107
    LEFT_EYEBROW_OUTER = 70
    RIGHT_EYEBROW_INNER = 336
    RIGHT_EYEBROW_OUTER = 300


IRIS_LANDMARKS = frozenset({Landmark.LEFT_IRIS, Landmark.RIGHT_IRIS})


class TopologyError(ValueError):
    """Landmark data does not match the declared FaceMesh topology."""


class FaceTopology:
    """
    Declared shape of the landmark mesh supplied by the detector.

    `validate()` is meant to run once at startup so that every named
    landmark is known to be addressable before any frame is processed.
    """

    def __init__(self, num_points: int = REFINED_POINTS, refined: bool = True):
        self.num_points = int(num_points)
        self.refined = bool(refined)

    def required(self):
        if self.refined:
            return list(Landmark)
        return [lm for lm in Landmark if lm not in IRIS_LANDMARKS]

    def validate(self):
        missing = [lm.name for lm in self.required() if int(lm) >= self.num_points]
        if missing:
            raise TopologyError(
                f"topology with {self.num_points} points cannot address: {', '.join(missing)}"
            )
        return self


class LandmarkSet:
    """
    Named view over one frame of landmarks.

    Wraps an (N, 3) array of normalized x, y, z and exposes points through
    the closed `Landmark` enumeration: `pts[Landmark.NOSE_TIP]`.
    """

    def __init__(self, points):
        arr = np.asarray(points, dtype=float)
        if arr.ndim != 2 or arr.shape[1] < 3:
            raise TopologyError(f"expected an (N, 3) landmark array, got shape {arr.shape}")
        if arr.shape[0] < BASE_POINTS:
            raise TopologyError(f"expected at least {BASE_POINTS} landmarks, got {arr.shape[0]}")
        self.points = arr[:, :3]

    @property
    def has_iris(self) -> bool:
        return self.points.shape[0] >= REFINED_POINTS

    def __getitem__(self, lm: Landmark) -> np.ndarray:
        if lm in IRIS_LANDMARKS and not self.has_iris:
            raise TopologyError(f"{lm.name} requires refined (iris) landmarks")
        return self.points[int(lm)]

    def __len__(self):
        return self.points.shape[0]


def to_array(points):
    """
    Convert detector output to an (N, 3) float array.

    Accepts a numpy array, a sequence of (x, y, z) tuples, or a MediaPipe
    NormalizedLandmarkList (anything with a `.landmark` sequence of objects
    carrying x, y, z). Returns None when there is no face.
    """
    if points is None:
        return None
    if hasattr(points, "landmark"):
        points = [(lm.x, lm.y, lm.z) for lm in points.landmark]
    arr = np.asarray(points, dtype=float)
    if arr.size == 0:
        return None
    return arr
