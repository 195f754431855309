from types import SimpleNamespace

import numpy as np
import pytest

from orla_vision.face_engine.landmarks import (
    BASE_POINTS, REFINED_POINTS, FaceTopology, Landmark, LandmarkSet, TopologyError, to_array,
)

from synthetic_landmarks import make_face


def test_refined_topology_addresses_every_landmark():
    FaceTopology(REFINED_POINTS, refined=True).validate()


def test_base_topology_does_not_require_iris():
    FaceTopology(BASE_POINTS, refined=False).validate()


def test_refined_topology_too_small_fails_validation():
    with pytest.raises(TopologyError) as err:
        FaceTopology(BASE_POINTS, refined=True).validate()
    assert "LEFT_IRIS" in str(err.value)


def test_landmark_set_named_access():
    pts = LandmarkSet(make_face())
    assert pts.has_iris
    assert len(pts) == REFINED_POINTS
    assert pts[Landmark.FOREHEAD].tolist() == [0.5, 0.2, 0.0]


def test_landmark_set_rejects_short_frame():
    with pytest.raises(TopologyError):
        LandmarkSet(np.zeros((100, 3)))


def test_iris_needs_refined_frame():
    pts = LandmarkSet(make_face(refined=False))
    assert not pts.has_iris
    with pytest.raises(TopologyError):
        pts[Landmark.LEFT_IRIS]


def test_to_array_no_face():
    assert to_array(None) is None
    assert to_array([]) is None


def test_to_array_from_mediapipe_landmarks():
    mp_like = SimpleNamespace(landmark=[SimpleNamespace(x=0.1, y=0.2, z=0.3)] * 3)
    arr = to_array(mp_like)
    assert arr.shape == (3, 3)
    assert arr[0].tolist() == pytest.approx([0.1, 0.2, 0.3])
