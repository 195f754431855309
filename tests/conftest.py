import sys
import types

import pytest

from orla_vision import processing_config
from orla_vision.face_engine.detector import LandmarkDetectorProvider

from fakes import FakeCamera, FakeFaceMesh
from synthetic_landmarks import make_face


@pytest.fixture(autouse=True)
def _reset_config():
    processing_config.reset_config()
    yield
    processing_config.reset_config()


@pytest.fixture
def fake_mesh_module(monkeypatch):
    module = types.ModuleType("fake_face_mesh")
    module.FaceMesh = FakeFaceMesh
    FakeFaceMesh.frames = [make_face()]
    FakeFaceMesh.instances = []
    FakeFaceMesh.fail = False
    monkeypatch.setitem(sys.modules, "fake_face_mesh", module)
    return module


@pytest.fixture
def provider(fake_mesh_module):
    return LandmarkDetectorProvider(module_name="fake_face_mesh")


@pytest.fixture
def cameras():
    """Camera factory that records every camera it hands out."""
    made = []

    def factory(cfg, **kw):
        cam = FakeCamera(**kw)
        made.append(cam)
        return cam

    factory.made = made
    return factory
