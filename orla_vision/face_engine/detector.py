import importlib
import logging
import threading
from enum import Enum

import cv2

from orla_vision.face_engine.landmarks import FaceTopology, REFINED_POINTS, BASE_POINTS, to_array

log = logging.getLogger(__name__)


class DetectorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class DetectorUnavailable(RuntimeError):
    """The landmark detector cannot be created; not retried until reset()."""


class FaceMeshDetector:
    """
    Wraps a MediaPipe FaceMesh instance.

    Args:
        face_mesh_cls: the FaceMesh class resolved by the provider
        max_num_faces: maximum faces to track
        min_detection_confidence: detection threshold
        min_tracking_confidence: tracking threshold
        refine_landmarks: iris refinement, required for gaze
    """

    def __init__(self, face_mesh_cls, max_num_faces=1, min_detection_confidence=0.5,
                 min_tracking_confidence=0.5, refine_landmarks=True):
        self.face_mesh = face_mesh_cls(
            static_image_mode=False,
            max_num_faces=max_num_faces,
            refine_landmarks=refine_landmarks,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self.topology = FaceTopology(REFINED_POINTS if refine_landmarks else BASE_POINTS, refine_landmarks)

    def detect(self, image):
        """Return an (N, 3) array for the first face in a BGR image, or None."""
        img_rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        results = self.face_mesh.process(img_rgb)
        if not results.multi_face_landmarks:
            return None
        return to_array(results.multi_face_landmarks[0])

    def close(self):
        self.face_mesh.close()


class LandmarkDetectorProvider:
    """
    Resolves the FaceMesh class and hands out one detector per session.

    The provider holds only the lifecycle state, which is shared by every
    session using it. Each `create_detector()` call builds a fresh
    FaceMeshDetector owned (and closed) by the caller, so tracking state is
    never shared between sessions.

    A missing module or class, or a detector that fails to construct, moves
    the provider to FAILED. From then on `create_detector()` raises
    immediately on every call, until `reset()` is called explicitly.
    """

    def __init__(self, module_name="mediapipe.python.solutions.face_mesh", class_name="FaceMesh", **detector_params):
        self.module_name = module_name
        self.class_name = class_name
        self.detector_params = detector_params
        self.state = DetectorState.UNINITIALIZED
        self.failure_reason = None
        self._face_mesh_cls = None
        self._lock = threading.Lock()

    def _resolve(self):
        try:
            module = importlib.import_module(self.module_name)
        except ImportError as exc:
            raise DetectorUnavailable(f"landmark detector module '{self.module_name}' could not be imported: {exc}") from exc
        face_mesh_cls = getattr(module, self.class_name, None)
        if face_mesh_cls is None:
            raise DetectorUnavailable(f"{self.class_name} class not found in module '{self.module_name}'")
        return face_mesh_cls

    def _build(self, face_mesh_cls):
        try:
            detector = FaceMeshDetector(face_mesh_cls, **self.detector_params)
            detector.topology.validate()
        except Exception as exc:
            raise DetectorUnavailable(f"{self.class_name} failed to initialize: {exc}") from exc
        return detector

    def create_detector(self) -> FaceMeshDetector:
        """Return a new detector for one session."""
        with self._lock:
            if self.state is DetectorState.FAILED:
                raise DetectorUnavailable(self.failure_reason)

            if self.state is DetectorState.UNINITIALIZED:
                self.state = DetectorState.INITIALIZING
            try:
                if self._face_mesh_cls is None:
                    self._face_mesh_cls = self._resolve()
                detector = self._build(self._face_mesh_cls)
            except DetectorUnavailable as exc:
                self.state = DetectorState.FAILED
                self.failure_reason = str(exc)
                log.error("landmark detector unavailable: %s", exc)
                raise
            if self.state is not DetectorState.READY:
                self.state = DetectorState.READY
                log.info("landmark detector ready (%s.%s)", self.module_name, self.class_name)
            return detector

    def reset(self):
        """Forget the resolved class and any failure so the next session tries again.

        Detectors already handed out stay with their sessions.
        """
        with self._lock:
            self._face_mesh_cls = None
            self.state = DetectorState.UNINITIALIZED
            self.failure_reason = None


# process-wide provider; sessions share its FAILED state, not its detectors
default_provider = LandmarkDetectorProvider()
