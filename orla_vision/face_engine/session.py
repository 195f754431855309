"""
Vision session controller.

A VisionSession owns everything one tracking session needs: the pipeline
state (FaceEngine), the camera and the frame loop. It is the only outbound
surface of the face engine:

  session = VisionSession()
  status = session.enable()        # never raises; check status.error
  session.face_data, session.emotion_data, ...
  session.get_emotion_trend(), session.get_dominant_emotion()
  session.disable()

Errors from the detector or the camera are turned into `status().error`
strings. A detector that failed to initialize is not retried: the provider
keeps its FAILED state for the life of the process (until reset()).
"""
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from orla_vision.face_engine.detector import DetectorState, DetectorUnavailable, default_provider
from orla_vision.face_engine.engine import FaceEngine
from orla_vision.face_engine.streamer import CameraError, FrameLoop, WebcamSource
from orla_vision.face_engine.types import Emotion, Trend, VisionSnapshot
from orla_vision.logger import log_event
from orla_vision.processing_config import ConfigError, get_config, validate_config

log = logging.getLogger(__name__)

DETECTOR_FAILED_MSG = "Face tracking failed to initialize and has been disabled."
DETECTOR_UNAVAILABLE_MSG = "Face tracking is unavailable after an earlier initialization failure."
INVALID_CONFIG_MSG = "Face tracking could not start: invalid configuration."
CAMERA_MESSAGES = {
    CameraError.PERMISSION_DENIED: "Camera access denied. Please allow camera access for face tracking.",
    CameraError.DEVICE_UNAVAILABLE: "No camera is available for face tracking. Check that a camera is connected.",
}


def webcam_from_config(cfg):
    return WebcamSource(src=cfg["camera_src"], width=cfg["camera_width"], height=cfg["camera_height"])


@dataclass
class SessionStatus:
    enabled: bool
    camera_active: bool
    detector_state: DetectorState
    error: Optional[str] = None
    frames_processed: int = 0
    capabilities: Dict[str, bool] = field(default_factory=dict)

    def to_dict(self):
        return {
            "enabled": self.enabled,
            "camera_active": self.camera_active,
            "detector_state": self.detector_state.value,
            "error": self.error,
            "frames_processed": self.frames_processed,
            "capabilities": dict(self.capabilities),
        }


class VisionSession:
    def __init__(self, provider=None, camera_factory=webcam_from_config, cfg=None, clock=time.time):
        """
        Args:
          provider: LandmarkDetectorProvider; defaults to the process-wide one
          camera_factory: callable(cfg) -> camera with open()/read()/close()
          cfg: configuration dict; defaults to processing_config at enable time.
            An explicit dict is checked here and raises ConfigError when invalid.
          clock: time source in epoch seconds
        """
        self.provider = provider or default_provider
        self.camera_factory = camera_factory
        self.clock = clock
        self._cfg = cfg
        self.cfg = validate_config(cfg) if cfg else get_config()
        self.engine = FaceEngine(cfg=self.cfg, clock=clock)
        self.detector = None
        self.camera = None
        self.loop = None
        self.enabled = False
        self.error = None
        self.frames_processed = 0
        self._lock = threading.RLock()

    # -- lifecycle ---------------------------------------------------------

    def enable(self, run_loop: bool = True) -> SessionStatus:
        with self._lock:
            if self.enabled:
                return self.status()
            if self.provider.state is DetectorState.FAILED:
                self.error = DETECTOR_UNAVAILABLE_MSG
                return self.status()

            self.error = None
            try:
                self.cfg = validate_config(self._cfg or get_config())
                engine = FaceEngine(cfg=self.cfg, clock=self.clock)
                self.detector = self.provider.create_detector()
                self.camera = self.camera_factory(self.cfg)
                self.camera.open()
            except ConfigError as exc:
                self.error = f"{INVALID_CONFIG_MSG} ({exc})"
                log.warning("vision session not started: %s", exc)
                self._teardown()
                return self.status()
            except DetectorUnavailable as exc:
                self.error = DETECTOR_FAILED_MSG
                log_event("detector_failed", reason=str(exc))
                self._teardown()
                return self.status()
            except CameraError as exc:
                self.error = CAMERA_MESSAGES.get(exc.kind, str(exc))
                log.warning("camera unavailable (%s): %s", exc.kind, exc)
                log_event("camera_error", kind=exc.kind, reason=str(exc))
                self._teardown()
                return self.status()
            except Exception as exc:
                log.exception("vision session failed to start")
                self.error = f"Face tracking could not start: {exc}"
                self._teardown()
                return self.status()

            self.engine = engine
            self.frames_processed = 0
            self.enabled = True
            if run_loop:
                self.loop = FrameLoop(self.step)
                self.loop.start()

        log.info("vision session enabled")
        log_event("session_enabled", loop=run_loop)
        return self.status()

    def disable(self) -> SessionStatus:
        with self._lock:
            loop, self.loop = self.loop, None
        # the loop thread needs the lock to finish its current frame
        if loop is not None:
            loop.stop()
        with self._lock:
            was_enabled = self.enabled
            self._teardown()
        if was_enabled:
            log.info("vision session disabled after %d frames", self.frames_processed)
            log_event("session_disabled", frames=self.frames_processed)
        return self.status()

    def _teardown(self):
        camera, self.camera = self.camera, None
        detector, self.detector = self.detector, None
        try:
            if camera is not None:
                camera.close()
        finally:
            try:
                if detector is not None:
                    detector.close()
            finally:
                self.enabled = False
                self.engine.reset()

    def __enter__(self):
        self.enable()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disable()

    # -- frame processing --------------------------------------------------

    def step(self) -> bool:
        """Read one camera frame and process it.

        Returns False when no frame was ready. Errors from the camera or the
        detector propagate; the frame loop counts them as skipped frames.
        """
        camera = self.camera
        if camera is None:
            return False
        frame = camera.read()
        if frame is None:
            return False
        self.process_frame(frame)
        return True

    def process_frame(self, image) -> VisionSnapshot:
        with self._lock:
            if self.detector is None:
                raise RuntimeError("vision session is not enabled")
            points = self.detector.detect(image)
            return self.process_landmarks(points)

    def process_landmarks(self, points) -> VisionSnapshot:
        """Feed one frame of detector output (None or empty for no face)."""
        with self._lock:
            snapshot = self.engine.process_landmarks(points)
            self.frames_processed += 1
            return snapshot

    # -- queries -----------------------------------------------------------

    def snapshot(self) -> VisionSnapshot:
        with self._lock:
            return self.engine.latest

    @property
    def face_data(self):
        return self.snapshot().face

    @property
    def emotion_data(self):
        return self.snapshot().emotion

    @property
    def presence_data(self):
        return self.snapshot().presence

    @property
    def gesture_data(self):
        return self.snapshot().gesture

    def get_emotion_trend(self) -> Trend:
        with self._lock:
            return self.engine.trends.emotion_trend()

    def get_dominant_emotion(self) -> Emotion:
        with self._lock:
            return self.engine.trends.dominant_emotion()

    @property
    def capabilities(self) -> Dict[str, bool]:
        return {
            "face_tracking": True,
            # head-motion proxy only, no hand tracking
            "gesture_recognition": bool(self.cfg["enable_gestures"]),
            "emotion_detection": bool(self.cfg["enable_emotion"]),
            "presence_awareness": bool(self.cfg["enable_presence"]),
        }

    def status(self) -> SessionStatus:
        with self._lock:
            return SessionStatus(
                enabled=self.enabled,
                camera_active=self.camera is not None,
                detector_state=self.provider.state,
                error=self.error,
                frames_processed=self.frames_processed,
                capabilities=self.capabilities,
            )
