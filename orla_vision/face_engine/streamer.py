import logging
import threading

import cv2

log = logging.getLogger(__name__)


class CameraError(RuntimeError):
    PERMISSION_DENIED = "permission_denied"
    DEVICE_UNAVAILABLE = "device_unavailable"

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


class WebcamSource:
    """
    WebcamSource wraps an OpenCV capture device as a scoped resource.

    Methods:
      - open(): acquire the device (raises CameraError)
      - read(): next BGR frame, or None when no frame is ready
      - close(): release the device; safe to call more than once

    Also usable as a context manager so the device is released on every exit path.
    """

    def __init__(self, src=0, width=640, height=480, fps=30):
        self.src = src
        self.width = width
        self.height = height
        self.fps = fps
        self._cap = None

    @property
    def is_open(self) -> bool:
        return self._cap is not None

    def open(self):
        if self._cap is not None:
            return self
        try:
            cap = cv2.VideoCapture(self.src)
        except PermissionError as exc:
            raise CameraError(CameraError.PERMISSION_DENIED, f"camera access denied: {exc}") from exc
        if not cap.isOpened():
            cap.release()
            raise CameraError(CameraError.DEVICE_UNAVAILABLE, f"camera {self.src!r} could not be opened")
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        cap.set(cv2.CAP_PROP_FPS, self.fps)
        self._cap = cap
        return self

    def read(self):
        if self._cap is None:
            return None
        ret, frame = self._cap.read()
        if not ret:
            return None
        return frame

    def close(self):
        cap, self._cap = self._cap, None
        if cap is not None:
            cap.release()

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()


class FrameLoop:
    """
    Cooperative per-frame loop on a single worker thread.

    `step` is called once per iteration and is expected to block on the
    camera for the next frame, which ties the loop to the camera cadence.
    It returns True when a frame was processed; on False the loop idles
    briefly. The stop event is checked before every iteration. A step that
    raises is counted in `skipped`, logged, and followed by the same idle
    wait; the loop keeps going.
    """

    def __init__(self, step, idle_wait: float = 0.01, name: str = "vision-frame-loop"):
        self.step = step
        self.idle_wait = float(idle_wait)
        self.name = name
        self._stop = threading.Event()
        self._thread = None
        self.frames = 0
        self.skipped = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 2.0):
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                log.warning("%s did not stop within %.1fs", self.name, timeout)

    def _run(self):
        while not self._stop.is_set():
            try:
                processed = self.step()
            except Exception as exc:
                self.skipped += 1
                log.warning("frame skipped: %s", exc)
                self._stop.wait(self.idle_wait)
                continue
            if processed:
                self.frames += 1
            else:
                self._stop.wait(self.idle_wait)
