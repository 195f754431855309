"""Simple CLI to run a vision session against the local webcam.

Usage: python -m orla_vision.tools.webcam_signals [--json]
Press 'q' in the display window to quit. With --json each frame's snapshot
is printed to stdout as a JSON line.
"""
import argparse
import json
import time

import cv2

from orla_vision.face_engine.session import VisionSession
from orla_vision.logger import configure_logging


def _overlay_lines(session):
    snap = session.snapshot()
    face, emotion, presence, gesture = snap.face, snap.emotion, snap.presence, snap.gesture
    return [
        f"face: {face.face_detected}  pitch {face.head_rotation_x:+.1f} yaw {face.head_rotation_y:+.1f} roll {face.head_rotation_z:+.1f}",
        f"emotion: {emotion.primary.value} ({emotion.confidence:.2f}) v={emotion.valence:+.2f} a={emotion.arousal:.2f}",
        f"attention: {presence.attention_level:.2f}  looking: {presence.is_looking_at_screen}  dist: {presence.distance_from_screen.value}",
        f"gesture: {gesture.gesture.value}  trend: {session.get_emotion_trend().value}  dominant: {session.get_dominant_emotion().value}",
    ]


def run_display(session, show_fps=True, print_json=False):
    """Drive the session from the display loop until 'q' is pressed."""
    prev = time.time()
    frame_count = 0
    camera = session.camera
    while True:
        frame = camera.read()
        if frame is None:
            print("[webcam] frame read failed")
            break
        frame_count += 1
        try:
            session.process_frame(frame)
        except Exception as exc:
            print(f"[webcam] frame {frame_count} skipped: {exc}")

        y = 30
        if show_fps:
            now = time.time()
            dt = now - prev if now - prev > 0 else 1e-6
            prev = now
            cv2.putText(frame, f"FPS: {int(1.0 / dt)}", (10, y), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 0), 2)
            y += 25
        for line in _overlay_lines(session):
            cv2.putText(frame, line, (10, y), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 255, 0), 1)
            y += 22

        cv2.imshow("Orla Vision", frame)

        if print_json:
            out = {"timestamp": time.time(), **session.snapshot().to_dict()}
            print(json.dumps(out))

        key = cv2.waitKey(1) & 0xFF
        if key == ord("q"):
            break


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run face tracking against the webcam")
    parser.add_argument("--json", action="store_true", help="print per-frame snapshots as JSON lines")
    args = parser.parse_args(argv)

    configure_logging()
    session = VisionSession()
    status = session.enable(run_loop=False)
    if status.error:
        print(f"[webcam] {status.error}")
        return 1
    try:
        run_display(session, show_fps=True, print_json=args.json)
    finally:
        session.disable()
        cv2.destroyAllWindows()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
