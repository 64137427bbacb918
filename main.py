import argparse
import threading
import time
from pathlib import Path

import cv2
import numpy as np
import yaml

from detection.camera_perception import CameraPerception
from signals.api_handler import APIHandler
from signals.event_sink import CompositeSink
from signals.interview_session import InterviewSession, SessionInitError
from signals.session_logger import SessionLogger
from signals.visual_overlay import VisualOverlay

DEFAULT_CONFIG_PATH = "config/settings.yaml"


def _cv2_imshow_available() -> bool:
  """Check if cv2.imshow is available in this environment."""
  try:
    test_img = np.zeros((10, 10, 3), dtype=np.uint8)
    cv2.imshow("_cv2_test", test_img)
    cv2.waitKey(1)
    cv2.destroyWindow("_cv2_test")
    return True
  except Exception:
    return False


def load_config(path=DEFAULT_CONFIG_PATH):
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path.absolute()}")
    with open(config_path, "r") as f:
        config = yaml.safe_load(f)
        if config is None:
            raise ValueError(f"Config file is empty or invalid: {config_path.absolute()}")
        return config


def build_sink(config, session_name):
  """Session logger always; API and overlay depending on config."""
  sink = CompositeSink()
  output_dir = config.get("session", {}).get("output_dir", "log")
  sink.add(SessionLogger(session_name=session_name, output_dir=output_dir))

  api_cfg = config.get("api", {})
  api_handler = None
  if api_cfg.get("enabled", False):
    try:
      api_handler = APIHandler(api_url=api_cfg["url"], timeout=api_cfg.get("timeout", 10))
      sink.add(api_handler)
    except KeyError:
      print("⚠ Warning: api.enabled is set but api.url is missing. Continuing without remote reporting...")
  return sink, api_handler


def parse_args(argv=None):
  parser = argparse.ArgumentParser(description="Proctor a live interview from the local camera.")
  parser.add_argument("--candidate", required=True, help="Candidate name")
  parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to settings.yaml")
  parser.add_argument("--room-id", default=None, help="Room identifier (random if omitted)")
  return parser.parse_args(argv)


#Main

def main(argv=None):
  args = parse_args(argv)
  config = load_config(args.config)

  camera_index = config["camera"]["index"]
  show_window = bool(config.get("debug", {}).get("show_window", True))
  exit_key = config.get("debug", {}).get("exit_key", ord("q"))
  if show_window and not _cv2_imshow_available():
    print("⚠ Warning: OpenCV GUI not available. Disabling window display.")
    show_window = False

  cap = cv2.VideoCapture(camera_index)
  if not cap.isOpened():
    print("Error: Could not open video.")
    return 1

  perception = CameraPerception(config=config.get("detection", {}))
  session = InterviewSession(args.candidate, perception, config=config, room_id=args.room_id)
  sink, api_handler = build_sink(config, session_name=f"interview_{session.room_id[:8]}")
  overlay = VisualOverlay()
  sink.add(overlay)
  session.sink = sink

  try:
    session.start()
  except SessionInitError as e:
    print(f"✗ Could not start interview: {e}")
    cap.release()
    return 1

  # Latest camera frame, shared between the display loop and the tick worker
  latest = {"frame": None}
  frame_lock = threading.Lock()

  def current_frame():
    with frame_lock:
      return None if latest["frame"] is None else latest["frame"].copy()

  session.run(current_frame)

  try:
    while True:
      ret, frame = cap.read()
      if not ret:
        print("Error: Could not read frame.")
        break

      with frame_lock:
        latest["frame"] = frame

      if show_window:
        display = overlay.render_full_overlay(frame.copy(), session.orchestrator.last_result, time.time())
        try:
          cv2.imshow("Interview Monitor", display)
          if cv2.waitKey(1) & 0xFF == exit_key:
            break
        except Exception as e:
          print(f"⚠ Warning: Unable to display window ({e}). Disabling display.")
          show_window = False
      else:
        time.sleep(0.03)
  except KeyboardInterrupt:
    print("\nInterrupted, ending interview...")
  finally:
    snapshot = session.end()
    cap.release()
    cv2.destroyAllWindows()
    if api_handler is not None:
      api_handler.close()

  print(f"Final integrity score: {snapshot.score}/100 ({snapshot.severity})")
  print("Pipeline ended")
  return 0


if __name__ == "__main__":
  raise SystemExit(main())
