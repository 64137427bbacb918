"""Debounced detection of a candidate looking away from the screen."""
from typing import List, Optional

from detection.perception import FaceObservation
from inference.violations import ViolationEvent, ViolationKind
from memory.tracker_state import TrackerState

FACE_CENTER_THRESHOLD = 0.3  # fraction of frame width
FOCUS_LOST_THRESHOLD = 5.0  # seconds
FOCUS_LOST_CONFIDENCE = 0.8


class FocusTracker:
    """Emits FOCUS_LOST once a single face stays off-center past the threshold."""

    def __init__(self, start_time: float, config: Optional[dict] = None):
        """
        Args:
            start_time (float): Session start, the initial "last good" instant
            config (dict): Optional overrides for face_center / focus_lost_seconds
        """
        self.config = config or {}
        self.center_threshold = self.config.get("face_center", FACE_CENTER_THRESHOLD)
        self.lost_threshold = self.config.get("focus_lost_seconds", FOCUS_LOST_THRESHOLD)
        self.state = TrackerState(last_good_time=start_time)

    def deviation_ratio(self, face: FaceObservation, frame_width: float) -> float:
        """Horizontal distance of the face center from frame center, over frame width."""
        if frame_width <= 0:
            return 0.0
        frame_center_x = frame_width / 2.0
        return abs(face.bounding_box.center_x - frame_center_x) / frame_width

    def is_centered(self, face: FaceObservation, frame_width: float) -> bool:
        return self.deviation_ratio(face, frame_width) < self.center_threshold

    def observe(self, faces: List[FaceObservation], frame_width: float,
                frame_height: float, now: float) -> Optional[ViolationEvent]:
        """
        Evaluate one tick of face results.

        Only a tick with exactly one face is judged; presence problems belong to
        the PresenceTracker.

        Returns:
            ViolationEvent or None
        """
        state = self.state
        previous = state.advance(now)

        # No face or a crowd ends the episode; a returning face starts a fresh one
        if len(faces) != 1:
            state.clear()
            return None

        if self.is_centered(faces[0], frame_width):
            state.mark_good(now)
            return None

        if state.condition_held(now, previous, self.lost_threshold):
            return ViolationEvent(ViolationKind.FOCUS_LOST, now, FOCUS_LOST_CONFIDENCE)
        return None
