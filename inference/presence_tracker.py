"""Absence and crowd detection from per-tick face counts."""
from typing import List, Optional

from detection.perception import FaceObservation
from inference.violations import ViolationEvent, ViolationKind
from memory.tracker_state import TrackerState

NO_FACE_THRESHOLD = 10.0  # seconds
PRESENCE_CONFIDENCE = 0.9


class PresenceTracker:
    """
    NO_FACE is debounced and re-armed like focus; MULTIPLE_FACES fires on every
    tick with more than one face.
    """

    def __init__(self, start_time: float, config: Optional[dict] = None):
        self.config = config or {}
        self.absence_threshold = self.config.get("no_face_seconds", NO_FACE_THRESHOLD)
        self.state = TrackerState(last_good_time=start_time)

    def observe(self, faces: List[FaceObservation], now: float) -> Optional[ViolationEvent]:
        state = self.state
        previous = state.advance(now)

        if len(faces) == 1:
            state.mark_good(now)
            return None

        if len(faces) > 1:
            # Faces are present, so any absence episode is over
            state.clear()
            return ViolationEvent(ViolationKind.MULTIPLE_FACES, now, PRESENCE_CONFIDENCE)

        if state.condition_held(now, previous, self.absence_threshold):
            return ViolationEvent(ViolationKind.NO_FACE, now, PRESENCE_CONFIDENCE)
        return None
