"""Violation kinds and events produced by the trackers."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from detection.perception import clamp_confidence


class ViolationKind(Enum):
    """Closed set of integrity violations."""
    FOCUS_LOST = "FOCUS_LOST"
    NO_FACE = "NO_FACE"
    MULTIPLE_FACES = "MULTIPLE_FACES"
    PHONE_DETECTED = "PHONE_DETECTED"
    NOTES_DETECTED = "NOTES_DETECTED"
    BOOK_DETECTED = "BOOK_DETECTED"


# Report summary field for each kind
COUNT_FIELDS = {
    ViolationKind.FOCUS_LOST: "focusLostCount",
    ViolationKind.NO_FACE: "noFaceCount",
    ViolationKind.MULTIPLE_FACES: "multipleFacesCount",
    ViolationKind.PHONE_DETECTED: "phoneDetectedCount",
    ViolationKind.NOTES_DETECTED: "notesDetectedCount",
    ViolationKind.BOOK_DETECTED: "bookDetectedCount",
}

# Message shown to the candidate when the violation fires
TOAST_MESSAGES = {
    ViolationKind.FOCUS_LOST: "Focus lost - Please look at the screen",
    ViolationKind.NO_FACE: "No face detected - Please stay in front of camera",
    ViolationKind.MULTIPLE_FACES: "Multiple faces detected - Only candidate should be visible",
    ViolationKind.PHONE_DETECTED: "Phone detected - Please remove mobile device",
    ViolationKind.NOTES_DETECTED: "Notes/Paper detected - Please remove any notes",
    ViolationKind.BOOK_DETECTED: "Book detected - Please remove any books",
}

# (title, severity) rows of the report's violation table
REPORT_ROWS = {
    ViolationKind.FOCUS_LOST: ("Focus Lost (Looking Away)", "Medium"),
    ViolationKind.NO_FACE: ("Face Not Detected", "High"),
    ViolationKind.MULTIPLE_FACES: ("Multiple Faces", "Critical"),
    ViolationKind.PHONE_DETECTED: ("Mobile Phone Detected", "Critical"),
    ViolationKind.NOTES_DETECTED: ("Notes/Paper Detected", "High"),
    ViolationKind.BOOK_DETECTED: ("Books Detected", "High"),
}


@dataclass(frozen=True)
class ViolationEvent:
    """A single violation. Immutable once a tracker creates it."""
    kind: ViolationKind
    timestamp: float  # epoch seconds
    confidence: float

    def __post_init__(self):
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    @property
    def message(self) -> str:
        return TOAST_MESSAGES[self.kind]

    def to_dict(self):
        """Wire shape: {type, timestamp, confidence}."""
        return {
            "type": self.kind.value,
            "timestamp": datetime.fromtimestamp(self.timestamp).isoformat(),
            "confidence": round(self.confidence, 4),
        }
