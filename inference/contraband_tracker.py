"""Maps detected objects to prohibited-item violations, one event per object."""
from typing import List

from detection.perception import ObjectObservation
from inference.violations import ViolationEvent, ViolationKind

# Checked in order, first match wins; "notebook" therefore lands on the book row
CONTRABAND_LABELS = [
    (("phone", "cell phone"), ViolationKind.PHONE_DETECTED),
    (("book",), ViolationKind.BOOK_DETECTED),
    (("paper", "notebook"), ViolationKind.NOTES_DETECTED),
]


def classify_label(label: str):
    """Return the ViolationKind for an object label, or None if it is allowed."""
    label = (label or "").lower()
    for needles, kind in CONTRABAND_LABELS:
        if any(needle in label for needle in needles):
            return kind
    return None


class ContrabandTracker:
    """Stateless: every qualifying object in every tick is its own piece of evidence."""

    def observe(self, objects: List[ObjectObservation], now: float) -> List[ViolationEvent]:
        events = []
        for obj in objects:
            kind = classify_label(obj.label)
            if kind is not None:
                events.append(ViolationEvent(kind, now, obj.confidence))
        return events
