"""Typed perception results and the port that produces them once per tick."""
import math
from dataclasses import dataclass, field
from typing import List


class PerceptionError(Exception):
    """A single detect() call failed; the tick is treated as empty."""


class PerceptionInitError(Exception):
    """Perception could not be brought up for the session (camera, model...)."""


def clamp_confidence(value) -> float:
    """Clamp an upstream confidence into [0, 1]; NaN and garbage become 0.0."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return min(1.0, max(0.0, value))


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in frame pixels."""
    origin_x: float
    origin_y: float
    width: float
    height: float

    @property
    def center_x(self) -> float:
        return self.origin_x + self.width / 2.0

    @classmethod
    def from_xyxy(cls, x1, y1, x2, y2) -> "BoundingBox":
        return cls(float(x1), float(y1), float(x2 - x1), float(y2 - y1))

    def to_xyxy(self):
        return (self.origin_x, self.origin_y,
                self.origin_x + self.width, self.origin_y + self.height)


@dataclass(frozen=True)
class FaceObservation:
    """One detected face. Faces carry no identity across ticks."""
    bounding_box: BoundingBox
    confidence: float

    def __post_init__(self):
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))


@dataclass(frozen=True)
class ObjectObservation:
    """One classified object, e.g. ("cell phone", 0.87)."""
    label: str
    confidence: float
    bounding_box: BoundingBox = None

    def __post_init__(self):
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))


@dataclass
class PerceptionResult:
    """Everything the trackers need from one frame."""
    faces: List[FaceObservation] = field(default_factory=list)
    objects: List[ObjectObservation] = field(default_factory=list)
    frame_width: int = 0
    frame_height: int = 0


class PerceptionPort:
    """
    Capability that turns a video frame into faces and objects.

    Adapters to concrete model libraries subclass this and do the mapping to
    FaceObservation / ObjectObservation at the boundary.
    """

    degraded = False

    def initialize(self):
        """Load models / open devices. Raise PerceptionInitError on failure."""

    def detect(self, frame) -> PerceptionResult:
        raise NotImplementedError

    def close(self):
        """Release whatever initialize() acquired."""


class NullPerception(PerceptionPort):
    """
    Deterministic stand-in used when no detection capability is available.

    Always reports an empty scene. ``degraded`` is True so sinks can flag
    sessions that ran without real perception.
    """

    degraded = True

    def __init__(self, frame_width: int = 0, frame_height: int = 0):
        self.frame_width = frame_width
        self.frame_height = frame_height

    def detect(self, frame) -> PerceptionResult:
        return PerceptionResult(frame_width=self.frame_width, frame_height=self.frame_height)
