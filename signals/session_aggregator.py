"""Session event log, per-kind counts and the end-of-session summary."""
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from inference.score_engine import INITIAL_SCORE, classify_severity, interpret_score, recommendations_for
from inference.violations import COUNT_FIELDS, ViolationEvent, ViolationKind

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"


def _empty_counts() -> Dict[ViolationKind, int]:
    return {kind: 0 for kind in ViolationKind}


def _isoformat(timestamp: Optional[float]) -> Optional[str]:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp).isoformat()


def round_minutes(seconds: float) -> int:
    """Whole minutes, halves rounded up."""
    return int(math.floor(seconds / 60.0 + 0.5))


@dataclass
class Session:
    """Mutable per-interview state. Score is written by the ScoreEngine, log/counts by the aggregator."""
    room_id: str
    candidate_name: str
    start_time: float
    score: int = INITIAL_SCORE
    event_log: List[ViolationEvent] = field(default_factory=list)
    event_counts_by_kind: Dict[ViolationKind, int] = field(default_factory=_empty_counts)
    end_time: Optional[float] = None
    status: str = STATUS_ACTIVE
    degraded: bool = False


@dataclass(frozen=True)
class SessionSnapshot:
    """Point-in-time, read-only copy of a session."""
    room_id: str
    candidate_name: str
    start_time: float
    end_time: Optional[float]
    status: str
    score: int
    total_events: int
    counts_by_kind: Tuple[Tuple[ViolationKind, int], ...]
    events: Tuple[ViolationEvent, ...]
    duration_minutes: Optional[int]
    degraded: bool = False

    @property
    def severity(self) -> str:
        return classify_severity(self.score)

    @property
    def counts(self) -> Dict[ViolationKind, int]:
        return dict(self.counts_by_kind)

    def to_report_summary(self) -> dict:
        """Data consumed by the report renderer."""
        summary = {COUNT_FIELDS[kind]: count for kind, count in self.counts_by_kind}
        summary.update({
            "totalEvents": self.total_events,
            "integrityScore": self.score,
            "severity": self.severity,
            "interpretation": interpret_score(self.score),
            "recommendations": recommendations_for(self.score),
            "duration": self.duration_minutes,
            "events": [event.to_dict() for event in self.events],
        })
        return summary

    def to_interview_data(self) -> dict:
        """Shape handed to persistence at session end."""
        return {
            "roomId": self.room_id,
            "candidateName": self.candidate_name,
            "startTime": _isoformat(self.start_time),
            "endTime": _isoformat(self.end_time),
            "integrityScore": self.score,
            "status": self.status,
            "degraded": self.degraded,
            "events": [event.to_dict() for event in self.events],
        }


class SessionAggregator:
    """Append-only, order-preserving record of a session's violations."""

    def __init__(self, session: Session):
        self.session = session

    @property
    def total_events(self) -> int:
        return len(self.session.event_log)

    def record(self, event: ViolationEvent):
        """Append an event in arrival order and bump its kind's count."""
        self.session.event_log.append(event)
        self.session.event_counts_by_kind[event.kind] += 1

    def finish(self, end_time: float, status: str = STATUS_COMPLETED):
        self.session.end_time = end_time
        self.session.status = status

    def snapshot(self, now: Optional[float] = None) -> SessionSnapshot:
        """
        Take an immutable summary of the session.

        Args:
            now (float): Reference time for the duration; defaults to the
                session's end time. Duration is None while the session is open.

        Returns:
            SessionSnapshot
        """
        session = self.session
        duration = None
        if session.end_time is not None:
            reference = now if now is not None else session.end_time
            duration = round_minutes(reference - session.start_time)

        return SessionSnapshot(
            room_id=session.room_id,
            candidate_name=session.candidate_name,
            start_time=session.start_time,
            end_time=session.end_time,
            status=session.status,
            score=session.score,
            total_events=len(session.event_log),
            counts_by_kind=tuple((kind, session.event_counts_by_kind[kind]) for kind in ViolationKind),
            events=tuple(session.event_log),
            duration_minutes=duration,
            degraded=session.degraded,
        )
