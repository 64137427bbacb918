"""Lifecycle of one proctored interview: start, periodic ticks, end."""
import threading
import time
import uuid
from typing import Callable, List, Optional

from detection.perception import NullPerception, PerceptionInitError, PerceptionPort
from inference.score_engine import ScoreEngine
from inference.violations import ViolationEvent
from signals.detection_orchestrator import DetectionOrchestrator
from signals.event_sink import EventSink
from signals.session_aggregator import (STATUS_ACTIVE, STATUS_CANCELLED, STATUS_COMPLETED,
                                        Session, SessionAggregator, SessionSnapshot)
from signals.tick_scheduler import DEFAULT_TICK_INTERVAL, TickScheduler


class SessionInitError(Exception):
    """The session could not start; no score or log was created."""


class SessionStateError(Exception):
    """Operation not valid in the session's current lifecycle state."""


class InterviewSession:
    """
    Owns every piece of mutable state for one room: trackers, score, log.

    Ticks are serialized by ``_tick_lock``. Mutation and snapshot reads share
    ``_state_lock`` so readers never see a score that disagrees with the log.
    """

    def __init__(self, candidate_name: str, perception: Optional[PerceptionPort] = None,
                 sink: Optional[EventSink] = None, config: Optional[dict] = None,
                 room_id: Optional[str] = None, clock: Callable[[], float] = time.time):
        """
        Args:
            candidate_name (str): Required, surrounding whitespace stripped
            perception: PerceptionPort for this session (NullPerception if None)
            sink: EventSink for lifecycle markers and violations
            config (dict): Parsed settings; uses the "session" and "thresholds" sections
            room_id (str): Defaults to a fresh UUID
            clock: Time source, epoch seconds
        """
        if not candidate_name or not candidate_name.strip():
            raise ValueError("Candidate name is required")

        self.candidate_name = candidate_name.strip()
        self.room_id = room_id or str(uuid.uuid4())
        self.perception = perception or NullPerception()
        self.sink = sink or EventSink()
        self.config = config or {}
        self.clock = clock

        session_cfg = self.config.get("session", {})
        self.allow_degraded = bool(session_cfg.get("allow_degraded", False))
        self.tick_interval = float(session_cfg.get("tick_interval", DEFAULT_TICK_INTERVAL))

        self.session: Optional[Session] = None
        self.aggregator: Optional[SessionAggregator] = None
        self.orchestrator: Optional[DetectionOrchestrator] = None
        self.scheduler: Optional[TickScheduler] = None
        self._final_snapshot: Optional[SessionSnapshot] = None

        self._tick_lock = threading.Lock()
        self._state_lock = threading.RLock()

    @property
    def started(self) -> bool:
        return self.session is not None

    @property
    def active(self) -> bool:
        return self.session is not None and self.session.status == STATUS_ACTIVE

    def start(self) -> SessionSnapshot:
        """
        Bring up perception and open the session.

        Raises:
            SessionInitError: perception failed and degraded mode is off
            SessionStateError: the session was already started
        """
        if self.started:
            raise SessionStateError(f"Session {self.room_id} already started")

        degraded = self.perception.degraded
        try:
            self.perception.initialize()
        except PerceptionInitError as e:
            if not self.allow_degraded:
                raise SessionInitError(f"Perception unavailable for room {self.room_id}: {e}") from e
            print(f"⚠ Warning: perception unavailable ({e}). Continuing without detection...")
            self.perception = NullPerception()
            degraded = True

        with self._state_lock:
            self.session = Session(
                room_id=self.room_id,
                candidate_name=self.candidate_name,
                start_time=self.clock(),
                degraded=degraded,
            )
            self.aggregator = SessionAggregator(self.session)
            self.orchestrator = DetectionOrchestrator(
                self.perception, self.aggregator, ScoreEngine(), self.sink,
                config=self.config.get("thresholds", {}), clock=self.clock,
            )
            snapshot = self.aggregator.snapshot()

        print(f"✓ Interview started: {self.candidate_name} (room {self.room_id})")
        self.sink.session_started(snapshot)
        return snapshot

    def tick(self, frame) -> List[ViolationEvent]:
        """Run one detection tick. Returns [] when the session is not active."""
        with self._tick_lock:
            if not self.active:
                return []
            result = self.orchestrator.observe(frame)
            with self._state_lock:
                recorded = self.orchestrator.evaluate(result, self.clock())
            # Sinks may block on I/O; snapshot readers must not wait on them
            return self.orchestrator.publish(recorded)

    def run(self, frame_source: Callable[[], object], interval: Optional[float] = None) -> TickScheduler:
        """
        Drive ticks from ``frame_source`` on a fixed cadence until end()/cancel().

        A None frame from the source skips that tick.
        """
        if not self.active:
            raise SessionStateError(f"Session {self.room_id} is not active")
        if self.scheduler is not None and self.scheduler.running:
            return self.scheduler

        def _tick():
            frame = frame_source()
            if frame is not None:
                self.tick(frame)

        self.scheduler = TickScheduler(_tick, interval or self.tick_interval,
                                       name=f"session-{self.room_id[:8]}")
        self.scheduler.start()
        return self.scheduler

    def snapshot(self) -> SessionSnapshot:
        """Consistent point-in-time copy, safe to call while a tick runs."""
        if not self.started:
            raise SessionStateError(f"Session {self.room_id} has not started")
        with self._state_lock:
            return self.aggregator.snapshot()

    def end(self) -> SessionSnapshot:
        """Stop ticking, let an in-flight tick finish, and finalize as completed."""
        return self._finish(STATUS_COMPLETED)

    def cancel(self) -> SessionSnapshot:
        return self._finish(STATUS_CANCELLED)

    def _finish(self, status: str) -> SessionSnapshot:
        if not self.started:
            raise SessionStateError(f"Session {self.room_id} has not started")
        if self._final_snapshot is not None:
            return self._final_snapshot

        if self.scheduler is not None:
            self.scheduler.stop(wait=True)

        # Waits for a tick started outside the scheduler
        with self._tick_lock:
            with self._state_lock:
                self.aggregator.finish(self.clock(), status)
                snapshot = self.aggregator.snapshot()
            self._final_snapshot = snapshot

        try:
            self.perception.close()
        except Exception as e:
            print(f"⚠ Warning: failed to release perception: {e}")

        print(f"✓ Interview {status}: {self.candidate_name} | score={snapshot.score} "
              f"({snapshot.severity}) | events={snapshot.total_events}")
        self.sink.session_ended(snapshot)
        return snapshot
