"""One detection tick: perception, trackers, scoring and aggregation."""
import time
from typing import Callable, List, Optional, Tuple

from detection.perception import PerceptionPort, PerceptionResult
from inference.contraband_tracker import ContrabandTracker
from inference.focus_tracker import FocusTracker
from inference.presence_tracker import PresenceTracker
from inference.score_engine import ScoreEngine
from inference.violations import ViolationEvent
from signals.event_sink import EventSink
from signals.session_aggregator import SessionAggregator, SessionSnapshot


class DetectionOrchestrator:
    """
    Runs the three trackers over one sampled frame and applies what they emit.

    One instance per session; not safe for concurrent ticks.
    """

    def __init__(self, perception: PerceptionPort, aggregator: SessionAggregator,
                 score_engine: Optional[ScoreEngine] = None, sink: Optional[EventSink] = None,
                 config: Optional[dict] = None, clock: Callable[[], float] = time.time):
        """
        Args:
            perception: PerceptionPort producing faces/objects per frame
            aggregator: SessionAggregator owning the session's log and counts
            score_engine: ScoreEngine applying deductions (default instance if None)
            sink: EventSink receiving events and perception warnings
            config (dict): Tracker threshold overrides ("thresholds" section)
            clock: Time source, epoch seconds
        """
        self.perception = perception
        self.aggregator = aggregator
        self.session = aggregator.session
        self.score_engine = score_engine or ScoreEngine()
        self.sink = sink or EventSink()
        self.clock = clock

        start = self.session.start_time
        self.focus_tracker = FocusTracker(start, config)
        self.presence_tracker = PresenceTracker(start, config)
        self.contraband_tracker = ContrabandTracker()

        self.tick_count = 0
        self.failed_ticks = 0
        self.last_result: Optional[PerceptionResult] = None

    def observe(self, frame) -> Optional[PerceptionResult]:
        """Run perception only. Returns None when the port fails this tick."""
        try:
            self.last_result = self.perception.detect(frame)
            return self.last_result
        except Exception as e:
            self.failed_ticks += 1
            now = self.clock()
            print(f"⚠ Warning: perception failed for room {self.session.room_id}: {e}")
            self.sink.perception_failed(self.session.room_id, e, now)
            return None

    def evaluate(self, result: Optional[PerceptionResult],
                 now: float) -> List[Tuple[ViolationEvent, SessionSnapshot]]:
        """
        Feed one perception result through the trackers and apply the events.

        Focus/presence events come first, then contraband events in the
        order the contraband tracker produced them. The sink is not called
        here; pass the result to publish() once any state lock is released.

        Returns:
            list of (event, snapshot taken right after applying it)
        """
        self.tick_count += 1
        # A degraded port has nothing to say about the candidate
        if result is None or self.perception.degraded:
            return []

        events = []
        focus_event = self.focus_tracker.observe(
            result.faces, result.frame_width, result.frame_height, now
        )
        if focus_event is not None:
            events.append(focus_event)

        presence_event = self.presence_tracker.observe(result.faces, now)
        if presence_event is not None:
            events.append(presence_event)

        events.extend(self.contraband_tracker.observe(result.objects, now))

        recorded = []
        for event in events:
            self.score_engine.apply(event, self.session)
            self.aggregator.record(event)
            recorded.append((event, self.aggregator.snapshot()))
        return recorded

    def publish(self, recorded: List[Tuple[ViolationEvent, SessionSnapshot]]) -> List[ViolationEvent]:
        """Hand evaluated events to the sink in order and return the bare events."""
        for event, snapshot in recorded:
            self.sink.violation_recorded(event, snapshot)
        return [event for event, _ in recorded]

    def tick(self, frame, now: Optional[float] = None) -> List[ViolationEvent]:
        """Sample one frame and return the violations it produced."""
        result = self.observe(frame)
        if now is None:
            now = self.clock()
        return self.publish(self.evaluate(result, now))
