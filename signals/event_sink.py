"""Outbound stream of session markers and violation events."""
from typing import List


class EventSink:
    """No-op base; subclasses override the hooks they care about."""

    def session_started(self, snapshot):
        pass

    def violation_recorded(self, event, snapshot):
        pass

    def perception_failed(self, room_id: str, error: Exception, now: float):
        pass

    def session_ended(self, snapshot):
        pass


class CompositeSink(EventSink):
    """Fans every hook out to several sinks, in order."""

    def __init__(self, sinks: List[EventSink] = None):
        self.sinks = list(sinks or [])

    def add(self, sink: EventSink):
        self.sinks.append(sink)

    def session_started(self, snapshot):
        for sink in self.sinks:
            sink.session_started(snapshot)

    def violation_recorded(self, event, snapshot):
        for sink in self.sinks:
            sink.violation_recorded(event, snapshot)

    def perception_failed(self, room_id, error, now):
        for sink in self.sinks:
            sink.perception_failed(room_id, error, now)

    def session_ended(self, snapshot):
        for sink in self.sinks:
            sink.session_ended(snapshot)
