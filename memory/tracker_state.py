"""Timing state owned by a single tracker for a single session."""
from dataclasses import dataclass
from typing import Optional


@dataclass
class TrackerState:
    """
    Continuously-mutated timing fields of one tracker.

    Attributes:
        last_good_time (float): Start of the current countdown. Set by a good
            observation, by the first bad tick of an episode (to the previous
            evaluated tick) and by every emission.
        condition_active (bool): Whether the adverse condition has held
            continuously since last_good_time.
        last_observed_time (float): Time of the previous evaluated tick, the
            session start before the first one. Failed ticks never move it.
    """
    last_good_time: float
    condition_active: bool = False
    last_observed_time: Optional[float] = None

    def __post_init__(self):
        if self.last_observed_time is None:
            self.last_observed_time = self.last_good_time

    def advance(self, now: float) -> float:
        """Record an evaluated tick and return the previous one's time."""
        previous = self.last_observed_time
        self.last_observed_time = now
        return previous

    def mark_good(self, now: float):
        """A good observation: clear the condition and restart the clock."""
        self.condition_active = False
        self.last_good_time = now

    def clear(self):
        """The condition ended without a good observation (e.g. the face count changed)."""
        self.condition_active = False

    def elapsed(self, now: float) -> float:
        """Seconds the adverse condition has been running."""
        return now - self.last_good_time

    def condition_held(self, now: float, since: float, threshold: float) -> bool:
        """
        Register a bad observation and report whether it has outlasted ``threshold``.

        The first bad tick of an episode only starts the countdown from ``since``
        (the previous evaluated tick) and never reports. A report re-arms the
        countdown at ``now``.
        """
        if not self.condition_active:
            self.condition_active = True
            self.last_good_time = max(since, self.last_good_time)
            return False
        if self.elapsed(now) > threshold:
            self.last_good_time = now  # re-arm
            return True
        return False

    def to_dict(self):
        return {
            "last_good_time": self.last_good_time,
            "condition_active": self.condition_active,
            "last_observed_time": self.last_observed_time,
        }
