"""Fixed-cadence tick driver that never overlaps or queues ticks."""
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

DEFAULT_TICK_INTERVAL = 2.0  # seconds


class TickScheduler:
    """
    Fires ``tick_fn`` every ``interval`` seconds on a single worker thread.

    A fire that finds the previous tick still running is skipped, not queued.
    stop() cancels the timer first and then waits for an in-flight tick so its
    results are fully applied.
    """

    def __init__(self, tick_fn: Callable[[], object], interval: float = DEFAULT_TICK_INTERVAL,
                 name: str = "tick-scheduler"):
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")
        self.tick_fn = tick_fn
        self.interval = interval
        self.name = name

        self.fired = 0
        self.skipped = 0
        self.completed = 0
        self.last_error: Optional[Exception] = None

        self._stop_event = threading.Event()
        self._busy = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._timer: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._timer is not None and self._timer.is_alive()

    def start(self):
        if self.running:
            return
        self._stop_event.clear()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=self.name)
        self._timer = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._timer.start()

    def _run(self):
        while not self._stop_event.wait(self.interval):
            self.fire()

    def fire(self) -> bool:
        """Submit one tick unless one is already in flight. Returns True if submitted."""
        self.fired += 1
        if not self._busy.acquire(blocking=False):
            self.skipped += 1
            return False
        if self._stop_event.is_set() or self._executor is None:
            self._busy.release()
            return False
        self._executor.submit(self._guarded_tick)
        return True

    def _guarded_tick(self):
        try:
            self.tick_fn()
            self.completed += 1
        except Exception as e:
            self.last_error = e
            print(f"✗ Tick failed in {self.name}: {e}")
        finally:
            self._busy.release()

    def stop(self, wait: bool = True):
        """Stop firing; with wait=True block until an in-flight tick completes."""
        self._stop_event.set()
        if self._timer is not None and self._timer is not threading.current_thread():
            self._timer.join()
        self._timer = None
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
