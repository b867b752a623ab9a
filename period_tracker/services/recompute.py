"""
Debounced recomputation of calendar overlays.

Viewport changes and similar external triggers can arrive in bursts. The
debouncer coalesces a burst into one recompute that runs after a quiet
period: each trigger cancels the pending timer and schedules a new one.

Typical usage:
    debouncer = RecomputeDebouncer(refresh_calendar, delay=0.25)
    window.on_resize(debouncer.trigger)
"""
import threading
from typing import Callable, Optional

from aws_lambda_powertools import Logger

logger = Logger()

DEFAULT_DELAY_SECONDS = 0.25


class RecomputeDebouncer:
    """
    Runs a callback once after triggers stop arriving for ``delay`` seconds.

    Args:
        callback: Recompute function, called without arguments
        delay: Quiet period in seconds
        timer_factory: Callable building a cancellable timer with the
            ``threading.Timer(interval, function)`` interface
    """

    def __init__(
        self,
        callback: Callable[[], None],
        delay: float = DEFAULT_DELAY_SECONDS,
        timer_factory: Callable = threading.Timer
    ):
        self.callback = callback
        self.delay = delay
        self.timer_factory = timer_factory
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        """Check if a recompute is scheduled."""
        return self._timer is not None

    def trigger(self) -> None:
        """Cancel any pending recompute and schedule a new one."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            self._timer = self.timer_factory(self.delay, lambda: self._fire(generation))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        """Drop the pending recompute, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush(self) -> None:
        """Run a pending recompute now instead of waiting for the timer."""
        with self._lock:
            if self._timer is None:
                return
            self._timer.cancel()
            self._timer = None
        self._run()

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A timer cancelled after it started firing is stale
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
        self._run()

    def _run(self) -> None:
        try:
            self.callback()
        except Exception:
            logger.exception("Debounced recompute failed")
            raise
