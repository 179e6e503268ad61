"""
Trailing-edge debouncer.

Coalesces bursts of calls into a single invocation that runs once the
calls have stopped for a quiet period. Each trigger() restarts the
timer; only the timer that survives the quiet period fires.

States:
- IDLE: nothing scheduled
- PENDING: a timer is running and will fire unless restarted
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class DebounceState(Enum):
    """Debouncer states."""
    IDLE = "idle"
    PENDING = "pending"


class Debouncer:
    """
    Runs a callback after a quiet period.

    The callback is invoked on a timer thread; it should read whatever
    it needs at call time rather than capture it when triggered.

    Examples:
        >>> debouncer = Debouncer(0.45, store.save)
        >>> for _ in range(10):
        ...     debouncer.trigger()  # one save, 450ms after the last call
        >>> debouncer.flush()        # or save right now
    """

    def __init__(self, delay_seconds: float, callback: Callable[[], None]):
        """
        Initialize debouncer.

        Args:
            delay_seconds: Quiet period before the callback runs
            callback: Zero-argument function to run
        """
        self.delay_seconds = max(0.0, delay_seconds)
        self.callback = callback

        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self.fire_count = 0

    @property
    def state(self) -> DebounceState:
        with self._lock:
            return DebounceState.PENDING if self._timer is not None else DebounceState.IDLE

    @property
    def is_pending(self) -> bool:
        return self.state == DebounceState.PENDING

    def trigger(self):
        """Schedule the callback, superseding any pending call."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()

            self._generation += 1
            timer = threading.Timer(self.delay_seconds, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer

        timer.start()

    def cancel(self):
        """Drop the pending call, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
                self._generation += 1

    def flush(self) -> bool:
        """
        Run the pending call immediately.

        Returns:
            True if a call was pending and has run
        """
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            self._generation += 1

        self._run()
        return True

    def _fire(self, generation: int):
        with self._lock:
            # A cancelled timer can still wake up; only the latest may run
            if generation != self._generation or self._timer is None:
                return
            self._timer = None

        self._run()

    def _run(self):
        self.fire_count += 1
        try:
            self.callback()
        except Exception as e:
            logger.error(f"Debounced callback failed: {e}", exc_info=True)
