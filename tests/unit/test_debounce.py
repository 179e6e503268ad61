"""
Unit tests for the trailing-edge debouncer.
"""

import time
from unittest.mock import Mock

from tutordesk.store.debounce import DebounceState, Debouncer


class TestDebouncer:
    """Test cases for Debouncer."""

    def test_initial_state_idle(self):
        """Test a new debouncer has nothing scheduled."""
        debouncer = Debouncer(0.05, Mock())

        assert debouncer.state == DebounceState.IDLE
        assert not debouncer.is_pending
        assert debouncer.fire_count == 0

    def test_burst_fires_once(self):
        """Test repeated triggers coalesce into one call."""
        callback = Mock()
        debouncer = Debouncer(0.1, callback)

        for _ in range(10):
            debouncer.trigger()
        assert debouncer.is_pending

        time.sleep(0.4)

        callback.assert_called_once()
        assert debouncer.state == DebounceState.IDLE

    def test_retrigger_restarts_quiet_period(self):
        """Test a trigger during the quiet period postpones the call."""
        callback = Mock()
        debouncer = Debouncer(0.2, callback)

        debouncer.trigger()
        time.sleep(0.1)
        debouncer.trigger()
        time.sleep(0.15)

        callback.assert_not_called()

        time.sleep(0.3)
        callback.assert_called_once()

    def test_cancel(self):
        """Test a cancelled call never runs."""
        callback = Mock()
        debouncer = Debouncer(0.05, callback)

        debouncer.trigger()
        debouncer.cancel()
        time.sleep(0.2)

        callback.assert_not_called()
        assert not debouncer.is_pending

    def test_flush_runs_pending_call_now(self):
        """Test flush() runs synchronously and only once."""
        callback = Mock()
        debouncer = Debouncer(60, callback)

        debouncer.trigger()

        assert debouncer.flush()
        callback.assert_called_once()
        assert not debouncer.flush()
        assert debouncer.fire_count == 1

    def test_callback_errors_are_contained(self):
        """Test a failing callback does not break later triggers."""
        callback = Mock(side_effect=[RuntimeError("boom"), None])
        debouncer = Debouncer(60, callback)

        debouncer.trigger()
        debouncer.flush()
        debouncer.trigger()
        debouncer.flush()

        assert callback.call_count == 2
