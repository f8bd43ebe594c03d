"""Tests for the manually triggered Signal occurrence."""

from __future__ import annotations

import threading

import pytest

from waitfor.core.cancellation import CancellationToken
from waitfor.core.errors import WaitTimeoutError
from waitfor.core.occurrence import CANCELLED
from waitfor.core.signal import Signal
from tests.helpers.doubles import ExpectedFailure, NeverOccurring


class TestSignalTriggering:
    def test_triggered_before_wait(self):
        signal = Signal()
        signal.trigger("done")

        assert signal.is_triggered
        assert signal.wait_up_to(1.0) == "done"

    def test_triggered_from_another_thread(self):
        signal = Signal()
        threading.Timer(0.02, signal.trigger, args=("late",)).start()

        assert signal.wait_up_to(2.0) == "late"

    def test_only_first_trigger_counts(self):
        signal = Signal()

        assert signal.trigger("a") is True
        assert signal.trigger("b") is False
        assert signal.trigger_error(ExpectedFailure()) is False
        assert signal.wait_up_to(1.0) == "a"

    def test_error_trigger_is_raised(self):
        signal = Signal()
        signal.trigger_error(ExpectedFailure("remote side failed"))

        with pytest.raises(ExpectedFailure, match="remote side failed"):
            signal.wait_up_to(1.0)

    def test_can_be_awaited_repeatedly(self):
        signal = Signal()
        signal.trigger(42)

        assert signal.wait_up_to(1.0) == 42
        assert signal.wait_up_to(1.0) == 42


class TestSignalWaiting:
    def test_times_out(self):
        with pytest.raises(WaitTimeoutError, match="signal to be triggered"):
            Signal().wait_up_to(0.02)

    def test_zero_budget_times_out_even_if_triggered(self):
        signal = Signal()
        signal.trigger()

        with pytest.raises(WaitTimeoutError):
            signal.wait_up_to(0)

    def test_cancellation(self):
        token = CancellationToken()
        threading.Timer(0.02, token.cancel).start()

        assert Signal().wait_up_to(5.0, token=token) is CANCELLED

    def test_fake_clock_trigger_stops_time(self, fake_clock):
        signal = Signal(time_keeper=fake_clock)
        fake_clock.schedule_callback(lambda: signal.trigger("x"), 0.03)

        assert signal.wait_up_to(0.05) == "x"
        assert fake_clock.instant() == pytest.approx(0.03)

    def test_fake_clock_timeout(self, fake_clock):
        with pytest.raises(WaitTimeoutError):
            Signal(time_keeper=fake_clock).wait_up_to(0.05)
        assert fake_clock.instant() == pytest.approx(0.05)

    @pytest.mark.usefixtures("fast_config")
    def test_in_race(self):
        signal = Signal()
        threading.Timer(0.02, signal.trigger, args=("signalled",)).start()

        assert signal.or_(NeverOccurring()).wait_up_to(1.0) == "signalled"
