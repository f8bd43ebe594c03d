"""Time keeper backed by the real monotonic clock."""

from __future__ import annotations

import time

from waitfor.core.cancellation import CancellationToken
from waitfor.core.errors import SleepInterrupted
from waitfor.core.gate import CompletionGate, Outcome
from waitfor.core.interfaces.time_keeper import TimeKeeper


class SystemTimeKeeper(TimeKeeper):
    """``time.monotonic()`` instants; sleeps that wake on cancellation."""

    real_time = True

    def instant(self) -> float:
        return time.monotonic()

    def sleep_for(self, duration: float, token: CancellationToken | None = None) -> None:
        if token is None:
            if duration > 0:
                time.sleep(duration)
            return
        if token.wait(duration):
            raise SleepInterrupted(f"Sleep of {duration:g}s interrupted by cancellation")

    def await_gate(
        self,
        gate: CompletionGate,
        duration: float,
        token: CancellationToken | None = None,
    ) -> Outcome | None:
        return gate.wait(max(duration, 0.0), token)

    def __repr__(self) -> str:
        return "SystemTimeKeeper()"


_SYSTEM = SystemTimeKeeper()


def system_time_keeper() -> SystemTimeKeeper:
    """Return the process-wide system time keeper."""
    return _SYSTEM
