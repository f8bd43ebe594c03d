"""Deterministic time keepers for tests.

:class:`FakeTimeKeeper` models a universe where computation is instant and
time only passes when something sleeps.  :class:`ThreadableTimeKeeper` lets
threads sleep against a clock that another thread drives forward.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator

from waitfor.core.cancellation import CancellationToken
from waitfor.core.errors import SleepInterrupted
from waitfor.core.gate import CompletionGate, Outcome
from waitfor.core.interfaces.time_keeper import TimeKeeper

_log = logging.getLogger(__name__)

# Real-time slice used while waiting for a driving clock to move.
_POLL_SLICE = 0.001

# Real-time bound on a parked thread's wait before it re-checks its wake-up
# predicate; covers gates completed by threads the clock does not know about.
_RECHECK = 0.01


@dataclass(order=True)
class _ScheduledCallback:
    instant: float
    seq: int
    callback: Callable[[], None] = field(compare=False)


@dataclass(order=True)
class _Sleeper:
    instant: float
    seq: int
    ready: Callable[[], bool] = field(compare=False)


class FakeTimeKeeper(TimeKeeper):
    """Logical clock advanced only by :meth:`sleep_for` / :meth:`advance`.

    Callbacks registered with :meth:`schedule_callback` run exactly once, in
    instant order, when logical time reaches them.  If a callback cancels the
    sleeping token, time stops at that callback's instant and the sleep raises
    :class:`SleepInterrupted`, as a real sleep would be cut short.

    Sleeps made on race branch threads are scheduled as discrete events: a
    branch sleep parks until every registered branch is parked, and only the
    earliest wake-up moves the clock.  Concurrent branches therefore see one
    shared timeline, and the branch that would wake first in real time wins.

    Args:
        start: Initial instant in seconds.
    """

    real_time = False

    def __init__(self, start: float = 0.0) -> None:
        self._lock = threading.RLock()
        self._cond = threading.Condition(self._lock)
        self._now = start
        self._callbacks: list[_ScheduledCallback] = []
        self._sleepers: list[_Sleeper] = []
        self._seq = 0
        self._running = 0
        self._local = threading.local()

    def instant(self) -> float:
        with self._lock:
            return self._now

    def schedule_callback(self, callback: Callable[[], None], delay: float) -> None:
        """Run *callback* once logical time reaches now + *delay*."""
        with self._lock:
            self._callbacks.append(_ScheduledCallback(self._now + delay, self._next_seq(), callback))
            self._callbacks.sort()

    @property
    def pending_callbacks(self) -> int:
        with self._lock:
            return len(self._callbacks)

    def advance(self, duration: float) -> None:
        """Move time forward by *duration*, firing any callbacks passed."""
        self.sleep_for(duration)

    def sleep_for(self, duration: float, token: CancellationToken | None = None) -> None:
        if token is not None and token.is_cancelled:
            raise SleepInterrupted("Sleep requested by a cancelled context")
        with self._lock:
            target = self._now + max(duration, 0.0)
        if self._supervised:
            self._sleep_supervised(target, token)
            return
        with self._lock:
            while self._callbacks and self._callbacks[0].instant <= target:
                self._run_next_callback()
                if token is not None and token.is_cancelled:
                    _log.debug("Fake sleep interrupted at %g", self._now)
                    raise SleepInterrupted(f"Sleep interrupted at fake instant {self._now:g}")
            self._now = target

    def await_gate(
        self,
        gate: CompletionGate,
        duration: float,
        token: CancellationToken | None = None,
    ) -> Outcome | None:
        with self._lock:
            deadline = self._now + max(duration, 0.0)
        if self._supervised:
            self._sleep_supervised(deadline, token, gate)
            return gate.outcome
        # Step logical time callback by callback so a callback that completes
        # the gate stops the clock at its own instant.
        while True:
            outcome = gate.outcome
            if outcome is not None or (token is not None and token.is_cancelled):
                return outcome
            with self._lock:
                now = self._now
                upcoming = [c.instant for c in self._callbacks if c.instant <= deadline]
            if not upcoming:
                if deadline > now:
                    self.sleep_for(deadline - now, token)
                return gate.outcome
            self.sleep_for(max(min(upcoming) - now, 0.0), token)

    # ------------------------------------------------------------------
    # Branch supervision
    # ------------------------------------------------------------------

    def register_branch(self) -> None:
        with self._cond:
            self._running += 1

    def enter_branch(self) -> None:
        self._local.supervised = True

    def leave_branch(self) -> None:
        self._local.supervised = False
        with self._cond:
            self._running -= 1
            self._cond.notify_all()

    @contextmanager
    def blocked(self, ready: Callable[[], bool]) -> Iterator[None]:
        if not self._supervised:
            yield
            return
        with self._cond:
            entry = self._park(math.inf, ready)
        try:
            yield
        finally:
            with self._cond:
                self._unpark(entry)

    @property
    def _supervised(self) -> bool:
        return getattr(self._local, "supervised", False)

    def _sleep_supervised(
        self,
        target: float,
        token: CancellationToken | None,
        gate: CompletionGate | None = None,
    ) -> None:
        def ready() -> bool:
            if token is not None and token.is_cancelled:
                return True
            return gate is not None and gate.is_complete

        unregister = token.on_cancel(self._notify) if token is not None else None
        try:
            with self._cond:
                entry = self._park(target, ready)
                try:
                    while True:
                        if token is not None and token.is_cancelled:
                            _log.debug("Fake branch sleep interrupted at %g", self._now)
                            raise SleepInterrupted(f"Sleep interrupted at fake instant {self._now:g}")
                        if gate is not None and gate.is_complete:
                            return
                        if self._may_advance(entry):
                            if self._callbacks and self._callbacks[0].instant <= entry.instant:
                                self._run_next_callback()
                                self._cond.notify_all()
                                continue
                            self._now = max(self._now, entry.instant)
                            return
                        self._cond.wait(_RECHECK)
                finally:
                    self._unpark(entry)
        finally:
            if unregister is not None:
                unregister()

    def _may_advance(self, entry: _Sleeper) -> bool:
        # Only the earliest sleeper moves time, and only once no branch is
        # still computing and no parked thread is waiting to resume.
        if self._running > 0 or self._sleepers[0] is not entry:
            return False
        if math.isinf(entry.instant):
            return False
        return not any(sleeper.ready() for sleeper in self._sleepers)

    def _park(self, instant: float, ready: Callable[[], bool]) -> _Sleeper:
        entry = _Sleeper(instant, self._next_seq(), ready)
        self._sleepers.append(entry)
        self._sleepers.sort()
        self._running -= 1
        self._cond.notify_all()
        return entry

    def _unpark(self, entry: _Sleeper) -> None:
        self._sleepers.remove(entry)
        self._running += 1
        self._cond.notify_all()

    def _run_next_callback(self) -> None:
        due = self._callbacks.pop(0)
        self._now = max(self._now, due.instant)
        due.callback()

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def _notify(self) -> None:
        with self._cond:
            self._cond.notify_all()

    def __repr__(self) -> str:
        return f"FakeTimeKeeper(now={self.instant():g})"

class ThreadableTimeKeeper(TimeKeeper):
    """Sleeps until a driving clock reports that enough time has passed.

    Intended for multi-threaded tests: waits sleep against this keeper while
    the test thread advances the underlying :class:`FakeTimeKeeper`.

    Args:
        clock: The driving clock.
    """

    real_time = False

    def __init__(self, clock: TimeKeeper) -> None:
        self._clock = clock

    def instant(self) -> float:
        return self._clock.instant()

    def sleep_for(self, duration: float, token: CancellationToken | None = None) -> None:
        until = self._clock.instant() + duration
        while self._clock.instant() < until:
            if token is not None:
                if token.wait(_POLL_SLICE):
                    raise SleepInterrupted("Threadable sleep interrupted by cancellation")
            else:
                time.sleep(_POLL_SLICE)

    def await_gate(
        self,
        gate: CompletionGate,
        duration: float,
        token: CancellationToken | None = None,
    ) -> Outcome | None:
        until = self._clock.instant() + duration
        while self._clock.instant() < until:
            outcome = gate.wait(_POLL_SLICE, token)
            if outcome is not None or (token is not None and token.is_cancelled):
                return outcome
        return gate.outcome

    def __repr__(self) -> str:
        return f"ThreadableTimeKeeper({self._clock!r})"
