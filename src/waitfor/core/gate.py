"""One-shot completion gate shared by the race combinator and signals.

The gate is the only state written by more than one thread during a wait.
"Check empty, then set" happens under a single lock, so exactly one report
(value or failure) ever wins.
"""

from __future__ import annotations

import threading
from typing import Any, NamedTuple

from waitfor.core.cancellation import CancellationToken


class Outcome(NamedTuple):
    """The winning report: a value, or the failure that ended the wait."""

    value: Any = None
    error: BaseException | None = None


class CompletionGate:
    """First-writer-wins slot plus the signal that wakes its waiters.

    Args:
        parties: Number of reporters expected to :meth:`depart`.  When all of
            them have departed without a report, waiters wake with no outcome.
    """

    def __init__(self, parties: int | None = None) -> None:
        self._cond = threading.Condition()
        self._outcome: Outcome | None = None
        self._parties = parties
        self._departed = 0

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def offer_value(self, value: Any) -> bool:
        """Record *value* if nothing was reported yet; ``True`` if it won."""
        return self._offer(Outcome(value=value))

    def offer_error(self, error: BaseException) -> bool:
        """Record *error* if nothing was reported yet; ``True`` if it won."""
        return self._offer(Outcome(error=error))

    def depart(self) -> None:
        """Mark one reporting party as finished."""
        with self._cond:
            self._departed += 1
            self._cond.notify_all()

    def _offer(self, outcome: Outcome) -> bool:
        with self._cond:
            if self._outcome is not None:
                return False
            self._outcome = outcome
            self._cond.notify_all()
            return True

    # ------------------------------------------------------------------
    # Waiting
    # ------------------------------------------------------------------

    @property
    def outcome(self) -> Outcome | None:
        with self._cond:
            return self._outcome

    @property
    def is_complete(self) -> bool:
        return self.outcome is not None

    def is_settled(self, token: CancellationToken | None = None) -> bool:
        """``True`` once a waiter on this gate would wake: see :meth:`wait`."""
        with self._cond:
            return self._done(token)

    def wait(
        self,
        timeout: float | None,
        token: CancellationToken | None = None,
    ) -> Outcome | None:
        """Block until an outcome, cancellation of *token*, or *timeout*.

        ``timeout=None`` waits without a bound.  Returns the outcome, or
        ``None`` if the wait ended without one.
        """
        unregister = token.on_cancel(self._wake) if token is not None else None
        try:
            with self._cond:
                self._cond.wait_for(lambda: self._done(token), timeout)
                return self._outcome
        finally:
            if unregister is not None:
                unregister()

    def _done(self, token: CancellationToken | None) -> bool:
        if self._outcome is not None:
            return True
        if token is not None and token.is_cancelled:
            return True
        return self._parties is not None and self._departed >= self._parties

    def _wake(self) -> None:
        with self._cond:
            self._cond.notify_all()
