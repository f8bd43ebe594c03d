"""Time keeper abstraction (ABC).

Every wait in the package reads time and sleeps through a
:class:`TimeKeeper`.  The system implementation backs onto the monotonic
clock; the fakes in :mod:`waitfor.clock.fake` make waits deterministic in
tests.  Instants and durations are ``float`` seconds.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator

from waitfor.core.cancellation import CancellationToken

if TYPE_CHECKING:
    from waitfor.core.gate import CompletionGate, Outcome


class TimeKeeper(ABC):
    """Source of the current instant plus a cancellable sleep."""

    #: ``True`` when instants advance with wall time on their own.  Fakes set
    #: this to ``False``: their time moves only when something sleeps.
    real_time: bool = True

    @abstractmethod
    def instant(self) -> float:
        """Return the current instant in seconds."""

    @abstractmethod
    def sleep_for(self, duration: float, token: CancellationToken | None = None) -> None:
        """Block for *duration* seconds.

        Raises:
            SleepInterrupted: If *token* is cancelled before or during the sleep.
        """

    @abstractmethod
    def await_gate(
        self,
        gate: CompletionGate,
        duration: float,
        token: CancellationToken | None = None,
    ) -> Outcome | None:
        """Wait up to *duration* (in this clock's time) for *gate* to complete.

        Returns the outcome, or ``None`` on timeout.  Returns early, with
        whatever the gate holds, when *token* is cancelled.
        """

    def elapsed_since(self, start: float) -> float:
        """Seconds between *start* and now."""
        return self.instant() - start

    # ------------------------------------------------------------------
    # Branch supervision
    # ------------------------------------------------------------------
    # Logical clocks must know which threads are still working before they
    # may move time forward.  Real clocks ignore these hooks.

    def register_branch(self) -> None:
        """Announce, from the spawning thread, a branch thread about to start."""

    def enter_branch(self) -> None:
        """Called first thing on a registered branch thread."""

    def leave_branch(self) -> None:
        """Called last thing on a registered branch thread."""

    @contextmanager
    def blocked(self, ready: Callable[[], bool]) -> Iterator[None]:
        """Mark the calling thread as blocked on something other than time.

        *ready* reports whether the thread has become runnable again.
        """
        yield
