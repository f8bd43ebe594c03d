"""Race combinator — wait for whichever of two occurrences happens first.

Each ``wait_up_to`` spawns exactly two daemon branch threads.  Both report to
a shared :class:`~waitfor.core.gate.CompletionGate`; the first report wins.
When the gate fires (or the deadline passes, or the caller is cancelled)
both branches are cancelled and joined before the race returns.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Callable, TypeVar

from waitfor.core.condition import Description
from waitfor.core.context import WaitContext
from waitfor.core.errors import FailEventError, SleepInterrupted, WaitTimeoutError, with_note
from waitfor.core.gate import CompletionGate, Outcome
from waitfor.core.negate import Negated
from waitfor.core.occurrence import Absent, Occurrence, shared_time_keeper
from waitfor.log_config.logger import ContextualLogger

_log = logging.getLogger(__name__)

T = TypeVar("T")


class Race(Occurrence[T]):
    """Occurs when either *first* or *second* occurs; yields the winner's value.

    Raises:
        IllegalUseError: If the two occurrences are attached to different clocks.
    """

    _child_attrs = ("_first", "_second")

    def __init__(
        self,
        first: Occurrence[Any],
        second: Occurrence[Any],
        *,
        description: Description | None = None,
    ) -> None:
        super().__init__(time_keeper=shared_time_keeper(first, second), description=description)
        self._first = first
        self._second = second

    @property
    def first(self) -> Occurrence[Any]:
        return self._first

    @property
    def second(self) -> Occurrence[Any]:
        return self._second

    def _await(self, duration: float, ctx: WaitContext) -> T:
        if duration <= 0:
            raise WaitTimeoutError(self, duration)

        log = ContextualLogger(_log, wait=ctx.wait_id)
        gate = CompletionGate(parties=2)
        branch_ctx = ctx.branch()
        threads = [
            threading.Thread(
                target=self._run_branch,
                args=(branch, duration, branch_ctx, gate),
                name=f"waitfor-race-{ctx.wait_id}-{index}",
                daemon=True,
            )
            for index, branch in enumerate((self._first, self._second))
        ]

        clock = ctx.time_keeper
        log.debug("Racing %s against %s (budget %gs)", self._first, self._second, duration)
        for _ in threads:
            clock.register_branch()
        for thread in threads:
            thread.start()

        try:
            # Logical clocks only move while branches sleep, so the branches'
            # own deadlines bound the wait; every branch departs eventually.
            bound = duration if clock.real_time else None
            with clock.blocked(lambda: gate.is_settled(ctx.token)):
                outcome = gate.wait(bound, ctx.token)
        finally:
            branch_ctx.token.cancel()
            branch_ctx.token.detach()
            self._join(threads, ctx, log)

        if ctx.token.is_cancelled:
            raise SleepInterrupted(f"Cancelled while waiting for {self}")
        return self._resolve(outcome, duration, log)

    def _resolve(self, outcome: Outcome | None, duration: float, log: ContextualLogger) -> T:
        if outcome is None:
            raise WaitTimeoutError(self, duration)
        error = outcome.error
        if error is None:
            log.debug("Race won with %r", outcome.value)
            return outcome.value
        if isinstance(error, WaitTimeoutError):
            raise WaitTimeoutError(self, duration) from error
        log.debug("Race ended by %s", type(error).__name__)
        raise with_note(error, f"Raised while waiting for {self}")

    @staticmethod
    def _run_branch(
        branch: Occurrence[Any],
        duration: float,
        ctx: WaitContext,
        gate: CompletionGate,
    ) -> None:
        clock = ctx.time_keeper
        clock.enter_branch()
        won = False
        try:
            value = branch._await_branch(duration, ctx)
        except SleepInterrupted:
            return
        except Exception as exc:
            won = gate.offer_error(exc)
        else:
            won = not isinstance(value, Absent) and gate.offer_value(value)
        finally:
            if won:
                # Stops the other branch before a logical clock may move on.
                ctx.token.cancel()
            gate.depart()
            clock.leave_branch()

    @staticmethod
    def _join(threads: list[threading.Thread], ctx: WaitContext, log: ContextualLogger) -> None:
        timeout = ctx.config.race.join_timeout
        for thread in threads:
            thread.join(timeout=timeout)
            if thread.is_alive():
                log.warning(
                    "Race branch %s still running %.1fs after cancellation", thread.name, timeout
                )

    def _default_description(self) -> str:
        return f"{self._first} or {self._second}"


class FailIf(Race[T]):
    """*main* raced against a :class:`Negated` occurrence.

    Returns *main*'s value unless the disallowed occurrence fires first, in
    which case a :class:`~waitfor.core.errors.FailEventError` (or the
    configured replacement) is raised.
    """

    def __init__(
        self,
        main: Occurrence[T],
        negated: Negated,
        *,
        description: Description | None = None,
    ) -> None:
        super().__init__(main, negated, description=description)

    @property
    def main(self) -> Occurrence[T]:
        return self._first

    @property
    def negated(self) -> Negated:
        return self._second

    def throwing(self, cause: BaseException) -> FailIf[T]:
        """Attach *cause* to the failure raised when the disallowed occurrence fires."""
        return self._with_negated(self.negated.throwing(cause))

    def throwing_from(self, supplier: Callable[[], BaseException]) -> FailIf[T]:
        """Like :meth:`throwing`, with the cause built at failure time."""
        return self._with_negated(self.negated.throwing_from(supplier))

    def throwing_as(self, wrap: Callable[[FailEventError], BaseException]) -> FailIf[T]:
        """Raise whatever *wrap* returns for the generated failure instead."""
        return self._with_negated(self.negated.throwing_as(wrap))

    def _with_negated(self, negated: Negated) -> FailIf[T]:
        clone = copy.copy(self)
        clone._second = negated
        return clone

    def _default_description(self) -> str:
        return f"{self._first} (failing if {self.negated.disallowed} occurs first)"
