"""Poll occurrence — turns a :class:`Condition` into an :class:`Occurrence`.

The condition is evaluated repeatedly until it is met or the deadline
passes, sleeping through the context's time keeper between evaluations.
With ``confined=True`` (the default) every evaluation runs on the context's
single :class:`~waitfor.core.context.EvaluationWorker`, so polls racing each
other inside one wait never evaluate their conditions concurrently.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, TypeVar

from waitfor.config.config_manager import get_config
from waitfor.core.condition import Condition, Description
from waitfor.core.context import WaitContext
from waitfor.core.errors import (
    ConditionEvaluationError,
    ErrorKind,
    InternalWaitError,
    SleepInterrupted,
    WaitError,
    WaitTimeoutError,
    format_duration,
)
from waitfor.core.interfaces.time_keeper import TimeKeeper
from waitfor.core.occurrence import IgnoreTarget, Occurrence
from waitfor.log_config.logger import ContextualLogger

_log = logging.getLogger(__name__)

T = TypeVar("T")


class PollOccurrence(Occurrence[T]):
    """Occurrence that happens when polling finds *condition* met.

    Args:
        condition: The condition to evaluate.
        time_keeper: Attached clock, or ``None`` to inherit.
        polling_interval: Seconds between evaluations; defaults to the
            active config's ``polling.interval``.
        confined: Evaluate on the context's evaluation worker rather than on
            the waiting thread.
        description: Message override.
    """

    def __init__(
        self,
        condition: Condition[T],
        *,
        time_keeper: TimeKeeper | None = None,
        polling_interval: float | None = None,
        confined: bool = True,
        description: Description | None = None,
    ) -> None:
        super().__init__(time_keeper=time_keeper, description=description)
        self._condition = condition
        self._interval = (
            polling_interval if polling_interval is not None else get_config().polling.interval
        )
        self._confined = confined
        self._ignored: tuple[IgnoreTarget, ...] = ()
        self._ignore_predicates: tuple[Callable[[BaseException], bool], ...] = ()

    @property
    def condition(self) -> Condition[T]:
        return self._condition

    @property
    def polling_interval(self) -> float:
        return self._interval

    @property
    def confined(self) -> bool:
        return self._confined

    # ------------------------------------------------------------------
    # Fluent configuration
    # ------------------------------------------------------------------

    def polling_every(self, interval: float) -> PollOccurrence[T]:
        if interval <= 0:
            raise ValueError(f"Polling interval must be positive, got {interval!r}")
        clone = copy.copy(self)
        clone._interval = interval
        return clone

    def ignoring(self, *targets: IgnoreTarget) -> PollOccurrence[T]:
        for target in targets:
            if not isinstance(target, ErrorKind) and not (
                isinstance(target, type) and issubclass(target, BaseException)
            ):
                raise TypeError(f"Can only ignore exception types or ErrorKinds, got {target!r}")
        clone = copy.copy(self)
        clone._ignored = self._ignored + targets
        return clone

    def ignoring_if(self, predicate: Callable[[BaseException], bool]) -> PollOccurrence[T]:
        clone = copy.copy(self)
        clone._ignore_predicates = self._ignore_predicates + (predicate,)
        return clone

    def is_ignored(self, error: BaseException) -> bool:
        """Whether *error* (or its direct cause) was declared ignorable."""
        candidates = [error]
        if error.__cause__ is not None:
            candidates.append(error.__cause__)
        for candidate in candidates:
            for target in self._ignored:
                if isinstance(target, ErrorKind):
                    if getattr(candidate, "kind", None) == target:
                        return True
                elif isinstance(candidate, target):
                    return True
            if any(predicate(candidate) for predicate in self._ignore_predicates):
                return True
        return False

    # ------------------------------------------------------------------
    # Waiting
    # ------------------------------------------------------------------

    def _await(self, duration: float, ctx: WaitContext) -> T:
        clock = ctx.time_keeper
        log = ContextualLogger(_log, wait=ctx.wait_id)
        deadline = clock.instant() + duration
        evaluations = 0

        while True:
            # An expired deadline never permits one more evaluation.
            if clock.instant() >= deadline:
                log.debug("Timed out polling %s after %d evaluation(s)", self, evaluations)
                raise WaitTimeoutError(self, duration)

            evaluations += 1
            try:
                met, result = self._evaluate(ctx)
            except (SleepInterrupted, InternalWaitError):
                raise
            except Exception as exc:
                if not self.is_ignored(exc):
                    if isinstance(exc, WaitError):
                        raise
                    raise ConditionEvaluationError(self._condition, exc) from exc
                log.debug("Ignoring %s while polling %s", type(exc).__name__, self)
                met, result = False, None

            if ctx.token.is_cancelled:
                raise SleepInterrupted(f"Cancelled while polling {self}")
            if met:
                log.debug("%s met after %d evaluation(s)", self._condition, evaluations)
                return result

            clock.sleep_for(min(self._interval, deadline - clock.instant()), ctx.token)

    def _evaluate(self, ctx: WaitContext) -> tuple[bool, Any]:
        if self._confined:
            return ctx.worker.run(self._check, ctx.token)
        return self._check()

    def _check(self) -> tuple[bool, Any]:
        # Runs where the condition is confined: the result is read in the same
        # call that evaluated it.
        if self._condition.is_met():
            return True, self._condition.last_result()
        return False, None

    def _default_description(self) -> str:
        return (
            f"{self._condition} (as determined by polling every "
            f"{format_duration(self._interval)})"
        )
