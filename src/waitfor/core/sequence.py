"""Sequential composition: wait for one occurrence, then another.

The second wait gets whatever budget the first left over, measured on the
context's time keeper.  A zero or negative leftover is still a deadline: the
second occurrence times out immediately instead of being skipped.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, TypeVar

from waitfor.core.condition import Condition, Description
from waitfor.core.context import WaitContext
from waitfor.core.errors import FailEventError, IllegalUseError, WaitTimeoutError
from waitfor.core.occurrence import Absent, Occurrence, shared_time_keeper
from waitfor.core.race import FailIf

_log = logging.getLogger(__name__)

T = TypeVar("T")


class Sequential(Occurrence[T]):
    """Occurs when *first* and then *second* have occurred; yields *second*'s value."""

    _child_attrs = ("_first", "_second")

    def __init__(
        self,
        first: Occurrence[Any],
        second: Occurrence[T],
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
    def second(self) -> Occurrence[T]:
        return self._second

    def _await(self, duration: float, ctx: WaitContext) -> T:
        clock = ctx.time_keeper
        start = clock.instant()
        try:
            self._first._await(duration, ctx)
            remaining = duration - clock.elapsed_since(start)
            _log.debug("[wait=%s] %s occurred; %gs left for %s", ctx.wait_id, self._first, remaining, self._second)
            return self._second._await(remaining, ctx)
        except WaitTimeoutError as exc:
            raise WaitTimeoutError(self, duration) from exc

    def after(self, action: Callable[[], Any]) -> Sequential[T]:
        """Run *action* before the first constituent, not before the second."""
        clone = copy.copy(self)
        clone._first = self._first.after(action)
        return clone

    def or_(self, other: Occurrence[T] | Condition[T] | Callable[[], T]) -> Sequential[T]:
        """Race *other* against the second constituent only.

        The first constituent must still occur before either can win.
        """
        return self._with_second(self._second.or_(other))

    def fail_if(self, disallowed: Occurrence[Any] | Condition[Any] | Callable[[], Any]) -> Sequential[T]:
        """Watch for *disallowed* only once the first constituent has occurred."""
        return self._with_second(self._second.fail_if(disallowed))

    def throwing(self, cause: BaseException) -> Sequential[T]:
        return self._with_second(self._fail_if_second("throwing").throwing(cause))

    def throwing_from(self, supplier: Callable[[], BaseException]) -> Sequential[T]:
        return self._with_second(self._fail_if_second("throwing_from").throwing_from(supplier))

    def throwing_as(self, wrap: Callable[[FailEventError], BaseException]) -> Sequential[T]:
        return self._with_second(self._fail_if_second("throwing_as").throwing_as(wrap))

    def described_as(self, description: Description) -> Sequential[T]:
        """Describe the second constituent, which is what the caller is waiting for."""
        clone = copy.copy(self)
        clone._second = self._second.described_as(description)
        return clone

    def _fail_if_second(self, method: str) -> FailIf[T]:
        if not isinstance(self._second, FailIf):
            raise IllegalUseError(f"{method}() needs a preceding fail_if() on {self}")
        return self._second

    def _with_second(self, second: Occurrence[T]) -> Sequential[T]:
        clone = copy.copy(self)
        clone._second = second
        clone._time_keeper = shared_time_keeper(self._first, second)
        return clone

    def _default_description(self) -> str:
        return f"{self._first} and then {self._second}"


class AfterAction(Occurrence[T]):
    """Runs *action* synchronously, then waits for *occurrence*.

    The action's own running time is not charged against the budget.  An
    already-expired budget times out without running the action.
    """

    _child_attrs = ("_occurrence",)

    def __init__(self, action: Callable[[], Any], occurrence: Occurrence[T]) -> None:
        super().__init__(time_keeper=occurrence.time_keeper)
        self._action = action
        self._occurrence = occurrence

    @property
    def occurrence(self) -> Occurrence[T]:
        return self._occurrence

    def _await(self, duration: float, ctx: WaitContext) -> T:
        self._run_action(duration)
        return self._occurrence._await(duration, ctx)

    def _await_branch(self, duration: float, ctx: WaitContext) -> T | Absent:
        self._run_action(duration)
        return self._occurrence._await_branch(duration, ctx)

    def _run_action(self, duration: float) -> None:
        if duration <= 0:
            raise WaitTimeoutError(self, duration)
        self._action()

    def described_as(self, description: Description) -> AfterAction[T]:
        clone = copy.copy(self)
        clone._occurrence = self._occurrence.described_as(description)
        return clone

    def _default_description(self) -> str:
        return str(self._occurrence)
