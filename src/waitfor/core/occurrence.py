"""The occurrence contract and its fluent combinators.

An occurrence is something that may happen in the future, yielding a value,
and can be awaited with a deadline.  :meth:`Occurrence.wait_up_to` either
returns the value, raises :class:`~waitfor.core.errors.WaitTimeoutError`, or
returns :data:`CANCELLED` when the caller's token was cancelled.

The fluent methods (``after``, ``or_``, ``and_then_expect``, ``fail_if``) only
construct combinator instances; no combinator reaches into another's
internals beyond :meth:`Occurrence._await`.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from waitfor.clock.system import system_time_keeper
from waitfor.config.config_manager import get_config
from waitfor.core.cancellation import CancellationToken
from waitfor.core.condition import Condition, Description, is_truthy
from waitfor.core.context import EvaluationWorker, WaitContext
from waitfor.core.errors import ErrorKind, IllegalUseError, SleepInterrupted
from waitfor.core.interfaces.time_keeper import TimeKeeper

if TYPE_CHECKING:
    from waitfor.core.race import FailIf, Race
    from waitfor.core.sequence import AfterAction, Sequential

_log = logging.getLogger(__name__)

T = TypeVar("T")

IgnoreTarget = type[BaseException] | ErrorKind


class Absent(str, Enum):
    """Results that are not values."""

    CANCELLED = "cancelled"
    NOT_OCCURRED = "not_occurred"

    def __bool__(self) -> bool:
        return False


#: Returned by ``wait_up_to`` when the waiting context was cancelled.
CANCELLED = Absent.CANCELLED

#: Reported by a negated branch whose disallowed occurrence never fired.
NOT_OCCURRED = Absent.NOT_OCCURRED


class Occurrence(ABC, Generic[T]):
    """Base class for everything that can be awaited.

    Args:
        time_keeper: Clock to wait against.  ``None`` inherits the clock of
            the enclosing wait (the system clock at top level).
        description: Overrides the text used in timeout and failure messages.
    """

    #: Attribute names of constituent occurrences, for fluent reconfiguration.
    _child_attrs: tuple[str, ...] = ()

    def __init__(
        self,
        *,
        time_keeper: TimeKeeper | None = None,
        description: Description | None = None,
    ) -> None:
        self._time_keeper = time_keeper
        self._description = description

    @property
    def time_keeper(self) -> TimeKeeper | None:
        return self._time_keeper

    # ------------------------------------------------------------------
    # Waiting
    # ------------------------------------------------------------------

    def wait_up_to(
        self,
        duration: float,
        token: CancellationToken | None = None,
        worker: EvaluationWorker | None = None,
    ) -> T | Absent:
        """Block until the occurrence happens or *duration* seconds pass.

        Args:
            duration: Time budget in seconds (in the attached clock's time).
            token: Cancelling it makes the wait return :data:`CANCELLED`.
            worker: Evaluation worker to share across several waits issued by
                the same caller.  A private one is created when omitted.

        Raises:
            WaitTimeoutError: The deadline passed first.
        """
        ctx = WaitContext.open(
            self._time_keeper or system_time_keeper(),
            get_config(),
            token=token,
            worker=worker,
        )
        try:
            return self._await(duration, ctx)
        except SleepInterrupted:
            _log.debug("[wait=%s] Cancelled while waiting for %s", ctx.wait_id, self)
            return CANCELLED
        finally:
            ctx.close()

    @abstractmethod
    def _await(self, duration: float, ctx: WaitContext) -> T:
        """Wait within an already-open context.  Cancellation raises SleepInterrupted."""

    def _await_branch(self, duration: float, ctx: WaitContext) -> T | Absent:
        """Wait as one branch of a race; may return :data:`NOT_OCCURRED`."""
        return self._await(duration, ctx)

    # ------------------------------------------------------------------
    # Combinators
    # ------------------------------------------------------------------

    def after(self, action: Callable[[], Any]) -> AfterAction[T]:
        """Run *action* first, then wait for this occurrence with the full budget."""
        from waitfor.core.sequence import AfterAction

        return AfterAction(action, self)

    def or_(self, other: Occurrence[T] | Condition[T] | Callable[[], T]) -> Race[T]:
        """Wait for whichever of this and *other* happens first."""
        from waitfor.core.race import Race

        return Race(self, as_occurrence(other))

    def __or__(self, other: Occurrence[T] | Condition[T] | Callable[[], T]) -> Race[T]:
        return self.or_(other)

    def and_then_expect(self, next_: Occurrence[Any] | Condition[Any] | Callable[[], Any]) -> Sequential[Any]:
        """Wait for this occurrence, then for *next_* with the remaining budget."""
        from waitfor.core.sequence import Sequential

        return Sequential(self, as_occurrence(next_))

    def fail_if(self, disallowed: Occurrence[Any] | Condition[Any] | Callable[[], Any]) -> FailIf[T]:
        """Fail instead of returning if *disallowed* happens first."""
        from waitfor.core.negate import Negated
        from waitfor.core.race import FailIf

        return FailIf(self, Negated(as_occurrence(disallowed)))

    # ------------------------------------------------------------------
    # Fluent configuration
    # ------------------------------------------------------------------

    def described_as(self, description: Description) -> Occurrence[T]:
        """Return a copy whose messages use *description*."""
        clone = copy.copy(self)
        clone._description = description
        return clone

    def polling_every(self, interval: float) -> Occurrence[T]:
        """Return a copy whose polls evaluate every *interval* seconds."""
        return self._reconfigured(lambda child: child.polling_every(interval))

    def ignoring(self, *targets: IgnoreTarget) -> Occurrence[T]:
        """Return a copy whose polls treat matching evaluation failures as "not met"."""
        return self._reconfigured(lambda child: child.ignoring(*targets))

    def ignoring_if(self, predicate: Callable[[BaseException], bool]) -> Occurrence[T]:
        """Like :meth:`ignoring`, with a caller-supplied predicate over errors."""
        return self._reconfigured(lambda child: child.ignoring_if(predicate))

    def _reconfigured(self, fn: Callable[[Occurrence[Any]], Occurrence[Any]]) -> Occurrence[T]:
        clone = copy.copy(self)
        for name in self._child_attrs:
            setattr(clone, name, fn(getattr(self, name)))
        return clone

    # ------------------------------------------------------------------
    # Description
    # ------------------------------------------------------------------

    def _default_description(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        description = self._description
        if description is None:
            return self._default_description()
        return description() if callable(description) else description

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self}>"


def as_occurrence(target: Occurrence[T] | Condition[T] | Callable[[], T]) -> Occurrence[T]:
    """Coerce an occurrence, condition, or zero-argument callable to an occurrence.

    Conditions and callables become polls at the default interval; a bare
    callable is met once it returns something other than None or False.
    """
    if isinstance(target, Occurrence):
        return target
    if isinstance(target, Condition):
        return target.as_occurrence()
    if callable(target):
        return is_truthy(target).as_occurrence()
    raise TypeError(f"Cannot wait for {target!r}: expected an occurrence, condition or callable")


def shared_time_keeper(*occurrences: Occurrence[Any]) -> TimeKeeper | None:
    """The single clock attached to *occurrences*, or None if none is attached.

    Raises:
        IllegalUseError: If two different clocks are attached.
    """
    found: TimeKeeper | None = None
    for occurrence in occurrences:
        keeper = occurrence.time_keeper
        if keeper is None:
            continue
        if found is not None and keeper is not found:
            raise IllegalUseError(
                f"Cannot compose waits on different clocks: {found!r} and {keeper!r}"
            )
        found = keeper
    return found
