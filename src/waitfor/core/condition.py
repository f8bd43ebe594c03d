"""Re-evaluatable tests that polling turns into occurrences.

A condition runs a computation, remembers the value it produced, and tests a
predicate against it.  Every :meth:`Condition.is_met` call re-runs the
computation; nothing is memoised.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from waitfor.core.errors import ConditionEvaluationError, IllegalUseError, WaitError

if TYPE_CHECKING:
    from waitfor.core.interfaces.time_keeper import TimeKeeper
    from waitfor.core.poll import PollOccurrence

T = TypeVar("T")

Description = str | Callable[[], str]

_UNSET: Any = object()


def _name_of(fn: Any) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)


class Condition(ABC, Generic[T]):
    """Base class for conditions.

    Subclasses implement :meth:`is_met` and :meth:`last_result`.  The
    description (used only in failure messages) may be a string or a
    zero-argument callable evaluated lazily.
    """

    def __init__(self, description: Description | None = None) -> None:
        self._description = description

    @abstractmethod
    def is_met(self) -> bool:
        """Run the computation, store its value, and test the predicate.

        Raises:
            ConditionEvaluationError: If the computation or predicate raised.
        """

    @abstractmethod
    def last_result(self) -> T:
        """The value computed by the most recent :meth:`is_met` call.

        Raises:
            IllegalUseError: If the condition has never been evaluated.
        """

    def described_as(self, description: Description) -> Condition[T]:
        """Attach (or replace) the description.  Evaluation is unaffected."""
        self._description = description
        return self

    def as_occurrence(
        self,
        time_keeper: TimeKeeper | None = None,
        confined: bool = True,
    ) -> PollOccurrence[T]:
        """Poll this condition at the default interval until it is met."""
        from waitfor.core.poll import PollOccurrence

        return PollOccurrence(self, time_keeper=time_keeper, confined=confined)

    def _default_description(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        description = self._description
        if description is None:
            return self._default_description()
        return description() if callable(description) else description


class MatchCondition(Condition[T]):
    """Condition built from a zero-argument computation and a predicate."""

    def __init__(
        self,
        computation: Callable[[], T],
        predicate: Callable[[T], Any],
        description: Description | None = None,
    ) -> None:
        super().__init__(description)
        self._computation = computation
        self._predicate = predicate
        self._last: Any = _UNSET

    def is_met(self) -> bool:
        try:
            value = self._computation()
            self._last = value
            return bool(self._predicate(value))
        except WaitError:
            raise
        except Exception as exc:
            raise ConditionEvaluationError(self, exc) from exc

    def last_result(self) -> T:
        if self._last is _UNSET:
            raise IllegalUseError(f"{self} has not been evaluated yet")
        return self._last

    def _default_description(self) -> str:
        return f"{_name_of(self._computation)} to satisfy {_name_of(self._predicate)}"


def _is_true_or_not_none(value: Any) -> bool:
    return value is not None and value is not False


def match(computation: Callable[[], T], predicate: Callable[[T], Any]) -> MatchCondition[T]:
    """Condition met when *predicate* holds for the value *computation* returns."""
    return MatchCondition(computation, predicate)


def match_value(item: T, predicate: Callable[[T], Any]) -> MatchCondition[T]:
    """Condition over a fixed *item*, e.g. a mutable object whose state changes."""
    return MatchCondition(
        lambda: item,
        predicate,
        description=lambda: f"{item!r} to satisfy {_name_of(predicate)}",
    )


def is_truthy(computation: Callable[[], T]) -> MatchCondition[T]:
    """Condition met once *computation* returns something other than None or False."""
    return MatchCondition(
        computation,
        _is_true_or_not_none,
        description=lambda: f"{_name_of(computation)} to return True or a non-None value",
    )
