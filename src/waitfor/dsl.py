"""Import-friendly entry points: ``expect(...)`` and ``after(action).expect(...)``.

Usage::

    from waitfor import after, expect

    expect(lambda: job.status == "done").polling_every(0.1).wait_up_to(5)
    after(button.click).expect(dialog_shown).wait_up_to(2)
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from waitfor.core.condition import Condition, match
from waitfor.core.occurrence import Occurrence, as_occurrence

T = TypeVar("T")


def expect(
    target: Occurrence[T] | Condition[T] | Callable[[], T],
    predicate: Callable[[T], Any] | None = None,
) -> Occurrence[T]:
    """Turn *target* into an occurrence.

    With a *predicate*, *target* must be a zero-argument callable; the result
    polls it until the predicate holds for the returned value.
    """
    if predicate is not None:
        if not callable(target) or isinstance(target, (Occurrence, Condition)):
            raise TypeError("expect(target, predicate) needs a zero-argument callable target")
        return match(target, predicate).as_occurrence()
    return as_occurrence(target)


class After:
    """Holds an action to run before whatever is expected next."""

    def __init__(self, action: Callable[[], Any]) -> None:
        self._action = action

    def expect(
        self,
        target: Occurrence[T] | Condition[T] | Callable[[], T],
        predicate: Callable[[T], Any] | None = None,
    ) -> Occurrence[T]:
        return expect(target, predicate).after(self._action)


def after(action: Callable[[], Any]) -> After:
    """Start an expression that runs *action* before waiting."""
    return After(action)
