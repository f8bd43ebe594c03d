"""Error taxonomy for waits.

Every error raised by this package derives from :class:`WaitError` and
carries an :class:`ErrorKind` tag, so callers (and the poll ignore filter)
can match on the kind instead of on the concrete class.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Tag identifying the category of a :class:`WaitError`."""

    TIMEOUT = "timeout"
    CONDITION_EVALUATION = "condition_evaluation"
    FAIL_EVENT = "fail_event"
    INTERNAL = "internal"
    ILLEGAL_USE = "illegal_use"
    INTERRUPTED = "interrupted"


def format_duration(seconds: float) -> str:
    """Render a duration in seconds the way timeout messages show it."""
    return f"{seconds:g}s"


def with_note(error: BaseException, note: str) -> BaseException:
    """Return a copy of *error* carrying *note*; *error* itself is left untouched.

    The same exception object can be raised by many waits (a failed signal is
    re-raised to every waiter), so notes are never added to it in place.
    """
    cls = type(error)
    clone = cls.__new__(cls, *error.args)
    clone.__dict__.update(error.__dict__)
    notes = getattr(error, "__notes__", None)
    if notes is not None:
        clone.__notes__ = list(notes)
    clone.add_note(note)
    clone.__cause__ = error.__cause__
    clone.__context__ = error.__context__
    clone.__suppress_context__ = error.__suppress_context__
    return clone.with_traceback(error.__traceback__)


class WaitError(Exception):
    """Base class for every error raised while composing or awaiting occurrences."""

    kind: ErrorKind = ErrorKind.INTERNAL


class WaitTimeoutError(WaitError, TimeoutError):
    """A deadline elapsed before an occurrence completed."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, occurrence: Any, duration: float) -> None:
        self.occurrence = occurrence
        self.duration = duration
        super().__init__(
            f"Timed out after {format_duration(duration)} waiting for {occurrence}"
        )


class ConditionEvaluationError(WaitError):
    """A condition's computation raised while it was being evaluated.

    The original failure is available as ``__cause__``.
    """

    kind = ErrorKind.CONDITION_EVALUATION

    def __init__(self, subject: Any, cause: BaseException) -> None:
        self.subject = subject
        super().__init__(
            f"Evaluating {subject} failed: {type(cause).__name__}: {cause}"
        )
        self.__cause__ = cause


class FailEventError(WaitError, AssertionError):
    """An occurrence that must not happen happened before the wait completed."""

    kind = ErrorKind.FAIL_EVENT

    def __init__(self, occurrence: Any) -> None:
        self.occurrence = occurrence
        super().__init__(f"Fail event occurred: {occurrence}")


class InternalWaitError(WaitError):
    """Machinery failure, e.g. an evaluation worker rejected a submission."""

    kind = ErrorKind.INTERNAL


class IllegalUseError(WaitError):
    """Programmer error such as reading a result that was never computed."""

    kind = ErrorKind.ILLEGAL_USE


class SleepInterrupted(WaitError):
    """Cooperative abort: the waiting context was cancelled.

    Raised by time keepers and workers; ``Occurrence.wait_up_to`` turns it
    into the ``CANCELLED`` sentinel, so callers never see it.
    """

    kind = ErrorKind.INTERRUPTED
