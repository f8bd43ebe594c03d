"""waitfor — composable waits for things that happen in the future."""

from waitfor.clock import FakeTimeKeeper, SystemTimeKeeper, ThreadableTimeKeeper
from waitfor.core import (
    CANCELLED,
    CancellationToken,
    Condition,
    ConditionEvaluationError,
    ErrorKind,
    EvaluationWorker,
    FailEventError,
    IllegalUseError,
    InternalWaitError,
    Occurrence,
    PollOccurrence,
    Signal,
    WaitError,
    WaitTimeoutError,
    is_truthy,
    match,
    match_value,
)
from waitfor.dsl import after, expect

__all__ = [
    "CANCELLED",
    "CancellationToken",
    "Condition",
    "ConditionEvaluationError",
    "ErrorKind",
    "EvaluationWorker",
    "FailEventError",
    "FakeTimeKeeper",
    "IllegalUseError",
    "InternalWaitError",
    "Occurrence",
    "PollOccurrence",
    "Signal",
    "SystemTimeKeeper",
    "ThreadableTimeKeeper",
    "WaitError",
    "WaitTimeoutError",
    "after",
    "expect",
    "is_truthy",
    "match",
    "match_value",
]
