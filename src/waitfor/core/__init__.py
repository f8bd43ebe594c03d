"""Core primitives: occurrences, combinators, conditions, and wait machinery."""

from waitfor.core.cancellation import CancellationToken
from waitfor.core.condition import Condition, MatchCondition, is_truthy, match, match_value
from waitfor.core.context import EvaluationWorker, WaitContext
from waitfor.core.errors import (
    ConditionEvaluationError,
    ErrorKind,
    FailEventError,
    IllegalUseError,
    InternalWaitError,
    SleepInterrupted,
    WaitError,
    WaitTimeoutError,
)
from waitfor.core.gate import CompletionGate, Outcome
from waitfor.core.negate import Negated
from waitfor.core.occurrence import CANCELLED, Absent, Occurrence, as_occurrence
from waitfor.core.poll import PollOccurrence
from waitfor.core.race import FailIf, Race
from waitfor.core.sequence import AfterAction, Sequential
from waitfor.core.signal import Signal

__all__ = [
    "CANCELLED",
    "Absent",
    "AfterAction",
    "CancellationToken",
    "CompletionGate",
    "Condition",
    "ConditionEvaluationError",
    "ErrorKind",
    "EvaluationWorker",
    "FailEventError",
    "FailIf",
    "IllegalUseError",
    "InternalWaitError",
    "MatchCondition",
    "Negated",
    "Occurrence",
    "Outcome",
    "PollOccurrence",
    "Race",
    "Sequential",
    "Signal",
    "SleepInterrupted",
    "WaitContext",
    "WaitError",
    "WaitTimeoutError",
    "as_occurrence",
    "is_truthy",
    "match",
    "match_value",
]
