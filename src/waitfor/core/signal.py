"""One-shot signal — an occurrence completed by calling :meth:`Signal.trigger`.

Useful as a building block and for callback-style integrations: hand
``signal.trigger`` to whatever reports completion, then wait on the signal.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from waitfor.core.condition import Description
from waitfor.core.context import WaitContext
from waitfor.core.errors import SleepInterrupted, WaitTimeoutError
from waitfor.core.gate import CompletionGate
from waitfor.core.interfaces.time_keeper import TimeKeeper
from waitfor.core.occurrence import Occurrence

_log = logging.getLogger(__name__)

T = TypeVar("T")


class Signal(Occurrence[T]):
    """Manually completed occurrence.  Only the first trigger counts."""

    def __init__(
        self,
        *,
        time_keeper: TimeKeeper | None = None,
        description: Description | None = None,
    ) -> None:
        super().__init__(time_keeper=time_keeper, description=description)
        self._gate = CompletionGate()

    @property
    def is_triggered(self) -> bool:
        return self._gate.is_complete

    def trigger(self, value: Any = None) -> bool:
        """Complete the signal with *value*; ``False`` if it was already completed."""
        won = self._gate.offer_value(value)
        if not won:
            _log.debug("Ignoring late trigger of %s", self)
        return won

    def trigger_error(self, error: BaseException) -> bool:
        """Complete the signal with a failure that waiters will raise."""
        won = self._gate.offer_error(error)
        if not won:
            _log.debug("Ignoring late error trigger of %s", self)
        return won

    def _await(self, duration: float, ctx: WaitContext) -> T:
        if duration <= 0:
            raise WaitTimeoutError(self, duration)
        outcome = ctx.time_keeper.await_gate(self._gate, duration, ctx.token)
        if ctx.token.is_cancelled:
            raise SleepInterrupted(f"Cancelled while waiting for {self}")
        if outcome is None:
            raise WaitTimeoutError(self, duration)
        if outcome.error is not None:
            raise outcome.error
        return outcome.value

    def _default_description(self) -> str:
        return "signal to be triggered"
