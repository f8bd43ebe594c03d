"""Negated occurrence — the inverse of a normal wait.

The disallowed occurrence happening is the *failure*; it timing out is the
success case and yields ``None``.
"""

from __future__ import annotations

import copy
from typing import Any, Callable

from waitfor.core.condition import Description
from waitfor.core.context import WaitContext
from waitfor.core.errors import FailEventError, WaitTimeoutError
from waitfor.core.occurrence import NOT_OCCURRED, Absent, Occurrence


class Negated(Occurrence[None]):
    """Raises when *disallowed* occurs within the budget; returns ``None`` otherwise.

    The failure is a :class:`FailEventError` naming the disallowed occurrence.
    Use :meth:`throwing` to attach a fixed cause, :meth:`throwing_from` to
    build the cause when the failure happens, or :meth:`throwing_as` to wrap
    or replace the generated error entirely.
    """

    _child_attrs = ("_disallowed",)

    def __init__(
        self,
        disallowed: Occurrence[Any],
        *,
        description: Description | None = None,
    ) -> None:
        super().__init__(time_keeper=disallowed.time_keeper, description=description)
        self._disallowed = disallowed
        self._cause: BaseException | None = None
        self._cause_supplier: Callable[[], BaseException] | None = None
        self._wrap: Callable[[FailEventError], BaseException] | None = None

    @property
    def disallowed(self) -> Occurrence[Any]:
        return self._disallowed

    def throwing(self, cause: BaseException) -> Negated:
        return self._configured(cause=cause)

    def throwing_from(self, supplier: Callable[[], BaseException]) -> Negated:
        return self._configured(cause_supplier=supplier)

    def throwing_as(self, wrap: Callable[[FailEventError], BaseException]) -> Negated:
        return self._configured(wrap=wrap)

    def _configured(self, **settings: Any) -> Negated:
        clone = copy.copy(self)
        clone._cause = settings.get("cause")
        clone._cause_supplier = settings.get("cause_supplier")
        clone._wrap = settings.get("wrap")
        return clone

    def _await(self, duration: float, ctx: WaitContext) -> None:
        self._await_branch(duration, ctx)
        return None

    def _await_branch(self, duration: float, ctx: WaitContext) -> Absent:
        try:
            result = self._disallowed._await(duration, ctx)
        except WaitTimeoutError:
            return NOT_OCCURRED
        if isinstance(result, Absent):
            return NOT_OCCURRED
        raise self._failure()

    def _failure(self) -> BaseException:
        error = FailEventError(self._disallowed if self._description is None else self)
        if self._wrap is not None:
            return self._wrap(error)
        cause = self._cause_supplier() if self._cause_supplier is not None else self._cause
        if cause is not None:
            error.__cause__ = cause
        return error

    def _default_description(self) -> str:
        return f"{self._disallowed} not to occur"
