"""Per-wait context and the single-worker evaluation queue.

A :class:`WaitContext` is created once per top-level ``wait_up_to`` call and
handed down to every constituent occurrence.  It carries the resolved time
keeper, the cancellation token, the evaluation worker and the active config,
so nothing below the top-level call looks anything up implicitly.
"""

from __future__ import annotations

import logging
import threading
import uuid
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, Callable, TypeVar

from waitfor.core.cancellation import CancellationToken
from waitfor.core.errors import InternalWaitError, SleepInterrupted
from waitfor.core.interfaces.time_keeper import TimeKeeper
from waitfor.core.models.config import WaitConfig

_log = logging.getLogger(__name__)

R = TypeVar("R")


class EvaluationWorker:
    """A single dedicated thread through which condition evaluations run.

    Every poll awaited within one context submits its evaluations here, so
    concurrently pending polls never evaluate their conditions at the same
    time.  Different contexts get different workers.

    Args:
        name: Suffix for the worker thread's name.
    """

    def __init__(self, name: str | None = None) -> None:
        self._name = name or uuid.uuid4().hex[:8]
        self._lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._closed = False

    @property
    def name(self) -> str:
        return self._name

    def run(self, fn: Callable[[], R], token: CancellationToken | None = None) -> R:
        """Run *fn* on the worker thread and return its result.

        Blocks until *fn* finishes or *token* is cancelled.

        Raises:
            SleepInterrupted: If *token* is cancelled first.
            InternalWaitError: If the submission was rejected or cancelled.
        """
        if token is not None and token.is_cancelled:
            raise SleepInterrupted("Evaluation requested by a cancelled context")
        future = self._submit(fn)
        finished = threading.Event()
        future.add_done_callback(lambda _f: finished.set())
        unregister = token.on_cancel(finished.set) if token is not None else None
        try:
            finished.wait()
        finally:
            if unregister is not None:
                unregister()

        if not future.done():
            future.cancel()
            raise SleepInterrupted("Evaluation abandoned: waiting context was cancelled")
        try:
            return future.result()
        except CancelledError as exc:
            raise InternalWaitError(f"Evaluation on worker {self._name} was cancelled") from exc

    def close(self) -> None:
        """Stop the worker without waiting; queued evaluations are dropped."""
        with self._lock:
            self._closed = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)
            _log.debug("Evaluation worker %s closed", self._name)

    def _submit(self, fn: Callable[[], Any]) -> Future:
        with self._lock:
            if self._closed:
                raise InternalWaitError(f"Evaluation worker {self._name} is closed")
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix=f"waitfor-eval-{self._name}"
                )
            try:
                return self._executor.submit(fn)
            except RuntimeError as exc:
                raise InternalWaitError(
                    f"Evaluation worker {self._name} rejected a submission"
                ) from exc

    def __repr__(self) -> str:
        return f"<EvaluationWorker {self._name}>"


@dataclass(frozen=True)
class WaitContext:
    """Everything a constituent occurrence needs while it is being awaited."""

    time_keeper: TimeKeeper
    token: CancellationToken
    worker: EvaluationWorker
    config: WaitConfig
    wait_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    owns_worker: bool = False

    @classmethod
    def open(
        cls,
        time_keeper: TimeKeeper,
        config: WaitConfig,
        token: CancellationToken | None = None,
        worker: EvaluationWorker | None = None,
    ) -> WaitContext:
        """Create a root context; a worker is created (and owned) if none is given."""
        wait_id = uuid.uuid4().hex[:8]
        owns = worker is None
        return cls(
            time_keeper=time_keeper,
            token=token if token is not None else CancellationToken(),
            worker=worker if worker is not None else EvaluationWorker(wait_id),
            config=config,
            wait_id=wait_id,
            owns_worker=owns,
        )

    def branch(self) -> WaitContext:
        """Same context with a child token, for a concurrently awaited branch."""
        return replace(self, token=self.token.child(), owns_worker=False)

    def close(self) -> None:
        if self.owns_worker:
            self.worker.close()
