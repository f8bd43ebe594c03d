"""Cancellation tokens: the explicit "this context was cancelled" signal.

Threads cannot be interrupted in Python, so every blocking primitive in the
package observes a :class:`CancellationToken` instead.  Tokens form a tree:
cancelling a parent cancels every child, which is how a race tells both of
its branch threads to stop.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

_log = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe, one-way cancellation flag with callbacks.

    Args:
        parent: When given, this token is cancelled whenever *parent* is.
    """

    def __init__(self, parent: CancellationToken | None = None) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._callbacks: dict[int, Callable[[], None]] = {}
        self._next_id = 0
        self._unlink: Callable[[], None] | None = None
        if parent is not None:
            self._unlink = parent.on_cancel(self.cancel)

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Cancel the token.  Only the first call runs the callbacks."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()
        for callback in callbacks:
            try:
                callback()
            except Exception:
                _log.exception("Cancellation callback %s raised", callback)

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run *callback* once when the token is cancelled.

        Runs it immediately if the token is already cancelled.  Returns a
        function that unregisters the callback.
        """
        with self._lock:
            if not self._event.is_set():
                key = self._next_id
                self._next_id += 1
                self._callbacks[key] = callback
                return lambda: self._remove(key)
        callback()
        return lambda: None

    def child(self) -> CancellationToken:
        """Return a new token linked to this one."""
        return CancellationToken(parent=self)

    def detach(self) -> None:
        """Unlink from the parent so the parent no longer holds a reference."""
        if self._unlink is not None:
            self._unlink()
            self._unlink = None

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or *timeout* elapses; ``True`` if cancelled."""
        if timeout is not None and timeout <= 0:
            return self._event.is_set()
        return self._event.wait(timeout)

    def _remove(self, key: int) -> None:
        with self._lock:
            self._callbacks.pop(key, None)

    def __repr__(self) -> str:
        state = "cancelled" if self.is_cancelled else "active"
        return f"<CancellationToken {state}>"
