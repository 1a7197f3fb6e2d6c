"""Hierarchical cancellation scopes.

A :class:`Scope` is a lifetime boundary shared by a unit of work and
everything it spawns. Cancelling a scope runs its cancel callbacks (used to
close blocking streams) and then cancels every child scope, so a single
``cancel()`` on the root tears down the whole ownership tree.
"""

from __future__ import annotations

import threading
from typing import Callable, List, Optional, Set


class Scope:
    def __init__(self, parent: Optional[Scope] = None):
        self._parent = parent
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._children: Set[Scope] = set()
        self._callbacks: List[Callable[[], None]] = []
        if parent is not None:
            parent._adopt(self)

    def _adopt(self, child: Scope) -> None:
        with self._lock:
            if not self._event.is_set():
                self._children.add(child)
                return
        child.cancel()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def child(self) -> Scope:
        return Scope(parent=self)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; True if cancelled."""
        return self._event.wait(timeout)

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback`` to run once on cancellation.

        Runs immediately when the scope is already cancelled. Returns a
        function that unregisters the callback.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)

                def remove() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return remove
        callback()
        return lambda: None

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
            children, self._children = list(self._children), set()
        for callback in callbacks:
            callback()
        for child in children:
            child.cancel()

    def detach(self) -> None:
        """Forget this scope in its parent once its work has finished."""
        parent = self._parent
        if parent is None:
            return
        with parent._lock:
            parent._children.discard(self)
        self._parent = None
