"""
Shared "network busy" indicator.

Several requests can be in flight at once (a forecast fetch started while a
snapshot fetch is pending), so the indicator is a reference count: it is busy
while at least one tracked request has not completed. Listeners only hear the
idle -> busy and busy -> idle edges.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)

ActivityListener = Callable[[bool], None]


class NetworkActivity:
    """Reference-counted in-flight request indicator."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # Held from the counter change through delivery so edges arrive in counter order.
        self._edge_lock = threading.RLock()
        self._in_flight = 0
        self._listeners: list[ActivityListener] = []

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def busy(self) -> bool:
        return self.in_flight > 0

    def add_listener(self, listener: ActivityListener) -> None:
        """Register `listener(busy)`; called on every idle/busy edge."""
        self._listeners.append(listener)

    def begin(self) -> None:
        with self._edge_lock:
            with self._lock:
                self._in_flight += 1
                became_busy = self._in_flight == 1
            if became_busy:
                self._notify(True)

    def end(self) -> None:
        with self._edge_lock:
            with self._lock:
                if self._in_flight == 0:
                    raise RuntimeError("NetworkActivity.end() called without a matching begin()")
                self._in_flight -= 1
                became_idle = self._in_flight == 0
            if became_idle:
                self._notify(False)

    @contextmanager
    def track(self) -> Iterator[None]:
        """Count one request for the duration of the block."""
        self.begin()
        try:
            yield
        finally:
            self.end()

    def _notify(self, busy: bool) -> None:
        logger.debug("Network activity %s", "busy" if busy else "idle")
        for listener in list(self._listeners):
            listener(busy)
