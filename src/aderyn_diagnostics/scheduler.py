# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Marshal callbacks from worker threads back onto the main thread."""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Callable

Callback = Callable[[], None]


class MainThreadScheduler:
    """Queue of callbacks executed by whichever thread pumps the scheduler.

    Editor state must only be touched from the pumping thread; worker threads
    hand their results over with :meth:`schedule`.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[Callback] = queue.SimpleQueue()
        self._timers: set[threading.Timer] = set()
        self._lock = threading.Lock()

    def schedule(self, callback: Callback) -> None:
        """Queue ``callback`` to run on the next pump. Safe from any thread."""

        self._queue.put(callback)

    def defer(self, delay: float, callback: Callback) -> threading.Timer:
        """Queue ``callback`` after ``delay`` seconds."""

        timer: threading.Timer

        def _fire() -> None:
            with self._lock:
                self._timers.discard(timer)
            self.schedule(callback)

        timer = threading.Timer(delay, _fire)
        timer.daemon = True
        with self._lock:
            self._timers.add(timer)
        timer.start()
        return timer

    @property
    def has_pending_timers(self) -> bool:
        """Return ``True`` while deferred callbacks have not fired yet."""

        with self._lock:
            return bool(self._timers)

    def run_pending(self) -> int:
        """Run every queued callback on the calling thread and return how many ran."""

        executed = 0
        while True:
            try:
                callback = self._queue.get_nowait()
            except queue.Empty:
                return executed
            callback()
            executed += 1

    def drain_until(self, predicate: Callable[[], bool], timeout: float, *, poll: float = 0.05) -> bool:
        """Pump callbacks until ``predicate`` holds or ``timeout`` seconds pass.

        Returns:
            bool: Final value of ``predicate``.
        """

        deadline = time.monotonic() + timeout
        while True:
            self.run_pending()
            if predicate():
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return predicate()
            try:
                callback = self._queue.get(timeout=min(poll, remaining))
            except queue.Empty:
                continue
            callback()

    def cancel_timers(self) -> None:
        """Cancel deferred callbacks that have not fired yet."""

        with self._lock:
            timers = list(self._timers)
            self._timers.clear()
        for timer in timers:
            timer.cancel()


__all__ = ["MainThreadScheduler"]
