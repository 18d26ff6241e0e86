"""Polling mutual exclusion with a bounded wait.

There is no queue and no fairness: every waiter retries at the poll interval
and whichever attempt lands first wins. Sections do not nest; calling
``with_exclusive`` from inside an action times out instead of re-entering.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from ringi.core.errors import LockTimeout
from ringi.observability.tracing import log_event

from .advisory_lock import AdvisoryLock

T = TypeVar("T")


class ExclusiveSection:
    def __init__(
        self,
        lock: AdvisoryLock,
        *,
        poll_interval: float = 0.01,
        timeout: float = 10.0,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = lock
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._sleep = sleep
        self._monotonic = monotonic

    def _acquire(self, poll_interval: float, timeout: float) -> None:
        deadline = self._monotonic() + timeout
        while not self._lock.try_acquire():
            remaining = deadline - self._monotonic()
            if remaining <= 0:
                log_event(
                    "lock.timeout",
                    level=logging.WARNING,
                    lock=self._lock.name,
                    timeout_seconds=timeout,
                )
                raise LockTimeout(self._lock.name, timeout)
            self._sleep(min(poll_interval, remaining))

    def with_exclusive(
        self,
        action: Callable[[], T],
        *,
        poll_interval: float | None = None,
        timeout: float | None = None,
    ) -> T:
        """Run ``action`` once while holding the lock.

        The lock is released whether or not ``action`` raises; its exception
        propagates unchanged.

        Raises:
            LockTimeout: The lock was not acquired within ``timeout`` seconds.
                ``action`` has not been called.
        """
        self._acquire(
            self._poll_interval if poll_interval is None else poll_interval,
            self._timeout if timeout is None else timeout,
        )
        started = self._monotonic()
        try:
            return action()
        finally:
            self._lock.release()
            log_event(
                "lock.released",
                level=logging.DEBUG,
                lock=self._lock.name,
                held_ms=round((self._monotonic() - started) * 1000, 3),
            )
