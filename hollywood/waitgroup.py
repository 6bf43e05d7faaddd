"""A counter that lets threads wait for a set of tasks to finish."""

from __future__ import annotations

import threading


class WaitGroup:
    """Waits for a collection of tasks to complete."""

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    @property
    def count(self) -> int:
        with self._cond:
            return self._count

    def add(self, n: int = 1) -> None:
        """Add n, which may be negative, to the counter."""
        with self._cond:
            if self._count + n < 0:
                raise ValueError("negative WaitGroup counter")
            self._count += n
            if self._count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        """Decrement the counter by one."""
        self.add(-1)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the counter is zero; return False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout)