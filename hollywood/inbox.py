"""Mailbox that delivers messages to a process in batches."""

from __future__ import annotations

import enum
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable

from .pid import PID

DEFAULT_THROUGHPUT = 300
MESSAGE_BATCH_SIZE = 1024 * 4


@dataclass
class Envelope:
    """A message together with the PID of its sender."""

    msg: Any = None
    sender: PID | None = None


class ThreadScheduler:
    """Runs scheduled work on a new daemon thread."""

    def __init__(self, throughput: int = DEFAULT_THROUGHPUT) -> None:
        self.throughput = throughput

    def schedule(self, fn: Callable[[], None]) -> None:
        threading.Thread(target=fn, daemon=True).start()


class _Status(enum.Enum):
    STOPPED = enum.auto()
    STARTING = enum.auto()
    IDLE = enum.auto()
    RUNNING = enum.auto()


class Inbox:
    """Buffers envelopes and hands them to a process's ``invoke``."""

    def __init__(self, size: int, scheduler: ThreadScheduler | None = None) -> None:
        self.size = size
        self._buffer: deque[Envelope] = deque()
        self._lock = threading.Lock()
        self._scheduler = scheduler or ThreadScheduler(DEFAULT_THROUGHPUT)
        self._status = _Status.STOPPED
        self._proc: Any = None

    def send(self, envelope: Envelope) -> None:
        """Queue an envelope and schedule processing if idle."""
        with self._lock:
            self._buffer.append(envelope)
        self._schedule()

    def start(self, proc: Any) -> None:
        """Attach the process and begin delivering messages."""
        with self._lock:
            if self._status is not _Status.STOPPED:
                return
            self._status = _Status.STARTING
            self._proc = proc
            self._status = _Status.IDLE
        self._schedule()

    def stop(self) -> None:
        """Stop delivering messages."""
        with self._lock:
            self._status = _Status.STOPPED

    def _schedule(self) -> None:
        with self._lock:
            if self._status is not _Status.IDLE:
                return
            self._status = _Status.RUNNING
        self._scheduler.schedule(self._process)

    def _process(self) -> None:
        try:
            self._run()
        finally:
            with self._lock:
                pending = False
                if self._status is _Status.RUNNING:
                    self._status = _Status.IDLE
                    pending = bool(self._buffer)
            if pending:
                self._schedule()

    def _pop_batch(self) -> list[Envelope]:
        with self._lock:
            count = min(len(self._buffer), MESSAGE_BATCH_SIZE)
            return [self._buffer.popleft() for _ in range(count)]

    def _run(self) -> None:
        handled = 0
        throughput = self._scheduler.throughput
        while self._status is not _Status.STOPPED:
            if handled > throughput:
                handled = 0
                time.sleep(0)
            handled += 1
            batch = self._pop_batch()
            if not batch:
                return
            self._proc.invoke(batch)