"""One-shot process that receives the answer to a request."""

from __future__ import annotations

import queue
import random
from typing import Any

from .pid import PID, PID_SEPARATOR
from .waitgroup import WaitGroup

_MAX_INT32 = 2**31 - 1


class Response:
    """Resolves to the first message sent to it, or times out."""

    def __init__(self, engine: Any, timeout: float) -> None:
        self._engine = engine
        self.timeout = timeout
        self._result: queue.Queue[Any] = queue.Queue(maxsize=1)
        self.pid = PID(
            engine.address, "response" + PID_SEPARATOR + str(random.randrange(_MAX_INT32))
        )

    def result(self) -> Any:
        """Block until the answer arrives; raise TimeoutError after the timeout."""
        try:
            return self._result.get(timeout=max(self.timeout, 0))
        except queue.Empty:
            raise TimeoutError("context deadline exceeded") from None
        finally:
            self._engine.registry.remove(self.pid)

    def send(self, pid: PID | None, msg: Any, sender: PID | None) -> None:
        """Resolve the response with msg; later messages are dropped."""
        try:
            self._result.put_nowait(msg)
        except queue.Full:
            pass

    def start(self) -> None:
        """Begin unresolved, discarding any answer left from before registration."""
        try:
            self._result.get_nowait()
        except queue.Empty:
            pass

    def invoke(self, envelopes: list[Any]) -> None:
        """Resolve with the first message of a delivered batch, if any."""
        if envelopes:
            first = envelopes[0]
            self.send(self.pid, first.msg, first.sender)

    def shutdown(self, wg: WaitGroup | None) -> None:
        """Drop the response from the engine's registry."""
        self._engine.registry.remove(self.pid)