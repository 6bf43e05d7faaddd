"""The engine-wide actor that fans events out to subscribers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .pid import PID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventSub:
    """Subscribes a PID to the event stream."""

    pid: PID


@dataclass(frozen=True)
class EventUnsub:
    """Unsubscribes a PID from the event stream."""

    pid: PID


class EventStream:
    """Forwards every event it receives to all subscribers."""

    def __init__(self) -> None:
        self._subs: dict[PID, bool] = {}

    def receive(self, ctx: Any) -> None:
        msg = ctx.message
        if isinstance(msg, EventSub):
            self._subs[msg.pid] = True
        elif isinstance(msg, EventUnsub):
            self._subs.pop(msg.pid, None)
        else:
            log = getattr(msg, "log", None)
            if callable(log):
                level, text, attrs = log()
                details = " ".join(f"{key}={value}" for key, value in attrs.items())
                logger.log(level, "%s %s", text, details)
            for sub in list(self._subs):
                ctx.forward(sub)


def new_event_stream() -> Callable[[], EventStream]:
    """Return a producer of event stream receivers."""
    return EventStream