"""Lifecycle messages and events broadcast over the event stream."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .pid import PID
from .waitgroup import WaitGroup

LogRecord = tuple[int, str, dict[str, Any]]


def _id_of(pid: PID | None) -> str:
    return pid.id if pid is not None else ""


@dataclass(frozen=True)
class Initialized:
    """Delivered to a receiver before it is started."""


@dataclass(frozen=True)
class Started:
    """Delivered to a receiver once it is ready to process messages."""


@dataclass(frozen=True)
class Stopped:
    """Delivered to a receiver when its process shuts down."""


class InternalError(Exception):
    """Raised inside a receiver to restart it without counting the restart."""

    def __init__(self, origin: str, err: BaseException | str) -> None:
        super().__init__(origin, err)
        self.origin = origin
        self.err = err


@dataclass(frozen=True)
class PoisonPill:
    """Engine-private message that stops a process."""

    wg: WaitGroup | None = None
    graceful: bool = False


@dataclass
class ActorStartedEvent:
    """Broadcast when a receiver is spawned and ready to process messages."""

    pid: PID
    timestamp: datetime = field(default_factory=datetime.now)

    def log(self) -> LogRecord:
        return logging.DEBUG, "Actor started", {"pid": self.pid}


@dataclass
class ActorInitializedEvent:
    """Broadcast after a receiver has handled its Initialized message."""

    pid: PID
    timestamp: datetime = field(default_factory=datetime.now)

    def log(self) -> LogRecord:
        return logging.DEBUG, "Actor initialized", {"pid": self.pid}


@dataclass
class ActorStoppedEvent:
    """Broadcast each time a process terminates."""

    pid: PID
    timestamp: datetime = field(default_factory=datetime.now)

    def log(self) -> LogRecord:
        return logging.DEBUG, "Actor stopped", {"pid": self.pid}


@dataclass
class ActorRestartedEvent:
    """Broadcast when an actor crashes and is restarted."""

    pid: PID
    timestamp: datetime = field(default_factory=datetime.now)
    stacktrace: str = ""
    reason: Any = None
    restarts: int = 0

    def log(self) -> LogRecord:
        return (
            logging.ERROR,
            "Actor crashed and restarted",
            {
                "pid": _id_of(self.pid),
                "stack": self.stacktrace,
                "reason": self.reason,
                "restarts": self.restarts,
            },
        )


@dataclass
class ActorMaxRestartsExceededEvent:
    """Broadcast when an actor has crashed too many times."""

    pid: PID
    timestamp: datetime = field(default_factory=datetime.now)

    def log(self) -> LogRecord:
        return logging.ERROR, "Actor crashed too many times", {"pid": _id_of(self.pid)}


@dataclass
class ActorDuplicateIdEvent:
    """Broadcast when a process id is registered twice."""

    pid: PID

    def log(self) -> LogRecord:
        return logging.ERROR, "Actor name already claimed", {"pid": _id_of(self.pid)}


@dataclass
class EngineRemoteMissingEvent:
    """Broadcast when a message targets a remote PID but no remote is configured."""

    target: PID | None
    sender: PID | None = None
    message: Any = None

    def log(self) -> LogRecord:
        return logging.ERROR, "Engine has no remote", {"sender": _id_of(self.target)}


@dataclass
class RemoteUnreachableEvent:
    """Broadcast when a remote could not be reached after retrying."""

    listen_addr: str


@dataclass
class DeadLetterEvent:
    """Broadcast when a message cannot be delivered to its recipient."""

    target: PID | None
    message: Any = None
    sender: PID | None = None