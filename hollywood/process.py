"""Processes, the contexts they run receivers in, and repeating senders."""

from __future__ import annotations

import logging
import random
import sys
import threading
import time
import traceback
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Protocol

from .events import (
    ActorInitializedEvent,
    ActorMaxRestartsExceededEvent,
    ActorRestartedEvent,
    ActorStartedEvent,
    ActorStoppedEvent,
    Initialized,
    InternalError,
    PoisonPill,
    Started,
    Stopped,
)
from .inbox import Envelope, Inbox
from .opts import MiddlewareFunc, OptFunc, Opts, ReceiveFunc, default_opts
from .pid import PID, PID_SEPARATOR
from .waitgroup import WaitGroup

logger = logging.getLogger(__name__)


class Receiver(Protocol):
    """Anything that can process messages delivered through a Context."""

    def receive(self, ctx: Context) -> None: ...


Producer = Callable[[], Receiver]


def _random_id() -> str:
    return str(random.randrange(sys.maxsize))


def apply_middleware(receive: ReceiveFunc, middleware: Iterable[MiddlewareFunc]) -> ReceiveFunc:
    """Wrap receive so the first middleware runs first."""
    for mw in reversed(list(middleware)):
        receive = mw(receive)
    return receive


class _FuncReceiver:
    def __init__(self, f: Callable[[Context], None]) -> None:
        self._f = f

    def receive(self, ctx: Context) -> None:
        self._f(ctx)


def func_receiver(f: Callable[[Context], None]) -> Producer:
    """Return a producer whose receivers call f for every message."""
    return lambda: _FuncReceiver(f)


@dataclass
class SendRepeater:
    """Sends a message to a target at a fixed interval until stopped."""

    engine: Any
    target: PID
    msg: Any
    interval: float
    sender: PID | None = None
    _cancel: threading.Event = field(default_factory=threading.Event, init=False, repr=False)

    def start(self) -> None:
        """Begin sending on a background thread."""

        def run() -> None:
            while not self._cancel.wait(self.interval):
                self.engine.send_with_sender(self.target, self.msg, self.sender)

        threading.Thread(target=run, daemon=True).start()

    def stop(self) -> None:
        """Stop sending."""
        self._cancel.set()


class Context:
    """What a receiver sees of its process while handling a message."""

    def __init__(self, engine: Any, pid: PID, context: Any = None) -> None:
        self.engine = engine
        self.pid = pid
        self.context = context
        self.sender: PID | None = None
        self.receiver: Receiver | None = None
        self.message: Any = None
        self._parent_ctx: Context | None = None
        self._children: dict[str, PID] = {}
        self._children_lock = threading.Lock()

    def request(self, pid: PID, msg: Any, timeout: float) -> Any:
        """Send msg to pid as a request; return the pending Response."""
        return self.engine.request(pid, msg, timeout)

    def respond(self, msg: Any) -> None:
        """Send msg to the sender of the message being handled."""
        if self.sender is None:
            logger.warning("context got no sender (func=respond, pid=%s)", self.pid)
            return
        self.engine.send(self.sender, msg)

    def spawn_child(self, producer: Producer, name: str, *opt_funcs: OptFunc) -> PID:
        """Spawn a child process that is stopped when this one stops."""
        options = default_opts(producer)
        options.kind = self.pid.id + PID_SEPARATOR + name
        for opt in opt_funcs:
            opt(options)
        if not options.id:
            options.id = _random_id()
        proc = Process(self.engine, options)
        proc.context._parent_ctx = self
        pid = self.engine.spawn_proc(proc)
        with self._children_lock:
            self._children[pid.id] = pid
        return proc.pid

    def spawn_child_func(self, f: Callable[[Context], None], name: str, *opt_funcs: OptFunc) -> PID:
        """Spawn f as a stateless child receiver."""
        return self.spawn_child(func_receiver(f), name, *opt_funcs)

    def send(self, pid: PID, msg: Any) -> None:
        """Send msg to pid with this process as the sender."""
        self.engine.send_with_sender(pid, msg, self.pid)

    def send_repeat(self, pid: PID, msg: Any, interval: float) -> SendRepeater:
        """Send msg to pid every interval seconds until the repeater is stopped."""
        repeater = SendRepeater(self.engine, pid, msg, interval, sender=self.pid)
        repeater.start()
        return repeater

    def forward(self, pid: PID) -> None:
        """Pass the current message on to pid with this process as sender."""
        self.engine.send_with_sender(pid, self.message, self.pid)

    def get_pid(self, id: str) -> PID | None:
        """Return the PID of the registered process with the given id."""
        proc = self.engine.registry.get_by_id(id)
        return proc.pid if proc is not None else None

    def parent(self) -> PID | None:
        """Return the PID of the process that spawned this one, if any."""
        return self._parent_ctx.pid if self._parent_ctx is not None else None

    def child(self, id: str) -> PID | None:
        """Return the PID of the child with the given id, if any."""
        with self._children_lock:
            return self._children.get(id)

    def children(self) -> list[PID]:
        """Return the PIDs of all living children."""
        with self._children_lock:
            return list(self._children.values())

    def _remove_child(self, id: str) -> None:
        with self._children_lock:
            self._children.pop(id, None)


def _clean_trace(exc: BaseException) -> str:
    lines = [f"thread {threading.current_thread().name} [{type(exc).__name__}]"]
    for frame in reversed(traceback.extract_tb(exc.__traceback__)):
        lines.append(frame.name)
        lines.append(f"\t{frame.filename}:{frame.lineno}")
    return "\n".join(lines)


class Process:
    """A receiver with its inbox, restart policy and lifecycle."""

    def __init__(self, engine: Any, opts: Opts) -> None:
        self.opts = opts
        self.pid = PID(engine.address, opts.kind + PID_SEPARATOR + opts.id)
        self.context = Context(engine, self.pid, opts.context)
        self.inbox = Inbox(opts.inbox_size)
        self.restarts = 0
        self._buffer: list[Envelope] = []
        self._stopped = False

    @property
    def _engine(self) -> Any:
        return self.context.engine

    def _receive_wrapped(self) -> None:
        apply_middleware(self.context.receiver.receive, self.opts.middleware)(self.context)

    def start(self) -> None:
        """Create the receiver, deliver startup messages and open the inbox."""
        recv = self.opts.producer()
        self.context.receiver = recv
        try:
            self.context.message = Initialized()
            self._receive_wrapped()
            self._engine.broadcast_event(ActorInitializedEvent(pid=self.pid))

            self.context.message = Started()
            self._receive_wrapped()
            self._engine.broadcast_event(ActorStartedEvent(pid=self.pid))

            if self._buffer:
                buffered, self._buffer = self._buffer, []
                self.invoke(buffered)
            if not self._stopped:
                self.inbox.start(self)
        except Exception as exc:
            self.context.message = Stopped()
            recv.receive(self.context)
            self._try_restart(exc)

    def send(self, pid: PID | None, msg: Any, sender: PID | None) -> None:
        """Queue a message in the inbox."""
        self.inbox.send(Envelope(msg, sender))

    def invoke(self, envelopes: list[Envelope]) -> None:
        """Deliver a batch of envelopes to the receiver."""
        visited = 0
        processed = 0
        try:
            for envelope in envelopes:
                visited += 1
                pill = envelope.msg
                if isinstance(pill, PoisonPill):
                    if pill.graceful:
                        for pending in envelopes[processed:]:
                            self._invoke_msg(pending)
                    self._cleanup(pill.wg)
                    return
                self._invoke_msg(envelope)
                processed += 1
        except Exception as exc:
            self.context.message = Stopped()
            self.context.receiver.receive(self.context)
            self._buffer = list(envelopes[visited:])
            self._try_restart(exc)

    def shutdown(self, wg: WaitGroup | None) -> None:
        """Stop the process immediately."""
        self._cleanup(wg)

    def _invoke_msg(self, envelope: Envelope) -> None:
        if isinstance(envelope.msg, PoisonPill):
            return
        self.context.message = envelope.msg
        self.context.sender = envelope.sender
        if self.opts.middleware:
            self._receive_wrapped()
        else:
            self.context.receiver.receive(self.context)

    def _try_restart(self, exc: Exception) -> None:
        if isinstance(exc, InternalError):
            logger.error("%s: %s", exc.origin, exc.err)
            time.sleep(self.opts.restart_delay)
            self.start()
            return
        stacktrace = _clean_trace(exc)
        if self.restarts == self.opts.max_restarts:
            self._engine.broadcast_event(ActorMaxRestartsExceededEvent(pid=self.pid))
            self._cleanup(None)
            return
        self.restarts += 1
        self._engine.broadcast_event(
            ActorRestartedEvent(
                pid=self.pid,
                stacktrace=stacktrace,
                reason=exc,
                restarts=self.restarts,
            )
        )
        time.sleep(self.opts.restart_delay)
        self.start()

    def _cleanup(self, wg: WaitGroup | None) -> None:
        self._stopped = True
        if self.context._parent_ctx is not None:
            self.context._parent_ctx._remove_child(self.pid.id)

        for child in self.context.children():
            self._engine.poison(child).wait()

        self.inbox.stop()
        self._engine.registry.remove(self.pid)
        self.context.message = Stopped()
        self._receive_wrapped()

        self._engine.broadcast_event(ActorStoppedEvent(pid=self.pid))
        if wg is not None:
            wg.done()