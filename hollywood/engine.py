"""The actor engine: spawns processes and routes messages between them."""

from __future__ import annotations

import dataclasses
import random
import sys
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from .event_stream import EventSub, EventUnsub, new_event_stream
from .events import DeadLetterEvent, EngineRemoteMissingEvent, PoisonPill
from .opts import OptFunc, default_opts
from .pid import PID
from .process import Context, Process, Producer, SendRepeater, func_receiver
from .registry import LOCAL_LOOKUP_ADDR, Registry
from .response import Response
from .waitgroup import WaitGroup


class Remoter(Protocol):
    """A transport that lets an engine reach processes on other engines."""

    address: str

    def send(self, pid: PID, msg: Any, sender: PID | None) -> None: ...

    def start(self, engine: Engine) -> None: ...

    def stop(self) -> WaitGroup: ...


@dataclass(frozen=True)
class EngineConfig:
    """Configuration of an engine."""

    remote: Remoter | None = None

    def with_remote(self, remote: Remoter) -> EngineConfig:
        """Return a copy that sends and receives messages through remote."""
        return dataclasses.replace(self, remote=remote)


def _random_id() -> str:
    return str(random.randrange(sys.maxsize))


class Engine:
    """Owns the registry of processes and delivers messages to them."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        config = config or EngineConfig()
        self.event_stream: PID | None = None
        self.registry = Registry(self)
        self.address = LOCAL_LOOKUP_ADDR
        self.remote = config.remote
        if self.remote is not None:
            self.address = self.remote.address
            try:
                self.remote.start(self)
            except Exception as exc:
                raise RuntimeError(f"failed to start remote: {exc}") from exc
        self.event_stream = self.spawn(new_event_stream(), "eventstream")

    def spawn(self, producer: Producer, kind: str, *opt_funcs: OptFunc) -> PID:
        """Spawn a process whose receiver is made by producer."""
        options = default_opts(producer)
        options.kind = kind
        for opt in opt_funcs:
            opt(options)
        if not options.id:
            options.id = _random_id()
        return self.spawn_proc(Process(self, options))

    def spawn_func(self, f: Callable[[Context], None], kind: str, *opt_funcs: OptFunc) -> PID:
        """Spawn f as a stateless receiver."""
        return self.spawn(func_receiver(f), kind, *opt_funcs)

    def spawn_proc(self, proc: Any) -> PID:
        """Register and start a custom process."""
        self.registry.add(proc)
        return proc.pid

    def request(self, pid: PID, msg: Any, timeout: float) -> Response:
        """Send msg to pid and return a Response that resolves to the answer."""
        resp = Response(self, timeout)
        self.registry.add(resp)
        self.send_with_sender(pid, msg, resp.pid)
        return resp

    def send_with_sender(self, pid: PID | None, msg: Any, sender: PID | None) -> None:
        """Send msg to pid, naming sender as its origin."""
        self._send(pid, msg, sender)

    def send(self, pid: PID | None, msg: Any) -> None:
        """Send msg to pid without a sender."""
        self._send(pid, msg, None)

    def broadcast_event(self, msg: Any) -> None:
        """Publish msg to every subscriber of the event stream."""
        if self.event_stream is not None:
            self._send(self.event_stream, msg, None)

    def send_repeat(self, pid: PID, msg: Any, interval: float) -> SendRepeater:
        """Send msg to pid every interval seconds until the repeater is stopped."""
        repeater = SendRepeater(self, pid, msg, interval, sender=None)
        repeater.start()
        return repeater

    def stop(self, pid: PID | None, wg: WaitGroup | None = None) -> WaitGroup:
        """Stop the process at once, dropping what is left in its inbox."""
        return self._send_poison_pill(pid, False, wg)

    def poison(self, pid: PID | None, wg: WaitGroup | None = None) -> WaitGroup:
        """Stop the process once it has handled the messages already queued."""
        return self._send_poison_pill(pid, True, wg)

    def send_local(self, pid: PID | None, msg: Any, sender: PID | None) -> None:
        """Deliver msg to a local process, or broadcast a dead letter."""
        proc = self.registry.get(pid)
        if proc is None:
            self.broadcast_event(DeadLetterEvent(target=pid, message=msg, sender=sender))
            return
        proc.send(pid, msg, sender)

    def subscribe(self, pid: PID) -> None:
        """Subscribe pid to the event stream."""
        self.send(self.event_stream, EventSub(pid))

    def unsubscribe(self, pid: PID) -> None:
        """Unsubscribe pid from the event stream."""
        self.send(self.event_stream, EventUnsub(pid))

    def _send_poison_pill(self, pid: PID | None, graceful: bool, wg: WaitGroup | None) -> WaitGroup:
        wg = wg if wg is not None else WaitGroup()
        pill = PoisonPill(wg=wg, graceful=graceful)
        if self.registry.get(pid) is None:
            self.broadcast_event(DeadLetterEvent(target=pid, message=pill, sender=None))
            return wg
        wg.add(1)
        self.send_local(pid, pill, None)
        return wg

    def _send(self, pid: PID | None, msg: Any, sender: PID | None) -> None:
        if pid is None:
            return
        if self._is_local(pid):
            self.send_local(pid, msg, sender)
            return
        if self.remote is None:
            self.broadcast_event(EngineRemoteMissingEvent(target=pid, sender=sender, message=msg))
            return
        self.remote.send(pid, msg, sender)

    def _is_local(self, pid: PID | None) -> bool:
        return pid is not None and pid.address == self.address