import queue
import threading
from dataclasses import dataclass

import pytest

from hollywood.engine import Engine, EngineConfig
from hollywood.events import ActorRestartedEvent, Initialized, Started
from hollywood.opts import with_id, with_max_restarts, with_restart_delay
from hollywood.pid import PID
from hollywood.process import apply_middleware, func_receiver
from hollywood.registry import LOCAL_LOOKUP_ADDR
from hollywood.waitgroup import WaitGroup

TIMEOUT = 2.0


@pytest.fixture
def engine():
    return Engine(EngineConfig())


@dataclass(frozen=True)
class _TriggerPanic:
    data: int


@dataclass(frozen=True)
class _TestMsg:
    pass


def _panic_wrapper():
    raise RuntimeError("foo")


def test_child_event_no_race_condition(engine):
    children = queue.Queue()

    def parent(c):
        if isinstance(c.message, Started):
            child = c.spawn_child_func(lambda _c: None, "child")
            c.engine.subscribe(child)
            children.put(child)

    parent_pid = engine.spawn_func(parent, "parent")
    assert engine.poison(parent_pid).wait(TIMEOUT)
    child = children.get(timeout=TIMEOUT)
    assert engine.registry.get(parent_pid) is None
    assert engine.registry.get(child) is None


def test_context_send_repeat(engine):
    results = queue.Queue()
    holder = {}

    def receive(c):
        if isinstance(c.message, Started):
            holder["repeater"] = c.send_repeat(c.pid, "foo", 0.01)
        elif isinstance(c.message, str):
            holder["repeater"].stop()
            results.put((c.sender, c.pid, c.message))

    pid = engine.spawn_func(receive, "test")
    sender, own, msg = results.get(timeout=TIMEOUT)
    assert pid == sender
    assert pid == own
    assert msg == "foo"


def test_spawn_child_pid(engine):
    pids = queue.Queue()
    expected = PID(LOCAL_LOOKUP_ADDR, "parent/1/child/1")

    def receive(c):
        if isinstance(c.message, Started):
            pids.put(c.spawn_child_func(lambda _c: None, "child", with_id("1")))

    engine.spawn_func(receive, "parent", with_id("1"))
    assert expected.equals(pids.get(timeout=TIMEOUT))


def test_child(engine):
    counts = queue.Queue()

    def receive(c):
        if isinstance(c.message, Initialized):
            for child_id in ("1", "2", "3"):
                c.spawn_child_func(lambda _c: None, "child", with_id(child_id))
        elif isinstance(c.message, Started):
            counts.put(len(c.children()))
            first = sorted(c.children(), key=lambda p: p.id)[0]
            stop_wg = WaitGroup()
            c.engine.stop(first, stop_wg)
            stop_wg.wait(TIMEOUT)
            counts.put(sorted(c.children(), key=lambda p: p.id))

    pid = engine.spawn_func(receive, "foo", with_id("bar/baz"))
    assert pid == PID(LOCAL_LOOKUP_ADDR, "foo/bar/baz")
    assert counts.get(timeout=TIMEOUT) == 3
    remaining = counts.get(timeout=TIMEOUT)
    assert remaining == [pid.child("child/2"), pid.child("child/3")]


def test_parent(engine):
    seen = queue.Queue()
    expected_parent = PID(LOCAL_LOOKUP_ADDR, "foo/bar/baz")

    def child(c):
        if isinstance(c.message, Started):
            seen.put((c.parent(), len(c.children())))

    def parent(c):
        if isinstance(c.message, Started):
            c.spawn_child_func(child, "child")

    pid = engine.spawn_func(parent, "foo", with_id("bar/baz"))
    parent_pid, n_children = seen.get(timeout=TIMEOUT)
    assert expected_parent.equals(parent_pid)
    assert pid == parent_pid
    assert n_children == 0


def test_child_lookup_by_id(engine):
    seen = queue.Queue()

    def parent(c):
        if isinstance(c.message, Started):
            pid = c.spawn_child_func(lambda _c: None, "child", with_id("7"))
            seen.put((pid, c.child(pid.id), c.child("missing")))

    parent_pid = engine.spawn_func(parent, "p")
    pid, found, missing = seen.get(timeout=TIMEOUT)
    assert parent_pid.child("child/7") == pid
    assert parent_pid.child("child/7") == found
    assert missing is None


def test_get_pid(engine):
    seen = queue.Queue()

    def receive(c):
        if isinstance(c.message, Started):
            seen.put((c.get_pid("foo/bar"), c.pid))

    pid = engine.spawn_func(receive, "foo", with_id("bar"))
    found, own = seen.get(timeout=TIMEOUT)
    assert pid.equals(found)
    assert pid.equals(own)


def test_spawn_child(engine):
    children = queue.Queue()

    def receive(c):
        if isinstance(c.message, Started):
            children.put(c.spawn_child_func(lambda _c: None, "child", with_max_restarts(0)))

    pid = engine.spawn_func(receive, "parent", with_max_restarts(0))
    child = children.get(timeout=TIMEOUT)
    assert engine.poison(pid).wait(TIMEOUT)
    assert engine.registry.get(child) is None
    assert engine.registry.get(pid) is None


def test_clean_trace(engine):
    traces = queue.Queue()

    def receive(c):
        msg = c.message
        if isinstance(msg, Started):
            c.engine.subscribe(c.pid)
        elif isinstance(msg, _TriggerPanic):
            _panic_wrapper()
        elif isinstance(msg, ActorRestartedEvent):
            traces.put((msg.pid, msg.stacktrace))

    pid = engine.spawn_func(receive, "foo", with_max_restarts(1), with_restart_delay(0.01))
    engine.send(pid, _TriggerPanic(1))
    event_pid, stacktrace = traces.get(timeout=TIMEOUT)
    assert pid == event_pid
    lines = stacktrace.split("\n")
    assert "_panic_wrapper" in lines[1]


def test_startup_messages(engine):
    order = queue.Queue()
    initialized = threading.Event()
    proceed = threading.Event()

    def receive(c):
        if isinstance(c.message, Initialized):
            initialized.set()
            proceed.wait(TIMEOUT)
        order.put(type(c.message))

    spawner = threading.Thread(
        target=engine.spawn_func, args=(receive, "foo", with_id("bar")), daemon=True
    )
    spawner.start()
    assert initialized.wait(TIMEOUT)

    pid = engine.registry.get_pid("foo", "bar")
    engine.send(pid, _TestMsg())
    proceed.set()

    got = [order.get(timeout=TIMEOUT) for _ in range(3)]
    assert got == [Initialized, Started, _TestMsg]


def test_respond_answers_request(engine):
    def receive(c):
        if isinstance(c.message, str):
            c.respond("foo")

    pid = engine.spawn_func(receive, "responder")
    assert engine.request(pid, "ping", 1.0).result() == "foo"


def test_forward_sets_forwarder_as_sender(engine):
    seen = queue.Queue()

    def target(c):
        if isinstance(c.message, str):
            seen.put((c.message, c.sender))

    target_pid = engine.spawn_func(target, "target")

    def forwarder(c):
        if isinstance(c.message, str):
            c.forward(target_pid)

    forwarder_pid = engine.spawn_func(forwarder, "forwarder")
    engine.send(forwarder_pid, "hello")
    msg, sender = seen.get(timeout=TIMEOUT)
    assert msg == "hello"
    assert sender == forwarder_pid


def test_apply_middleware_runs_in_declared_order():
    calls = []

    def tag(name):
        def mw(next_receive):
            def wrapped(ctx):
                calls.append(name)
                next_receive(ctx)

            return wrapped

        return mw

    apply_middleware(lambda ctx: calls.append("receive"), [tag("a"), tag("b")])(None)
    assert calls == ["a", "b", "receive"]


def test_func_receiver_calls_function():
    seen = []
    receiver = func_receiver(seen.append)()
    receiver.receive("ctx")
    assert seen == ["ctx"]