# hollywood

An actor engine for Python. Actors are receivers that handle one message at
a time from their own inbox. Processes are spawned into an `Engine`,
addressed by a `PID`, restarted when they fail, and can subscribe to a
shared event stream. Each process runs its inbox on background threads.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Spawning an actor

```python
from hollywood.engine import Engine, EngineConfig
from hollywood.events import Started, Stopped
from hollywood.opts import with_id

engine = Engine(EngineConfig())

def greeter(ctx):
    msg = ctx.message
    if isinstance(msg, Started):
        print("ready")
    elif isinstance(msg, str):
        ctx.respond(f"hello, {msg}")
    elif isinstance(msg, Stopped):
        print("bye")

pid = engine.spawn_func(greeter, "greeter", with_id("1"))
print(pid)                      # local/greeter/1

reply = engine.request(pid, "world", 1.0).result()
print(reply)                    # hello, world

engine.poison(pid).wait()
```

Any object with a `receive(ctx)` method can be an actor; give `Engine.spawn`
a producer callable that returns a fresh instance each time the process
starts or restarts. `Engine.spawn_func` wraps a plain function.

`Engine.request` returns a `Response`; its `result()` blocks until the
answer arrives and raises `TimeoutError` once the timeout (in seconds) has
passed. Either way the response is removed from the engine's registry.

A PID is a frozen dataclass of `address` and `id`; `str(pid)` joins them
with `/`, `pid.equals(other)` compares both parts and `pid.child(id)` builds
the PID of a child. An engine without a remote has the address `local`.

## Lifecycle and restarts

Every process receives `Initialized`, then `Started`, before any other
message, and `Stopped` when it shuts down. If `receive` raises, the process
receives `Stopped`, waits for its restart delay and starts again with a new
receiver; the messages of the batch that came after the failing one are
handed to the new receiver (the failing message itself is dropped). After
`max_restarts` restarts a further failure broadcasts
`ActorMaxRestartsExceededEvent` and removes the process. Raising
`InternalError` restarts the process without counting the restart.

Options from `hollywood.opts`, passed after the kind:

- `with_id(id)` – a fixed id instead of a random one
- `with_max_restarts(n)` – restarts allowed (default 3)
- `with_restart_delay(seconds)` – pause before restarting (default 0.5)
- `with_inbox_size(size)` – size recorded for the inbox (default 1024); the
  queue itself is not bounded
- `with_middleware(*middleware)` – wrap the receive function; the first
  middleware given runs outermost
- `with_context(ctx)` – any value, exposed as `Context.context`

`Engine.stop` ends a process at once, discarding what is left in its inbox;
`Engine.poison` lets it handle the messages already queued first. Both
return a `WaitGroup` whose `wait()` blocks until the process has stopped;
you may also pass your own `WaitGroup`. Stopping a PID that is not
registered broadcasts a `DeadLetterEvent` and returns at once.

Spawning a second process with an id that is already taken does not start
it and broadcasts `ActorDuplicateIdEvent`.

## Inside a receiver

The `Context` offers `message`, `sender`, `pid`, `engine`, `send`,
`forward`, `respond`, `request`, `send_repeat`, `spawn_child`,
`spawn_child_func`, `children()`, `child(id)`, `parent()` and `get_pid(id)`.
A child's id is the parent's id followed by `/kind/id`. Children are
poisoned, and waited for, when their parent stops.

`send_repeat` (on a `Context` or on the `Engine`) returns a `SendRepeater`
that sends the message every interval seconds until `stop()` is called.

## Event stream

`engine.subscribe(pid)` and `engine.unsubscribe(pid)` manage who receives
engine events: `ActorInitializedEvent`, `ActorStartedEvent`,
`ActorStoppedEvent`, `ActorRestartedEvent`, `ActorMaxRestartsExceededEvent`,
`ActorDuplicateIdEvent`, `DeadLetterEvent`, `EngineRemoteMissingEvent`, and
anything passed to `engine.broadcast_event`. Events that define `log()` are
also written to the standard `logging` module at the level they name.

Messages sent to a local PID that is not registered become a
`DeadLetterEvent`.

## Cluster primitives

`hollywood.cluster` holds the data types used to coordinate actors across
nodes: `Member` (with `pid()`, `equals()` and `has_kind()`), `MemberSet`
(`add`, `remove`, `contains`, `get_by_host`, `remove_by_host`, `members`,
`for_each`, `except_`, `filter_by_kind`), `CID`, `ActivationConfig`,
`ActivationDetails`, `select_random_member`, `Kind`, `KindConfig`,
`member_to_provider_pid`, and the events `MemberJoinEvent`,
`MemberLeaveEvent`, `ActivationEvent` and `DeactivationEvent`.

## What this package does not do

- There is no network transport. `EngineConfig.with_remote` accepts any
  object with an `address` attribute and `send`, `start` and `stop` methods,
  but none is supplied; without one, messages to non-local PIDs only
  broadcast an `EngineRemoteMissingEvent`.
- There is no running cluster: no agent actor, membership discovery or
  activation of actors on other nodes. `hollywood.cluster` provides the
  data types only.
- There is no command-line program.