"""Options that configure a spawned process."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

DEFAULT_INBOX_SIZE = 1024
DEFAULT_MAX_RESTARTS = 3
DEFAULT_RESTART_DELAY = 0.5  # seconds

ReceiveFunc = Callable[[Any], None]
MiddlewareFunc = Callable[[ReceiveFunc], ReceiveFunc]


@dataclass
class Opts:
    """Settings a process is spawned with."""

    producer: Callable[[], Any] | None = None
    kind: str = ""
    id: str = ""
    max_restarts: int = DEFAULT_MAX_RESTARTS
    restart_delay: float = DEFAULT_RESTART_DELAY
    inbox_size: int = DEFAULT_INBOX_SIZE
    middleware: list[MiddlewareFunc] = field(default_factory=list)
    context: Any = None


OptFunc = Callable[[Opts], None]


def default_opts(producer: Callable[[], Any]) -> Opts:
    """Return default options for the given producer."""
    return Opts(producer=producer)


def with_context(ctx: Any) -> OptFunc:
    def apply(opts: Opts) -> None:
        opts.context = ctx

    return apply


def with_middleware(*middleware: MiddlewareFunc) -> OptFunc:
    def apply(opts: Opts) -> None:
        opts.middleware.extend(middleware)

    return apply


def with_restart_delay(delay: float) -> OptFunc:
    def apply(opts: Opts) -> None:
        opts.restart_delay = delay

    return apply


def with_inbox_size(size: int) -> OptFunc:
    def apply(opts: Opts) -> None:
        opts.inbox_size = size

    return apply


def with_max_restarts(n: int) -> OptFunc:
    def apply(opts: Opts) -> None:
        opts.max_restarts = int(n)

    return apply


def with_id(id: str) -> OptFunc:
    def apply(opts: Opts) -> None:
        opts.id = id

    return apply