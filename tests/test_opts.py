from hollywood.opts import (
    DEFAULT_INBOX_SIZE,
    DEFAULT_MAX_RESTARTS,
    DEFAULT_RESTART_DELAY,
    default_opts,
    with_context,
    with_id,
    with_inbox_size,
    with_max_restarts,
    with_middleware,
    with_restart_delay,
)


def _producer():
    return object()


def test_default_opts():
    opts = default_opts(_producer)
    assert opts.producer is _producer
    assert opts.max_restarts == DEFAULT_MAX_RESTARTS == 3
    assert opts.inbox_size == DEFAULT_INBOX_SIZE == 1024
    assert opts.restart_delay == DEFAULT_RESTART_DELAY
    assert opts.middleware == []
    assert opts.id == ""


def test_option_functions_apply():
    opts = default_opts(_producer)
    ctx = {"foo": "bar"}
    for apply in (
        with_context(ctx),
        with_id("x"),
        with_inbox_size(16),
        with_max_restarts(7),
        with_restart_delay(0.01),
    ):
        apply(opts)
    assert opts.context is ctx
    assert opts.id == "x"
    assert opts.inbox_size == 16
    assert opts.max_restarts == 7
    assert opts.restart_delay == 0.01


def test_with_middleware_appends_in_order():
    def first(fn):
        return fn

    def second(fn):
        return fn

    opts = default_opts(_producer)
    with_middleware(first)(opts)
    with_middleware(second)(opts)
    assert opts.middleware == [first, second]


def test_default_middleware_lists_are_independent():
    a = default_opts(_producer)
    b = default_opts(_producer)
    with_middleware(lambda fn: fn)(a)
    assert len(a.middleware) == 1
    assert b.middleware == []