import threading

import pytest

from hollywood.waitgroup import WaitGroup


def test_wait_returns_immediately_when_empty():
    wg = WaitGroup()
    assert wg.wait(timeout=0.01) is True


def test_wait_times_out_while_pending():
    wg = WaitGroup()
    wg.add(1)
    assert wg.wait(timeout=0.01) is False
    wg.done()
    assert wg.wait(timeout=0.01) is True


def test_negative_counter_raises():
    wg = WaitGroup()
    with pytest.raises(ValueError):
        wg.done()


def test_done_from_other_threads():
    wg = WaitGroup()
    wg.add(5)
    threads = [threading.Thread(target=wg.done) for _ in range(5)]
    for t in threads:
        t.start()
    assert wg.wait(timeout=2) is True
    assert wg.count == 0