import time

import pytest

from stagger.util import NullTimer, Timer


@pytest.fixture
def timer():
    return Timer()


def test_start_stop(timer):
    timer.start("label")
    timer.stop("label")
    times = timer.times
    assert "label" in times
    assert len(times) == 1
    assert timer.hits["label"] == 1


def test_clock(timer):
    with timer.clock("label"):
        # small arbitrary computation task to time
        time.sleep(0.1)
    times = timer.times
    assert "label" in times
    assert len(times) == 1
    assert abs(times["label"] - 0.1) < 5e-2


def test_clock_stops_on_exception(timer):
    with pytest.raises(ZeroDivisionError):
        with timer.clock("label"):
            1 / 0
    assert timer.hits["label"] == 1
    with timer.clock("label"):
        pass
    assert timer.hits["label"] == 2


def test_start_twice(timer):
    """cannot call start twice consecutively with no stop"""
    timer.start("label")
    with pytest.raises(ValueError) as err:
        timer.start("label")
    assert "clock already started for 'label'" in str(err.value)


def test_stop_without_start(timer):
    with pytest.raises(ValueError, match="never started"):
        timer.stop("label")


def test_clock_in_clock(timer):
    """should not be able to create a given clock inside itself"""
    with timer.clock("label"):
        with pytest.raises(ValueError) as err:
            with timer.clock("label"):
                pass
    assert "clock already started for 'label'" in str(err.value)


def test_consecutive_clocks(timer):
    """total time increases with consecutive clock blocks"""
    with timer.clock("label"):
        time.sleep(0.01)
    previous_time = timer.times["label"]
    for i in range(5):
        with timer.clock("label"):
            time.sleep(0.01)
        assert timer.times["label"] >= previous_time + 0.01
        previous_time = timer.times["label"]
    assert timer.hits["label"] == 6


@pytest.mark.parametrize(
    "ops, result",
    [
        ([], True),
        (["enable"], True),
        (["disable"], False),
        (["disable", "enable"], True),
        (["disable", "disable"], False),
    ],
)
def test_enable_disable(timer, ops, result):
    for op in ops:
        getattr(timer, op)()
    assert timer.enabled == result


def test_disabled_timer_does_not_add_time(timer):
    with timer.clock("label"):
        time.sleep(0.01)
    initial_time = timer.times["label"]
    timer.disable()
    with timer.clock("label"):
        time.sleep(0.01)
    assert timer.times["label"] == initial_time


def test_cannot_disable_running_timer(timer):
    timer.start("label")
    with pytest.raises(RuntimeError):
        timer.disable()


def test_timer_reset(timer):
    with timer.clock("label1"):
        pass
    timer.reset()
    assert len(timer.times) == 0
    assert len(timer.hits) == 0


def test_null_timer_never_records():
    timer = NullTimer()
    with timer.clock("label"):
        pass
    assert len(timer.times) == 0
    assert not timer.enabled
    with pytest.raises(NotImplementedError):
        timer.enable()
