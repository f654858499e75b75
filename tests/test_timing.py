"""
Tests for the per-round timer.
"""

import pytest

from timing import RoundTimer


def make_clock(*readings):
    values = iter(readings)
    return lambda: next(values)


def test_elapsed_from_injected_clock():
    timer = RoundTimer(clock=make_clock(10.0, 12.5))
    assert timer.start() == 10.0
    assert timer.stop() == pytest.approx(2.5)


def test_default_clock_is_non_negative():
    timer = RoundTimer()
    timer.start()
    assert timer.stop() >= 0.0


def test_stop_without_start():
    with pytest.raises(RuntimeError):
        RoundTimer().stop()


def test_timer_is_reusable_across_rounds():
    timer = RoundTimer(clock=make_clock(0.0, 1.0, 5.0, 5.25))
    timer.start()
    assert timer.stop() == pytest.approx(1.0)
    timer.start()
    assert timer.stop() == pytest.approx(0.25)
