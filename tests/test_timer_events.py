"""Tests for the auto-play timer, speed presets and the view bus."""

from __future__ import annotations

import time

import pytest

from svmdbg import AutoPlayTimer, DebuggerView, MachineState, RunState, ViewBus, ViewSubscription, resolve_speed
from svmdbg.timer import speed_name


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def _view(run_state: RunState) -> DebuggerView:
    return DebuggerView.capture(run_state, MachineState())


@pytest.mark.parametrize(
    "value, expected",
    [("slow", 1000), ("normal", 500), ("FAST", 100), ("250", 250), ("40ms", 40), (75, 75), (30.0, 30)],
)
def test_resolve_speed(value, expected):
    assert resolve_speed(value) == expected


@pytest.mark.parametrize("value", [0, -5, "0", "warp", True, 2.5, None])
def test_resolve_speed_rejects(value):
    with pytest.raises(ValueError):
        resolve_speed(value)


def test_speed_name():
    assert speed_name(500) == "normal"
    assert speed_name(123) is None


def test_timer_ticks_until_callback_returns_false():
    seen = []

    def tick(timer):
        seen.append(timer.ticks)
        return timer.ticks < 3

    timer = AutoPlayTimer(10, tick)
    timer.start()
    assert _wait_for(lambda: not timer.alive)
    assert seen == [1, 2, 3]
    assert timer.cancelled


def test_timer_cancel_before_first_tick():
    calls = []
    timer = AutoPlayTimer(200, lambda t: calls.append(t) or True)
    timer.start()
    timer.cancel()
    timer.cancel()
    timer.join(timeout=1.0)
    assert not timer.alive
    assert calls == []
    with pytest.raises(RuntimeError):
        timer.start()


def test_timer_stops_when_callback_raises():
    def boom(_timer):
        raise RuntimeError("tick failed")

    timer = AutoPlayTimer(5, boom)
    timer.start()
    assert _wait_for(lambda: not timer.alive)
    assert timer.ticks == 1


def test_view_bus_filters_by_state_and_survives_bad_subscribers():
    bus = ViewBus()
    received = []

    def broken(_view):
        raise ValueError("boom")

    bus.subscribe(broken)
    token = bus.subscribe(ViewSubscription(handler=received.append, states=frozenset({RunState.HALTED})))
    assert len(bus) == 2
    bus.publish(_view(RunState.PAUSED))
    bus.publish(_view(RunState.HALTED))
    assert [v.run_state for v in received] == [RunState.HALTED]
    bus.unsubscribe(token)
    bus.publish(_view(RunState.HALTED))
    assert len(received) == 1
