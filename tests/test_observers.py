"""Tests for loop observer subscriptions."""

import pytest

from agent_loops.core.observers import LoopObservers


def test_notify_in_registration_order():
    observers = LoopObservers()
    calls = []
    observers.subscribe("step_complete", lambda *a: calls.append(("first", a)))
    observers.subscribe("step_complete", lambda *a: calls.append(("second", a)))

    observers.notify("step_complete", 1, "Do X", "done")

    assert calls == [("first", (1, "Do X", "done")), ("second", (1, "Do X", "done"))]
    assert observers.count("step_complete") == 2


def test_unsubscribe():
    observers = LoopObservers()
    calls = []
    callback = calls.append
    observers.subscribe("plan_created", lambda steps, ctx: callback(steps))
    observers.subscribe("iteration", callback)
    observers.unsubscribe("iteration", callback)

    observers.notify("iteration", 1, None, None)

    assert calls == []
    assert observers.count("iteration") == 0


def test_unknown_hook():
    with pytest.raises(ValueError):
        LoopObservers().subscribe("on_whatever", print)
