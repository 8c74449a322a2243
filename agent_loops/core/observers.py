"""Subscriber lists for loop progress hooks."""

from typing import Callable

HOOKS = (
    "iteration",        # (iteration, response, context)
    "tool_execution",   # (tool_name, tool_input, ToolResult)
    "reflection",       # (refinement, score, feedback)
    "plan_created",     # (steps, context)
    "step_complete",    # (step_number, description, result)
)


class LoopObservers:
    """
    Holds any number of callbacks per hook. Callbacks run in
    registration order, in-line; an exception raised by one is not
    caught here and aborts the phase that notified it.
    """

    def __init__(self):
        self._subscribers: dict[str, list[Callable]] = {h: [] for h in HOOKS}

    def subscribe(self, hook: str, callback: Callable) -> None:
        if hook not in self._subscribers:
            raise ValueError(f"Unknown hook: {hook!r}. Available: {list(HOOKS)}")
        self._subscribers[hook].append(callback)

    def unsubscribe(self, hook: str, callback: Callable) -> None:
        if callback in self._subscribers.get(hook, []):
            self._subscribers[hook].remove(callback)

    def notify(self, hook: str, *args) -> None:
        for callback in list(self._subscribers[hook]):
            callback(*args)

    def count(self, hook: str) -> int:
        return len(self._subscribers[hook])
