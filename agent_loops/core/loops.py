"""Loop lookup by name."""

from agent_loops.core.base_loop import BaseLoop
from agent_loops.core.plan_execute_loop import PlanExecuteLoop
from agent_loops.core.react_loop import ReActLoop
from agent_loops.core.reflection_loop import ReflectionLoop
from agent_loops.errors import ConfigError

LOOP_TYPES: dict[str, type[BaseLoop]] = {
    ReActLoop.name: ReActLoop,
    ReflectionLoop.name: ReflectionLoop,
    PlanExecuteLoop.name: PlanExecuteLoop,
}

# Options each loop accepts from the [loop] config table.
LOOP_OPTIONS = {
    "react": (),
    "reflection": ("max_refinements", "quality_threshold", "criteria"),
    "plan_execute": ("allow_replan",),
}


def create_loop(name: str, logger=None, **options) -> BaseLoop:
    """Instantiate the loop called ``name``; options it does not take are ignored."""
    if name not in LOOP_TYPES:
        raise ConfigError(f"Unknown loop: {name!r}. Available: {sorted(LOOP_TYPES)}")
    accepted = {k: v for k, v in options.items() if k in LOOP_OPTIONS[name]}
    return LOOP_TYPES[name](logger=logger, **accepted)
