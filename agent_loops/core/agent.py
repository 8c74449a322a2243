"""Top-level orchestrator wiring: LLM, tools, loop selection."""

import logging
from typing import Callable

from agent_loops.core.config import LoopConfig
from agent_loops.core.context import AgentResult, ExecutionContext, TokenUsage
from agent_loops.core.loops import create_loop
from agent_loops.errors import ConfigError
from agent_loops.llm.base import BaseLLM
from agent_loops.llm.router import LLMRouter
from agent_loops.tools.base import BaseTool
from agent_loops.tools.calculator import CalculatorTool
from agent_loops.tools.current_datetime import CurrentDateTimeTool
from agent_loops.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

BUILTIN_TOOLS: dict[str, type[BaseTool]] = {
    CalculatorTool.name: CalculatorTool,
    CurrentDateTimeTool.name: CurrentDateTimeTool,
}


class Agent:
    """
    Wires all components together. Each ``run`` gets a fresh
    ExecutionContext; the agent itself only keeps the last context
    and the token totals across runs.
    """

    def __init__(
        self,
        config: dict,
        llm: BaseLLM | None = None,
        extra_tools: list[BaseTool] | None = None,
    ):
        self.config = config
        self.llm_router = LLMRouter(config.get("llm", {}))
        self.provider: str | None = None
        self.llm = llm or self.llm_router.get()

        self.tools = ToolRegistry()
        self._register_tools(config.get("tools", {}))
        for tool in extra_tools or []:
            self.tools.register(tool)

        self._hooks: list[tuple[str, Callable]] = []
        self.loop_name = config.get("loop", {}).get("type", "react")
        self.loop = self._make_loop(self.loop_name)

        self.usage = TokenUsage()
        self.last_context: ExecutionContext | None = None

    def _register_tools(self, tools_config: dict) -> None:
        enabled = tools_config.get("enabled", list(BUILTIN_TOOLS))
        for name in enabled:
            if name not in BUILTIN_TOOLS:
                raise ConfigError(
                    f"Unknown tool in [tools] enabled: {name!r}. "
                    f"Available: {sorted(BUILTIN_TOOLS)}"
                )
            self.tools.register(BUILTIN_TOOLS[name]())

    def _make_loop(self, name: str):
        options = dict(self.config.get("loop", {}))
        options.pop("type", None)
        loop = create_loop(name, **options)
        for hook, callback in self._hooks:
            loop.observers.subscribe(hook, callback)
        return loop

    def _loop_config(self) -> LoopConfig:
        llm_cfg = self.config.get("llm", {})
        loop_cfg = self.config.get("loop", {})
        return LoopConfig(
            model=self.llm_router.model_for(self.provider),
            max_iterations=loop_cfg.get("max_iterations", 10),
            temperature=loop_cfg.get("temperature", 0.0),
            max_tokens=llm_cfg.get("max_tokens", 4096),
            system_prompt=loop_cfg.get("system_prompt"),
        )

    def add_observer(self, hook: str, callback: Callable) -> None:
        """Subscribe ``callback`` to ``hook`` on the current and any future loop."""
        self.loop.observers.subscribe(hook, callback)
        self._hooks.append((hook, callback))

    async def run(self, task: str) -> AgentResult:
        context = ExecutionContext(
            client=self.llm,
            task=task,
            tools=self.tools,
            config=self._loop_config(),
        )
        logger.info("Running %s loop (max %d iterations)", self.loop_name, context.max_iterations)
        context = await self.loop.execute(context)

        self.usage.add(context.token_usage.input_tokens, context.token_usage.output_tokens)
        self.last_context = context
        return context.to_result()

    def switch_loop(self, name: str) -> None:
        self.loop = self._make_loop(name)
        self.loop_name = name

    def switch_provider(self, name: str) -> None:
        if name not in self.llm_router.names():
            raise ConfigError(
                f"Unknown provider: {name!r}. Available: {self.llm_router.names()}"
            )
        self.llm = self.llm_router.get(name)
        self.provider = name
