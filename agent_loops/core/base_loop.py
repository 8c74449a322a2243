"""Shared machinery for the loop implementations."""

import logging
from abc import ABC, abstractmethod
from typing import Callable

from agent_loops.core.context import ExecutionContext
from agent_loops.core.conversation import serialize_messages
from agent_loops.core.dispatch import (
    execute_tools,
    extract_text,
    has_tool_use,
    normalize_content,
)
from agent_loops.core.observers import LoopObservers
from agent_loops.llm.base import LLMResponse

module_logger = logging.getLogger(__name__)


class BaseLoop(ABC):
    """
    A loop drives one ExecutionContext from running to a terminal
    state. ``execute`` never raises: every failure ends in
    ``context.fail``.
    """

    name: str = ""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or module_logger
        self.observers = LoopObservers()

    def get_name(self) -> str:
        return self.name

    def on_iteration(self, callback: Callable) -> "BaseLoop":
        """callback(iteration, response, context)"""
        self.observers.subscribe("iteration", callback)
        return self

    def on_tool_execution(self, callback: Callable) -> "BaseLoop":
        """callback(tool_name, tool_input, tool_result)"""
        self.observers.subscribe("tool_execution", callback)
        return self

    @abstractmethod
    async def execute(self, context: ExecutionContext) -> ExecutionContext:
        ...

    async def _call_model(
        self,
        context: ExecutionContext,
        messages: list[dict],
        *,
        with_tools: bool = True,
        system: str | None = None,
    ) -> LLMResponse:
        """One model round trip; counts as one iteration."""
        context.increment_iteration()
        tools = context.tool_definitions() if with_tools else None
        response = await context.client.complete(
            messages=serialize_messages(messages),
            tools=tools or None,
            system=system or context.config.system_prompt,
            **context.config.request_params(),
        )
        if response.usage is not None:
            context.add_token_usage(
                response.usage.input_tokens or 0, response.usage.output_tokens or 0
            )
        self.observers.notify("iteration", context.iteration, response, context)
        return response

    async def _respond(
        self,
        context: ExecutionContext,
        prompt: str,
        *,
        with_tools: bool = True,
        system: str | None = None,
    ) -> str:
        """
        Single-prompt exchange. If the reply asks for tools they are run
        and one follow-up call is made with the results; the text of the
        last reply is returned.

        The follow-up call is not checked against the iteration budget,
        so one exchange may take the run one past ``max_iterations``.
        """
        messages = [{"role": "user", "content": prompt}]
        response = await self._call_model(
            context, messages, with_tools=with_tools, system=system
        )

        if not has_tool_use(response.content):
            return extract_text(response.content)

        tool_results = await execute_tools(context, response.content, self.observers)
        follow_up = messages + [
            {"role": "assistant", "content": normalize_content(response.content)},
            {"role": "user", "content": tool_results},
        ]
        response = await self._call_model(
            context, follow_up, with_tools=with_tools, system=system
        )
        return extract_text(response.content)
