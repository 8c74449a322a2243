"""Core reason→act→observe ReAct cycle."""

import logging

from agent_loops.core.base_loop import BaseLoop
from agent_loops.core.context import ExecutionContext
from agent_loops.core.dispatch import (
    execute_tools,
    extract_text,
    has_tool_use,
    normalize_content,
)

module_logger = logging.getLogger(__name__)


class ReActLoop(BaseLoop):
    """
    Core reason→act→observe cycle. Provider-agnostic: calls the
    context's model client with the running conversation, executes any
    requested tools, feeds the results back, and repeats until the
    model ends its turn without asking for tools or the iteration
    limit is hit.
    """

    name = "react"

    def __init__(self, logger: logging.Logger | None = None):
        super().__init__(logger=logger or module_logger)

    async def execute(self, context: ExecutionContext) -> ExecutionContext:
        while not context.is_completed() and not context.has_reached_max_iterations():
            try:
                await self._cycle(context)
            except Exception as e:
                self.logger.error("Error in iteration %d: %s", context.iteration, e)
                context.fail(str(e))
                break

        if not context.is_completed() and context.has_reached_max_iterations():
            self.logger.warning("Max iterations reached")
            context.fail(
                f"Maximum iterations ({context.max_iterations}) reached without completion"
            )

        return context

    async def _cycle(self, context: ExecutionContext) -> None:
        response = await self._call_model(context, context.messages)
        iteration = context.iteration
        self.logger.debug("ReAct loop iteration %d", iteration)

        context.conversation.add_assistant_content(normalize_content(response.content))

        # Every tool_use needs a tool_result in the next message, even when
        # the stop reason is end_turn or max_tokens.
        if has_tool_use(response.content):
            tool_results = await execute_tools(context, response.content, self.observers)
            context.conversation.add_tool_results(tool_results)
        elif response.stop_reason == "end_turn":
            context.complete(extract_text(response.content))
            self.logger.info("Agent completed in %d iterations", iteration)
        else:
            self.logger.warning(
                "Stop reason '%s' in iteration %d, continuing",
                response.stop_reason, iteration,
            )
