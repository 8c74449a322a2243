"""Tool dispatch shared by every loop.

Turns the ``tool_use`` blocks of a model response into ``tool_result``
blocks, one per invocation and in the same order, whatever happens
inside the tools.
"""

import logging
from collections.abc import Mapping

from agent_loops.core.conversation import to_block
from agent_loops.core.observers import LoopObservers
from agent_loops.llm.base import TextBlock, ToolResultBlock, ToolUseBlock
from agent_loops.tools.base import BaseTool, ToolResult

logger = logging.getLogger(__name__)


def has_tool_use(content: list) -> bool:
    """True if any block asks for a tool, whatever the stop reason says."""
    return any(isinstance(to_block(b), ToolUseBlock) for b in content)


def tool_use_blocks(content: list) -> list[ToolUseBlock]:
    return [b for b in map(to_block, content) if isinstance(b, ToolUseBlock)]


def _normalize_input(value) -> dict | None:
    """Tool input as a dict; None when the model sent something that is not an object."""
    if isinstance(value, dict):
        return value
    if isinstance(value, Mapping):
        return dict(value)
    if not value:
        return {}
    return None


def normalize_content(content: list) -> list:
    """
    Typed copy of ``content`` in which every tool-use input is a dict.
    An empty input always ends up as ``{}`` (never ``[]``/``None``),
    which is what the API expects back in the assistant turn.
    """
    normalized = []
    for block in map(to_block, content):
        if isinstance(block, ToolUseBlock):
            block = ToolUseBlock(
                id=block.id, name=block.name, input=_normalize_input(block.input) or {}
            )
        normalized.append(block)
    return normalized


def extract_text(content: list) -> str:
    return "\n".join(
        b.text for b in map(to_block, content) if isinstance(b, TextBlock)
    )


async def invoke_tool(tool: BaseTool, params: dict) -> ToolResult:
    """Run one tool and fold every outcome, exceptions included, into a ToolResult."""
    try:
        result = await tool.execute(params)
    except Exception as e:
        logger.error("Tool execution failed: %s (%s)", tool.name, e)
        return ToolResult.error(f"Tool execution failed: {e}")
    if isinstance(result, ToolResult):
        return result
    return ToolResult.ok(result)


async def execute_tools(
    context, content: list, observers: LoopObservers | None = None
) -> list[ToolResultBlock]:
    results = []

    for block in tool_use_blocks(content):
        params = _normalize_input(block.input)
        logger.debug("Executing tool: %s %s", block.name, params)

        tool = context.get_tool(block.name)
        if params is None:
            logger.warning("Non-object input for tool %s: %r", block.name, block.input)
            params = {}
            result = ToolResult.error(
                f"Invalid input for tool {block.name}: expected an object"
            )
        elif tool is None:
            result = ToolResult.error(f"Unknown tool: {block.name}")
        else:
            result = await invoke_tool(tool, params)

        context.record_tool_call(block.name, params, result.content, result.is_error)

        if observers is not None:
            observers.notify("tool_execution", block.name, params, result)

        results.append(result.to_block(block.id))

    return results
