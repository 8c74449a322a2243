"""Tests for the shared tool dispatch helpers."""

import json

import pytest

from agent_loops.core.context import ExecutionContext
from agent_loops.core.conversation import serialize_content
from agent_loops.core.dispatch import (
    execute_tools,
    extract_text,
    has_tool_use,
    invoke_tool,
    normalize_content,
)
from agent_loops.core.observers import LoopObservers
from agent_loops.llm.base import TextBlock, ToolUseBlock
from agent_loops.tools.base import FunctionTool, ToolResult
from agent_loops.tools.calculator import CalculatorTool

from fakes import ScriptedLLM


def _boom(params):
    raise RuntimeError("disk on fire")


def make_context(tools=None):
    return ExecutionContext(client=ScriptedLLM([]), task="t", tools=tools or [])


def test_has_tool_use_scans_content():
    content = [TextBlock(text="thinking"), ToolUseBlock(id="a", name="calculator", input={})]
    assert has_tool_use(content) is True
    assert has_tool_use(content) is True
    assert has_tool_use([TextBlock(text="done")]) is False
    assert has_tool_use([]) is False


def test_has_tool_use_accepts_raw_dict_blocks():
    assert has_tool_use([{"type": "tool_use", "id": "a", "name": "x", "input": {}}])


@pytest.mark.parametrize("empty", [[], None, (), {}])
def test_normalize_turns_empty_input_into_object(empty):
    normalized = normalize_content([ToolUseBlock(id="a", name="noop", input=empty)])
    assert normalized[0].input == {}
    assert json.dumps(serialize_content(normalized)[0]["input"]) == "{}"


def test_normalize_keeps_text_and_input_values():
    content = [
        TextBlock(text="hi"),
        {"type": "tool_use", "id": "b", "name": "calculator", "input": {"expression": "1+1"}},
    ]
    normalized = normalize_content(content)
    assert normalized[0] == TextBlock(text="hi")
    assert normalized[1].input == {"expression": "1+1"}


def test_extract_text_joins_text_blocks_only():
    content = [
        TextBlock(text="first"),
        ToolUseBlock(id="a", name="calculator", input={}),
        TextBlock(text="second"),
    ]
    assert extract_text(content) == "first\nsecond"
    assert extract_text([]) == ""


@pytest.mark.asyncio
async def test_invoke_tool_converts_exception_to_error_result():
    result = await invoke_tool(FunctionTool("boom", "explodes", _boom), {})
    assert result.is_error
    assert result.content == "Tool execution failed: disk on fire"


@pytest.mark.asyncio
async def test_execute_tools_one_result_per_call_in_order():
    context = make_context([CalculatorTool(), FunctionTool("boom", "explodes", _boom)])
    content = [
        TextBlock(text="let me check"),
        ToolUseBlock(id="t1", name="calculator", input={"expression": "5 + 3"}),
        ToolUseBlock(id="t2", name="missing", input={}),
        ToolUseBlock(id="t3", name="boom", input=[]),
    ]

    results = await execute_tools(context, content)

    assert [r.tool_use_id for r in results] == ["t1", "t2", "t3"]
    assert results[0].content == "8"
    assert not results[0].is_error
    assert results[1].content == "Unknown tool: missing"
    assert results[1].is_error
    assert results[2].is_error
    assert "disk on fire" in results[2].content

    assert [c.tool for c in context.tool_calls] == ["calculator", "missing", "boom"]
    assert [c.is_error for c in context.tool_calls] == [False, True, True]
    assert context.tool_calls[2].input == {}


@pytest.mark.asyncio
async def test_execute_tools_notifies_every_observer():
    context = make_context([CalculatorTool()])
    seen_a, seen_b = [], []
    observers = LoopObservers()
    observers.subscribe("tool_execution", lambda *args: seen_a.append(args))
    observers.subscribe("tool_execution", lambda *args: seen_b.append(args))

    await execute_tools(
        context,
        [ToolUseBlock(id="t1", name="calculator", input={"expression": "2*3"})],
        observers,
    )

    assert len(seen_a) == len(seen_b) == 1
    name, params, result = seen_a[0]
    assert name == "calculator"
    assert params == {"expression": "2*3"}
    assert result == ToolResult.ok("6")


@pytest.mark.asyncio
async def test_execute_tools_without_tool_use_returns_empty():
    context = make_context()
    assert await execute_tools(context, [TextBlock(text="no tools")]) == []
    assert context.tool_calls == []


@pytest.mark.asyncio
async def test_execute_tools_rejects_non_object_input():
    context = make_context([CalculatorTool()])
    seen = []
    observers = LoopObservers()
    observers.subscribe("tool_execution", lambda *args: seen.append(args))
    content = [
        ToolUseBlock(id="a", name="calculator", input={"expression": "1+1"}),
        ToolUseBlock(id="b", name="calculator", input="1+1"),
        ToolUseBlock(id="c", name="calculator", input=["1+1"]),
    ]

    results = await execute_tools(context, content, observers)

    assert [r.tool_use_id for r in results] == ["a", "b", "c"]
    assert results[0].content == "2"
    for result in results[1:]:
        assert result.is_error
        assert result.content == "Invalid input for tool calculator: expected an object"
    assert [c.is_error for c in context.tool_calls] == [False, True, True]
    assert context.tool_calls[1].input == {}
    assert len(seen) == 3


def test_normalize_replaces_non_object_input():
    normalized = normalize_content([ToolUseBlock(id="a", name="calculator", input=["1+1"])])
    assert normalized[0].input == {}
