"""Tests for the plan-execute loop."""

import pytest

from agent_loops.core.config import LoopConfig
from agent_loops.core.context import ExecutionContext, RunStatus
from agent_loops.core.plan_execute_loop import PlanExecuteLoop
from agent_loops.tools.calculator import CalculatorTool

from fakes import ScriptedLLM, text_response, tool_response


def make_context(responses, max_iterations=20):
    llm = ScriptedLLM(responses)
    context = ExecutionContext(
        client=llm,
        task="Compare two numbers",
        tools=[CalculatorTool()],
        config=LoopConfig(max_iterations=max_iterations),
    )
    return context, llm


def test_name():
    assert PlanExecuteLoop().get_name() == "plan_execute"


@pytest.mark.asyncio
async def test_plans_executes_and_synthesizes():
    context, llm = make_context([
        text_response("Plan:\n1. Get first number\n2. Get second number"),
        text_response("First is 3"),
        text_response("Second is 5"),
        text_response("5 is larger than 3"),
    ])
    plans, steps = [], []
    loop = (
        PlanExecuteLoop()
        .on_plan_created(lambda s, ctx: plans.append(s))
        .on_step_complete(lambda n, desc, res: steps.append((n, desc, res)))
    )

    result = await loop.execute(context)

    assert result.status is RunStatus.COMPLETED
    assert result.answer == "5 is larger than 3"
    assert plans == [["Get first number", "Get second number"]]
    assert steps == [
        (1, "Get first number", "First is 3"),
        (2, "Get second number", "Second is 5"),
    ]
    assert result.iteration == 4
    assert result.metadata["replans"] == 0
    assert [r["result"] for r in result.metadata["step_results"]] == ["First is 3", "Second is 5"]

    plan_request = llm.calls[0]
    assert "systematic planner" in plan_request["system"]
    assert "- calculator:" in plan_request["messages"][0]["content"]
    assert plan_request["tools"] is None

    second_step = llm.calls[2]["messages"][0]["content"]
    assert second_step.startswith("Execute this step: Get second number")
    assert "Previous step results:\nStep 1: First is 3" in second_step

    synthesis = llm.calls[3]["messages"][0]["content"]
    assert "Step 2 (Get second number):\nSecond is 5" in synthesis


@pytest.mark.asyncio
async def test_no_parseable_steps_fails():
    context, llm = make_context([text_response("I would just do it.")])
    plans = []
    loop = PlanExecuteLoop().on_plan_created(lambda s, ctx: plans.append(s))

    result = await loop.execute(context)

    assert result.status is RunStatus.FAILED
    assert result.error == "Failed to create a valid execution plan"
    assert plans == [[]]
    assert llm.call_count == 1


@pytest.mark.asyncio
async def test_failure_marker_triggers_replan():
    context, llm = make_context([
        text_response("1. Connect to server\n2. Download file\n3. Parse file"),
        text_response("Unable to connect: host unreachable"),
        text_response("1. Use cached copy\n2. Parse cached copy"),
        text_response("Loaded cached copy"),
        text_response("Parsed 10 rows"),
        text_response("Parsed 10 rows from cache"),
    ])

    result = await PlanExecuteLoop().execute(context)

    assert result.status is RunStatus.COMPLETED
    assert result.metadata["plan_steps"] == [
        "Connect to server",
        "Use cached copy",
        "Parse cached copy",
    ]
    assert result.metadata["replans"] == 1
    revise_request = llm.calls[2]
    assert "Adapt plans" in revise_request["system"]
    assert "Remaining planned steps:\n1. Download file\n2. Parse file" in (
        revise_request["messages"][0]["content"]
    )
    assert result.answer == "Parsed 10 rows from cache"


@pytest.mark.asyncio
async def test_replan_disabled():
    context, llm = make_context([
        text_response("1. Connect\n2. Report"),
        text_response("Connection failed"),
        text_response("Reported the failure"),
        text_response("Could not connect"),
    ])

    result = await PlanExecuteLoop(allow_replan=False).execute(context)

    assert result.status is RunStatus.COMPLETED
    assert result.metadata["plan_steps"] == ["Connect", "Report"]
    assert llm.call_count == 4


@pytest.mark.asyncio
async def test_empty_revision_keeps_plan():
    context, _ = make_context([
        text_response("1. Try it\n2. Finish"),
        text_response("error: nope"),
        text_response("No changes needed."),
        text_response("finished"),
        text_response("All done"),
    ])

    result = await PlanExecuteLoop().execute(context)

    assert result.metadata["plan_steps"] == ["Try it", "Finish"]
    assert result.metadata["replans"] == 0
    assert result.answer == "All done"


@pytest.mark.asyncio
async def test_step_with_tool_use_follow_up():
    context, llm = make_context([
        text_response("1. Compute the sum"),
        tool_response("calculator", {"expression": "3 + 5"}, stop_reason="end_turn"),
        text_response("The sum is 8"),
        text_response("Answer: 8"),
    ])

    result = await PlanExecuteLoop().execute(context)

    assert result.answer == "Answer: 8"
    assert len(result.tool_calls) == 1
    assert result.metadata["step_results"][0]["result"] == "The sum is 8"
    assert llm.calls[2]["messages"][2]["content"][0]["content"] == "8"


@pytest.mark.asyncio
async def test_iteration_limit_mid_plan_fails():
    context, llm = make_context(
        [
            text_response("1. A\n2. B\n3. C"),
            text_response("did A"),
            text_response("did B"),
        ],
        max_iterations=3,
    )

    result = await PlanExecuteLoop().execute(context)

    assert result.status is RunStatus.FAILED
    assert result.error == "Maximum iterations reached before completing all steps."
    assert llm.call_count == 3
    assert len(result.metadata["step_results"]) == 2


@pytest.mark.asyncio
async def test_exception_fails_run():
    context, _ = make_context([text_response("1. A"), RuntimeError("rate limited")])

    result = await PlanExecuteLoop().execute(context)

    assert result.status is RunStatus.FAILED
    assert result.error == "rate limited"
