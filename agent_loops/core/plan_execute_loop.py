"""Plan → execute → monitor → revise loop."""

import logging
from typing import Callable

from agent_loops.core.base_loop import BaseLoop
from agent_loops.core.context import ExecutionContext
from agent_loops.core.parsing import parse_plan_steps, should_replan
from agent_loops.core.plan import Plan, StepResult

module_logger = logging.getLogger(__name__)

PLANNER_SYSTEM_PROMPT = "You are a systematic planner. Create clear, actionable plans."
REVISER_SYSTEM_PROMPT = "You are a systematic planner. Adapt plans based on progress."

PLAN_PROMPT = """\
Task: {task}{tools}

Create a detailed step-by-step plan to complete this task.
Format each step as:
1. [Step description]
2. [Step description]
...

Be specific and actionable. Each step should be clear and executable."""

REVISE_PROMPT = """\
Original task: {task}

Completed steps:
{completed}{remaining}

Based on the results so far, revise the remaining steps if needed.
Format each step as:
1. [Step description]
2. [Step description]
..."""

SYNTHESIZE_PROMPT = """\
Original task: {task}

Step results:
{results}
Provide a comprehensive final answer based on all step results."""


class PlanExecuteLoop(BaseLoop):
    """
    Separates planning from execution:

    1. Plan: ask the model for a numbered step list.
    2. Execute: run each step, feeding it earlier step results.
    3. Monitor: scan each result for failure markers.
    4. Revise: on a marker, ask for a new list of remaining steps.

    Finally the step results are synthesized into the answer.
    """

    name = "plan_execute"

    def __init__(self, logger: logging.Logger | None = None, allow_replan: bool = True):
        super().__init__(logger=logger or module_logger)
        self.allow_replan = allow_replan

    def on_plan_created(self, callback: Callable) -> "PlanExecuteLoop":
        """callback(steps, context)"""
        self.observers.subscribe("plan_created", callback)
        return self

    def on_step_complete(self, callback: Callable) -> "PlanExecuteLoop":
        """callback(step_number, description, result)"""
        self.observers.subscribe("step_complete", callback)
        return self

    async def execute(self, context: ExecutionContext) -> ExecutionContext:
        if context.is_completed():
            return context

        try:
            self.logger.debug("Phase 1: Creating execution plan")
            plan = Plan(steps=parse_plan_steps(await self._create_plan(context)))
            self.logger.info("Plan created with %d steps", len(plan))
            self.observers.notify("plan_created", list(plan.steps), context)

            if not plan.steps:
                context.fail("Failed to create a valid execution plan")
                return context

            i = 0
            while i < len(plan.steps):
                if context.has_reached_max_iterations():
                    self.logger.warning("Max iterations reached during step execution")
                    break

                step = plan.steps[i]
                self.logger.debug("Executing step %d: %s", i + 1, step[:50])
                result = await self._execute_step(context, step, plan)
                plan.record(i, result)
                self.observers.notify("step_complete", i + 1, step, result)

                if self.allow_replan and should_replan(result):
                    self.logger.debug("Step %d requires replanning", i + 1)
                    if not context.has_reached_max_iterations():
                        await self._revise(context, plan, i)

                i += 1

            context.add_metadata("plan_steps", list(plan.steps))
            context.add_metadata("step_results", [r.to_dict() for r in plan.results])
            context.add_metadata("replans", plan.revisions)

            if context.has_reached_max_iterations():
                context.fail("Maximum iterations reached before completing all steps.")
            else:
                self.logger.debug("Synthesizing final answer from step results")
                context.complete(await self._synthesize(context, plan.results))

        except Exception as e:
            self.logger.error("Plan-execute loop failed: %s", e)
            context.fail(str(e))

        return context

    async def _create_plan(self, context: ExecutionContext) -> str:
        tools = ""
        definitions = context.tool_definitions()
        if definitions:
            tools = "\n\nAvailable tools:\n" + "".join(
                f"- {t['name']}: {t['description']}\n" for t in definitions
            )
        prompt = PLAN_PROMPT.format(task=context.task, tools=tools)
        return await self._respond(
            context, prompt, with_tools=False, system=PLANNER_SYSTEM_PROMPT
        )

    async def _execute_step(self, context: ExecutionContext, step: str, plan: Plan) -> str:
        prompt = f"Execute this step: {step}"
        if plan.results:
            prompt += "\n\nPrevious step results:\n" + plan.results_summary()
        return await self._respond(context, prompt)

    async def _revise(self, context: ExecutionContext, plan: Plan, index: int) -> None:
        remaining = plan.remaining_after(index)
        completed = "".join(
            f"Step {r.step}: {r.description}\nResult: {r.result}\n\n" for r in plan.results
        )
        prompt = REVISE_PROMPT.format(
            task=context.task,
            completed=completed,
            remaining=(
                "\n\nRemaining planned steps:\n" + Plan.numbered(remaining)
                if remaining else ""
            ),
        )
        revised = parse_plan_steps(
            await self._respond(
                context, prompt, with_tools=False, system=REVISER_SYSTEM_PROMPT
            )
        )
        if revised:
            self.logger.info("Plan revised with %d new steps", len(revised))
            plan.replace_tail(index, revised)

    async def _synthesize(self, context: ExecutionContext, results: list[StepResult]) -> str:
        text = "".join(
            f"Step {r.step} ({r.description}):\n{r.result}\n\n" for r in results
        )
        prompt = SYNTHESIZE_PROMPT.format(task=context.task, results=text)
        return await self._respond(context, prompt, with_tools=False)
