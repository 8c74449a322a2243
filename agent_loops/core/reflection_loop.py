"""Generate → reflect → refine loop."""

import logging
from dataclasses import asdict, dataclass
from typing import Callable

from agent_loops.core.base_loop import BaseLoop
from agent_loops.core.context import ExecutionContext
from agent_loops.core.parsing import extract_score

module_logger = logging.getLogger(__name__)

DEFAULT_CRITERIA = "correctness, completeness, clarity, and quality"
FEEDBACK_PREVIEW_CHARS = 200

EVALUATOR_SYSTEM_PROMPT = (
    "You are an expert evaluator. Be constructive but critical in your assessment."
)

REFLECT_PROMPT = """\
Task: {task}

Current output:
{output}

Evaluate this output on {criteria}:
1. What's working well?
2. What issues or problems exist?
3. How can it be improved?
4. Overall quality score (1-10)

Be constructive but critical. Focus on actionable improvements."""

REFINE_PROMPT = """\
Task: {task}

Current output:
{output}

Reflection:
{reflection}

Improve the output by addressing the issues identified in the reflection. \
Maintain what works well while fixing the problems."""


@dataclass
class ReflectionRecord:
    iteration: int
    score: int
    feedback: str


class ReflectionLoop(BaseLoop):
    """
    Produces an answer, then repeatedly asks the model to critique and
    improve it until the critique's score reaches ``quality_threshold``
    or ``max_refinements`` rounds have run.
    """

    name = "reflection"

    def __init__(
        self,
        logger: logging.Logger | None = None,
        max_refinements: int = 3,
        quality_threshold: int = 8,
        criteria: str | None = None,
    ):
        super().__init__(logger=logger or module_logger)
        self.max_refinements = max_refinements
        self.quality_threshold = quality_threshold
        self.criteria = criteria

    def on_reflection(self, callback: Callable) -> "ReflectionLoop":
        """callback(refinement, score, feedback)"""
        self.observers.subscribe("reflection", callback)
        return self

    async def execute(self, context: ExecutionContext) -> ExecutionContext:
        if context.is_completed():
            return context

        try:
            self.logger.debug("Phase 1: Initial generation")
            output = await self._respond(context, context.task)

            if not output:
                context.fail("Failed to generate initial output")
                return context

            reflections: list[ReflectionRecord] = []

            for refinement in range(1, self.max_refinements + 1):
                if context.has_reached_max_iterations():
                    self.logger.warning("Max iterations reached during refinement")
                    break

                self.logger.debug("Refinement iteration %d", refinement)
                reflection = await self._reflect(context, output)
                score = extract_score(reflection)
                reflections.append(
                    ReflectionRecord(
                        iteration=refinement,
                        score=score,
                        feedback=reflection[:FEEDBACK_PREVIEW_CHARS],
                    )
                )
                self.logger.debug("Reflection score: %d", score)
                self.observers.notify("reflection", refinement, score, reflection)

                if score >= self.quality_threshold:
                    self.logger.info("Quality threshold met at refinement %d", refinement)
                    break

                self.logger.debug("Refining output based on reflection")
                output = await self._refine(context, output, reflection)

            context.add_metadata("reflections", [asdict(r) for r in reflections])
            context.add_metadata("final_score", reflections[-1].score if reflections else 0)
            context.complete(output)

        except Exception as e:
            self.logger.error("Reflection loop failed: %s", e)
            context.fail(str(e))

        return context

    async def _reflect(self, context: ExecutionContext, output: str) -> str:
        prompt = REFLECT_PROMPT.format(
            task=context.task,
            output=output,
            criteria=self.criteria or DEFAULT_CRITERIA,
        )
        return await self._respond(
            context, prompt, with_tools=False, system=EVALUATOR_SYSTEM_PROMPT
        )

    async def _refine(self, context: ExecutionContext, output: str, reflection: str) -> str:
        prompt = REFINE_PROMPT.format(
            task=context.task, output=output, reflection=reflection
        )
        return await self._respond(context, prompt)
