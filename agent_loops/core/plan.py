"""Plan data model for the plan-execute loop."""

from dataclasses import dataclass, field


@dataclass
class StepResult:
    """What executing one step produced."""
    step: int
    description: str
    result: str

    def to_dict(self) -> dict:
        return {"step": self.step, "description": self.description, "result": self.result}


@dataclass
class Plan:
    """
    Ordered step descriptions plus the results gathered so far.
    Revisions only ever replace the steps that have not run yet.
    """
    steps: list[str]
    results: list[StepResult] = field(default_factory=list)
    revisions: int = 0

    def __len__(self) -> int:
        return len(self.steps)

    def remaining_after(self, index: int) -> list[str]:
        return self.steps[index + 1:]

    def replace_tail(self, index: int, new_steps: list[str]) -> None:
        """Keep steps[0..index], swap everything after for ``new_steps``."""
        self.steps = self.steps[: index + 1] + list(new_steps)
        self.revisions += 1

    def record(self, index: int, result: str) -> StepResult:
        step_result = StepResult(step=index + 1, description=self.steps[index], result=result)
        self.results.append(step_result)
        return step_result

    def results_summary(self) -> str:
        return "".join(f"Step {r.step}: {r.result}\n" for r in self.results)

    @staticmethod
    def numbered(steps: list[str]) -> str:
        return "\n".join(f"{i}. {s}" for i, s in enumerate(steps, start=1))
