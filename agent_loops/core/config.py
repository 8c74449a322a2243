"""Per-run model parameters."""

from dataclasses import dataclass


@dataclass
class LoopConfig:
    model: str = "anthropic/claude-sonnet-4-20250514"
    max_iterations: int = 10
    temperature: float = 0.0
    max_tokens: int = 4096
    system_prompt: str | None = None

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")

    def request_params(self) -> dict:
        return {
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

