"""Abstract LLM interface, content blocks and response types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class TextBlock:
    text: str
    type: str = field(default="text", init=False)

    def to_dict(self) -> dict:
        return {"type": "text", "text": self.text}


@dataclass
class ToolUseBlock:
    id: str
    name: str
    input: dict = field(default_factory=dict)
    type: str = field(default="tool_use", init=False)

    def to_dict(self) -> dict:
        return {
            "type": "tool_use",
            "id": self.id,
            "name": self.name,
            "input": dict(self.input) if self.input else {},
        }


@dataclass
class ToolResultBlock:
    tool_use_id: str
    content: str
    is_error: bool = False
    type: str = field(default="tool_result", init=False)

    def to_dict(self) -> dict:
        block = {
            "type": "tool_result",
            "tool_use_id": self.tool_use_id,
            "content": self.content,
        }
        if self.is_error:
            block["is_error"] = True
        return block


ContentBlock = TextBlock | ToolUseBlock | ToolResultBlock


@dataclass
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class LLMResponse:
    """
    One model turn. ``content`` is the ordered list of blocks; the
    stop reason is what the provider reported and may disagree with
    the content (e.g. ``max_tokens`` while tool calls are present).
    """
    content: list = field(default_factory=list)
    usage: Usage | None = None
    stop_reason: str = "end_turn"
    raw: object = None


class BaseLLM(ABC):
    """Abstract interface that each provider implements."""

    @abstractmethod
    async def complete(
        self,
        messages: list[dict],
        tools: list[dict] | None = None,
        system: str | None = None,
        temperature: float = 0.0,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        ...
