"""Base tool interface (BaseTool ABC) and the ToolResult variant."""

import inspect
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from agent_loops.llm.base import ToolResultBlock


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool invocation: ``ok(content)`` or ``error(message)``."""
    content: str
    is_error: bool = False

    @classmethod
    def ok(cls, value: Any) -> "ToolResult":
        return cls(content=_stringify(value))

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(content=message, is_error=True)

    def to_block(self, tool_use_id: str) -> ToolResultBlock:
        return ToolResultBlock(
            tool_use_id=tool_use_id, content=self.content, is_error=self.is_error
        )


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    return json.dumps(value, default=str)


class BaseTool(ABC):
    name: str = ""
    description: str = ""

    @abstractmethod
    def parameters_schema(self) -> dict:
        """JSON Schema for tool input."""
        ...

    @abstractmethod
    async def execute(self, params: dict):
        """Run the tool. Returns a ToolResult or any JSON-serializable value."""
        ...

    def to_schema(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters_schema(),
        }


class FunctionTool(BaseTool):
    """Wraps a plain or async callable taking the input dict."""

    def __init__(
        self,
        name: str,
        description: str,
        fn: Callable[[dict], Any],
        parameters: dict | None = None,
    ):
        self.name = name
        self.description = description
        self.fn = fn
        self._parameters = parameters or {"type": "object", "properties": {}}

    def parameters_schema(self):
        return self._parameters

    async def execute(self, params):
        result = self.fn(params)
        if inspect.isawaitable(result):
            result = await result
        return result
