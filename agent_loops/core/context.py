"""Execution context: the state one loop run reads and mutates."""

import copy
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from agent_loops.core.config import LoopConfig
from agent_loops.core.conversation import Conversation
from agent_loops.errors import ContextStateError
from agent_loops.llm.base import BaseLLM
from agent_loops.tools.base import BaseTool
from agent_loops.tools.registry import ToolRegistry


class RunStatus(Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total(self) -> int:
        return self.input_tokens + self.output_tokens

    def add(self, input_tokens: int, output_tokens: int) -> None:
        if input_tokens < 0 or output_tokens < 0:
            raise ValueError("Token counts cannot be negative")
        self.input_tokens += input_tokens
        self.output_tokens += output_tokens

    def to_dict(self) -> dict:
        return {
            "input": self.input_tokens,
            "output": self.output_tokens,
            "total": self.total,
        }


@dataclass
class ToolCallRecord:
    tool: str
    input: dict
    result: str
    is_error: bool
    iteration: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "tool": self.tool,
            "input": self.input,
            "result": self.result,
            "is_error": self.is_error,
            "iteration": self.iteration,
            "timestamp": self.timestamp,
        }


@dataclass
class AgentResult:
    success: bool
    answer: str | None
    error: str | None
    iterations: int
    messages: list[dict]
    metadata: dict = field(default_factory=dict)


class ExecutionContext:
    """
    Everything a loop needs for one run: the task, the model client,
    the tools, the conversation, and the run's terminal state.
    A context belongs to a single ``execute`` call and is returned
    from it; do not share one between concurrent runs.
    """

    def __init__(
        self,
        client: BaseLLM,
        task: str,
        tools: ToolRegistry | list[BaseTool] | None = None,
        config: LoopConfig | None = None,
    ):
        self.client = client
        self.task = task
        if isinstance(tools, ToolRegistry):
            self.tools = tools
        else:
            self.tools = ToolRegistry(tools)
        self.config = config or LoopConfig()

        self.conversation = Conversation()
        self.conversation.add_user_message(task)
        self.iteration = 0
        self.status = RunStatus.RUNNING
        self.answer: str | None = None
        self.error: str | None = None
        self.token_usage = TokenUsage()
        self.tool_calls: list[ToolCallRecord] = []
        self.metadata: dict[str, Any] = {}
        self.start_time = time.time()
        self.end_time: float | None = None
        self._checkpoints: dict[str, dict] = {}

    # -- conversation --

    @property
    def messages(self) -> list[dict]:
        return self.conversation.messages

    def add_message(self, role: str, content) -> None:
        self.conversation.add_message(role, content)

    # -- iteration budget --

    @property
    def max_iterations(self) -> int:
        return self.config.max_iterations

    def increment_iteration(self) -> int:
        self.iteration += 1
        return self.iteration

    def has_reached_max_iterations(self) -> bool:
        return self.iteration >= self.config.max_iterations

    # -- terminal state --

    def is_completed(self) -> bool:
        return self.status is not RunStatus.RUNNING

    def has_failed(self) -> bool:
        return self.status is RunStatus.FAILED

    def complete(self, answer: str) -> None:
        self._finish(RunStatus.COMPLETED)
        self.answer = answer

    def fail(self, message: str) -> None:
        self._finish(RunStatus.FAILED)
        self.error = message

    def _finish(self, status: RunStatus) -> None:
        if self.is_completed():
            raise ContextStateError(
                f"Context already {self.status.value}; cannot mark it {status.value}"
            )
        self.status = status
        self.end_time = time.time()

    # -- tools --

    def tool_definitions(self) -> list[dict]:
        return self.tools.schemas()

    def get_tool(self, name: str) -> BaseTool | None:
        return self.tools.get(name)

    def record_tool_call(
        self, name: str, input: dict, output: str, is_error: bool = False
    ) -> None:
        self.tool_calls.append(
            ToolCallRecord(
                tool=name,
                input=dict(input),
                result=output,
                is_error=is_error,
                iteration=self.iteration,
            )
        )

    # -- accounting --

    def add_token_usage(self, input_tokens: int, output_tokens: int) -> None:
        self.token_usage.add(input_tokens, output_tokens)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    def get_metadata(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def execution_time(self) -> float:
        return (self.end_time or time.time()) - self.start_time

    # -- checkpoints --

    def create_checkpoint(self, checkpoint_id: str | None = None) -> str:
        checkpoint_id = checkpoint_id or f"checkpoint_{uuid.uuid4().hex[:12]}"
        self._checkpoints[checkpoint_id] = {
            "messages": copy.deepcopy(self.messages),
            "iteration": self.iteration,
            "token_usage": (self.token_usage.input_tokens, self.token_usage.output_tokens),
            "tool_calls": list(self.tool_calls),
            "metadata": copy.deepcopy(self.metadata),
        }
        return checkpoint_id

    def restore_checkpoint(self, checkpoint_id: str) -> None:
        if checkpoint_id not in self._checkpoints:
            raise ContextStateError(f"Checkpoint '{checkpoint_id}' not found")
        saved = self._checkpoints[checkpoint_id]
        self.conversation = Conversation(copy.deepcopy(saved["messages"]))
        self.iteration = saved["iteration"]
        self.token_usage = TokenUsage(*saved["token_usage"])
        self.tool_calls = list(saved["tool_calls"])
        self.metadata = copy.deepcopy(saved["metadata"])

    def checkpoints(self) -> list[str]:
        return list(self._checkpoints)

    def fork(self) -> "ExecutionContext":
        """Independent copy of the running state, for a separate run."""
        forked = ExecutionContext(
            client=self.client,
            task=self.task,
            tools=self.tools,
            config=self.config,
        )
        forked.conversation = Conversation(copy.deepcopy(self.messages))
        forked.iteration = self.iteration
        forked.token_usage = TokenUsage(
            self.token_usage.input_tokens, self.token_usage.output_tokens
        )
        forked.tool_calls = list(self.tool_calls)
        forked.metadata = copy.deepcopy(self.metadata)
        forked.start_time = self.start_time
        return forked

    # -- export --

    def to_dict(self) -> dict:
        return {
            "task": self.task,
            "model": self.config.model,
            "status": self.status.value,
            "iteration": self.iteration,
            "answer": self.answer,
            "error": self.error,
            "tool_calls": [c.to_dict() for c in self.tool_calls],
            "token_usage": self.token_usage.to_dict(),
            "metadata": self.metadata,
            "execution_time": self.execution_time(),
        }

    def to_result(self) -> AgentResult:
        metadata = {
            "token_usage": self.token_usage.to_dict(),
            "tool_calls": [c.to_dict() for c in self.tool_calls],
            "execution_time": self.execution_time(),
        }
        metadata.update(self.metadata)
        return AgentResult(
            success=self.status is RunStatus.COMPLETED,
            answer=self.answer,
            error=self.error or ("Run did not finish" if not self.is_completed() else None),
            iterations=self.iteration,
            messages=self.messages,
            metadata=metadata,
        )

    def __repr__(self) -> str:
        return (
            f"ExecutionContext(status={self.status.value}, "
            f"iteration={self.iteration}, messages={len(self.messages)})"
        )
