"""Message history management for the interaction loops."""

from agent_loops.llm.base import TextBlock, ToolResultBlock, ToolUseBlock


def to_block(block):
    """Coerce a raw dict block into its typed form; typed blocks pass through."""
    if not isinstance(block, dict):
        return block
    match block.get("type"):
        case "text":
            return TextBlock(text=block.get("text", ""))
        case "tool_use":
            return ToolUseBlock(
                id=block.get("id", ""),
                name=block.get("name", ""),
                input=block.get("input") or {},
            )
        case "tool_result":
            return ToolResultBlock(
                tool_use_id=block.get("tool_use_id", ""),
                content=block.get("content", ""),
                is_error=block.get("is_error", False),
            )
    return block


def serialize_content(content):
    if isinstance(content, str):
        return content
    return [b.to_dict() if hasattr(b, "to_dict") else b for b in content]


def serialize_messages(messages: list[dict]) -> list[dict]:
    """Plain-dict form of a message list, ready for JSON encoding."""
    return [
        {"role": m["role"], "content": serialize_content(m["content"])}
        for m in messages
    ]


class Conversation:
    """Stores user, assistant, and tool result messages for LLM context."""

    def __init__(self, messages: list[dict] | None = None):
        self._messages: list[dict] = list(messages or [])

    @property
    def messages(self) -> list[dict]:
        return self._messages

    def add_message(self, role: str, content) -> None:
        self._messages.append({"role": role, "content": content})

    def add_user_message(self, content: str) -> None:
        self.add_message("user", content)

    def add_assistant_content(self, content: list) -> None:
        self.add_message("assistant", list(content))

    def add_tool_results(self, results: list[ToolResultBlock]) -> None:
        self.add_message("user", list(results))
