"""Unified LLM interface via LiteLLM (all providers through one API)."""

import json
import logging

from litellm import acompletion

from agent_loops.llm.base import BaseLLM, LLMResponse, TextBlock, ToolUseBlock, Usage

logger = logging.getLogger(__name__)

FINISH_REASONS = {
    "stop": "end_turn",
    "end_turn": "end_turn",
    "tool_calls": "tool_use",
    "function_call": "tool_use",
    "length": "max_tokens",
    "content_filter": "refusal",
}


def to_openai_messages(messages: list[dict], system: str | None = None) -> list[dict]:
    """
    Flatten block-structured messages into OpenAI chat messages:
    assistant tool_use blocks become ``tool_calls``, user tool_result
    blocks become one ``tool`` message each.
    """
    out = [{"role": "system", "content": system}] if system else []

    for msg in messages:
        content = msg["content"]
        if isinstance(content, str):
            out.append({"role": msg["role"], "content": content})
            continue

        texts = [b["text"] for b in content if b.get("type") == "text"]
        tool_uses = [b for b in content if b.get("type") == "tool_use"]
        tool_results = [b for b in content if b.get("type") == "tool_result"]

        if msg["role"] == "assistant":
            entry: dict = {"role": "assistant", "content": "\n".join(texts)}
            if tool_uses:
                entry["tool_calls"] = [
                    {
                        "id": b["id"],
                        "type": "function",
                        "function": {
                            "name": b["name"],
                            "arguments": json.dumps(b.get("input") or {}),
                        },
                    }
                    for b in tool_uses
                ]
            out.append(entry)
            continue

        for b in tool_results:
            out.append({
                "role": "tool",
                "tool_call_id": b["tool_use_id"],
                "content": b["content"],
            })
        if texts:
            out.append({"role": msg["role"], "content": "\n".join(texts)})

    return out


def to_openai_tools(tools: list[dict]) -> list[dict]:
    return [
        {
            "type": "function",
            "function": {
                "name": t["name"],
                "description": t["description"],
                "parameters": t["parameters"],
            },
        }
        for t in tools
    ]


class LiteLLMClient(BaseLLM):
    """
    Single client that talks to any provider via LiteLLM.
    Model names use LiteLLM format: anthropic/claude-sonnet-4-20250514, openai/gpt-4o, etc.
    API keys from environment: ANTHROPIC_API_KEY, OPENAI_API_KEY, etc.
    """

    def __init__(self, model: str, max_tokens: int = 4096, timeout: float | None = None):
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def complete(
        self,
        messages: list[dict],
        tools: list[dict] | None = None,
        system: str | None = None,
        temperature: float = 0.0,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        kwargs = {
            "model": self.model,
            "messages": to_openai_messages(messages, system),
            "temperature": temperature,
            "max_tokens": max_tokens or self.max_tokens,
        }
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        if tools:
            kwargs["tools"] = to_openai_tools(tools)
            kwargs["tool_choice"] = "auto"

        logger.debug("LiteLLM request: model=%s messages=%d", self.model, len(messages))
        response = await acompletion(**kwargs)
        return self._parse(response)

    def _parse(self, response) -> LLMResponse:
        # LiteLLM normalizes to OpenAI ChatCompletion shape
        choice = response.choices[0]
        msg = choice.message
        content: list = []
        if getattr(msg, "content", None):
            content.append(TextBlock(text=msg.content))
        for tc in getattr(msg, "tool_calls", None) or []:
            try:
                arguments = json.loads(tc.function.arguments or "{}")
            except json.JSONDecodeError:
                logger.warning("Unparseable tool arguments for %s", tc.function.name)
                arguments = {}
            if not isinstance(arguments, dict):
                logger.warning("Non-object tool arguments for %s", tc.function.name)
                arguments = {}
            content.append(
                ToolUseBlock(id=tc.id, name=tc.function.name, input=arguments)
            )

        usage = None
        if getattr(response, "usage", None):
            usage = Usage(
                input_tokens=getattr(response.usage, "prompt_tokens", 0) or 0,
                output_tokens=getattr(response.usage, "completion_tokens", 0) or 0,
            )

        finish_reason = getattr(choice, "finish_reason", None) or "stop"
        return LLMResponse(
            content=content,
            usage=usage,
            stop_reason=FINISH_REASONS.get(finish_reason, finish_reason),
            raw=response,
        )
