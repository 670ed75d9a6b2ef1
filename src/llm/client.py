"""Async Claude API client with streaming and tool-calling loop."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import anthropic

from src.config import settings
from src.llm.models import RESPONSE_TOKENS, resolve_model, thinking_budget

if TYPE_CHECKING:
    from src.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

_client: anthropic.AsyncAnthropic | None = None


def _get_client() -> anthropic.AsyncAnthropic:
    """Lazily initialize the Anthropic client."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
    return _client


def _serialize_content(content: list[Any]) -> list[dict[str, Any]]:
    """Convert SDK content blocks to plain dicts for message history.

    Thinking blocks must be sent back unchanged (with their signature)
    when continuing a tool-calling turn.
    """
    result: list[dict[str, Any]] = []
    for block in content:
        if block.type == "text":
            result.append({"type": "text", "text": block.text})
        elif block.type == "tool_use":
            result.append({
                "type": "tool_use",
                "id": block.id,
                "name": block.name,
                "input": block.input,
            })
        elif block.type == "thinking":
            result.append({
                "type": "thinking",
                "thinking": block.thinking,
                "signature": block.signature,
            })
        elif block.type == "redacted_thinking":
            result.append({"type": "redacted_thinking", "data": block.data})
    return result


def _request_kwargs(
    system: str | list[dict[str, Any]],
    messages: list[dict[str, Any]],
    model: str | None,
    thinking: str,
    tool_schemas: list[dict[str, Any]],
) -> dict[str, Any]:
    budget = thinking_budget(thinking)
    kwargs: dict[str, Any] = {
        "model": resolve_model(model or settings.claude_model),
        "max_tokens": RESPONSE_TOKENS + budget,
        "system": system,
        "messages": messages,
    }
    if budget:
        kwargs["thinking"] = {"type": "enabled", "budget_tokens": budget}
    if tool_schemas:
        kwargs["tools"] = tool_schemas
    return kwargs


async def generate_response(
    messages: list[dict[str, Any]],
    *,
    system: str | list[dict[str, Any]],
    tools: ToolRegistry | None = None,
    model: str | None = None,
    thinking: str = "off",
) -> str:
    """Generate a response with full tool-calling loop.

    Text is collected from the stream across rounds. When Claude calls
    tools, they are executed through *tools* and the results fed back
    until Claude answers without a tool call or ``max_tool_rounds`` is hit.

    Args:
        messages: Conversation history in Claude API message format.
        system: System prompt (string or content blocks).
        tools: Registry of tools this conversation may call.
        model: Friendly name or full model ID (default from settings).
        thinking: Extended-thinking level name.

    Returns:
        The complete assistant text across all rounds.

    Raises:
        anthropic.APIError: On API/transport failures (after SDK retries).
    """
    client = _get_client()
    tool_schemas = tools.get_schemas() if tools else []

    loop_messages = list(messages)
    full_text = ""

    max_rounds = settings.max_tool_rounds
    for round_num in range(max_rounds):
        kwargs = _request_kwargs(system, loop_messages, model, thinking, tool_schemas)

        async with client.messages.stream(**kwargs) as stream:
            first_chunk = True
            async for text in stream.text_stream:
                # Keep text from successive tool-calling rounds apart.
                if first_chunk and round_num > 0 and full_text and not full_text.endswith("\n"):
                    full_text += "\n\n"
                full_text += text
                first_chunk = False

            response = await stream.get_final_message()

        tool_use_blocks = [b for b in response.content if b.type == "tool_use"]

        if not tool_use_blocks or tools is None:
            return full_text

        logger.info(
            "Round %d: %d tool call(s): %s",
            round_num + 1,
            len(tool_use_blocks),
            ", ".join(b.name for b in tool_use_blocks),
        )

        loop_messages.append({
            "role": "assistant",
            "content": _serialize_content(response.content),
        })

        tool_results: list[dict[str, Any]] = []
        for block in tool_use_blocks:
            result = await tools.execute(block.name, block.input or {})
            tool_results.append({
                "type": "tool_result",
                "tool_use_id": block.id,
                "content": result.to_content(),
                "is_error": not result.success,
            })

        loop_messages.append({"role": "user", "content": tool_results})

    logger.warning("Hit max tool rounds (%d)", max_rounds)
    return full_text
