"""Agent sessions: one conversational Claude context each.

The main (interactive) session lives behind a :class:`SessionHandle` so
``/reset`` can swap it for a fresh one while every reader keeps going
through the same handle. The background session is a plain
:class:`AgentSession` owned by the worker.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.agent.history import ConversationHistory, Message
from src.config import settings
from src.llm.client import generate_response
from src.llm.prompt import (
    BACKGROUND_SYSTEM_PROMPT,
    MAIN_SYSTEM_PROMPT,
    build_system_prompt,
    load_context_file,
)
from src.tools import BACKGROUND_TOOL_CATEGORIES, MAIN_TOOL_CATEGORIES, registry

if TYPE_CHECKING:
    from collections.abc import Callable

    from src.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

NO_RESPONSE = "(no response)"


class AgentSession:
    """A single agent execution context.

    Args:
        name: Label used in logs ("main", "background").
        base_prompt: System prompt text.
        tools: Registry of tools this agent may call.
        model: Model override (default from settings).
        thinking: Thinking level override (default from settings).
        context: Extra project context appended to the system prompt.
        window_size: Transcript window (default from settings).
    """

    def __init__(
        self,
        name: str,
        base_prompt: str,
        tools: ToolRegistry | None = None,
        *,
        model: str | None = None,
        thinking: str | None = None,
        context: str = "",
        window_size: int | None = None,
    ) -> None:
        self.name = name
        self._base_prompt = base_prompt
        self._context = context
        self._tools = tools
        self._model = model or settings.claude_model
        self._thinking = thinking or settings.thinking
        self._history = ConversationHistory(
            window_size=window_size or settings.conversation_window_size
        )
        self._disposed = False
        logger.info(
            "Session '%s' created with tools: %s", name, ", ".join(self.tool_names) or "none"
        )

    @property
    def tool_names(self) -> list[str]:
        """Names of the tools this session may call."""
        return self._tools.tool_names if self._tools is not None else []

    @property
    def messages(self) -> list[Message]:
        """Snapshot of the role-tagged transcript."""
        return list(self._history.messages)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def recent_transcript(self, max_messages: int = 20) -> str:
        return self._history.recent_transcript(max_messages)

    async def run(self, text: str) -> str:
        """Send *text* and return Claude's full reply.

        Raises on API or transport errors; the unanswered user turn is
        dropped from the transcript in that case.
        """
        if self._disposed:
            msg = f"Session '{self.name}' has been disposed"
            raise RuntimeError(msg)

        self._history.add("user", text)
        try:
            reply = await generate_response(
                self._history.to_api_messages(),
                system=build_system_prompt(self._base_prompt, self._context),
                tools=self._tools,
                model=self._model,
                thinking=self._thinking,
            )
        except Exception:
            self._history.pop()
            raise

        if reply:
            self._history.add("assistant", reply)
        else:
            self._history.pop()
        return reply

    async def prompt(self, text: str) -> str:
        """Like :meth:`run`, but failures come back as ``Error: ...`` text."""
        try:
            reply = await self.run(text)
        except Exception as exc:
            logger.exception("Prompt error in %s session", self.name)
            return f"Error: {exc}"
        return reply or NO_RESPONSE

    def reset(self) -> int:
        """Discard the transcript. Returns the number of messages cleared."""
        count = self._history.clear()
        logger.info("Session '%s' reset (%d messages cleared)", self.name, count)
        return count

    def dispose(self) -> None:
        """Release the session. Safe to call more than once."""
        if self._disposed:
            return
        self._disposed = True
        self._history.clear()
        logger.info("Session '%s' disposed", self.name)


class SessionHandle:
    """Stable reference to the live main session.

    ``reset()`` builds a new session from the factory, disposes the old one
    and installs the new one. Callers never keep the session itself.
    """

    def __init__(self, factory: Callable[[], AgentSession]) -> None:
        self._factory = factory
        self._current = factory()

    @property
    def current(self) -> AgentSession:
        return self._current

    async def prompt(self, text: str) -> str:
        return await self._current.prompt(text)

    def recent_transcript(self, max_messages: int = 20) -> str:
        return self._current.recent_transcript(max_messages)

    def reset(self) -> None:
        fresh = self._factory()
        self._current.dispose()
        self._current = fresh
        logger.info("Main session reset")

    def dispose(self) -> None:
        self._current.dispose()


def create_main_session() -> AgentSession:
    """Build the interactive session with memory and queue tools."""
    return AgentSession(
        "main",
        MAIN_SYSTEM_PROMPT,
        registry.scoped(MAIN_TOOL_CATEGORIES),
        context=load_context_file(),
    )


def create_background_session() -> AgentSession:
    """Build the background session with memory tools only."""
    return AgentSession(
        "background",
        BACKGROUND_SYSTEM_PROMPT,
        registry.scoped(BACKGROUND_TOOL_CATEGORIES),
        context=load_context_file(),
    )
