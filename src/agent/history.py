"""In-memory conversation transcript with sliding window."""

import logging
from dataclasses import dataclass, field

from src.config import settings

logger = logging.getLogger(__name__)

_ROLE_LABELS = {"user": "User", "assistant": "Assistant"}


@dataclass
class Message:
    """A single conversation turn."""

    role: str  # "user" or "assistant"
    content: str


@dataclass
class ConversationHistory:
    """Role-tagged transcript for one agent context."""

    messages: list[Message] = field(default_factory=list)
    window_size: int = field(default_factory=lambda: settings.conversation_window_size)

    def add(self, role: str, content: str) -> None:
        """Append a message and trim to the sliding window."""
        self.messages.append(Message(role=role, content=content))
        if len(self.messages) > self.window_size:
            self.messages = self.messages[-self.window_size :]

    def pop(self) -> Message | None:
        """Remove and return the newest message, if any."""
        return self.messages.pop() if self.messages else None

    def clear(self) -> int:
        """Clear all messages. Returns the count of cleared messages."""
        count = len(self.messages)
        self.messages.clear()
        return count

    def to_api_messages(self) -> list[dict[str, str]]:
        """Format messages for the Claude API.

        The window may cut between turns; Claude needs the first message
        to come from the user, so leading assistant turns are dropped.
        """
        start = 0
        while start < len(self.messages) and self.messages[start].role != "user":
            start += 1
        return [{"role": m.role, "content": m.content} for m in self.messages[start:]]

    def recent_transcript(self, max_messages: int = 20) -> str:
        """Render the last *max_messages* turns as labelled text blocks."""
        if max_messages <= 0:
            return ""
        lines = []
        for m in self.messages[-max_messages:]:
            if not m.content:
                continue
            label = _ROLE_LABELS.get(m.role, m.role.capitalize())
            lines.append(f"{label}: {m.content}")
        return "\n\n".join(lines)
