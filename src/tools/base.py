"""Base types for the tool-calling framework."""

from dataclasses import dataclass

from pydantic import BaseModel


@dataclass
class ToolResult:
    """Result of a tool execution.

    Every tool returns one of these. The LLM client sends it back to
    Claude as a tool_result content block, so both fields are short,
    human-readable text.
    """

    text: str = ""
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_content(self) -> str:
        """Serialize for the Claude tool_result content field."""
        if self.error:
            return f"Error: {self.error}"
        return self.text or "OK"


class ToolParams(BaseModel):
    """Base class for tool parameter models.

    Subclass with Field() definitions. The JSON schema is auto-generated
    via model_json_schema() for Claude's tool definitions.
    """
