"""Tool framework: import tool modules here to register them."""

# Import tool modules so their @registry.tool() decorators execute.
from src.tools import coding_tools, memory_tools, queue_tools  # noqa: F401
from src.tools.registry import registry

# Tool categories each agent may call.
MAIN_TOOL_CATEGORIES = frozenset({"coding", "memory", "queue"})
BACKGROUND_TOOL_CATEGORIES = frozenset({"coding", "memory"})

__all__ = ["BACKGROUND_TOOL_CATEGORIES", "MAIN_TOOL_CATEGORIES", "registry"]
