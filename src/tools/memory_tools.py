"""Weekly memory tool.

A single ``memory`` tool multiplexes four actions. The action tag is a
closed enum and each action's required fields are checked before the
handler runs, so a bad call comes back as a validation error result.
"""

from enum import StrEnum

from pydantic import Field, model_validator

from src.memory.store import MemoryStore, validate_week_id
from src.tools.base import ToolParams, ToolResult
from src.tools.registry import registry


class MemoryAction(StrEnum):
    READ_CURRENT = "read_current"
    READ_WEEK = "read_week"
    APPEND = "append"
    LIST = "list"


class MemoryParams(ToolParams):
    action: MemoryAction = Field(
        description=(
            "read_current (load this week), read_week (load a specific week by "
            "week_id), append (add an entry to this week), list (list available weeks)"
        )
    )
    week_id: str | None = Field(
        default=None, description="Week ID like 2026-W07 (required for read_week)"
    )
    entry: str | None = Field(
        default=None, description="Text to append (required for append)"
    )

    @model_validator(mode="after")
    def _check_action_fields(self) -> "MemoryParams":
        if self.action == MemoryAction.READ_WEEK:
            if not self.week_id:
                msg = "week_id is required for read_week"
                raise ValueError(msg)
            validate_week_id(self.week_id)
        if self.action == MemoryAction.APPEND and not (self.entry and self.entry.strip()):
            msg = "entry is required for append"
            raise ValueError(msg)
        return self


@registry.tool(
    name="memory",
    description=(
        "Manage persistent weekly memory files shared with the background worker. "
        "Use append to save important context, decisions, and outcomes. "
        "Use read_week when the user references past events."
    ),
    category="memory",
    params_model=MemoryParams,
)
async def memory_tool(
    action: MemoryAction,
    week_id: str | None = None,
    entry: str | None = None,
) -> ToolResult:
    store = MemoryStore.get()

    if action == MemoryAction.READ_CURRENT:
        week = store.current_week_id()
        return ToolResult(text=store.load_week(week) or f"No memory for {week} yet.")

    if action == MemoryAction.READ_WEEK:
        return ToolResult(text=store.load_week(week_id) or f"No memory for {week_id}.")

    if action == MemoryAction.APPEND:
        # Retried calls must not duplicate the bullet.
        if store.contains(entry):
            return ToolResult(text="Already in memory.")
        store.append(entry)
        return ToolResult(text="Saved to memory.")

    weeks = store.list_weeks()
    return ToolResult(text="\n".join(weeks) if weeks else "No memory files yet.")
