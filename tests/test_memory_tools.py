"""Tests for the memory tool."""

from datetime import UTC, datetime

from src.memory.store import MemoryStore
from src.tools import registry
from src.tools.memory_tools import MemoryAction, memory_tool


async def _call(**arguments):
    return await registry.execute("memory", arguments)


# -- handler -----------------------------------------------------------------


async def test_read_current_empty(memory_store: MemoryStore) -> None:
    result = await memory_tool(action=MemoryAction.READ_CURRENT)
    assert result.success
    assert result.text == f"No memory for {memory_store.current_week_id()} yet."


async def test_append_then_read_current(memory_store: MemoryStore) -> None:
    result = await memory_tool(action=MemoryAction.APPEND, entry="Discussed Q3 roadmap")
    assert result.text == "Saved to memory."

    result = await memory_tool(action=MemoryAction.READ_CURRENT)
    assert "Discussed Q3 roadmap" in result.text
    assert result.text.startswith("# Week ")


async def test_append_is_retry_safe(memory_store: MemoryStore) -> None:
    await memory_tool(action=MemoryAction.APPEND, entry="Booked flights")
    result = await memory_tool(action=MemoryAction.APPEND, entry="Booked flights")

    assert result.text == "Already in memory."
    assert memory_store.load_week().count("Booked flights") == 1


async def test_read_week(memory_store: MemoryStore) -> None:
    memory_store.append("old news", now=datetime(2026, 2, 11, tzinfo=UTC))
    result = await memory_tool(action=MemoryAction.READ_WEEK, week_id="2026-W07")
    assert "old news" in result.text


async def test_read_week_missing(memory_store: MemoryStore) -> None:
    result = await memory_tool(action=MemoryAction.READ_WEEK, week_id="2020-W01")
    assert result.text == "No memory for 2020-W01."


async def test_list(memory_store: MemoryStore) -> None:
    memory_store.append("a", now=datetime(2026, 2, 11, tzinfo=UTC))
    memory_store.append("b", now=datetime(2026, 2, 18, tzinfo=UTC))
    result = await memory_tool(action=MemoryAction.LIST)
    assert result.text == "2026-W08\n2026-W07"


async def test_list_empty(memory_store: MemoryStore) -> None:
    result = await memory_tool(action=MemoryAction.LIST)
    assert result.text == "No memory files yet."


# -- through the registry ----------------------------------------------------


async def test_registry_append(memory_store: MemoryStore) -> None:
    result = await _call(action="append", entry="Picked a venue")
    assert result.success
    assert memory_store.contains("Picked a venue")


async def test_unknown_action_is_validation_error(memory_store: MemoryStore) -> None:
    result = await _call(action="delete")
    assert not result.success
    assert result.error.startswith("Invalid arguments for 'memory'")
    assert "action" in result.error


async def test_read_week_requires_week_id(memory_store: MemoryStore) -> None:
    result = await _call(action="read_week")
    assert not result.success
    assert "week_id is required" in result.error


async def test_read_week_rejects_malformed_id(memory_store: MemoryStore) -> None:
    result = await _call(action="read_week", week_id="last week")
    assert not result.success
    assert "Invalid week ID" in result.error


async def test_append_requires_entry(memory_store: MemoryStore) -> None:
    result = await _call(action="append", entry="   ")
    assert not result.success
    assert "entry is required" in result.error
    assert memory_store.list_weeks() == []


def test_memory_tool_registered() -> None:
    tool = registry.get("memory")
    assert tool is not None
    assert tool.category == "memory"
    schema = tool.params_model.model_json_schema()
    assert "action" in schema["required"]
