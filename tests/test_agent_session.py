"""Tests for agent sessions and the swappable main-session handle."""

from unittest.mock import AsyncMock, patch

import pytest

from src.agent.session import (
    NO_RESPONSE,
    AgentSession,
    SessionHandle,
    create_background_session,
    create_main_session,
)


def _session(name: str = "main") -> AgentSession:
    return AgentSession(name, "You are a test.", window_size=10)


# -- AgentSession.run ----------------------------------------------------------


async def test_run_records_turns() -> None:
    session = _session()
    with patch("src.agent.session.generate_response", AsyncMock(return_value="hello")) as gen:
        reply = await session.run("hi")

    assert reply == "hello"
    assert [(m.role, m.content) for m in session.messages] == [
        ("user", "hi"),
        ("assistant", "hello"),
    ]
    args, kwargs = gen.call_args
    assert args[0] == [{"role": "user", "content": "hi"}]
    assert kwargs["system"][0]["text"].startswith("You are a test.")


async def test_run_error_drops_user_turn_and_raises() -> None:
    session = _session()
    with (
        patch("src.agent.session.generate_response", AsyncMock(side_effect=RuntimeError("overloaded"))),
        pytest.raises(RuntimeError, match="overloaded"),
    ):
        await session.run("hi")
    assert session.messages == []


async def test_run_empty_reply_drops_user_turn() -> None:
    session = _session()
    with patch("src.agent.session.generate_response", AsyncMock(return_value="")):
        assert await session.run("hi") == ""
    assert session.messages == []


async def test_run_after_dispose_raises() -> None:
    session = _session()
    session.dispose()
    with pytest.raises(RuntimeError, match="disposed"):
        await session.run("hi")


# -- AgentSession.prompt -------------------------------------------------------


async def test_prompt_converts_errors_to_text() -> None:
    session = _session()
    with patch("src.agent.session.generate_response", AsyncMock(side_effect=RuntimeError("boom"))):
        assert await session.prompt("hi") == "Error: boom"


async def test_prompt_empty_reply_placeholder() -> None:
    session = _session()
    with patch("src.agent.session.generate_response", AsyncMock(return_value="")):
        assert await session.prompt("hi") == NO_RESPONSE


async def test_recent_transcript() -> None:
    session = _session()
    with patch("src.agent.session.generate_response", AsyncMock(return_value="hello")):
        await session.run("hi")
    assert session.recent_transcript() == "User: hi\n\nAssistant: hello"


# -- reset / dispose -----------------------------------------------------------


async def test_reset_clears_transcript() -> None:
    session = _session()
    with patch("src.agent.session.generate_response", AsyncMock(return_value="hello")):
        await session.run("hi")
    assert session.reset() == 2
    assert session.messages == []
    assert not session.disposed


def test_dispose_is_idempotent() -> None:
    session = _session()
    session.dispose()
    session.dispose()
    assert session.disposed


# -- SessionHandle -------------------------------------------------------------


async def test_handle_reset_swaps_session() -> None:
    handle = SessionHandle(_session)
    old = handle.current
    with patch("src.agent.session.generate_response", AsyncMock(return_value="hello")):
        await handle.prompt("hi")

    handle.reset()

    assert handle.current is not old
    assert old.disposed
    assert handle.current.messages == []
    assert handle.recent_transcript() == ""


async def test_handle_routes_through_current() -> None:
    handle = SessionHandle(_session)
    handle.reset()
    with patch("src.agent.session.generate_response", AsyncMock(return_value="fresh")):
        assert await handle.prompt("hi") == "fresh"
    assert len(handle.current.messages) == 2


def test_handle_dispose() -> None:
    handle = SessionHandle(_session)
    handle.dispose()
    assert handle.current.disposed


# -- factories -----------------------------------------------------------------


def test_main_session_tools() -> None:
    session = create_main_session()
    assert session.name == "main"
    assert {"memory", "queue_task", "task_status", "bash"} <= set(session.tool_names)


def test_background_session_tools() -> None:
    session = create_background_session()
    assert session.name == "background"
    assert "memory" in session.tool_names
    assert "bash" in session.tool_names
    assert "queue_task" not in session.tool_names
