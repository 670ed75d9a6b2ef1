"""Shared test fixtures."""

from unittest.mock import AsyncMock

import pytest

from src.memory.store import MemoryStore
from src.tasks.store import TaskStore
from src.tools.queue_tools import init_queue_tools


@pytest.fixture
def task_store(tmp_path):
    """Create a TaskStore backed by a temporary queue file."""
    TaskStore._reset()
    s = TaskStore(path=tmp_path / "queue.json")
    TaskStore._instance = s
    yield s
    TaskStore._reset()


@pytest.fixture
def memory_store(tmp_path):
    """Create a MemoryStore rooted in a temporary directory."""
    MemoryStore._reset()
    s = MemoryStore(root=tmp_path / "memory")
    MemoryStore._instance = s
    yield s
    MemoryStore._reset()


@pytest.fixture(autouse=True)
def _no_queue_worker():
    """Make sure no test leaks a wired worker into the queue tools."""
    yield
    init_queue_tools(None)


class FakeChannel:
    """OutboundChannel that records what it was asked to send."""

    name = "fake"

    def __init__(self) -> None:
        self.sent: list[tuple[int, str]] = []
        self.presence: list[int] = []
        self.send_error: Exception | None = None

    async def send(self, chat_id: int, message: str) -> int:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((chat_id, message))
        return 1

    async def send_presence(self, chat_id: int) -> bool:
        self.presence.append(chat_id)
        return True


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def deliver() -> AsyncMock:
    return AsyncMock()
