"""Runtime: the live components shared by handlers and lifecycle hooks."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.agent.session import AgentSession, SessionHandle
    from src.bot.dispatcher import MessageDispatcher
    from src.memory.store import MemoryStore
    from src.tasks.store import TaskStore
    from src.tasks.worker import BackgroundWorker


@dataclass
class Runtime:
    """Everything wired together at startup."""

    main: SessionHandle
    background: AgentSession
    dispatcher: MessageDispatcher
    worker: BackgroundWorker
    tasks: TaskStore
    memory: MemoryStore
    previous_shutdown: str = "unknown"
    shutdown_signal: str = "unknown"
    started_at: float = field(default_factory=time.monotonic)

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self.started_at


# Set by init_runtime() during bot startup.
_runtime: Runtime | None = None


def init_runtime(runtime: Runtime | None) -> None:
    """Install (or clear, with None) the process-wide runtime."""
    global _runtime  # noqa: PLW0603
    _runtime = runtime


def get_runtime() -> Runtime:
    if _runtime is None:
        msg = "Runtime not initialised: call init_runtime() first"
        raise RuntimeError(msg)
    return _runtime
