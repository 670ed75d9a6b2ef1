"""Background queue tool: hand long-running work to the background worker."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import Field

from src.tools.base import ToolParams, ToolResult
from src.tools.registry import registry

if TYPE_CHECKING:
    from src.tasks.worker import BackgroundWorker

logger = logging.getLogger(__name__)

# Set by init_queue_tools() during bot startup.
_worker: BackgroundWorker | None = None


def init_queue_tools(worker: BackgroundWorker | None) -> None:
    """Wire the background worker into the tool functions.

    Called once during bot startup, after the worker is constructed.
    """
    global _worker  # noqa: PLW0603
    _worker = worker


def _get_worker() -> BackgroundWorker:
    if _worker is None:
        msg = "Background worker not initialised: call init_queue_tools() first"
        raise RuntimeError(msg)
    return _worker


class QueueTaskParams(ToolParams):
    description: str = Field(
        min_length=1,
        description="Complete, self-contained task description with all relevant context",
    )


@registry.tool(
    name="queue_task",
    description=(
        "Add a task to the background work queue. Use for complex, multi-step "
        "tasks. The description must be self-contained with all context needed "
        "to complete the task, since the background worker does not see this chat."
    ),
    category="queue",
    params_model=QueueTaskParams,
)
async def queue_task(description: str) -> ToolResult:
    worker = _get_worker()
    store = worker.store

    # A retried call returns the task that's already waiting.
    existing = store.find_pending(description)
    if existing is not None:
        return ToolResult(text=f"Task already queued (id: {existing.id}).")

    task = store.add(description)
    worker.wake()
    return ToolResult(
        text=f"Task queued (id: {task.id}). It will be processed in the background."
    )


class TaskStatusParams(ToolParams):
    task_id: str = Field(min_length=1, description="Task ID returned by queue_task")


@registry.tool(
    name="task_status",
    description="Check the status of a queued background task, with its result once finished.",
    category="queue",
    params_model=TaskStatusParams,
)
async def task_status(task_id: str) -> ToolResult:
    task = _get_worker().store.get_task(task_id)
    if task is None:
        return ToolResult(error=f"No task with id {task_id}")

    lines = [f"Status: {task.status}", f"Task: {task.description}"]
    if task.result is not None:
        lines.append(f"Result: {task.result}")
    if task.error is not None:
        lines.append(f"Error: {task.error}")
    return ToolResult(text="\n".join(lines))
