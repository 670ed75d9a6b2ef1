"""Background task system: models, durable queue, and the polling worker."""

from src.tasks.models import Task, TaskStatus
from src.tasks.store import InvalidTransitionError, TaskStore
from src.tasks.worker import BackgroundWorker

__all__ = [
    "BackgroundWorker",
    "InvalidTransitionError",
    "Task",
    "TaskStatus",
    "TaskStore",
]
