"""TaskStore: durable JSON-file task queue."""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from src.config import settings
from src.tasks.models import Task, TaskStatus, make_task_id, utc_now_iso

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(days=7)


class InvalidTransitionError(ValueError):
    """Raised when a status change is not allowed by the task state machine."""


class TaskStore:
    """Persists the background task list in a single JSON file.

    The whole list is kept in memory and rewritten to disk on every mutating
    call, before the call returns. Singleton accessed via ``TaskStore.get()``.
    Pass an explicit *path* for test isolation (e.g. ``tmp_path / "queue.json"``).

    All methods are synchronous: one process owns the file and every call
    runs to completion on the event loop, so no locking is needed.
    """

    _instance: TaskStore | None = None

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or settings.queue_path
        self._tasks: list[Task] = []
        self._load()

    @classmethod
    def get(cls) -> TaskStore:
        """Return the shared TaskStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    @property
    def path(self) -> Path:
        return self._path

    # -- Persistence -----------------------------------------------------------

    def _load(self) -> None:
        """Read the backing file. A corrupt or unreadable file means an empty store."""
        if not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                msg = f"expected a JSON array, got {type(raw).__name__}"
                raise ValueError(msg)
            self._tasks = [Task.from_dict(item) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Failed to load %s (%s), starting with an empty queue", self._path, exc)
            self._tasks = []
            return
        logger.info("Loaded %d task(s) from %s", len(self._tasks), self._path)

    def _save(self, tasks: list[Task]) -> None:
        """Rewrite the full task list. Write errors propagate to the caller."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([t.to_dict() for t in tasks], indent=2)
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_text(payload, encoding="utf-8")
        os.replace(tmp, self._path)

    def _commit(self, tasks: list[Task]) -> None:
        """Persist *tasks*, then make them the live list.

        The in-memory list only changes once the write has succeeded.
        """
        self._save(tasks)
        self._tasks = tasks

    def _index(self, task_id: str) -> int | None:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        return None

    def _transition(
        self, task_id: str, expected: TaskStatus, target: TaskStatus, **changes: str
    ) -> Task | None:
        index = self._index(task_id)
        if index is None:
            logger.warning("Task %s not found (wanted %s -> %s)", task_id, expected, target)
            return None
        current = self._tasks[index]
        if current.status != expected:
            msg = f"Task {task_id} is {current.status}, cannot move to {target}"
            raise InvalidTransitionError(msg)
        updated = dataclasses.replace(current, status=target, **changes)
        tasks = list(self._tasks)
        tasks[index] = updated
        self._commit(tasks)
        return updated

    # -- Queries ---------------------------------------------------------------

    def next_pending(self) -> Task | None:
        """Return a copy of the oldest pending task, or None."""
        for task in self._tasks:
            if task.status == TaskStatus.PENDING:
                return dataclasses.replace(task)
        return None

    def get_task(self, task_id: str) -> Task | None:
        """Fetch a copy of a task by ID, or None if not found."""
        index = self._index(task_id)
        return dataclasses.replace(self._tasks[index]) if index is not None else None

    def list_tasks(self, status: TaskStatus | str | None = None) -> list[Task]:
        """Return copies of all tasks in insertion order, optionally filtered."""
        if status is None:
            return [dataclasses.replace(t) for t in self._tasks]
        wanted = TaskStatus(status)
        return [dataclasses.replace(t) for t in self._tasks if t.status == wanted]

    def find_pending(self, description: str) -> Task | None:
        """Return a copy of the first pending task with this exact description."""
        for task in self._tasks:
            if task.status == TaskStatus.PENDING and task.description == description:
                return dataclasses.replace(task)
        return None

    # -- Mutations -------------------------------------------------------------

    def add(self, description: str) -> Task:
        """Append a new pending task and persist it. Returns a copy."""
        task = Task(id=make_task_id(), description=description)
        self._commit([*self._tasks, task])
        logger.info("Added task %s: %s", task.id, description[:80])
        return dataclasses.replace(task)

    def mark_running(self, task_id: str) -> None:
        """Move a task from pending to running. Unknown IDs are ignored."""
        self._transition(task_id, TaskStatus.PENDING, TaskStatus.RUNNING)

    def complete(self, task_id: str, result: str) -> None:
        """Move a running task to done with its result."""
        task = self._transition(
            task_id,
            TaskStatus.RUNNING,
            TaskStatus.DONE,
            result=result,
            completed_at=utc_now_iso(),
        )
        if task is not None:
            logger.info("Completed task %s", task_id)

    def fail(self, task_id: str, error: str) -> None:
        """Move a running task to failed with an error message."""
        task = self._transition(
            task_id,
            TaskStatus.RUNNING,
            TaskStatus.FAILED,
            error=error,
            completed_at=utc_now_iso(),
        )
        if task is not None:
            logger.warning("Failed task %s: %s", task_id, error[:80])

    def fail_interrupted(self, reason: str) -> list[Task]:
        """Fail every task left running by an unclean shutdown.

        Returns copies of the tasks that were failed.
        """
        if not any(t.status == TaskStatus.RUNNING for t in self._tasks):
            return []
        now = utc_now_iso()
        tasks: list[Task] = []
        interrupted: list[Task] = []
        for task in self._tasks:
            if task.status == TaskStatus.RUNNING:
                task = dataclasses.replace(
                    task, status=TaskStatus.FAILED, error=reason, completed_at=now
                )
                interrupted.append(task)
            tasks.append(task)
        self._commit(tasks)
        logger.warning("Marked %d interrupted task(s) as failed", len(interrupted))
        return [dataclasses.replace(t) for t in interrupted]

    def prune(self, max_age: timedelta = DEFAULT_MAX_AGE, now: datetime | None = None) -> int:
        """Remove done/failed tasks completed more than *max_age* ago.

        Pending and running tasks are never pruned. Returns the count removed.
        """
        cutoff = (now or datetime.now(UTC)) - max_age
        kept = [t for t in self._tasks if not _is_expired(t, cutoff)]
        pruned = len(self._tasks) - len(kept)
        if pruned:
            self._commit(kept)
            logger.info("Pruned %d old task(s)", pruned)
        return pruned


def _is_expired(task: Task, cutoff: datetime) -> bool:
    if not task.status.is_finished:
        return False
    completed = task.completed_datetime
    return completed is not None and completed < cutoff
