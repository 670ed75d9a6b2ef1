"""Task data model for the background work queue."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """Lifecycle state of a queued task.

    ``pending -> running -> done`` on success, ``running -> failed`` on error.
    Nothing leaves ``done`` or ``failed``.
    """

    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_finished(self) -> bool:
        return self in (TaskStatus.DONE, TaskStatus.FAILED)


@dataclass
class Task:
    """A unit of deferred work for the background agent.

    Attributes:
        id: Unique identifier (UUID hex), stable for the task's lifetime.
        description: Self-contained instructions for the background agent.
        status: Current lifecycle state.
        created_at: ISO 8601 timestamp (UTC).
        completed_at: ISO 8601 timestamp, set on ``done`` or ``failed``.
        result: Agent output, present only when ``done``.
        error: Failure message, present only when ``failed``.
    """

    id: str
    description: str
    status: TaskStatus = TaskStatus.PENDING
    created_at: str = ""
    completed_at: str | None = None
    result: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utc_now_iso()
        self.status = TaskStatus(self.status)

    @property
    def completed_datetime(self) -> datetime | None:
        if self.completed_at is None:
            return None
        return _parse_iso(self.completed_at)

    # -- Serialization ---------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict, omitting unset optional fields."""
        data: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "status": self.status.value,
            "created_at": self.created_at,
        }
        if self.completed_at is not None:
            data["completed_at"] = self.completed_at
        if self.result is not None:
            data["result"] = self.result
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """Deserialize from a dict produced by :meth:`to_dict`.

        Raises ``KeyError`` or ``ValueError`` on malformed records.
        """
        return cls(
            id=str(data["id"]),
            description=str(data["description"]),
            status=TaskStatus(data["status"]),
            created_at=str(data["created_at"]),
            completed_at=data.get("completed_at"),
            result=data.get("result"),
            error=data.get("error"),
        )


def make_task_id() -> str:
    """Generate a new task ID."""
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _parse_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
