"""Tests for the task data model."""

from datetime import UTC, datetime

import pytest

from src.tasks.models import Task, TaskStatus, make_task_id


class TestTaskStatus:
    def test_finished_states(self):
        assert TaskStatus.DONE.is_finished
        assert TaskStatus.FAILED.is_finished

    def test_open_states(self):
        assert not TaskStatus.PENDING.is_finished
        assert not TaskStatus.RUNNING.is_finished

    def test_string_values(self):
        assert TaskStatus("pending") is TaskStatus.PENDING
        assert str(TaskStatus.RUNNING) == "running"


class TestTask:
    def test_defaults(self):
        task = Task(id="abc", description="Summarize notes")
        assert task.status == TaskStatus.PENDING
        assert task.created_at
        assert task.completed_at is None
        assert task.result is None
        assert task.error is None

    def test_status_coerced_from_string(self):
        task = Task(id="abc", description="x", status="done")
        assert task.status is TaskStatus.DONE

    def test_invalid_status_rejected(self):
        with pytest.raises(ValueError):
            Task(id="abc", description="x", status="paused")

    def test_completed_datetime_parses_iso(self):
        task = Task(id="abc", description="x", completed_at="2026-02-10T12:00:00+00:00")
        assert task.completed_datetime == datetime(2026, 2, 10, 12, 0, tzinfo=UTC)

    def test_completed_datetime_assumes_utc_for_naive(self):
        task = Task(id="abc", description="x", completed_at="2026-02-10T12:00:00")
        assert task.completed_datetime.tzinfo == UTC

    def test_completed_datetime_none_when_unset(self):
        assert Task(id="abc", description="x").completed_datetime is None


class TestSerialization:
    def test_to_dict_omits_unset_fields(self):
        task = Task(id="abc", description="x", created_at="2026-02-10T12:00:00+00:00")
        assert task.to_dict() == {
            "id": "abc",
            "description": "x",
            "status": "pending",
            "created_at": "2026-02-10T12:00:00+00:00",
        }

    def test_to_dict_includes_result(self):
        task = Task(
            id="abc",
            description="x",
            status=TaskStatus.DONE,
            completed_at="2026-02-10T13:00:00+00:00",
            result="Summary: ...",
        )
        data = task.to_dict()
        assert data["status"] == "done"
        assert data["result"] == "Summary: ..."
        assert data["completed_at"] == "2026-02-10T13:00:00+00:00"
        assert "error" not in data

    def test_from_dict_restores_fields(self):
        task = Task.from_dict({
            "id": "abc",
            "description": "x",
            "status": "failed",
            "created_at": "2026-02-10T12:00:00+00:00",
            "completed_at": "2026-02-10T13:00:00+00:00",
            "error": "boom",
        })
        assert task.status is TaskStatus.FAILED
        assert task.error == "boom"
        assert task.result is None

    def test_from_dict_missing_field_raises(self):
        with pytest.raises(KeyError):
            Task.from_dict({"id": "abc", "status": "pending", "created_at": "x"})


def test_task_ids_are_unique():
    ids = {make_task_id() for _ in range(100)}
    assert len(ids) == 100
