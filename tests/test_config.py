"""Tests for Settings configuration model."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from src.config import Settings


class TestMissingRequired:
    def test_all_missing(self):
        s = Settings()
        assert s.missing_required() == [
            "TELEGRAM_BOT_TOKEN",
            "TELEGRAM_CHAT_ID",
            "ANTHROPIC_API_KEY",
        ]

    def test_all_present(self):
        s = Settings(telegram_bot_token="t", telegram_chat_id=42, anthropic_api_key="k")
        assert s.missing_required() == []

    def test_partial(self):
        s = Settings(telegram_bot_token="t", anthropic_api_key="k")
        assert s.missing_required() == ["TELEGRAM_CHAT_ID"]


class TestPaths:
    def test_derived_from_data_dir(self):
        s = Settings(data_dir=Path("/srv/pigeon"))
        assert s.queue_path == Path("/srv/pigeon/queue.json")
        assert s.memory_dir == Path("/srv/pigeon/memory")
        assert s.state_path == Path("/srv/pigeon/state.json")


class TestDefaults:
    def test_worker_and_dispatcher_defaults(self):
        s = Settings()
        assert s.worker_poll_interval == 5.0
        assert s.worker_busy_interval == 0.1
        assert s.task_max_age_days == 7
        assert s.typing_interval == 4.0
        assert s.history_messages == 20

    def test_environment_ignored_under_pytest(self, monkeypatch):
        monkeypatch.setenv("CLAUDE_MODEL", "opus")
        assert Settings().claude_model == "sonnet"

    def test_workspace_defaults_to_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert Settings().workspace.resolve() == tmp_path.resolve()
        assert Settings(workspace_dir=Path("/srv/work")).workspace == Path("/srv/work")


class TestValidation:
    @pytest.mark.parametrize("field", ["worker_poll_interval", "worker_busy_interval"])
    def test_worker_intervals_must_be_positive(self, field):
        with pytest.raises(ValidationError, match=field):
            Settings(**{field: 0})
