"""Tests for the shutdown-state record and uptime formatting."""

import json

from src.bot.lifecycle import (
    format_uptime,
    previous_shutdown_reason,
    read_shutdown_state,
    write_shutdown_state,
)


def test_format_uptime() -> None:
    assert format_uptime(0) == "0h 0m"
    assert format_uptime(59) == "0h 0m"
    assert format_uptime(3 * 3600 + 25 * 60 + 10) == "3h 25m"
    assert format_uptime(-5) == "0h 0m"


def test_write_then_read(tmp_path) -> None:
    path = tmp_path / "state.json"
    write_shutdown_state(path, "SIGTERM", 3725.44)

    raw = json.loads(path.read_text())
    assert raw["signal"] == "SIGTERM"
    assert raw["uptime_seconds"] == 3725.4
    assert raw["stopped_at"]

    state = read_shutdown_state(path)
    assert state.signal == "SIGTERM"
    assert state.uptime_seconds == 3725.4


def test_write_creates_parent_dir(tmp_path) -> None:
    path = tmp_path / "data" / "state.json"
    write_shutdown_state(path, "SIGINT", 1.0)
    assert path.exists()


def test_write_failure_is_logged_not_raised(tmp_path, caplog) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory")
    write_shutdown_state(blocker / "state.json", "SIGINT", 1.0)
    assert "Failed to write shutdown state" in caplog.text


def test_previous_reason_describes_state(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text(json.dumps({
        "signal": "SIGINT",
        "uptime_seconds": 7260,
        "stopped_at": "2026-02-11T09:30:00+00:00",
    }))
    assert previous_shutdown_reason(path) == "SIGINT after 2h 1m at 2026-02-11T09:30:00+00:00"


def test_previous_reason_missing_file(tmp_path) -> None:
    assert previous_shutdown_reason(tmp_path / "state.json") == "unknown"


def test_previous_reason_corrupt_file(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{oops")
    assert previous_shutdown_reason(path) == "unknown"


def test_previous_reason_missing_signal(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"uptime_seconds": 5}))
    assert previous_shutdown_reason(path) == "unknown"
