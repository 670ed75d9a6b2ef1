"""Process lifecycle bookkeeping: uptime and the clean-shutdown record."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


@dataclass
class ShutdownState:
    """What the previous process recorded when it stopped cleanly."""

    signal: str
    uptime_seconds: float
    stopped_at: str = ""

    def describe(self) -> str:
        """Human-readable summary for /status."""
        when = f" at {self.stopped_at}" if self.stopped_at else ""
        return f"{self.signal} after {format_uptime(self.uptime_seconds)}{when}"


def format_uptime(seconds: float) -> str:
    """Format seconds as ``Xh Ym``."""
    total = max(int(seconds), 0)
    hours, rem = divmod(total, 3600)
    return f"{hours}h {rem // 60}m"


def write_shutdown_state(path: Path, signal: str, uptime_seconds: float) -> None:
    """Record the shutdown reason. Failures are logged, never raised."""
    state = {
        "signal": signal,
        "uptime_seconds": round(uptime_seconds, 1),
        "stopped_at": datetime.now(UTC).isoformat(timespec="seconds"),
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(state, indent=2), encoding="utf-8")
    except OSError:
        logger.exception("Failed to write shutdown state to %s", path)
        return
    logger.info("Wrote shutdown state: %s", state)


def read_shutdown_state(path: Path) -> ShutdownState | None:
    """Load the previous shutdown record. Missing or corrupt files give None."""
    if not path.exists():
        return None
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return ShutdownState(
            signal=str(raw["signal"]),
            uptime_seconds=float(raw.get("uptime_seconds", 0)),
            stopped_at=str(raw.get("stopped_at", "")),
        )
    except (OSError, ValueError, KeyError, TypeError) as exc:
        logger.warning("Ignoring unreadable shutdown state %s: %s", path, exc)
        return None


def previous_shutdown_reason(path: Path) -> str:
    """Describe how the previous run ended, or ``"unknown"``."""
    state = read_shutdown_state(path)
    return state.describe() if state else UNKNOWN
