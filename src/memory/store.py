"""Weekly memory store backed by markdown files.

One file per ISO calendar week (``data/memory/2026-W07.md``). Each file
starts with a ``# Week <id>`` header followed by timestamped bullet
entries. Files are append-only: entries are never edited or removed.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from src.config import settings

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_WEEK_ID_RE = re.compile(r"^\d{4}-W\d{2}$")


def week_id_for(moment: datetime) -> str:
    """Return the ISO week ID (e.g. ``2026-W07``) containing *moment*."""
    iso = moment.isocalendar()
    return f"{iso.year}-W{iso.week:02d}"


def validate_week_id(week_id: str) -> str:
    """Return *week_id* unchanged, or raise ``ValueError`` if malformed."""
    if not _WEEK_ID_RE.match(week_id):
        msg = f"Invalid week ID {week_id!r} (expected e.g. 2026-W07)"
        raise ValueError(msg)
    return week_id


class MemoryStore:
    """Append-only weekly memory shared by the main and background agents.

    Singleton accessed via ``MemoryStore.get()``. Pass an explicit *root*
    for test isolation (e.g. ``tmp_path / "memory"``).
    """

    _instance: MemoryStore | None = None

    def __init__(self, root: Path | None = None) -> None:
        self._root = root or settings.memory_dir
        if not self._root.exists():
            self._root.mkdir(parents=True, exist_ok=True)
            logger.info("Created memory dir: %s", self._root)

    @classmethod
    def get(cls) -> MemoryStore:
        """Return the shared MemoryStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    @property
    def root(self) -> Path:
        return self._root

    def current_week_id(self, now: datetime | None = None) -> str:
        return week_id_for(now or datetime.now(UTC))

    def _week_path(self, week_id: str) -> Path:
        return self._root / f"{validate_week_id(week_id)}.md"

    # -- Read ------------------------------------------------------------------

    def load_week(self, week_id: str | None = None) -> str:
        """Return a week's file content (current week by default).

        Returns an empty string when the week has no file or it can't be read.
        """
        week_id = week_id or self.current_week_id()
        path = self._week_path(week_id)
        if not path.exists():
            return ""
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read memory week %s: %s", week_id, exc)
            return ""

    def contains(self, entry: str, week_id: str | None = None) -> bool:
        """Check whether *entry* was already appended to the given week."""
        needle = f"] {_flatten(entry)}\n"
        return needle in self.load_week(week_id)

    def list_weeks(self) -> list[str]:
        """Return all week IDs with a memory file, newest first."""
        if not self._root.exists():
            return []
        weeks = [p.stem for p in self._root.glob("*.md") if _WEEK_ID_RE.match(p.stem)]
        return sorted(weeks, reverse=True)

    # -- Write -----------------------------------------------------------------

    def append(self, entry: str, now: datetime | None = None) -> str:
        """Append a timestamped entry to the current week. Creates the file if missing.

        Returns the week ID written to.
        """
        now = now or datetime.now(UTC)
        week_id = self.current_week_id(now)
        path = self._week_path(week_id)

        if not path.exists():
            path.write_text(f"# Week {week_id}\n\n", encoding="utf-8")
            logger.info("Created new week file: %s", week_id)

        timestamp = now.strftime("%Y-%m-%d %H:%M")
        with path.open("a", encoding="utf-8") as fh:
            fh.write(f"- [{timestamp}] {_flatten(entry)}\n")
        logger.debug("Appended to %s: %s", week_id, entry[:80])
        return week_id


def _flatten(entry: str) -> str:
    """Collapse an entry onto one line so each bullet stays a single line."""
    return " ".join(entry.split())
