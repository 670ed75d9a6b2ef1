"""BackgroundWorker: polls the task queue and runs one task at a time."""

from __future__ import annotations

import asyncio
import functools
import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from src.config import settings
from src.tasks.store import DEFAULT_MAX_AGE

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from src.tasks.models import Task
    from src.tasks.store import TaskStore

logger = logging.getLogger(__name__)

NO_RESPONSE = "(no response)"
INTERRUPTED_ERROR = "Interrupted: the bot stopped while this task was running."

_JOB_ID = "background-worker-tick"


class TaskRunner(Protocol):
    """The part of an agent session the worker needs."""

    async def run(self, text: str) -> str: ...


class BackgroundWorker:
    """Drains the task queue through the background agent.

    Each tick looks for the oldest pending task. With nothing to do the
    next tick comes after ``idle_interval`` seconds; after a task the next
    tick comes after the much shorter ``busy_interval`` so a backlog drains
    quickly. Ticks are one-shot APScheduler jobs, so only one tick (and one
    task) is ever in progress.

    Args:
        store: TaskStore holding the queue.
        agent: Background agent; ``run()`` raises on failure.
        deliver: Async callable sending a result text to the owner.
        history_source: Callable ``(max_messages) -> str`` returning the main
            session's recent transcript, read fresh for every task.
        idle_interval: Seconds between polls when the queue is empty.
        busy_interval: Seconds before the next poll after a task. Both
            intervals must be positive.
        history_messages: How many transcript messages to include.
        max_age: Age after which finished tasks are pruned on start.
    """

    def __init__(
        self,
        store: TaskStore,
        agent: TaskRunner,
        deliver: Callable[[str], Awaitable[None]],
        *,
        history_source: Callable[[int], str] | None = None,
        idle_interval: float | None = None,
        busy_interval: float | None = None,
        history_messages: int | None = None,
        max_age: timedelta = DEFAULT_MAX_AGE,
    ) -> None:
        self._store = store
        self._agent = agent
        self._deliver = deliver
        self._history_source = history_source
        self._idle_interval = idle_interval if idle_interval is not None else settings.worker_poll_interval
        self._busy_interval = busy_interval if busy_interval is not None else settings.worker_busy_interval
        if self._idle_interval <= 0 or self._busy_interval <= 0:
            msg = (
                f"Worker intervals must be positive, got idle={self._idle_interval}"
                f" busy={self._busy_interval}"
            )
            raise ValueError(msg)
        self._history_messages = history_messages or settings.history_messages
        self._max_age = max_age
        self._scheduler: AsyncIOScheduler | None = None
        self._running = False
        self._stopped = False
        self._executing = False

    @property
    def store(self) -> TaskStore:
        return self._store

    @property
    def running(self) -> bool:
        return self._running

    @property
    def executing(self) -> bool:
        return self._executing

    # -- Lifecycle -------------------------------------------------------------

    async def start(self) -> None:
        """Prune old tasks, report interrupted ones, and schedule the first tick."""
        if self._running:
            return
        self._running = True
        self._stopped = False

        self._store.prune(self._max_age)
        for task in self._store.fail_interrupted(INTERRUPTED_ERROR):
            await self._deliver_safely(
                f"Task failed: {INTERRUPTED_ERROR}\nTask: {task.description[:200]}"
            )

        self._scheduler = AsyncIOScheduler(event_loop=asyncio.get_running_loop(), timezone=UTC)
        self._scheduler.start()
        self._schedule(0)
        logger.info(
            "Background worker started (poll=%.1fs, busy=%.1fs)",
            self._idle_interval,
            self._busy_interval,
        )

    async def stop(self) -> None:
        """Stop scheduling ticks. A task already running is left to finish."""
        self._running = False
        self._stopped = True
        if self._scheduler is not None:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Background worker stopped")

    def wake(self) -> None:
        """Run the waiting tick now instead of at the end of the poll interval.

        Does nothing while a task is executing: that tick schedules the
        next one itself when it finishes.
        """
        if not self._running or self._executing or self._scheduler is None:
            return
        try:
            self._scheduler.reschedule_job(_JOB_ID, trigger=self._trigger(0))
        except JobLookupError:
            logger.debug("No waiting tick to wake")

    # -- Ticks -----------------------------------------------------------------

    async def tick(self) -> float | None:
        """Run one scheduling step.

        Returns the delay in seconds before the next tick, or None once the
        worker has been stopped.
        """
        if self._stopped:
            return None

        task = self._store.next_pending()
        if task is None:
            return self._idle_interval

        self._store.mark_running(task.id)
        logger.info("Processing task %s: %s", task.id, task.description[:80])

        self._executing = True
        try:
            reply = await self._agent.run(self.build_prompt(task))
        except Exception as exc:
            error = str(exc) or type(exc).__name__
            logger.exception("Task %s failed", task.id)
            text = f"Task failed: {error}"
            record = functools.partial(self._store.fail, task.id, error)
        else:
            text = reply or NO_RESPONSE
            record = functools.partial(self._store.complete, task.id, text)
        finally:
            self._executing = False

        try:
            record()
        except Exception as exc:
            logger.exception("Could not record the outcome of task %s", task.id)
            text = f"Task failed: could not record result: {exc}\n\n{text}"

        await self._deliver_safely(text)
        return self._busy_interval

    def build_prompt(self, task: Task) -> str:
        """Combine recent main-session conversation with the task description."""
        history = ""
        if self._history_source is not None:
            history = self._history_source(self._history_messages)
        if not history:
            return task.description
        return (
            f"## Recent conversation for context:\n{history}\n\n"
            f"## Task to complete:\n{task.description}"
        )

    # -- Internal --------------------------------------------------------------

    async def _run_tick(self) -> None:
        """APScheduler job: run a tick, then schedule the next one."""
        try:
            delay = await self.tick()
        except Exception:
            logger.exception("Background worker tick failed")
            delay = self._idle_interval
        if delay is not None and self._running:
            self._schedule(delay)

    def _schedule(self, delay: float) -> None:
        if self._scheduler is None:
            return
        self._scheduler.add_job(
            self._run_tick,
            trigger=self._trigger(delay),
            id=_JOB_ID,
            misfire_grace_time=None,
            # The running tick adds its successor before its own instance is released.
            max_instances=2,
            replace_existing=True,
        )

    @staticmethod
    def _trigger(delay: float) -> DateTrigger:
        run_at = datetime.now(UTC) + timedelta(seconds=delay)
        return DateTrigger(run_date=run_at, timezone=UTC)

    async def _deliver_safely(self, text: str) -> None:
        try:
            await self._deliver(text)
        except Exception:
            logger.exception("Failed to deliver background result")
