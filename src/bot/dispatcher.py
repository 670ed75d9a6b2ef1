"""MessageDispatcher: serializes inbound messages through the main agent."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from src.config import settings

if TYPE_CHECKING:
    from src.notifications.channels import OutboundChannel

logger = logging.getLogger(__name__)


class Prompter(Protocol):
    """Anything that turns a user message into reply text without raising."""

    async def prompt(self, text: str) -> str: ...


@dataclass
class QueuedMessage:
    """An inbound message waiting for its turn."""

    chat_id: int
    text: str


class MessageDispatcher:
    """FIFO queue in front of the main agent.

    Only one prompt is in flight at a time and messages are answered in
    arrival order. Messages that arrive while a prompt is running wait in
    the queue; the running drain loop picks them up.

    Args:
        agent: The main session handle (or any ``Prompter``).
        channel: Outbound channel for replies and the typing indicator.
        presence_interval: Seconds between typing indicators. Telegram
            clears the indicator after about five seconds.
    """

    def __init__(
        self,
        agent: Prompter,
        channel: OutboundChannel,
        *,
        presence_interval: float | None = None,
    ) -> None:
        self._agent = agent
        self._channel = channel
        self._presence_interval = presence_interval or settings.typing_interval
        self._queue: deque[QueuedMessage] = deque()
        self._processing = False
        self._stopped = False
        self._drain_task: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        """Messages waiting behind the one being processed."""
        return len(self._queue)

    @property
    def processing(self) -> bool:
        return self._processing

    def enqueue(self, chat_id: int, text: str) -> None:
        """Queue a message and start draining if idle. Must be called on the event loop."""
        if self._stopped:
            logger.warning("Dispatcher stopped, dropping message: %s", text[:80])
            return

        self._queue.append(QueuedMessage(chat_id=chat_id, text=text))
        if self._processing:
            logger.info("Queued (%d pending)", len(self._queue))
            return

        self._processing = True
        self._drain_task = asyncio.create_task(self._drain())

    async def wait_idle(self) -> None:
        """Wait until the queue has been fully drained."""
        while self._drain_task is not None and not self._drain_task.done():
            await self._drain_task

    def stop(self) -> None:
        """Stop starting new prompts. The one in flight is allowed to finish."""
        self._stopped = True
        if self._queue:
            logger.info("Dispatcher stopping with %d unprocessed message(s)", len(self._queue))

    # -- Internal --------------------------------------------------------------

    async def _drain(self) -> None:
        try:
            while self._queue and not self._stopped:
                item = self._queue.popleft()
                await self._process(item)
        finally:
            self._processing = False

    async def _process(self, item: QueuedMessage) -> None:
        """Prompt the agent with one message and deliver the reply."""
        start = time.monotonic()
        preview = item.text[:100] + ("..." if len(item.text) > 100 else "")
        logger.info("Message: %s", preview)

        presence = asyncio.create_task(self._presence_loop(item.chat_id))
        try:
            response = await self._agent.prompt(item.text)
            presence.cancel()
            parts = await self._channel.send(item.chat_id, response)
            logger.info(
                "Replied (%.1fs, %d chars, %d msg(s))",
                time.monotonic() - start,
                len(response),
                parts,
            )
        except Exception as exc:
            logger.exception("Failed to answer message")
            with contextlib.suppress(Exception):
                await self._channel.send(item.chat_id, f"Error: {exc}")
        finally:
            presence.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await presence

    async def _presence_loop(self, chat_id: int) -> None:
        while True:
            with contextlib.suppress(Exception):
                await self._channel.send_presence(chat_id)
            await asyncio.sleep(self._presence_interval)
