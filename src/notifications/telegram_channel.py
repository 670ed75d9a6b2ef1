"""Telegram implementation of the OutboundChannel protocol."""

from __future__ import annotations

import logging

import telegram
from telegram.constants import ChatAction

from src.bot.chunking import TELEGRAM_MAX_LENGTH, split_message

logger = logging.getLogger(__name__)


class TelegramChannel:
    """Sends replies via the Telegram Bot API.

    Messages go out as plain text: model output often has unbalanced
    Markdown, which Telegram rejects.
    """

    def __init__(self, bot: telegram.Bot, max_length: int = TELEGRAM_MAX_LENGTH) -> None:
        self._bot = bot
        self._max_length = max_length

    @property
    def name(self) -> str:
        return "telegram"

    async def send(self, chat_id: int, message: str) -> int:
        """Send *message* in as many parts as the size limit requires."""
        chunks = split_message(message, self._max_length)
        for chunk in chunks:
            await self._bot.send_message(chat_id=chat_id, text=chunk)
        return len(chunks)

    async def send_presence(self, chat_id: int) -> bool:
        """Send the "typing" chat action. Failures are logged, not raised."""
        try:
            await self._bot.send_chat_action(chat_id=chat_id, action=ChatAction.TYPING)
            return True
        except Exception:
            logger.debug("send_chat_action failed for chat_id=%s", chat_id, exc_info=True)
            return False
