"""Authorized-chat security gate."""

import logging

from telegram import Update

from src.config import settings

logger = logging.getLogger(__name__)


def is_allowed(update: Update) -> bool:
    """Check if the update comes from the configured chat.

    Returns False (silently rejected) for every other chat.
    """
    chat = update.effective_chat
    if chat is None:
        return False

    if not settings.telegram_chat_id:
        logger.warning("TELEGRAM_CHAT_ID is not set: rejecting all messages")
        return False

    if chat.id != settings.telegram_chat_id:
        logger.warning("Rejected update from unauthorized chat %s", chat.id)
        return False
    return True
