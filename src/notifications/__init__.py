"""Outbound delivery: channel protocol and Telegram implementation."""

from src.notifications.channels import OutboundChannel
from src.notifications.telegram_channel import TelegramChannel

__all__ = ["OutboundChannel", "TelegramChannel"]
