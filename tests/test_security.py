"""Tests for the authorized-chat gate."""

from unittest.mock import MagicMock, patch

from src.bot.telegram.security import is_allowed


def _update(chat_id: int | None) -> MagicMock:
    update = MagicMock()
    update.effective_chat = None if chat_id is None else MagicMock(id=chat_id)
    return update


def test_configured_chat_allowed() -> None:
    with patch("src.bot.telegram.security.settings.telegram_chat_id", 42):
        assert is_allowed(_update(42))


def test_other_chat_rejected(caplog) -> None:
    with patch("src.bot.telegram.security.settings.telegram_chat_id", 42):
        assert not is_allowed(_update(99))
    assert "unauthorized chat 99" in caplog.text


def test_missing_chat_rejected() -> None:
    with patch("src.bot.telegram.security.settings.telegram_chat_id", 42):
        assert not is_allowed(_update(None))


def test_unset_chat_id_rejects_everything() -> None:
    with patch("src.bot.telegram.security.settings.telegram_chat_id", 0):
        assert not is_allowed(_update(0))
