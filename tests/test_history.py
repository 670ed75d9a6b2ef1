"""Tests for the conversation transcript."""

from src.agent.history import ConversationHistory


def test_add_and_window() -> None:
    history = ConversationHistory(window_size=3)
    for i in range(5):
        history.add("user", f"m{i}")
    assert [m.content for m in history.messages] == ["m2", "m3", "m4"]


def test_clear_returns_count() -> None:
    history = ConversationHistory(window_size=10)
    history.add("user", "a")
    history.add("assistant", "b")
    assert history.clear() == 2
    assert history.messages == []


def test_pop() -> None:
    history = ConversationHistory(window_size=10)
    assert history.pop() is None
    history.add("user", "a")
    assert history.pop().content == "a"
    assert history.messages == []


def test_api_messages_start_with_user() -> None:
    history = ConversationHistory(window_size=10)
    history.add("assistant", "orphan")
    history.add("user", "hi")
    history.add("assistant", "hello")
    assert history.to_api_messages() == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ]


def test_recent_transcript_labels_roles() -> None:
    history = ConversationHistory(window_size=10)
    history.add("user", "Book a table")
    history.add("assistant", "Done")
    assert history.recent_transcript() == "User: Book a table\n\nAssistant: Done"


def test_recent_transcript_is_bounded() -> None:
    history = ConversationHistory(window_size=50)
    for i in range(30):
        history.add("user", f"m{i}")
    transcript = history.recent_transcript(max_messages=2)
    assert transcript == "User: m28\n\nUser: m29"


def test_recent_transcript_empty() -> None:
    history = ConversationHistory(window_size=10)
    assert history.recent_transcript() == ""
    history.add("user", "a")
    assert history.recent_transcript(0) == ""
