"""Unit tests for chat commands and notifications."""
import pytest
from rich.text import Text

from parley.chat import (
    CommandAction,
    ConversationAccumulator,
    NotificationCenter,
    execute_command,
    is_command,
)
from parley.events.models import (
    DEFAULT_NOTIFICATION_TTL,
    Chunk,
    EndAnswer,
    Notification,
    NotificationLevel,
    StartAnswer,
)


class Editor:
    def __init__(self):
        self.text = ""

    def load_text(self, text):
        self.text = text


@pytest.fixture
def answered():
    """Accumulator holding one prompt and its answer."""
    acc = ConversationAccumulator(Text)
    acc.add_user_message("question")
    for event in (StartAnswer(), Chunk("the answer"), EndAnswer()):
        acc.handle_answer(event)
    return acc


class TestCommands:
    """Tests for execute_command."""

    @pytest.mark.parametrize("text,expected", [(":q", True), ("  :save x", True), ("hello :q", False), ("", False)])
    def test_is_command(self, text, expected):
        assert is_command(text) is expected

    @pytest.mark.parametrize("text", [":q", ":quit"])
    def test_quit(self, text):
        result = execute_command(text, ConversationAccumulator(Text))
        assert result.action == CommandAction.QUIT

    def test_clear(self):
        assert execute_command(":clear", ConversationAccumulator(Text)).action == CommandAction.CLEAR

    def test_open_loads_file_into_editor(self, tmp_path):
        path = tmp_path / "prompt.md"
        path.write_text("Explain SSE", encoding="utf-8")
        editor = Editor()

        result = execute_command(f":o {path}", ConversationAccumulator(Text), editor)

        assert editor.text == "Explain SSE"
        assert result.level == NotificationLevel.INFO

    def test_open_missing_file(self, tmp_path):
        result = execute_command(f":o {tmp_path / 'nope.txt'}", ConversationAccumulator(Text), Editor())
        assert result.level == NotificationLevel.ERROR

    def test_write_last_answer(self, tmp_path, answered):
        path = tmp_path / "answer.md"
        result = execute_command(f":w {path}", answered)

        assert path.read_text(encoding="utf-8") == "the answer"
        assert result.level == NotificationLevel.INFO
        assert str(path) in result.message

    def test_write_without_answer(self, tmp_path):
        result = execute_command(f":w {tmp_path / 'a.md'}", ConversationAccumulator(Text))
        assert result.level == NotificationLevel.WARNING

    def test_save_transcript(self, tmp_path, answered):
        path = tmp_path / "chat.txt"
        execute_command(f":save {path}", answered)
        assert path.read_text(encoding="utf-8") == "👤: question\n\n🤖: the answer\n"

    def test_write_into_missing_directory(self, tmp_path, answered):
        result = execute_command(f":w {tmp_path / 'no' / 'such' / 'dir.md'}", answered)
        assert result.level == NotificationLevel.ERROR

    def test_missing_argument(self, answered):
        result = execute_command(":w", answered)
        assert result.level == NotificationLevel.WARNING
        assert "Usage" in result.message

    def test_unknown_command(self):
        result = execute_command(":frobnicate", ConversationAccumulator(Text))
        assert result.level == NotificationLevel.WARNING
        assert result.action == CommandAction.NONE


class TestNotificationCenter:
    """Tests for notification expiry."""

    def test_default_ttl(self):
        assert Notification("x").ttl == DEFAULT_NOTIFICATION_TTL == 8

    def test_expires_after_ttl_ticks(self):
        center = NotificationCenter()
        notification = Notification("saved", ttl=3)
        center.push(notification)

        assert center.tick() == []
        assert center.tick() == []
        assert center.tick() == [notification]
        assert len(center) == 0

    def test_keeps_order(self):
        center = NotificationCenter()
        center.push(Notification("a"))
        center.push(Notification("b", NotificationLevel.ERROR))
        assert [n.message for n in center.active] == ["a", "b"]

    def test_zero_ttl_never_shown(self):
        center = NotificationCenter()
        center.push(Notification("gone", ttl=0))
        assert center.active == []

    def test_pushed_counts_expired_and_cleared(self):
        center = NotificationCenter()
        center.push(Notification("a", ttl=1))
        center.push(Notification("skipped", ttl=0))
        center.tick()
        center.push(Notification("b"))
        center.clear()

        assert center.pushed == 2
        assert center.active == []
