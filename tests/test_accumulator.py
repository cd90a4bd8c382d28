"""Unit tests for the conversation accumulator and the formatter."""
from rich.text import Text

from parley.chat import ConversationAccumulator, clean_latex, format_markdown
from parley.events.models import Chunk, EndAnswer, StartAnswer
from parley.llm.models import ChatMessage, ChatRole


class TestConversationAccumulator:
    """Tests for the StartAnswer/Chunk/EndAnswer state machine."""

    def test_round_trip(self, scripted_llm):
        """StartAnswer, 'a', 'b', EndAnswer gives one entry format('ab')."""
        llm = scripted_llm()
        acc = ConversationAccumulator()

        for event in (StartAnswer(), Chunk("a"), Chunk("b"), EndAnswer()):
            acc.handle_answer(event, llm)

        assert acc.formatted_transcript == [format_markdown("ab")]
        assert llm.messages == [ChatMessage(role=ChatRole.ASSISTANT, content="ab")]
        assert acc.last_answer == "ab"
        assert acc.partial_answer == ""
        assert not acc.streaming

    def test_partial_rerendered_on_every_chunk(self):
        calls = []

        def formatter(text):
            calls.append(text)
            return Text(text.upper())

        acc = ConversationAccumulator(formatter)
        acc.handle_answer(StartAnswer())
        acc.handle_answer(Chunk("he"))
        acc.handle_answer(Chunk("llo"))

        assert calls == ["he", "hello"]
        assert acc.partial_formatted == Text("HELLO")
        assert acc.renderables() == [Text("HELLO")]

    def test_start_clears_previous_partial(self):
        acc = ConversationAccumulator(Text)
        acc.handle_answer(StartAnswer())
        acc.handle_answer(Chunk("stale"))
        acc.handle_answer(StartAnswer())

        assert acc.partial_answer == ""
        assert acc.streaming

    def test_end_returns_answer(self):
        acc = ConversationAccumulator(Text)
        acc.handle_answer(StartAnswer())
        acc.handle_answer(Chunk("done"))
        assert acc.handle_answer(EndAnswer()) == "done"

    def test_events_outside_answer_ignored(self):
        acc = ConversationAccumulator(Text)
        assert acc.handle_answer(Chunk("x")) is None
        assert acc.handle_answer(EndAnswer()) is None
        assert acc.plain_transcript == []

    def test_error_chunk_kept_in_transcript(self, scripted_llm):
        llm = scripted_llm()
        acc = ConversationAccumulator(Text)
        for event in (StartAnswer(), Chunk("Error: HTTP 500"), EndAnswer()):
            acc.handle_answer(event, llm)

        assert acc.plain_transcript == ["🤖: Error: HTTP 500"]

    def test_user_message_and_plain_text(self):
        acc = ConversationAccumulator(Text)
        acc.add_user_message("Hi")
        for event in (StartAnswer(), Chunk("Hello"), EndAnswer()):
            acc.handle_answer(event)

        assert acc.plain_transcript == ["👤: Hi", "🤖: Hello"]
        assert acc.plain_text() == "👤: Hi\n\n🤖: Hello"
        assert len(acc.renderables()) == 2

    def test_rerender_uses_new_formatter(self):
        acc = ConversationAccumulator(Text)
        acc.add_user_message("q")
        for event in (StartAnswer(), Chunk("answer"), EndAnswer()):
            acc.handle_answer(event)

        acc.rerender(lambda text: Text(f"<{text}>"))

        assert acc.formatted_transcript[1] == Text("<answer>")
        assert acc.formatted_transcript[0].plain == "👤: q"

    def test_clear(self):
        acc = ConversationAccumulator(Text)
        acc.add_user_message("q")
        acc.handle_answer(StartAnswer())
        acc.clear()

        assert acc.plain_transcript == []
        assert acc.renderables() == []
        assert acc.last_answer is None


class TestFormatting:
    """Tests for the markdown formatter."""

    def test_markdown_styles_applied(self):
        text = format_markdown("some **bold** words")
        assert "bold" in text.plain
        assert "**" not in text.plain
        assert text.spans

    def test_deterministic(self):
        assert format_markdown("# Title\n\n- item") == format_markdown("# Title\n\n- item")

    def test_empty(self):
        assert format_markdown("") == Text("")

    def test_clean_latex(self):
        assert clean_latex(r"\(\frac{a}{b} \times 2\)") == "(a)/(b) x 2"
