"""Conversation/answer accumulator.

Hides how streamed fragments become a durable transcript. It is a three-state
machine driven only by AnswerEvents (StartAnswer, Chunk, EndAnswer), so it
knows nothing about networking or backends beyond appending the finished
answer to the active client's context.
"""

import logging
from collections.abc import Callable

from rich.text import Text

from ..events.models import AnswerEvent, Chunk, EndAnswer, StartAnswer
from ..llm.base import LLMClient
from ..llm.models import ChatRole
from .formatting import format_markdown, format_user_prompt

logger = logging.getLogger(__name__)

Formatter = Callable[[str], Text]

USER_PREFIX = "👤: "
ASSISTANT_PREFIX = "🤖: "


class ConversationAccumulator:
    """Transcript of one conversation plus the answer being streamed.

    Owned by the main loop; nothing else may mutate it.

    Attributes:
        plain_transcript: One prefixed plain-text line per prompt and answer
        formatted_transcript: Styled rendering of the same entries
        partial_answer: Text of the in-flight answer
        partial_formatted: format(partial_answer), refreshed on every Chunk
    """

    def __init__(self, formatter: Formatter = format_markdown) -> None:
        self._format = formatter
        self._entries: list[tuple[ChatRole, str]] = []
        self._last_answer: str | None = None
        self.plain_transcript: list[str] = []
        self.formatted_transcript: list[Text] = []
        self.partial_answer = ""
        self.partial_formatted = Text("")
        self.streaming = False

    @property
    def last_answer(self) -> str | None:
        """The most recent finished answer, if any."""
        return self._last_answer

    def add_user_message(self, text: str) -> None:
        self._entries.append((ChatRole.USER, text))
        self.plain_transcript.append(f"{USER_PREFIX}{text}")
        self.formatted_transcript.append(format_user_prompt(text))

    def handle_answer(self, event: AnswerEvent, llm: LLMClient | None = None) -> str | None:
        """Apply one AnswerEvent.

        Args:
            event: StartAnswer, Chunk or EndAnswer
            llm: Client whose context receives the finished answer

        Returns:
            The finished answer on EndAnswer, otherwise None
        """
        if isinstance(event, StartAnswer):
            if self.streaming:
                logger.warning("StartAnswer while an answer is still open, discarding %d chars", len(self.partial_answer))
            self._reset_partial()
            self.streaming = True
            return None

        if isinstance(event, Chunk):
            if not self.streaming:
                logger.warning("Chunk outside of an answer, ignoring")
                return None
            self.partial_answer += event.text
            self.partial_formatted = self._format(self.partial_answer)
            return None

        if isinstance(event, EndAnswer):
            if not self.streaming:
                logger.warning("EndAnswer outside of an answer, ignoring")
                return None
            answer = self.partial_answer
            self._entries.append((ChatRole.ASSISTANT, answer))
            self.plain_transcript.append(f"{ASSISTANT_PREFIX}{answer}")
            self.formatted_transcript.append(self.partial_formatted)
            if llm is not None:
                llm.append_chat_msg(answer, ChatRole.ASSISTANT)
            self._last_answer = answer
            self._reset_partial()
            return answer

        raise TypeError(f"Not an answer event: {event!r}")

    def renderables(self) -> list[Text]:
        """Everything to display, in order, including the in-flight answer."""
        items = list(self.formatted_transcript)
        if self.streaming:
            items.append(self.partial_formatted)
        return items

    def rerender(self, formatter: Formatter | None = None) -> None:
        """Format the whole transcript again, e.g. after the terminal width changed."""
        if formatter is not None:
            self._format = formatter
        self.formatted_transcript = [
            format_user_prompt(text) if role == ChatRole.USER else self._format(text)
            for role, text in self._entries
        ]
        if self.streaming:
            self.partial_formatted = self._format(self.partial_answer)

    def plain_text(self) -> str:
        """The plain transcript as one string, entries separated by blank lines."""
        return "\n\n".join(self.plain_transcript)

    def clear(self) -> None:
        self._entries = []
        self._last_answer = None
        self.plain_transcript = []
        self.formatted_transcript = []
        self._reset_partial()

    def _reset_partial(self) -> None:
        self.partial_answer = ""
        self.partial_formatted = Text("")
        self.streaming = False
