"""Custom widgets for the chat TUI."""

from rich.console import Group
from rich.text import Text
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Label, Static, TextArea

from ..events.models import Notification
from .config import LEVEL_STYLES, MAX_VISIBLE_NOTIFICATIONS, PROMPT_HISTORY_MAX_SIZE


class TranscriptView(VerticalScroll):
    """Scrollable transcript of the conversation.

    Follows the bottom while an answer streams, unless the user scrolled
    up to read something.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.follow = True
        self._signature: tuple[int, int, bool] | None = None

    def compose(self):
        yield Static(id="transcript-body")

    def show(self, items: list[Text], signature: tuple[int, int, bool]) -> None:
        """Display the transcript if it changed since the last call."""
        if signature == self._signature:
            return
        self._signature = signature
        self.query_one("#transcript-body", Static).update(Group(*items))
        if self.follow:
            self.scroll_end(animate=False)

    def invalidate(self) -> None:
        self._signature = None


class NotificationBar(Static):
    """Most recent notifications, newest last."""

    def show(self, notifications: list[Notification]) -> None:
        visible = notifications[-MAX_VISIBLE_NOTIFICATIONS:]
        self.display = bool(visible)
        if not visible:
            self.update("")
            return
        text = Text()
        for i, notification in enumerate(visible):
            if i:
                text.append("\n")
            text.append(notification.message, style=LEVEL_STYLES[notification.level])
        self.update(text)


class PromptBar(Horizontal):
    """Prompt editor with a history of sent prompts.

    Implements the PromptEditor protocol of the main loop: submitting is
    driven by the main loop through its key bindings, the bar only keeps
    the text and the history.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        yield Label("👤", id="prompt-label")
        text_area = TextArea(id="prompt-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area

    def on_mount(self) -> None:
        text_area = self.query_one("#prompt-input", TextArea)
        text_area.highlight_cursor_line = False
        text_area.focus()

    @property
    def text(self) -> str:
        return self.query_one("#prompt-input", TextArea).text

    def clear(self) -> None:
        """Empty the editor, remembering what was in it."""
        value = self.text.strip()
        if value and (not self._history or self._history[-1] != value):
            self._history.append(value)
            del self._history[:-PROMPT_HISTORY_MAX_SIZE]
        self._history_index = -1
        self.query_one("#prompt-input", TextArea).clear()

    def load_text(self, text: str) -> None:
        self.query_one("#prompt-input", TextArea).load_text(text)

    def focus_input(self) -> None:
        self.query_one("#prompt-input", TextArea).focus()

    def on_key(self, event) -> None:
        if event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        return self.query_one("#prompt-input", TextArea).cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#prompt-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#prompt-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.load_text("")
                return
        text_area.load_text(self._history[self._history_index])
