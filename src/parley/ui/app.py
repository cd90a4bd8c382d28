"""Main Textual TUI application.

The app is a thin adapter around the main loop: it forwards the chat keys,
mouse scrolls and resizes onto the event bus, runs the main loop and the
ticker as workers, and implements the ChatView the main loop renders into.
"""

import logging
from functools import partial
from typing import Any

from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from ..app.handler import KEY_HELP
from ..app.loop import MainLoop, TTSPlayer
from ..chat.accumulator import ConversationAccumulator
from ..chat.formatting import DEFAULT_WIDTH, format_markdown
from ..events.bus import EventBus, EventBusClosed
from ..events.models import KeyInput, MouseInput, ResizeInput
from ..events.producers import DEFAULT_TICK_RATE_MS, tick_forever
from ..llm.base import LLMClient
from ..llm.cancellation import TurnState
from .config import MIN_TRANSCRIPT_WIDTH, SPINNER_FRAMES, TRANSCRIPT_CHROME_WIDTH
from .screens import HelpScreen
from .styles import APP_CSS
from .themes import GRUVBOX_DARK
from .widgets import NotificationBar, PromptBar, TranscriptView

logger = logging.getLogger(__name__)


class ChatApp(App):
    """Textual TUI for one conversation with one backend."""

    CSS = APP_CSS
    TITLE = "Parley"
    ENABLE_COMMAND_PALETTE = False

    # Priority bindings so the prompt editor never swallows them; all but the
    # help key only forward the key to the main loop.
    BINDINGS = [
        Binding("ctrl+j", "send_key('ctrl+j')", "Send", priority=True),
        Binding("ctrl+t", "send_key('ctrl+t')", "Stop", priority=True),
        Binding("escape", "send_key('escape')", "Stop", show=False, priority=True),
        Binding("ctrl+n", "send_key('ctrl+n')", "New chat", priority=True),
        Binding("ctrl+p", "send_key('ctrl+p')", "Speak", priority=True),
        Binding("ctrl+q", "send_key('ctrl+q')", "Quit", priority=True),
        Binding("f1", "show_help", "Help", priority=True),
    ]

    def __init__(
        self,
        llm: LLMClient,
        tick_rate_ms: int = DEFAULT_TICK_RATE_MS,
        tts: TTSPlayer | None = None,
    ) -> None:
        super().__init__()
        self._llm = llm
        self._tick_interval = tick_rate_ms / 1000
        self._tts = tts
        self._bus = EventBus()
        self._spinner = 0
        self._width = DEFAULT_WIDTH
        self.main_loop: MainLoop | None = None

    def _get_model_name(self) -> str:
        return getattr(self._llm, "model", None) or self._llm.name

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield TranscriptView(id="transcript")
        yield NotificationBar(id="notifications")
        yield PromptBar(id="prompt-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(GRUVBOX_DARK)
        self.theme = "parley-gruvbox"
        self.sub_title = f"{self._llm.name} | {self._get_model_name()}"

        transcript = self.query_one("#transcript", TranscriptView)
        transcript.border_title = "Chat"
        prompt_bar = self.query_one("#prompt-bar", PromptBar)
        prompt_bar.border_title = "Prompt (ctrl+j to send, f1 for help)"
        prompt_bar.focus_input()

        self._width = self._transcript_width()
        accumulator = ConversationAccumulator(partial(format_markdown, width=self._width))
        self.main_loop = MainLoop(
            bus=self._bus,
            llm=self._llm,
            accumulator=accumulator,
            view=_ViewAdapter(self),
            editor=prompt_bar,
            tts=self._tts,
        )
        self._run_main_loop()
        self._run_ticker()

    def on_unmount(self) -> None:
        self._bus.close()

    @work(exclusive=True, group="main-loop")
    async def _run_main_loop(self) -> None:
        try:
            await self.main_loop.run()
        except EventBusClosed:
            logger.debug("Main loop stopped by closed event bus")
        self.exit()

    @work(exclusive=True, group="ticker")
    async def _run_ticker(self) -> None:
        await tick_forever(self._bus, self._tick_interval)

    # Input forwarding

    def action_send_key(self, key: str) -> None:
        # While the help popup is open a chat key only closes it
        if isinstance(self.screen, HelpScreen):
            self.screen.dismiss(None)
            return
        self._bus.send(KeyInput(key))

    def action_show_help(self) -> None:
        if isinstance(self.screen, HelpScreen):
            self.screen.dismiss(None)
        else:
            self.push_screen(HelpScreen(KEY_HELP))

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self._bus.send(MouseInput(event))

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self._bus.send(MouseInput(event))

    def on_resize(self, event: events.Resize) -> None:
        self._bus.send(ResizeInput(event.size.width, event.size.height))

    # ChatView

    def render_state(self, loop: MainLoop) -> None:
        accumulator = loop.accumulator
        signature = (len(accumulator.formatted_transcript), len(accumulator.partial_answer), accumulator.streaming)
        self.query_one("#transcript", TranscriptView).show(accumulator.renderables(), signature)
        self.query_one("#notifications", NotificationBar).show(loop.notifications.active)
        self._update_status(loop.turn_state)

    def handle_tick(self) -> None:
        self._spinner = (self._spinner + 1) % len(SPINNER_FRAMES)

    def handle_mouse(self, event: Any) -> None:
        transcript = self.query_one("#transcript", TranscriptView)
        if isinstance(event, events.MouseScrollUp):
            transcript.follow = False
        elif isinstance(event, events.MouseScrollDown) and transcript.scroll_y >= transcript.max_scroll_y:
            transcript.follow = True

    def handle_resize(self, width: int, height: int) -> None:
        new_width = self._transcript_width(width)
        if new_width == self._width or self.main_loop is None:
            return
        self._width = new_width
        self.main_loop.accumulator.rerender(partial(format_markdown, width=new_width))
        self.query_one("#transcript", TranscriptView).invalidate()

    def _transcript_width(self, width: int | None = None) -> int:
        width = width if width is not None else self.size.width
        return max(width - TRANSCRIPT_CHROME_WIDTH, MIN_TRANSCRIPT_WIDTH)

    def _update_status(self, state: TurnState) -> None:
        transcript = self.query_one("#transcript", TranscriptView)
        if state == TurnState.STREAMING:
            transcript.border_subtitle = f"{SPINNER_FRAMES[self._spinner]} answering"
        elif state == TurnState.CANCELLED:
            transcript.border_subtitle = "stopped"
        elif state == TurnState.FAILED:
            transcript.border_subtitle = "failed"
        else:
            transcript.border_subtitle = ""


class _ViewAdapter:
    """Maps the ChatView protocol onto ChatApp methods.

    Textual's App already defines render(), on_resize() and friends with
    other meanings, so the main loop talks to the app through this adapter.
    """

    def __init__(self, app: ChatApp) -> None:
        self._app = app

    def render(self, loop: MainLoop) -> None:
        self._app.render_state(loop)

    def on_tick(self) -> None:
        self._app.handle_tick()

    def on_mouse(self, event: Any) -> None:
        self._app.handle_mouse(event)

    def on_resize(self, width: int, height: int) -> None:
        self._app.handle_resize(width, height)


async def run_chat_tui(llm: LLMClient, tick_rate_ms: int = DEFAULT_TICK_RATE_MS) -> None:
    """Run the chat TUI until the user quits."""
    app = ChatApp(llm=llm, tick_rate_ms=tick_rate_ms)
    await app.run_async()
