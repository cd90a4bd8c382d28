"""The main loop: sole consumer of the event bus.

Renders, waits for one event, dispatches it, and starts over. All
conversation state (transcript, notifications, turn state) is mutated here
and only here; ask-tasks talk back exclusively through the bus.
"""

import asyncio
import logging
from typing import Any, Protocol

from ..chat.accumulator import ConversationAccumulator
from ..chat.commands import CommandAction, execute_command, is_command
from ..chat.notifications import NotificationCenter
from ..events.bus import EventBus, EventBusClosed
from ..events.models import (
    EndAnswer,
    Event,
    KeyInput,
    LLMToken,
    MouseInput,
    Notification,
    NotificationEvent,
    NotificationLevel,
    ResizeInput,
    Tick,
    TTSRequest,
)
from ..llm.base import LLMClient
from ..llm.cancellation import CancellationSignal, CancellationToken, TurnState
from ..llm.models import ChatRole
from .handler import handle_key_event

logger = logging.getLogger(__name__)


class ChatView(Protocol):
    """Whatever draws the conversation (the Textual app, or nothing)."""

    def render(self, loop: "MainLoop") -> None: ...

    def on_tick(self) -> None: ...

    def on_mouse(self, event: Any) -> None: ...

    def on_resize(self, width: int, height: int) -> None: ...


class PromptEditor(Protocol):
    """The widget the prompt is typed into."""

    @property
    def text(self) -> str: ...

    def clear(self) -> None: ...

    def load_text(self, text: str) -> None: ...


class TTSPlayer(Protocol):
    def speak(self, text: str, voice: str | None = None) -> None: ...


class NullView:
    """View that draws nothing, for headless use."""

    def render(self, loop: "MainLoop") -> None:
        pass

    def on_tick(self) -> None:
        pass

    def on_mouse(self, event: Any) -> None:
        pass

    def on_resize(self, width: int, height: int) -> None:
        pass


class MainLoop:
    """Dispatches bus events to the accumulator, input handler and notifications.

    At most one ask-task runs at a time: submit_prompt() refuses while a turn
    is streaming, and a turn only ends when its EndAnswer has been consumed.
    """

    def __init__(
        self,
        bus: EventBus,
        llm: LLMClient,
        accumulator: ConversationAccumulator | None = None,
        signal: CancellationSignal | None = None,
        view: ChatView | None = None,
        editor: PromptEditor | None = None,
        tts: TTSPlayer | None = None,
        notifications: NotificationCenter | None = None,
    ) -> None:
        self.bus = bus
        self.llm = llm
        self.accumulator = accumulator if accumulator is not None else ConversationAccumulator()
        self.signal = signal if signal is not None else CancellationSignal()
        self.notifications = notifications if notifications is not None else NotificationCenter()
        self.editor = editor
        self.running = True
        self.turn_state = TurnState.IDLE
        self._view: ChatView = view or NullView()
        self._tts = tts
        self._token: CancellationToken | None = None
        self._ask_task: asyncio.Task[None] | None = None

    @property
    def streaming(self) -> bool:
        return self.turn_state == TurnState.STREAMING

    @property
    def ask_task(self) -> asyncio.Task[None] | None:
        return self._ask_task

    async def run(self) -> None:
        """Process events until quit() is called.

        Raises:
            EventBusClosed: If the bus is closed while the loop still runs
        """
        logger.debug("Main loop started with %s backend", self.llm.name)
        try:
            while True:
                self._view.render(self)
                if not self.running:
                    break
                event = await self.bus.recv()
                self.dispatch(event)
        except EventBusClosed:
            logger.critical("Event bus closed under the running main loop")
            raise
        finally:
            await self.shutdown()
        logger.debug("Main loop stopped")

    def dispatch(self, event: Event) -> None:
        """Apply one event to the conversation state."""
        if isinstance(event, Tick):
            self.notifications.tick()
            self._view.on_tick()
        elif isinstance(event, KeyInput):
            handle_key_event(event, self)
        elif isinstance(event, MouseInput):
            self._view.on_mouse(event.event)
        elif isinstance(event, ResizeInput):
            self._view.on_resize(event.width, event.height)
        elif isinstance(event, LLMToken):
            self._handle_answer(event)
        elif isinstance(event, NotificationEvent):
            self.notifications.push(event.notification)
        elif isinstance(event, TTSRequest):
            self._speak(event)
        else:
            logger.warning("Unhandled event %r", event)

    def _handle_answer(self, event: LLMToken) -> None:
        answer = event.answer
        self.accumulator.handle_answer(answer, self.llm)
        if not isinstance(answer, EndAnswer):
            return

        # Only a stop the ask-task acted on counts as a cancelled turn
        if self._token is not None and self._token.observed:
            self.turn_state = TurnState.CANCELLED
        elif answer.error is not None:
            self.turn_state = TurnState.FAILED
        else:
            self.turn_state = TurnState.COMPLETED
        logger.debug("Turn %s", self.turn_state.value)
        self.signal.reset()
        self._token = None

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO) -> None:
        self.notifications.push(Notification(message, level))

    def submit_prompt(self, text: str) -> bool:
        """Send a prompt to the backend, or run it if it is a chat command.

        Returns:
            True if the prompt was accepted (the editor may be cleared)
        """
        text = text.strip()
        if not text:
            return False

        if is_command(text):
            self.run_command(text)
            return True

        if self.streaming:
            self.notify("Wait for the answer to finish or stop it first", NotificationLevel.WARNING)
            return False

        self.accumulator.add_user_message(text)
        self.llm.append_chat_msg(text, ChatRole.USER)

        self._token = self.signal.begin_turn()
        self.turn_state = TurnState.STREAMING
        self._ask_task = asyncio.create_task(
            self.llm.ask(self.bus, self._token),
            name=f"ask-{self._token.generation}",
        )
        self._ask_task.add_done_callback(self._on_ask_done)
        return True

    def _on_ask_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Ask task failed", exc_info=error)

    def run_command(self, text: str) -> None:
        result = execute_command(text, self.accumulator, self.editor)
        if result.action == CommandAction.QUIT:
            self.quit()
        elif result.action == CommandAction.CLEAR:
            self.new_chat()
        if result.message:
            self.notify(result.message, result.level)

    def stop_stream(self) -> None:
        """Ask the running turn to stop. Its EndAnswer still arrives."""
        if not self.streaming:
            return
        logger.info("Stopping turn %d", self.signal.generation)
        self.signal.cancel()

    def new_chat(self) -> None:
        if self.streaming:
            self.notify("Stop the current answer before starting a new chat", NotificationLevel.WARNING)
            return
        self.llm.clear()
        self.accumulator.clear()
        self.turn_state = TurnState.IDLE
        self.notify("New chat")

    def speak_last_answer(self) -> None:
        answer = self.accumulator.last_answer
        if not answer:
            self.notify("No answer to read out yet", NotificationLevel.WARNING)
            return
        self.bus.send(TTSRequest(answer))

    def _speak(self, request: TTSRequest) -> None:
        if self._tts is None:
            self.notify("Text-to-speech is not available", NotificationLevel.WARNING)
            return
        try:
            self._tts.speak(request.text, request.voice)
        except Exception as e:
            logger.exception("Text-to-speech failed")
            self.notify(f"Text-to-speech failed: {e}", NotificationLevel.ERROR)

    def quit(self) -> None:
        self.running = False
        self.stop_stream()

    async def shutdown(self) -> None:
        """Stop the running ask-task, if any, and wait for it."""
        task = self._ask_task
        if task is None or task.done():
            return
        self.signal.cancel()
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
