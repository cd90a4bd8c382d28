import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Protocol

import httpx

from ..events.models import (
    Chunk,
    EndAnswer,
    Event,
    LLMToken,
    Notification,
    NotificationEvent,
    NotificationLevel,
    StartAnswer,
)
from .cancellation import Cancellable
from .framing import DoneFrame, Frame, FrameError, JSONFrame, NDJSONDecoder, SSEDecoder
from .models import DEFAULT_SYSTEM_PROMPT, ChatMessage, ChatRole

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 300.0


class EventSink(Protocol):
    """Where an ask-task delivers its events (normally the EventBus)."""

    def send(self, event: Event) -> None: ...


class StreamEnded(Exception):
    """Raised inside a stream handler when the server sent its end marker."""


def describe_error(error: BaseException) -> str:
    """Turn a transport or decoding error into a one-line message for the chat."""
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        detail = ""
        try:
            detail = response.text.strip()
        except httpx.ResponseNotRead:
            pass
        message = f"Error: HTTP {response.status_code} {response.reason_phrase} from {error.request.url}"
        if detail:
            message += f": {detail[:300]}"
        return message
    if isinstance(error, httpx.TimeoutException):
        return f"Error: request timed out ({type(error).__name__})"
    if isinstance(error, httpx.HTTPError):
        return f"Error: {type(error).__name__}: {error}"
    return f"Error: {error}"


class LLMClient(ABC):
    """Abstract base class for LLM backend clients.

    This module hides the design decision of which LLM backend is active.
    Implementations must handle backend-specific details like:
    - Request body and authentication
    - Incremental decoding of the backend's wire format
    - Mapping of the decoded values to answer text

    Every client owns the ordered list of chat messages that forms the
    context of the next ask(). Callers must not run two asks on the same
    client at once, nor mutate its messages while an ask is in flight.

    Supports async context manager protocol for proper resource cleanup:
        async with client:
            await client.ask(bus, token)
        # Automatically cleaned up
    """

    name: ClassVar[str] = "llm"

    def __init__(self, system_prompt: str | None = DEFAULT_SYSTEM_PROMPT) -> None:
        self._system_prompt = system_prompt
        self._messages: list[ChatMessage] = []

    @property
    def messages(self) -> list[ChatMessage]:
        """A copy of the accumulated chat context."""
        return list(self._messages)

    @property
    def system_prompt(self) -> str | None:
        return self._system_prompt

    def append_chat_msg(self, msg: str, role: ChatRole | str) -> None:
        """Append one message to the context of the next ask."""
        self._messages.append(ChatMessage(role=ChatRole(role), content=msg))

    def clear(self) -> None:
        """Forget the whole conversation."""
        self._messages = []

    def conversation(self) -> list[ChatMessage]:
        """Messages to send: the system prompt followed by the chat context."""
        if not self._system_prompt:
            return list(self._messages)
        return [ChatMessage(role=ChatRole.SYSTEM, content=self._system_prompt), *self._messages]

    async def ask(self, event_sink: EventSink, cancel: Cancellable) -> None:
        """Run one streaming exchange and report it through ``event_sink``.

        Emits exactly one StartAnswer, zero or more Chunk and exactly one
        EndAnswer, whatever happens. Network, HTTP and decoding errors are
        reported as a Chunk carrying the error text (followed by an error
        notification after EndAnswer) and never raised.

        Args:
            event_sink: Receiver of the LLMToken events (usually the EventBus)
            cancel: Polled between network reads; when it reports cancelled
                the exchange stops and EndAnswer is emitted
        """
        error: str | None = None
        event_sink.send(LLMToken(StartAnswer()))
        try:
            await self._stream_answer(event_sink, cancel)
        except asyncio.CancelledError:
            logger.info("%s ask task cancelled", self.name)
            raise
        except httpx.HTTPError as e:
            logger.warning("%s request failed: %s", self.name, e)
            error = describe_error(e)
        except Exception as e:
            logger.exception("%s stream error", self.name)
            error = describe_error(e)
        finally:
            if error is not None:
                event_sink.send(LLMToken(Chunk(error)))
            event_sink.send(LLMToken(EndAnswer(error)))

        if error is not None:
            event_sink.send(NotificationEvent(Notification(error, NotificationLevel.ERROR)))

    @abstractmethod
    async def _stream_answer(self, event_sink: EventSink, cancel: Cancellable) -> None:
        """Perform the request and send one Chunk per piece of answer text.

        Must return as soon as ``cancel.cancelled`` is observed, without
        forwarding anything else. StartAnswer and EndAnswer are handled by
        ask().
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "LLMClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise


class HTTPStreamingClient(LLMClient):
    """Base for backends that stream their answer over one HTTP POST.

    Subclasses provide the URL, the request body, the decoder for the
    backend's framing and the mapping from decoded JSON to answer text.
    The read loop, cancellation checks and error reporting live here.
    """

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        system_prompt: str | None = DEFAULT_SYSTEM_PROMPT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float | None = DEFAULT_READ_TIMEOUT,
        **client_kwargs: Any
    ):
        """Initialize the HTTP client.

        Args:
            url: Full endpoint URL the chat request is POSTed to
            api_key: Optional bearer token
            system_prompt: Prepended to every request (None disables it)
            connect_timeout: Seconds to wait for the connection
            read_timeout: Seconds to wait for each read (None waits forever)
            **client_kwargs: Additional kwargs for httpx.AsyncClient
        """
        super().__init__(system_prompt=system_prompt)
        self._url = url
        self._api_key = api_key
        timeout = httpx.Timeout(connect=connect_timeout, read=read_timeout, write=connect_timeout, pool=connect_timeout)
        self._client = httpx.AsyncClient(timeout=timeout, **client_kwargs)

    @property
    def url(self) -> str:
        return self._url

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    @abstractmethod
    def _build_body(self) -> dict[str, Any]:
        """JSON body of the chat request."""

    @abstractmethod
    def _make_decoder(self) -> SSEDecoder | NDJSONDecoder:
        """A fresh decoder for one response."""

    @abstractmethod
    def _extract_text(self, data: Any) -> str | None:
        """Answer text carried by one decoded value, or None for nothing.

        Raises:
            StreamEnded: If the value marks the end of the answer
        """

    async def _stream_answer(self, event_sink: EventSink, cancel: Cancellable) -> None:
        if cancel.cancelled:
            logger.info("%s ask cancelled before the request was sent", self.name)
            return

        decoder = self._make_decoder()
        request = self._client.build_request("POST", self._url, headers=self._headers(), json=self._build_body())
        logger.debug("%s POST %s (%d messages)", self.name, self._url, len(self._messages))

        response = await self._client.send(request, stream=True)
        try:
            if response.is_error:
                await response.aread()
                response.raise_for_status()

            async for data in response.aiter_bytes():
                if cancel.cancelled:
                    logger.info("%s stream cancelled", self.name)
                    decoder.reset()
                    return
                if self._forward(decoder.feed(data), event_sink, cancel):
                    return

            if not cancel.cancelled:
                self._forward(decoder.flush(), event_sink, cancel)
        finally:
            await response.aclose()

    def _forward(self, frames: list[Frame], event_sink: EventSink, cancel: Cancellable) -> bool:
        """Send the text of decoded frames. Returns True when the stream is over."""
        for frame in frames:
            if cancel.cancelled:
                logger.info("%s stream cancelled, dropping %d decoded frame(s)", self.name, len(frames))
                return True
            if isinstance(frame, DoneFrame):
                return True
            if isinstance(frame, FrameError):
                logger.warning("%s: %s", self.name, frame.message)
                event_sink.send(LLMToken(Chunk(f"Error: {frame.message}")))
                continue
            if isinstance(frame, JSONFrame):
                try:
                    text = self._extract_text(frame.data)
                except StreamEnded:
                    return True
                if text is not None:
                    event_sink.send(LLMToken(Chunk(text)))
        return False

    async def close(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()
