"""Google Gemini backend client.

Gemini is reachable two ways:
- The OpenAI-compatible endpoint (any URL containing "openai"), which
  streams SSE exactly like ChatGPT
- The native generateContent API through the official Google GenAI SDK
  (https://github.com/googleapis/python-genai). That call is not streamed:
  the whole answer is fetched, then replayed as fixed-size chunks with a
  short pause between them so consumers see the same Chunk sequence as for
  a real stream.
"""

import asyncio
import logging
from typing import Any

from google import genai
from google.genai import types

from ...events.models import Chunk, LLMToken
from ..base import EventSink, HTTPStreamingClient
from ..cancellation import Cancellable
from ..framing import SSEDecoder
from ..models import ChatMessage, ChatRole
from .chatgpt import extract_delta_content

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
NATIVE_BASE_URL = "https://generativelanguage.googleapis.com/"
OPENAI_COMPATIBLE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions"

DEFAULT_CHUNK_SIZE = 5  # characters
DEFAULT_CHUNK_DELAY = 0.01  # seconds

UNPARSABLE_RESPONSE = "Error: Unable to parse Gemini response"


def segment_text(text: str, size: int) -> list[str]:
    """Cut ``text`` into pieces of ``size`` characters (the last may be shorter)."""
    if size < 1:
        raise ValueError("Chunk size must be at least 1")
    return [text[i:i + size] for i in range(0, len(text), size)]


def is_openai_compatible(url: str | None) -> bool:
    return bool(url) and "openai" in url


class GeminiClient(HTTPStreamingClient):
    """Google Gemini backend client.

    Hidden design decisions:
    - Choice between the OpenAI-compatible stream and the native API,
      made once from the configured URL
    - Conversion of chat messages to Gemini contents (system prompt as
      system_instruction, "assistant" as "model", consecutive messages of
      one role merged)
    - Simulated streaming of the native, non-streamed answer
    """

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        url: str | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_delay: float = DEFAULT_CHUNK_DELAY,
        genai_client: Any | None = None,
        **kwargs: Any
    ):
        """Initialize Gemini client.

        Args:
            api_key: Google AI API key
            model: Model to request
            url: OpenAI-compatible endpoint, or the native API base URL
                (None uses the SDK default)
            chunk_size: Characters per simulated chunk (native API only)
            chunk_delay: Pause between simulated chunks in seconds
            genai_client: Pre-built google.genai.Client (native API only)
            **kwargs: Timeouts, system prompt and httpx.AsyncClient kwargs
        """
        self._openai_compatible = is_openai_compatible(url)
        super().__init__(url=url or NATIVE_BASE_URL, api_key=api_key, **kwargs)
        self._model = model
        self._chunk_size = chunk_size
        self._chunk_delay = chunk_delay

        self._genai = genai_client
        self._owns_genai = genai_client is None and not self._openai_compatible
        if self._owns_genai:
            http_options = types.HttpOptions(base_url=url) if url else None
            self._genai = genai.Client(api_key=api_key, http_options=http_options)

    @property
    def model(self) -> str:
        """Get the model name."""
        return self._model

    @property
    def openai_compatible(self) -> bool:
        return self._openai_compatible

    # OpenAI-compatible path

    def _build_body(self) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": [msg.to_wire() for msg in self.conversation()],
            "stream": True,
        }

    def _make_decoder(self) -> SSEDecoder:
        return SSEDecoder()

    def _extract_text(self, data: Any) -> str | None:
        return extract_delta_content(data, null_as_newline=True)

    # Native path

    def _convert_messages(self, messages: list[ChatMessage]) -> tuple[str | None, list[types.Content]]:
        """Convert ChatMessage list to Gemini format.

        Args:
            messages: List of chat messages

        Returns:
            Tuple of (system_instruction, contents)
        """
        system_parts: list[str] = []
        contents: list[types.Content] = []

        for msg in messages:
            if msg.role == ChatRole.SYSTEM:
                system_parts.append(msg.content)
                continue

            role = "model" if msg.role == ChatRole.ASSISTANT else "user"
            part = types.Part(text=msg.content)
            # Gemini expects alternating turns
            if contents and contents[-1].role == role:
                contents[-1].parts.append(part)
            else:
                contents.append(types.Content(role=role, parts=[part]))

        system_instruction = "\n\n".join(system_parts) if system_parts else None
        return system_instruction, contents

    def _extract_content(self, response: Any) -> str:
        """Extract text content from Gemini response, handling empty responses.

        Args:
            response: Gemini GenerateContentResponse

        Returns:
            Text content or empty string
        """
        if response.candidates and len(response.candidates) > 0:
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                texts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
                if texts:
                    return "".join(texts)

        # Fallback to response.text (may raise or return None)
        try:
            return response.text or ""
        except (ValueError, AttributeError):
            return ""

    async def _stream_answer(self, event_sink: EventSink, cancel: Cancellable) -> None:
        if self._openai_compatible:
            await super()._stream_answer(event_sink, cancel)
            return

        if cancel.cancelled:
            logger.info("gemini ask cancelled before the request was sent")
            return

        system_instruction, contents = self._convert_messages(self.conversation())
        config = types.GenerateContentConfig(
            temperature=0.7,
            top_k=32,
            top_p=0.95,
            max_output_tokens=8192,
            system_instruction=system_instruction,
        )
        logger.debug("gemini generate_content model=%s (%d contents)", self._model, len(contents))
        response = await self._genai.aio.models.generate_content(
            model=self._model,
            contents=contents,
            config=config
        )

        text = self._extract_content(response)
        if not text:
            event_sink.send(LLMToken(Chunk(UNPARSABLE_RESPONSE)))
            return

        for piece in segment_text(text, self._chunk_size):
            if cancel.cancelled:
                logger.info("gemini simulated stream cancelled")
                return
            event_sink.send(LLMToken(Chunk(piece)))
            await asyncio.sleep(self._chunk_delay)

    async def close(self) -> None:
        """Close the HTTP client and the GenAI client this instance created.

        A GenAI client passed in by the caller is left open.
        """
        await super().close()
        if self._owns_genai:
            await self._genai.aio.aclose()
