"""OpenAI Chat Completions backend.

Speaks the SSE framing of ``POST /v1/chat/completions`` with
``"stream": true``. The same wire format is served by xAI and by Gemini's
OpenAI-compatible endpoint, which reuse extract_delta_content().
"""

from typing import Any, ClassVar

from ..base import HTTPStreamingClient
from ..framing import SSEDecoder

DEFAULT_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"


def extract_delta_content(data: Any, null_as_newline: bool = True) -> str | None:
    """Pull ``choices[0].delta.content`` out of one streamed completion chunk.

    Args:
        data: Decoded JSON value of one ``data:`` line
        null_as_newline: Map an empty, null or missing content to "\\n"
            instead of dropping it

    Returns:
        The text to forward, or None if there is nothing to forward
    """
    if isinstance(data, dict) and data.get("error"):
        error = data["error"]
        message = error.get("message", error) if isinstance(error, dict) else error
        return f"Error: {message}"

    try:
        content = data["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        content = None

    if isinstance(content, str) and content:
        return content
    return "\n" if null_as_newline else None


class ChatGPTClient(HTTPStreamingClient):
    """OpenAI backend client.

    Hidden design decisions:
    - Request body and bearer authentication
    - SSE framing of the streamed answer
    - Extraction of the text delta from each chunk
    """

    name = "chatgpt"
    null_content_as_newline: ClassVar[bool] = True

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        url: str = DEFAULT_URL,
        **kwargs: Any
    ):
        """Initialize ChatGPT client.

        Args:
            api_key: OpenAI API key
            model: Model to request
            url: Chat completions endpoint
            **kwargs: Timeouts, system prompt and httpx.AsyncClient kwargs
        """
        super().__init__(url=url, api_key=api_key, **kwargs)
        self._model = model

    @property
    def model(self) -> str:
        """Get the model name."""
        return self._model

    def _build_body(self) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": [msg.to_wire() for msg in self.conversation()],
            "stream": True,
        }

    def _make_decoder(self) -> SSEDecoder:
        return SSEDecoder()

    def _extract_text(self, data: Any) -> str | None:
        return extract_delta_content(data, null_as_newline=self.null_content_as_newline)
