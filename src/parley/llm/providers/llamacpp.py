from typing import Any

from ..base import HTTPStreamingClient
from ..framing import SSEDecoder
from .chatgpt import extract_delta_content


class LLamacppClient(HTTPStreamingClient):
    """llama.cpp server backend client.

    Hidden design decisions:
    - The server has one loaded model, so the body carries no model name
    - Authentication is optional (``--api-key`` on the server side)
    - Chunks without text (role announcements, finish markers) are skipped
    """

    name = "llamacpp"

    def __init__(self, url: str, api_key: str | None = None, **kwargs: Any):
        """Initialize llama.cpp client.

        Args:
            url: Chat completions endpoint, e.g. http://localhost:8080/v1/chat/completions
            api_key: Optional bearer token
            **kwargs: Timeouts, system prompt and httpx.AsyncClient kwargs
        """
        super().__init__(url=url, api_key=api_key, **kwargs)

    def _build_body(self) -> dict[str, Any]:
        return {
            "messages": [msg.to_wire() for msg in self.conversation()],
            "stream": True,
        }

    def _make_decoder(self) -> SSEDecoder:
        return SSEDecoder()

    def _extract_text(self, data: Any) -> str | None:
        return extract_delta_content(data, null_as_newline=False)
